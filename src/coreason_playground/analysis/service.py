# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import time

from loguru import logger

from coreason_playground.analysis.lexer import LexicalAnalyzer
from coreason_playground.analysis.semantic import SemanticEnhancer
from coreason_playground.config import PlaygroundConfig
from coreason_playground.models import SyntaxAnalysisResponse
from coreason_playground.process import ProcessRunner
from coreason_playground.source import sanitize_source


class SyntaxAnalysisService:
    """Static tokenization followed by best-effort semantic enhancement."""

    def __init__(self, config: PlaygroundConfig, runner: ProcessRunner):
        self.lexer = LexicalAnalyzer()
        self.enhancer = SemanticEnhancer(config, runner)

    async def analyze(self, source_code: str) -> SyntaxAnalysisResponse:
        """Tokenize ``source_code``.

        The response fails only if the static pass itself raises. Any problem in the
        semantic step silently yields the static tokens.
        """
        start_time = time.monotonic()
        logger.info(f"Starting syntax analysis for {len(source_code)} characters of code")

        try:
            source = sanitize_source(source_code)
            tokens = self.lexer.tokenize(source)
        except Exception as e:
            logger.exception("Syntax analysis failed")
            return SyntaxAnalysisResponse.failed(f"Syntax analysis failed: {e}", self._elapsed_ms(start_time))

        logger.info(f"Static analysis produced {len(tokens)} tokens")
        # Nothing for the AST dump to annotate
        if tokens:
            tokens = await self.enhancer.enhance(source, tokens)

        elapsed = self._elapsed_ms(start_time)
        logger.info(f"Syntax analysis completed in {elapsed}ms with {len(tokens)} tokens")
        return SyntaxAnalysisResponse.succeeded(tokens, elapsed)

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)
