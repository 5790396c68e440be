# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import anyio
from loguru import logger

from coreason_playground.analysis.ast_mining import SymbolTable, mine_symbols
from coreason_playground.config import PlaygroundConfig
from coreason_playground.exceptions import PlaygroundError
from coreason_playground.language import KEYWORDS, REFINED_TYPE_NAMES
from coreason_playground.models import SemanticKind, SyntaxToken, TokenType
from coreason_playground.process import ProcessRunner
from coreason_playground.source import wrap_in_module
from coreason_playground.workspace import Workspace

SEMANTIC_TOKEN_TYPES: dict[SemanticKind, TokenType] = {
    SemanticKind.USER_FUNCTION: TokenType.USER_FUNCTION,
    SemanticKind.USER_VARIABLE: TokenType.USER_VARIABLE,
    SemanticKind.FUNCTION_PARAMETER: TokenType.FUNCTION_PARAMETER,
    SemanticKind.IMPORTED_CLASS: TokenType.IMPORTED_CLASS,
    SemanticKind.IMPORTED_FUNCTION: TokenType.IMPORTED_FUNCTION,
}

AST_SOURCE_NAME = "main.tri"


def refine_token_type(token: SyntaxToken) -> str:
    """Static refinement for tokens the AST said nothing about."""
    if token.value in KEYWORDS:
        return TokenType.SEMANTIC_KEYWORD.value
    if token.value in REFINED_TYPE_NAMES:
        return TokenType.SEMANTIC_BUILT_IN_TYPE.value
    return token.token_type


def merge_tokens(tokens: list[SyntaxToken], symbols: SymbolTable) -> list[SyntaxToken]:
    """Reclassify static tokens whose text is a known symbol."""
    merged: list[SyntaxToken] = []
    for token in tokens:
        info = symbols.get(token.value)
        if info is not None:
            merged.append(
                token.model_copy(
                    update={
                        "token_type": SEMANTIC_TOKEN_TYPES[info.kind].value,
                        "semantic_info": info.kind.value,
                        "semantic_detail": info.detail,
                    }
                )
            )
            logger.debug(f"Enhanced token '{token.value}': {token.token_type} -> {info.kind.value}")
            continue

        refined = refine_token_type(token)
        merged.append(token if refined == token.token_type else token.model_copy(update={"token_type": refined}))
    return merged


class SemanticEnhancer:
    """
    Enriches static tokens with symbol kinds mined from the compiler's AST dump.

    Enhancement is best-effort. ``collect_symbols`` returns ``None`` when the compiler
    cannot produce a dump, and ``enhance`` then hands back the static tokens untouched.
    """

    def __init__(self, config: PlaygroundConfig, runner: ProcessRunner):
        self.config = config
        self.runner = runner

    async def collect_symbols(self, source: str) -> SymbolTable | None:
        """Run the compiler in AST-dump mode on ``source`` and mine the output.

        Returns:
            SymbolTable | None: Mined symbols, or ``None`` if the dump failed.
        """
        try:
            workspace = Workspace.create(self.config.temp_directory)
        except OSError as e:
            logger.warning(f"Semantic analysis failed, using static analysis only: {e}")
            return None

        try:
            source_file = workspace.write_source(AST_SOURCE_NAME, wrap_in_module(source))
            result = await self.runner.run(
                self.config.compiler_executable,
                ["-ast", self.config.ast_verbosity, source_file.name],
                cwd=workspace.path,
                timeout=self.config.compilation_timeout,
                label="compiler",
            )
            if not result.success:
                logger.warning(f"AST dump exited with code {result.exit_code}, using static tokens only")
                logger.debug(f"Compiler output: {result.output}")
                return None
            return mine_symbols(result.output)
        except (PlaygroundError, OSError, UnicodeError) as e:
            logger.warning(f"Semantic enhancement failed, using static tokens only: {e}")
            return None
        finally:
            await anyio.to_thread.run_sync(workspace.dispose)

    async def enhance(self, source: str, tokens: list[SyntaxToken]) -> list[SyntaxToken]:
        symbols = await self.collect_symbols(source)
        if symbols is None:
            return tokens
        enhanced = merge_tokens(tokens, symbols)
        logger.info(f"Enhanced {len(tokens)} static tokens with {len(symbols)} semantic entries")
        return enhanced
