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

from coreason_playground.analysis import SyntaxAnalysisService
from coreason_playground.compiler import CompilerService
from coreason_playground.config import PlaygroundConfig
from coreason_playground.models import CompileResponse, SyntaxAnalysisResponse
from coreason_playground.process import (
    ProcessRegistry,
    ProcessRunner,
    ProcessSweeper,
    kill_orphaned_processes,
)


class PlaygroundService:
    """Async-native playground service (The Core).

    Owns the process registry shared by every request, the background sweeper and the
    two request pipelines. Construct once per server and use as an async context manager.
    """

    def __init__(self, config: PlaygroundConfig | None = None):
        """Initializes the PlaygroundService.

        Args:
            config: Configuration for the service. Defaults are read from the environment.
        """
        self.config = config or PlaygroundConfig()
        self.registry = ProcessRegistry(kill_grace_period=self.config.kill_grace_period)
        self.runner = ProcessRunner(
            self.registry,
            kill_grace_period=self.config.kill_grace_period,
            output_grace_period=self.config.output_grace_period,
        )
        self.sweeper = ProcessSweeper(self.registry, interval=self.config.sweep_interval)
        self.compiler = CompilerService(self.config, self.runner)
        self.syntax = SyntaxAnalysisService(self.config, self.runner)

    async def start(self) -> None:
        """Kill orphans of a previous instance and start the periodic sweep."""
        logger.info("Initializing playground service with process management")
        if self.config.kill_orphans_on_start:
            try:
                await anyio.to_thread.run_sync(kill_orphaned_processes, self.config.orphan_pattern)
            except Exception as e:
                logger.warning(f"Orphan process scan failed: {e}")
        self.sweeper.start()
        logger.info("Playground service initialized with periodic cleanup")

    async def shutdown(self) -> None:
        """Stop the sweeper and kill every process still in flight."""
        logger.info(f"Shutting down playground service. Terminating {len(self.registry)} processes.")
        await self.sweeper.stop()
        await self.registry.kill_all()
        logger.info("Playground service shutdown complete")

    async def __aenter__(self) -> "PlaygroundService":
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.shutdown()

    async def compile_and_execute(self, source_code: str) -> CompileResponse:
        logger.info(f"Received compilation request (length: {len(source_code)} chars)")
        response = await self.compiler.compile_and_execute(source_code)
        logger.info(f"Compilation completed - Success: {response.success}, Type: {response.result_type}")
        return response

    async def analyze_syntax(self, source_code: str) -> SyntaxAnalysisResponse:
        return await self.syntax.analyze(source_code)
