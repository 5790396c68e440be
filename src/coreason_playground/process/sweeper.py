# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import asyncio

from loguru import logger

from coreason_playground.process.registry import ProcessRegistry


class ProcessSweeper:
    """Background task that periodically sweeps a ProcessRegistry.

    Owned by the service lifecycle: ``start()`` on boot, ``stop()`` on shutdown.
    """

    def __init__(self, registry: ProcessRegistry, interval: float = 120.0):
        self.registry = registry
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop if it is not already running. Must be called on the event loop."""
        if not self.running:
            self._task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def _sweep_loop(self) -> None:
        logger.info("Process sweeper started")
        try:
            while True:
                await asyncio.sleep(self.interval)
                try:
                    await self.registry.sweep()
                except Exception as e:
                    logger.error(f"Process sweep failed: {e}")
        except asyncio.CancelledError:
            logger.info("Process sweeper cancelled")
