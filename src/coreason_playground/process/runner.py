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
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from coreason_playground.exceptions import ProcessSpawnError, ProcessTimeoutError
from coreason_playground.process.registry import ProcessHandle, ProcessRegistry


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and merged stdout/stderr of a finished process."""

    exit_code: int
    output: str
    duration: float

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class ProcessRunner:
    """
    Runs one external process under a hard timeout.

    stdout and stderr are merged into one pipe that is drained by a separate task from
    the moment the process starts, so a chatty child can never block on a full pipe
    while we wait for it to exit.
    """

    def __init__(
        self,
        registry: ProcessRegistry,
        kill_grace_period: float = 2.0,
        output_grace_period: float = 5.0,
    ):
        self.registry = registry
        self.kill_grace_period = kill_grace_period
        self.output_grace_period = output_grace_period

    async def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path,
        timeout: float,
        label: str = "process",
    ) -> ProcessResult:
        """Spawn ``command`` with ``args`` in ``cwd`` and wait for it.

        Args:
            command: Executable to launch.
            args: Arguments passed after the executable.
            cwd: Working directory of the child.
            timeout: Seconds to wait for exit before force-killing.
            label: Prefix of the registry id, for logs.

        Returns:
            ProcessResult: Exit code and decoded combined output. Output is empty if the
            drain did not finish within the output grace period after exit.

        Raises:
            ProcessSpawnError: If the process could not be started.
            ProcessTimeoutError: If the process did not exit within ``timeout``.
        """
        process_id = self.registry.next_id(label)
        logger.info(f"Process {process_id} executing command: {command} {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            logger.error(f"Failed to start {command}: {e}")
            raise ProcessSpawnError(f"Failed to start {command}: {e}") from e

        handle = ProcessHandle(process_id=process_id, process=process, started_at=time.monotonic())
        try:
            self.registry.register(handle)
            assert process.stdout is not None
            handle.output_task = asyncio.create_task(process.stdout.read())

            try:
                await asyncio.wait_for(process.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Process {process_id} timed out after {timeout}s, force killing")
                await handle.terminate(self.kill_grace_period)
                raise ProcessTimeoutError(f"Process timed out after {timeout}s", timeout) from None

            output = await self._collect_output(handle)
            exit_code = process.returncode if process.returncode is not None else -1
            logger.info(f"Process {process_id} exited with code {exit_code} in {handle.runtime_ms}ms")
            return ProcessResult(exit_code=exit_code, output=output, duration=time.monotonic() - handle.started_at)
        finally:
            self.registry.deregister(process_id)
            if not handle.finished or (handle.output_task is not None and not handle.output_task.done()):
                await handle.terminate(self.kill_grace_period)

    async def _collect_output(self, handle: ProcessHandle) -> str:
        output_task = handle.output_task
        assert output_task is not None
        try:
            raw = await asyncio.wait_for(asyncio.shield(output_task), timeout=self.output_grace_period)
        except asyncio.CancelledError:
            # Drain cancelled by a sweep or shutdown; only our own cancellation propagates
            if not output_task.cancelled():
                raise
            logger.warning(f"Output of process {handle.process_id} discarded after forced termination")
            return ""
        except asyncio.TimeoutError:
            logger.warning(f"Output of process {handle.process_id} not available after exit, returning empty output")
            return ""
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read process output for {handle.process_id}: {e}")
            return ""
        return raw.decode("utf-8", errors="replace")
