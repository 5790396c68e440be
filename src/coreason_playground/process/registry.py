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
import itertools
import os
import re
import threading
import time
from contextlib import suppress
from dataclasses import dataclass

import psutil
from loguru import logger


@dataclass
class ProcessHandle:
    process_id: str
    process: asyncio.subprocess.Process
    started_at: float
    output_task: "asyncio.Task[bytes] | None" = None

    @property
    def finished(self) -> bool:
        """Non-blocking poll: True once the child's exit status is known."""
        return self.process.returncode is not None

    @property
    def runtime_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)

    async def terminate(self, grace_period: float) -> None:
        """Cancel output draining and SIGKILL the child, waiting briefly for it to be reaped."""
        if self.output_task is not None and not self.output_task.done():
            self.output_task.cancel()

        if self.finished:
            return

        logger.warning(f"Force killing process {self.process_id} (pid {self.process.pid})")
        with suppress(ProcessLookupError):
            self.process.kill()
        try:
            await asyncio.wait_for(self.process.wait(), timeout=grace_period)
        except asyncio.TimeoutError:
            logger.error(f"Process {self.process_id} did not exit within {grace_period}s of SIGKILL")


class ProcessRegistry:
    """Bookkeeping of in-flight external processes.

    Request coroutines register and deregister handles; the sweeper and the shutdown
    routine reconcile and kill them. All map mutations happen under one lock.
    """

    def __init__(self, kill_grace_period: float = 2.0):
        self.kill_grace_period = kill_grace_period
        self._handles: dict[str, ProcessHandle] = {}
        self._lock = threading.Lock()
        self._counter = itertools.count(1)

    def next_id(self, prefix: str = "process") -> str:
        with self._lock:
            return f"{prefix}-{next(self._counter)}"

    def register(self, handle: ProcessHandle) -> None:
        with self._lock:
            if handle.process_id in self._handles:
                raise ValueError(f"Process {handle.process_id} is already registered")
            self._handles[handle.process_id] = handle

    def deregister(self, process_id: str) -> ProcessHandle | None:
        with self._lock:
            return self._handles.pop(process_id, None)

    def get(self, process_id: str) -> ProcessHandle | None:
        with self._lock:
            return self._handles.get(process_id)

    def __contains__(self, process_id: object) -> bool:
        with self._lock:
            return process_id in self._handles

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    async def sweep(self) -> int:
        """Reconcile the registry against the real processes.

        Entries whose process has exited are dropped. Entries still running are treated
        as stuck: they are removed and force-killed.

        Returns:
            int: Number of entries removed.
        """
        logger.info("Cleaning up zombie processes...")
        exited: list[str] = []
        stuck: list[ProcessHandle] = []
        with self._lock:
            for process_id, handle in list(self._handles.items()):
                if handle.finished:
                    exited.append(process_id)
                else:
                    stuck.append(handle)
                del self._handles[process_id]

        for process_id in exited:
            logger.debug(f"Removing dead process: {process_id}")

        if stuck:
            results = await asyncio.gather(
                *(handle.terminate(self.kill_grace_period) for handle in stuck),
                return_exceptions=True,
            )
            for handle, result in zip(stuck, results):
                if isinstance(result, BaseException):
                    logger.warning(f"Failed to kill process {handle.process_id}: {result}")

        logger.info(f"Active processes after cleanup: {len(self)}")
        return len(exited) + len(stuck)

    async def kill_all(self) -> None:
        """Force-terminate every tracked process concurrently and clear the registry."""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()

        logger.info(f"Killing {len(handles)} active processes")
        results = await asyncio.gather(
            *(handle.terminate(self.kill_grace_period) for handle in handles),
            return_exceptions=True,
        )
        for handle, result in zip(handles, results):
            if isinstance(result, BaseException):
                logger.warning(f"Failed to kill process {handle.process_id}: {result}")


def kill_orphaned_processes(pattern: str, wait_timeout: float = 5.0) -> int:
    """Kill processes whose command line matches ``pattern``.

    Used at start-up against compiler invocations left behind by a crashed instance.
    Runs synchronously; callers on the event loop should offload it to a thread.
    Failures are logged, never raised.

    Returns:
        int: Number of processes killed.
    """
    logger.info("Checking for existing compiler processes...")
    try:
        matcher = re.compile(pattern)
    except re.error as e:
        logger.warning(f"Invalid orphan process pattern {pattern!r}: {e}")
        return 0

    own_pids = {os.getpid(), os.getppid()}
    killed = 0
    try:
        for proc in psutil.process_iter(["pid", "cmdline"]):
            if proc.info["pid"] in own_pids:
                continue
            cmdline = " ".join(proc.info.get("cmdline") or [])
            if not cmdline or not matcher.search(cmdline):
                continue

            logger.warning(f"Found existing compiler process PID: {proc.pid}, attempting to kill it")
            try:
                proc.kill()
                proc.wait(timeout=wait_timeout)
                killed += 1
                logger.info(f"Killed existing compiler process PID: {proc.pid}")
            except psutil.NoSuchProcess:
                continue
            except (psutil.AccessDenied, psutil.TimeoutExpired) as e:
                logger.warning(f"Failed to kill process {proc.pid}: {e}")
    except psutil.Error as e:
        logger.warning(f"Failed to check for existing compiler processes: {e}")

    return killed
