"""
External process orchestration: spawning, bookkeeping and sweeping.
"""

from .registry import ProcessHandle, ProcessRegistry, kill_orphaned_processes
from .runner import ProcessResult, ProcessRunner
from .sweeper import ProcessSweeper

__all__ = [
    "ProcessHandle",
    "ProcessRegistry",
    "ProcessResult",
    "ProcessRunner",
    "ProcessSweeper",
    "kill_orphaned_processes",
]
