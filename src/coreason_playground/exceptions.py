# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

"""Exception hierarchy for the playground core."""


class PlaygroundError(Exception):
    """Base class for all playground errors."""


class InputRejectedError(PlaygroundError):
    """Source text was empty or too long."""


class ProcessSpawnError(PlaygroundError):
    """The operating system could not start the external process."""


class ProcessTimeoutError(PlaygroundError):
    """The external process did not exit within its time budget."""

    def __init__(self, message: str, timeout: float):
        super().__init__(message)
        self.timeout = timeout

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout * 1000)


class CompilationError(PlaygroundError):
    """The compiler ran and reported failure, or could not be run at all."""


class ArtifactMissingError(PlaygroundError):
    """The compiler reported success but no runnable artifact was produced."""


class ExecutionError(PlaygroundError):
    """The compiled program could not be started."""
