# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import os
import time
from pathlib import Path
from uuid import uuid4

import anyio
from loguru import logger

from coreason_playground.config import PlaygroundConfig
from coreason_playground.exceptions import (
    ArtifactMissingError,
    CompilationError,
    ExecutionError,
    InputRejectedError,
    ProcessSpawnError,
    ProcessTimeoutError,
)
from coreason_playground.language import (
    DEFAULT_ARTIFACT_NAME,
    LEGACY_ARTIFACT_NAMES,
    NO_ERRORS_MARKER,
    SOURCE_SUFFIX,
)
from coreason_playground.models import CompileResponse
from coreason_playground.process import ProcessResult, ProcessRunner
from coreason_playground.workspace import Workspace

# Files the compiler may leave next to the binary that must never be executed
NON_EXECUTABLE_SUFFIXES = (SOURCE_SUFFIX, ".c", ".h", ".o", ".ll", ".s", ".json", ".txt", ".log")

TRUNCATION_MARKER = "\n... (output truncated)"


def artifact_candidates(source_file: Path) -> list[Path]:
    """Conventional output names for ``source_file``, in probing order."""
    base_name = source_file.stem
    directory = source_file.parent
    names = [base_name, f"{base_name}.exe", *LEGACY_ARTIFACT_NAMES, DEFAULT_ARTIFACT_NAME]
    return [directory / name for name in names]


def truncate_output(output: str, max_length: int) -> str:
    if len(output) <= max_length:
        return output
    return output[:max_length] + TRUNCATION_MARKER


class CompilerService:
    """
    Compiles a snippet with the external compiler and runs the produced binary.

    Every request gets its own Workspace, which is disposed however the request ends.
    """

    def __init__(self, config: PlaygroundConfig, runner: ProcessRunner):
        self.config = config
        self.runner = runner

    async def compile_and_execute(self, source_code: str) -> CompileResponse:
        """Compile and run ``source_code``.

        Args:
            source_code: Sanitized snippet text.

        Returns:
            CompileResponse: One of success, compilation_error, runtime_error or timeout.
        """
        try:
            self._validate(source_code)
        except InputRejectedError as e:
            return CompileResponse.compilation_error(str(e))

        session_id = uuid4().hex[:8]
        root = self.config.temp_directory
        start_time = time.monotonic()
        workspace: Workspace | None = None

        try:
            Workspace.purge_stale_artifacts(root)
            workspace = Workspace.create(root, session_id)
            source_file = workspace.write_source(f"temp_{session_id}{SOURCE_SUFFIX}", source_code)
            logger.info(f"Created temporary source file: {source_file}")

            await self._compile(source_file)
            executable = self._locate_executable(workspace, source_file)
            result = await self._execute(executable)

            elapsed = self._elapsed_ms(start_time)
            output = truncate_output(result.output.strip(), self.config.max_output_length)
            if result.success:
                return CompileResponse.succeeded(output, elapsed)
            error = output or f"Program terminated with exit code {result.exit_code}"
            return CompileResponse.runtime_error(error, elapsed)

        except CompilationError as e:
            logger.error(f"Compilation failed for session {session_id}: {e}")
            return CompileResponse.compilation_error(str(e))
        except (ArtifactMissingError, ExecutionError) as e:
            logger.error(f"Execution failed for session {session_id}: {e}")
            return CompileResponse.runtime_error(str(e), self._elapsed_ms(start_time))
        except ProcessTimeoutError as e:
            logger.warning(f"Execution timed out for session {session_id}: {e}")
            return CompileResponse.timed_out(str(e))
        except OSError as e:
            logger.exception(f"Unexpected error for session {session_id}: {e}")
            return CompileResponse.compilation_error(f"Internal server error: {e}")
        finally:
            if workspace is not None:
                await anyio.to_thread.run_sync(workspace.dispose)

    def _validate(self, source_code: str) -> None:
        if not source_code or not source_code.strip():
            raise InputRejectedError("Source code cannot be empty")
        limit = self.config.max_source_code_length
        if len(source_code) > limit:
            raise InputRejectedError(f"Source code exceeds maximum length of {limit} characters")
        try:
            source_code.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InputRejectedError("Source code contains characters that cannot be encoded as UTF-8") from e

    async def _compile(self, source_file: Path) -> str:
        """Run the compiler and decide whether it succeeded.

        Success is exit code zero AND either the no-errors marker in the output or a
        conventionally named artifact on disk. The compiler's own signalling is not
        consistent enough to rely on either check alone.

        Raises:
            CompilationError: On failure, timeout or spawn failure.
        """
        timeout_ms = self.config.compilation_timeout_ms
        try:
            result = await self.runner.run(
                self.config.compiler_executable,
                [source_file.name],
                cwd=source_file.parent,
                timeout=self.config.compilation_timeout,
                label="compiler",
            )
        except ProcessTimeoutError as e:
            raise CompilationError(f"Compilation timed out after {timeout_ms}ms") from e
        except ProcessSpawnError as e:
            raise CompilationError(f"Failed to execute compiler: {e}") from e

        output = result.output.strip()
        logger.debug(f"Files in workspace after compilation: {sorted(p.name for p in source_file.parent.iterdir())}")

        artifact_exists = any(candidate.exists() for candidate in artifact_candidates(source_file))
        success = result.exit_code == 0 and (NO_ERRORS_MARKER in output or artifact_exists)
        logger.info(
            f"Compilation finished with exit code: {result.exit_code}, "
            f"executable exists: {artifact_exists}, overall success: {success}"
        )
        if not success:
            raise CompilationError(output or f"Compiler exited with code {result.exit_code} without output")
        return output

    def _locate_executable(self, workspace: Workspace, source_file: Path) -> Path:
        """Find the compiled program: conventional names first, then a directory scan.

        Raises:
            ArtifactMissingError: If nothing runnable was produced.
        """
        for candidate in artifact_candidates(source_file):
            if candidate.is_file():
                logger.info(f"Found executable: {candidate}")
                return candidate

        logger.info("Predefined executables not found. Scanning workspace for any executable...")
        for entry in sorted(workspace.path.iterdir()):
            if self._is_runnable(entry, source_file):
                logger.info(f"Found executable by scanning: {entry}")
                return entry

        logger.error(f"Executable not found. Files in workspace: {workspace.list_files()}")
        raise ArtifactMissingError("Compiled executable not found. Compilation may have failed silently.")

    @staticmethod
    def _is_runnable(entry: Path, source_file: Path) -> bool:
        name = entry.name
        if name == source_file.name or name.startswith("."):
            return False
        if name.endswith(NON_EXECUTABLE_SUFFIXES) or not entry.is_file():
            return False
        return entry.suffix in ("", ".exe") or os.access(entry, os.X_OK)

    async def _execute(self, executable: Path) -> ProcessResult:
        """Run the compiled program under the execution timeout.

        Raises:
            ProcessTimeoutError: If the program runs too long.
            ExecutionError: If the program cannot be started.
        """
        timeout_ms = self.config.execution_timeout_ms
        try:
            result = await self.runner.run(
                str(executable),
                [],
                cwd=executable.parent,
                timeout=self.config.execution_timeout,
                label="program",
            )
        except ProcessTimeoutError as e:
            raise ProcessTimeoutError(f"Program execution timed out after {timeout_ms}ms", e.timeout) from e
        except ProcessSpawnError as e:
            raise ExecutionError(f"Failed to execute program: {e}") from e

        logger.info(f"Program execution finished with exit code: {result.exit_code}")
        return result

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)
