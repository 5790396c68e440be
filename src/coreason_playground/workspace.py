# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import shutil
from pathlib import Path
from types import TracebackType
from uuid import uuid4

from loguru import logger

from coreason_playground.language import DEFAULT_ARTIFACT_NAME, SOURCE_SUFFIX

# Top-level files in the temp root left behind by earlier runs
_STALE_SUFFIXES = (SOURCE_SUFFIX, ".exe")
_STALE_PREFIXES = ("temp_",)
_STALE_NAMES = frozenset({"privet", DEFAULT_ARTIFACT_NAME, "main"})


class Workspace:
    """A disposable directory owned by exactly one request.

    Example:
        >>> with Workspace.create(Path("/app/temp")) as ws:
        ...     ws.write_source("main.tri", "модуль м")
    """

    def __init__(self, path: Path, workspace_id: str):
        self.path = path
        self.workspace_id = workspace_id
        self._disposed = False

    @classmethod
    def create(cls, root: Path, workspace_id: str | None = None) -> "Workspace":
        """Create a fresh, uniquely named directory under ``root``.

        Raises:
            OSError: If the directory cannot be created.
            FileExistsError: If the id collides with an existing workspace.
        """
        workspace_id = workspace_id or uuid4().hex
        root.mkdir(parents=True, exist_ok=True)
        path = root / f"session_{workspace_id}"
        path.mkdir()
        logger.debug(f"Created workspace {path}")
        return cls(path, workspace_id)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def write_source(self, filename: str, content: str) -> Path:
        if self._disposed:
            raise RuntimeError("Workspace has been disposed")
        source_file = self.path / filename
        source_file.write_text(content, encoding="utf-8")
        return source_file

    def list_files(self) -> list[str]:
        if not self.path.is_dir():
            return []
        return sorted(entry.name for entry in self.path.iterdir())

    def dispose(self) -> None:
        """Recursively delete the directory.

        Errors are logged, never raised. Safe to call multiple times.
        """
        if self._disposed:
            return
        self._disposed = True

        if not self.path.exists():
            return
        try:
            shutil.rmtree(self.path)
            logger.debug(f"Cleaned up workspace {self.path}")
        except OSError as e:
            logger.warning(f"Failed to clean up workspace {self.path}: {e}")

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    @staticmethod
    def purge_stale_artifacts(root: Path) -> int:
        """Delete leftover source and artifact files directly under ``root``.

        Only regular files are considered, so live workspaces of concurrent requests
        are never touched. Failures are logged and skipped.

        Returns:
            int: Number of files removed.
        """
        if not root.is_dir():
            return 0

        removed = 0
        try:
            entries = list(root.iterdir())
        except OSError as e:
            logger.warning(f"Failed to list temp directory for cleanup: {e}")
            return 0

        for entry in entries:
            name = entry.name
            stale = name.endswith(_STALE_SUFFIXES) or name.startswith(_STALE_PREFIXES) or name in _STALE_NAMES
            if not stale or not entry.is_file():
                continue
            try:
                entry.unlink(missing_ok=True)
                removed += 1
                logger.debug(f"Deleted stale artifact: {name}")
            except OSError as e:
                logger.warning(f"Failed to delete stale artifact {entry}: {e}")

        if removed:
            logger.info(f"Purged {removed} stale artifacts from {root}")
        return removed
