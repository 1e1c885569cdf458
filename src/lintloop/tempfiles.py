# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Temporary files and directories created for lint runs."""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path

from .state import DocumentStates

LOGGER = logging.getLogger(__name__)


class TempResourceTracker:
    """Track temp resources per document and release them when it settles."""

    def __init__(self, states: DocumentStates, *, prefix: str = "lintloop") -> None:
        self._states = states
        self._prefix = prefix

    def manage_file(self, document: int, path: Path) -> None:
        """Delete ``path`` (a single file) when ``document`` settles."""

        state = self._states.get(document)
        if state is not None:
            state.temp_files.append(path)

    def manage_directory(self, document: int, path: Path) -> None:
        """Delete ``path`` recursively when ``document`` settles."""

        state = self._states.get(document)
        if state is not None:
            state.temp_dirs.append(path)

    def create_directory(self, document: int) -> Path:
        """Create a private directory (owner-only access) managed for ``document``."""

        directory = Path(tempfile.mkdtemp(prefix=self._prefix))
        directory.chmod(0o700)
        self.manage_directory(document, directory)
        return directory

    def create_temporary_file(self, document: int, name: str, lines: Sequence[str]) -> Path:
        """Write ``lines`` to ``name`` inside a new private directory for ``document``."""

        path = self.create_directory(document) / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    def is_temporary_path(self, document: int, path: str | Path) -> bool:
        """Return whether ``path`` lies inside a resource managed for ``document``."""

        state = self._states.get(document)
        if state is None:
            return False
        candidate = Path(path)
        if candidate in state.temp_files:
            return True
        return any(candidate.is_relative_to(directory) for directory in state.temp_dirs)

    def release(self, document: int) -> None:
        """Delete every managed file and directory for ``document``."""

        state = self._states.get(document)
        if state is None:
            return
        for path in state.temp_files:
            LOGGER.debug("removing temporary file %s", path)
            path.unlink(missing_ok=True)
        state.temp_files = []
        for directory in state.temp_dirs:
            LOGGER.debug("removing temporary directory %s", directory)
            shutil.rmtree(directory, ignore_errors=True)
        state.temp_dirs = []


__all__ = ["TempResourceTracker"]
