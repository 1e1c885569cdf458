# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Simple in-memory document store."""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class _Document:
    """Contents and metadata of one open document."""

    lines: list[str] = field(default_factory=list)
    path: Path | None = None
    version: int = 0


def _split(text: str | Sequence[str]) -> list[str]:
    """Return ``text`` as a list of lines without terminators."""

    if isinstance(text, str):
        return text.splitlines()
    return list(text)


class InMemoryDocumentStore:
    """Documents held in memory and addressed by integer handles.

    Handles start at ``1`` and are never reused within a store.
    """

    def __init__(self) -> None:
        self._documents: dict[int, _Document] = {}
        self._counter = itertools.count(1)

    def open(self, text: str | Sequence[str] = "", *, path: str | Path | None = None) -> int:
        """Add a document and return its handle.

        Args:
            text: Full text or a sequence of lines.
            path: File the document is associated with, if any.

        Returns:
            int: Handle of the new document.
        """

        handle = next(self._counter)
        self._documents[handle] = _Document(
            lines=_split(text),
            path=Path(path) if path is not None else None,
        )
        return handle

    def open_file(self, path: str | Path) -> int:
        """Read ``path`` from disk and open it as a document."""

        source = Path(path)
        return self.open(source.read_text(encoding="utf-8"), path=source)

    def update(self, document: int, text: str | Sequence[str]) -> None:
        """Replace the contents of ``document`` and bump its version."""

        entry = self._documents[document]
        entry.lines = _split(text)
        entry.version += 1

    def close(self, document: int) -> None:
        """Drop ``document``; unknown handles are ignored."""

        self._documents.pop(document, None)

    def lines(self, document: int) -> Sequence[str]:
        """Return the lines of ``document``, or an empty tuple when it is not open."""

        entry = self._documents.get(document)
        return tuple(entry.lines) if entry is not None else ()

    def path(self, document: int) -> Path | None:
        """Return the file backing ``document``, if any."""

        entry = self._documents.get(document)
        return entry.path if entry is not None else None

    def version(self, document: int) -> int:
        """Return how many times ``document`` was updated; ``0`` when unknown."""

        entry = self._documents.get(document)
        return entry.version if entry is not None else 0

    def find(self, path: str | Path) -> int | None:
        """Return the handle of the open document backed by ``path``.

        Args:
            path: File path; relative paths resolve against the working directory.

        Returns:
            int | None: Matching handle, or ``None`` when no open document uses it.
        """

        target = Path(path).absolute()
        for handle, entry in self._documents.items():
            if entry.path is not None and entry.path.absolute() == target:
                return handle
        return None

    def __contains__(self, document: object) -> bool:
        return document in self._documents


__all__ = ["InMemoryDocumentStore"]
