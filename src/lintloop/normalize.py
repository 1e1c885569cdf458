# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Repair raw diagnostics into their published form."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from .interfaces import DocumentStore
from .linters import RawItem
from .models import Diagnostic, RawDiagnostic
from .severity import SeverityRemap, apply_severity_remap

TemporaryPathCheck = Callable[[int, str], bool]


def coerce_raw(item: RawItem) -> RawDiagnostic:
    """Return ``item`` as a :class:`RawDiagnostic`, validating mappings."""

    if isinstance(item, RawDiagnostic):
        return item
    return RawDiagnostic.model_validate(dict(item))


def normalize_diagnostic(
    raw: RawDiagnostic,
    *,
    document: int,
    line_count: int,
    linter_name: str,
    remap: SeverityRemap | None = None,
    owner: int | None = None,
    filename: str | None = None,
) -> Diagnostic:
    """Convert ``raw`` into a :class:`Diagnostic`.

    Lines below 1 become 1. Lines past the end become the last line, but only
    for items owned by the linted document since the line count of another
    file is unknown here.

    Args:
        raw: Diagnostic produced by a handler.
        document: Document that was linted.
        line_count: Number of lines in ``document``.
        linter_name: Linter credited with the item.
        remap: Optional severity remapping table for the linter.
        owner: Document owning the item when ``filename`` is set.
        filename: File named by the item when it is not the linted document.

    Returns:
        Diagnostic: Normalized item.
    """

    owning_document = document if filename is None else owner
    line = raw.line
    if line < 1:
        line = 1
    elif owning_document == document and line > line_count:
        line = max(line_count, 1)
    severity, sub_type = apply_severity_remap(raw.severity, raw.sub_type, remap)
    return Diagnostic(
        document=owning_document,
        filename=filename,
        text=raw.text,
        line=line,
        column=raw.column,
        column_is_visual=raw.column_is_visual,
        severity=severity,
        sub_type=sub_type,
        code=raw.code,
        detail=raw.detail,
        end_line=raw.end_line,
        end_column=raw.end_column,
        linter_name=linter_name,
    )


class DiagnosticNormalizer:
    """Normalize raw diagnostics using live document information."""

    def __init__(
        self,
        documents: DocumentStore,
        *,
        type_map: Mapping[str, SeverityRemap] | None = None,
        is_temporary_path: TemporaryPathCheck | None = None,
    ) -> None:
        self._documents = documents
        self._type_map = dict(type_map or {})
        self._is_temporary_path = is_temporary_path

    def normalize(self, document: int, linter_name: str, items: Sequence[RawItem]) -> list[Diagnostic]:
        """Return normalized diagnostics for ``items`` produced by ``linter_name``."""

        line_count = len(self._documents.lines(document))
        remap = self._type_map.get(linter_name)
        normalized: list[Diagnostic] = []
        for item in items:
            raw = coerce_raw(item)
            filename, owner = self._resolve_owner(document, raw.filename)
            normalized.append(
                normalize_diagnostic(
                    raw,
                    document=document,
                    line_count=line_count,
                    linter_name=linter_name,
                    remap=remap,
                    owner=owner,
                    filename=filename,
                )
            )
        return normalized

    def _resolve_owner(self, document: int, filename: str | None) -> tuple[str | None, int | None]:
        """Return the filename to keep and the document owning it."""

        if not filename:
            return None, document
        if self._is_temporary_path is not None and self._is_temporary_path(document, filename):
            return None, document
        own_path = self._documents.path(document)
        if own_path is not None and Path(filename).absolute() == own_path.absolute():
            return None, document
        return filename, self._documents.find(filename)


__all__ = ["DiagnosticNormalizer", "coerce_raw", "normalize_diagnostic"]
