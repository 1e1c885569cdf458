# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Regular-expression output handler for configured linters."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Final

from .errors import LinterDefinitionError
from .models import RawDiagnostic
from .severity import Severity

_FILE_GROUPS: Final[tuple[str, ...]] = ("file", "filename")
_MESSAGE_GROUPS: Final[tuple[str, ...]] = ("message", "text")
_SEVERITY_GROUPS: Final[tuple[str, ...]] = ("severity", "level")
_CODE_GROUPS: Final[tuple[str, ...]] = ("code", "rule")

DEFAULT_SEVERITY_MAP: Final[dict[str, Severity]] = {
    "e": Severity.ERROR,
    "error": Severity.ERROR,
    "fatal": Severity.ERROR,
    "w": Severity.WARNING,
    "warn": Severity.WARNING,
    "warning": Severity.WARNING,
    "i": Severity.INFO,
    "info": Severity.INFO,
    "note": Severity.INFO,
    "hint": Severity.INFO,
}


def _first(groups: Mapping[str, str | None], names: Sequence[str]) -> str | None:
    """Return the first non-empty group among ``names``."""

    for name in names:
        value = groups.get(name)
        if value:
            return value
    return None


def _optional_int(value: str | None) -> int | None:
    """Convert a captured number, keeping ``None`` for absent groups."""

    return int(value) if value else None


class RegexParser:
    """Turn matching output lines into raw diagnostics.

    The pattern must define ``line`` and one of ``message``/``text`` as named
    groups. ``file``, ``column``, ``end_line``, ``end_column``, ``code`` (or
    ``rule``) and ``severity`` (or ``level``) are read when present. Lines that
    do not match are skipped.
    """

    def __init__(
        self,
        pattern: str | re.Pattern[str],
        *,
        default_severity: Severity = Severity.ERROR,
        severity_map: Mapping[str, Severity] | None = None,
    ) -> None:
        try:
            self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        except re.error as exc:
            raise LinterDefinitionError(f"invalid output pattern: {exc}") from exc
        groups = set(self.pattern.groupindex)
        if "line" not in groups or not groups.intersection(_MESSAGE_GROUPS):
            raise LinterDefinitionError("output pattern needs named groups 'line' and 'message'")
        self.default_severity = default_severity
        self.severity_map = dict(severity_map or DEFAULT_SEVERITY_MAP)

    def __call__(self, document: int, lines: Sequence[str]) -> list[RawDiagnostic]:
        """Parse every matching output line.

        Args:
            document: Document the output belongs to.
            lines: Output lines collected from the linter.

        Returns:
            list[RawDiagnostic]: One item per matching line; other lines are skipped.
        """

        diagnostics: list[RawDiagnostic] = []
        for line in lines:
            match = self.pattern.search(line)
            if match is None:
                continue
            groups = match.groupdict()
            diagnostics.append(
                RawDiagnostic(
                    text=(_first(groups, _MESSAGE_GROUPS) or "").strip(),
                    line=int(groups["line"]),
                    column=_optional_int(groups.get("column")) or 0,
                    end_line=_optional_int(groups.get("end_line")),
                    end_column=_optional_int(groups.get("end_column")),
                    filename=_first(groups, _FILE_GROUPS),
                    code=_first(groups, _CODE_GROUPS),
                    severity=self._severity(_first(groups, _SEVERITY_GROUPS)),
                )
            )
        return diagnostics

    def _severity(self, token: str | None) -> Severity:
        """Map a captured severity label, falling back to the default."""

        if token is None:
            return self.default_severity
        return self.severity_map.get(token.strip().lower(), self.default_severity)


__all__ = ["DEFAULT_SEVERITY_MAP", "RegexParser"]
