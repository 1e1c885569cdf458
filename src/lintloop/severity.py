# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Final

STYLE_SUB_TYPE: Final[str] = "style"
STYLE_SUFFIX: Final[str] = "S"


class Severity(str, Enum):
    """Severity levels normalising different tool vocabularies."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def letter(self) -> str:
        """Return the single-letter code used by severity remapping tables."""

        return _SEVERITY_TO_LETTER[self]

    @classmethod
    def coerce(cls, value: Severity | str) -> Severity:
        """Return the severity named by ``value``.

        Both the single-letter form (``E``, ``W``, ``I``) and the full name are
        accepted, case-insensitively.

        Args:
            value: Severity instance or textual representation.

        Returns:
            Severity: Matching enumeration member.

        Raises:
            ValueError: If ``value`` does not name a known severity.
        """

        if isinstance(value, Severity):
            return value
        token = value.strip()
        by_letter = _LETTER_TO_SEVERITY.get(token.upper())
        if by_letter is not None:
            return by_letter
        return cls(token.lower())


_SEVERITY_TO_LETTER: Final[dict[Severity, str]] = {
    Severity.ERROR: "E",
    Severity.WARNING: "W",
    Severity.INFO: "I",
}
_LETTER_TO_SEVERITY: Final[dict[str, Severity]] = {letter: sev for sev, letter in _SEVERITY_TO_LETTER.items()}

# Remapping targets are restricted to these keys; anything else leaves the item untouched.
REMAP_TARGETS: Final[frozenset[str]] = frozenset({"E", "ES", "W", "WS", "I"})

SeverityRemap = Mapping[str, str]


def remap_key(severity: Severity, sub_type: str | None) -> str:
    """Return the lookup key for ``severity`` in a remapping table."""

    suffix = STYLE_SUFFIX if sub_type == STYLE_SUB_TYPE else ""
    return f"{severity.letter}{suffix}"


def apply_severity_remap(
    severity: Severity,
    sub_type: str | None,
    remap: SeverityRemap | None,
) -> tuple[Severity, str | None]:
    """Apply a per-linter remapping table to a severity/sub-type pair.

    Args:
        severity: Current severity of the diagnostic.
        sub_type: Current sub-type (``"style"`` or ``None``).
        remap: Table mapping ``E``/``ES``/``W``/``WS``/``I`` keys to new keys.

    Returns:
        tuple[Severity, str | None]: Remapped severity and sub-type. The input
        pair is returned unchanged when no entry applies or the target is not
        recognised.
    """

    if not remap:
        return severity, sub_type
    target = remap.get(remap_key(severity, sub_type))
    if target not in REMAP_TARGETS:
        return severity, sub_type
    new_severity = _LETTER_TO_SEVERITY[target[0]]
    new_sub_type = STYLE_SUB_TYPE if target.endswith(STYLE_SUFFIX) else None
    return new_severity, new_sub_type


__all__ = [
    "REMAP_TARGETS",
    "STYLE_SUB_TYPE",
    "Severity",
    "SeverityRemap",
    "apply_severity_remap",
    "remap_key",
]
