# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the lintloop package."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import Severity


class RawDiagnostic(BaseModel):
    """Diagnostic record as produced by an output handler or language server.

    Only ``text`` and ``line`` are required. Missing or malformed values for
    those fields raise a validation error: a handler that cannot produce them
    is broken, and the failure is left to propagate.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str
    line: int
    column: int = 0
    filename: str | None = None
    column_is_visual: bool = False
    severity: Severity = Severity.ERROR
    code: str | None = None
    detail: str | None = None
    end_column: int | None = None
    end_line: int | None = None
    sub_type: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> object:
        """Accept single-letter and full severity names."""
        if value is None:
            return Severity.ERROR
        if isinstance(value, str):
            return Severity.coerce(value)
        return value

    @field_validator("column", mode="before")
    @classmethod
    def _coerce_column(cls, value: object) -> object:
        """Treat an absent column as unspecified."""
        if value is None or value == "":
            return 0
        return value

    @field_validator("code", mode="before")
    @classmethod
    def _coerce_code(cls, value: object) -> object:
        """Store numeric codes in their textual form."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class Diagnostic(BaseModel):
    """Normalized diagnostic published for a document.

    Attributes:
        document: Handle of the document owning the item, ``None`` when the
            item names a file that is not open.
        filename: File named by the producer when it differs from the linted
            document.
        linter_name: Linter that contributed the item.
    """

    model_config = ConfigDict(frozen=True)

    document: int | None
    text: str
    line: int
    column: int = 0
    linter_name: str
    filename: str | None = None
    column_is_visual: bool = False
    severity: Severity = Severity.ERROR
    code: str | None = None
    detail: str | None = None
    end_column: int | None = None
    end_line: int | None = None
    sub_type: str | None = None


class HistoryStatus(str, Enum):
    """Lifecycle states recorded in a document's command history."""

    STARTED = "started"
    FAILED = "failed"
    FINISHED = "finished"
    EXECUTABLE = "executable"
    MISSING = "missing"


class HistoryEntry(BaseModel):
    """Audit record describing one command or executable check."""

    model_config = ConfigDict(validate_assignment=True)

    status: HistoryStatus
    command: str
    job_id: int | None = None
    exit_code: int | None = None
    output: list[str] = Field(default_factory=list)


__all__ = ["Diagnostic", "HistoryEntry", "HistoryStatus", "RawDiagnostic"]
