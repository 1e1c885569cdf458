# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Presentation sinks receiving published diagnostic lists."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .interfaces import DocumentStore
from .models import Diagnostic
from .severity import Severity

_SEVERITY_STYLES: Final[dict[Severity, str]] = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


class BasePresentationSink:
    """Sink base class; every channel is a no-op unless overridden."""

    def set_signs(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        return None

    def set_lists(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        return None

    def update_statusline(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        return None

    def set_highlights(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        return None

    def echo_cursor_warning(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        return None

    def lint_settled(self, document: int) -> None:
        return None


@dataclass(frozen=True, slots=True)
class SinkCall:
    """One channel invocation captured by :class:`RecordingSink`."""

    channel: str
    document: int
    diagnostics: tuple[Diagnostic, ...]


@dataclass(slots=True)
class RecordingSink(BasePresentationSink):
    """Remember every call in order."""

    calls: list[SinkCall] = field(default_factory=list)
    settled: list[int] = field(default_factory=list)

    def _record(self, channel: str, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        self.calls.append(SinkCall(channel=channel, document=document, diagnostics=tuple(diagnostics)))

    def set_signs(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        self._record("signs", document, diagnostics)

    def set_lists(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        self._record("lists", document, diagnostics)

    def update_statusline(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        self._record("statusline", document, diagnostics)

    def set_highlights(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        self._record("highlights", document, diagnostics)

    def echo_cursor_warning(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        self._record("cursor", document, diagnostics)

    def lint_settled(self, document: int) -> None:
        self.settled.append(document)

    def published(self, document: int, channel: str = "lists") -> list[tuple[Diagnostic, ...]]:
        """Return every list sent to ``channel`` for ``document``, oldest first."""

        return [call.diagnostics for call in self.calls if call.document == document and call.channel == channel]

    def latest(self, document: int) -> tuple[Diagnostic, ...] | None:
        published = self.published(document)
        return published[-1] if published else None


class ConsoleSink(BasePresentationSink):
    """Render the settled diagnostics of each document as a rich table."""

    def __init__(self, console: Console, *, documents: DocumentStore | None = None, color: bool = True) -> None:
        self._console = console
        self._documents = documents
        self._color = color
        self._latest: dict[int, list[Diagnostic]] = {}

    def set_lists(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        self._latest[document] = list(diagnostics)

    def diagnostics(self, document: int) -> list[Diagnostic]:
        return list(self._latest.get(document, ()))

    def lint_settled(self, document: int) -> None:
        self._console.print(self.render(document))

    def render(self, document: int) -> Table:
        """Build the table for ``document``'s latest list."""

        path = self._documents.path(document) if self._documents is not None else None
        table = Table(
            title=str(path) if path is not None else f"document {document}",
            box=box.SIMPLE_HEAVY if self._color else box.SIMPLE,
        )
        table.add_column("Line", justify="right", no_wrap=True)
        table.add_column("Col", justify="right", no_wrap=True)
        table.add_column("Severity", no_wrap=True)
        table.add_column("Linter", no_wrap=True)
        table.add_column("Code", no_wrap=True)
        table.add_column("Message", overflow="fold")
        for item in self._latest.get(document, ()):
            style = _SEVERITY_STYLES[item.severity] if self._color else None
            location = item.filename or ""
            message = f"{location}: {item.text}" if location else item.text
            table.add_row(
                str(item.line),
                str(item.column) if item.column else "-",
                Text(item.severity.value, style=style) if style else Text(item.severity.value),
                item.linter_name,
                item.code or "-",
                message,
            )
        return table


__all__ = ["BasePresentationSink", "ConsoleSink", "RecordingSink", "SinkCall"]
