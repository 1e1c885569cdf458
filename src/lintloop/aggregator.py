# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Merge per-linter results into a document's published diagnostic list."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .interfaces import PresentationSink
from .linters import RawItem
from .models import Diagnostic
from .normalize import DiagnosticNormalizer
from .state import DocumentStates
from .tempfiles import TempResourceTracker

LOGGER = logging.getLogger(__name__)

SuppressionCheck = Callable[[int], bool]


def diagnostic_sort_key(diagnostic: Diagnostic) -> tuple[bool, str, int, int, str]:
    """Order items of the linted document first, then by position and linter."""

    return (
        diagnostic.filename is not None,
        diagnostic.filename or "",
        diagnostic.line,
        diagnostic.column,
        diagnostic.linter_name,
    )


def sort_diagnostics(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Return ``diagnostics`` sorted; ties keep their insertion order."""

    return sorted(diagnostics, key=diagnostic_sort_key)


@dataclass(frozen=True, slots=True)
class SinkChannels:
    """Which presentation channels receive published lists."""

    signs: bool = True
    lists: bool = True
    statusline: bool = True
    highlights: bool = True
    cursor: bool = True


class ResultAggregator:
    """Publish merged diagnostics and signal when a document settles."""

    def __init__(
        self,
        states: DocumentStates,
        normalizer: DiagnosticNormalizer,
        temp_files: TempResourceTracker,
        *,
        sinks: Sequence[PresentationSink] = (),
        channels: SinkChannels | None = None,
        should_do_nothing: SuppressionCheck | None = None,
    ) -> None:
        self._states = states
        self._normalizer = normalizer
        self._temp_files = temp_files
        self._sinks = list(sinks)
        self._channels = channels or SinkChannels()
        self._should_do_nothing = should_do_nothing

    def handle_loclist(self, document: int, linter_name: str, items: Sequence[RawItem]) -> None:
        """Normalize ``items`` and publish them as ``linter_name``'s contribution."""

        if document not in self._states:
            LOGGER.debug("dropping %d results from %s for untracked document %d", len(items), linter_name, document)
            return
        self.publish(document, linter_name, self._normalizer.normalize(document, linter_name, items))

    def publish(self, document: int, linter_name: str, diagnostics: Sequence[Diagnostic]) -> None:
        """Replace ``linter_name``'s previous results for ``document``.

        Args:
            document: Document receiving the results.
            linter_name: Linter whose earlier contribution is replaced.
            diagnostics: Normalized diagnostics from the latest run.
        """

        state = self._states.get(document)
        if state is None:
            return
        state.active_linters.discard(linter_name)
        kept = [item for item in state.diagnostics if item.linter_name != linter_name]
        state.diagnostics = sort_diagnostics([*kept, *diagnostics])
        if self._should_do_nothing is not None and self._should_do_nothing(document):
            return
        self.set_results(document, state.diagnostics)

    def clear(self, document: int) -> None:
        """Drop every stored result for ``document`` and publish the empty list.

        Args:
            document: Document whose results are discarded.
        """

        state = self._states.get(document)
        if state is not None:
            state.diagnostics = []
        self.set_results(document, [])

    def set_results(self, document: int, diagnostics: Sequence[Diagnostic]) -> None:
        """Forward ``diagnostics`` to the sinks and settle the document when idle.

        The stored list is left untouched; callers replacing results go through
        :meth:`publish` or :meth:`clear`.

        Args:
            document: Document whose results are forwarded.
            diagnostics: Complete list to show for the document.
        """

        state = self._states.get(document)
        linting_is_done = state is None or not state.is_checking
        published = list(diagnostics)
        for sink in self._sinks:
            self._forward(sink, document, published)
        if linting_is_done:
            self._temp_files.release(document)
            for sink in self._sinks:
                sink.lint_settled(document)

    def _forward(self, sink: PresentationSink, document: int, diagnostics: list[Diagnostic]) -> None:
        """Send ``diagnostics`` to every channel of ``sink`` that is enabled."""

        channels = self._channels
        if channels.signs:
            sink.set_signs(document, diagnostics)
        if channels.lists:
            sink.set_lists(document, diagnostics)
        if channels.statusline:
            sink.update_statusline(document, diagnostics)
        if channels.highlights:
            sink.set_highlights(document, diagnostics)
        if channels.cursor:
            sink.echo_cursor_warning(document, diagnostics)


__all__ = ["ResultAggregator", "SinkChannels", "diagnostic_sort_key", "sort_diagnostics"]
