# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for :mod:`lintloop.aggregator`."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from lintloop.aggregator import ResultAggregator, SinkChannels, sort_diagnostics
from lintloop.documents import InMemoryDocumentStore
from lintloop.models import Diagnostic
from lintloop.normalize import DiagnosticNormalizer
from lintloop.sinks import RecordingSink
from lintloop.state import DocumentStates
from lintloop.tempfiles import TempResourceTracker


@dataclass
class _Harness:
    documents: InMemoryDocumentStore
    states: DocumentStates
    sink: RecordingSink
    aggregator: ResultAggregator
    suppressed: set[int] = field(default_factory=set)


@pytest.fixture
def harness() -> _Harness:
    documents = InMemoryDocumentStore()
    states = DocumentStates()
    sink = RecordingSink()
    harness = _Harness(documents=documents, states=states, sink=sink, aggregator=None)  # type: ignore[arg-type]
    harness.aggregator = ResultAggregator(
        states,
        DiagnosticNormalizer(documents),
        TempResourceTracker(states),
        sinks=[sink],
        should_do_nothing=lambda document: document in harness.suppressed,
    )
    return harness


def _open(harness: _Harness) -> int:
    document = harness.documents.open([f"line {index}" for index in range(1, 21)])
    harness.states.ensure(document)
    return document


def _texts(diagnostics: tuple[Diagnostic, ...] | list[Diagnostic] | None) -> list[str]:
    return [item.text for item in diagnostics or ()]


def test_publish_replaces_previous_results_of_the_linter(harness: _Harness) -> None:
    document = _open(harness)
    aggregator = harness.aggregator

    aggregator.handle_loclist(document, "flake8", [{"text": "a1", "line": 1}, {"text": "a2", "line": 2}])
    aggregator.handle_loclist(document, "pylint", [{"text": "p", "line": 3}])
    aggregator.handle_loclist(document, "flake8", [{"text": "b1", "line": 4}])

    assert _texts(harness.sink.latest(document)) == ["p", "b1"]
    assert _texts(harness.states.get(document).diagnostics) == ["p", "b1"]


def test_results_are_sorted_with_linter_tie_break(harness: _Harness) -> None:
    document = _open(harness)
    aggregator = harness.aggregator

    aggregator.handle_loclist(document, "zeta", [{"text": "z", "line": 2, "column": 1}])
    aggregator.handle_loclist(
        document,
        "alpha",
        [{"text": "a-late", "line": 5}, {"text": "a", "line": 2, "column": 1}, {"text": "a-early", "line": 1}],
    )

    assert _texts(harness.sink.latest(document)) == ["a-early", "a", "z", "a-late"]


def test_sort_keeps_insertion_order_for_full_ties(harness: _Harness) -> None:
    items = [
        Diagnostic(document=1, text=text, line=1, column=1, linter_name="x") for text in ("first", "second", "third")
    ]
    assert _texts(sort_diagnostics(reversed(items))) == ["third", "second", "first"]


def test_own_document_items_sort_before_other_files(harness: _Harness) -> None:
    items = [
        Diagnostic(document=None, text="other", line=1, linter_name="x", filename="/a.py"),
        Diagnostic(document=1, text="own", line=50, linter_name="x"),
    ]
    assert _texts(sort_diagnostics(items)) == ["own", "other"]


def test_settles_only_when_no_linter_is_active(harness: _Harness) -> None:
    document = _open(harness)
    harness.states.get(document).active_linters.update({"flake8", "pylint"})

    harness.aggregator.handle_loclist(document, "flake8", [])
    assert harness.sink.settled == []

    harness.aggregator.handle_loclist(document, "pylint", [])
    assert harness.sink.settled == [document]


def test_suppressed_documents_store_but_do_not_forward(harness: _Harness) -> None:
    document = _open(harness)
    harness.suppressed.add(document)

    harness.aggregator.handle_loclist(document, "flake8", [{"text": "hidden", "line": 1}])

    assert harness.sink.calls == []
    assert _texts(harness.states.get(document).diagnostics) == ["hidden"]


def test_results_for_untracked_documents_are_dropped(harness: _Harness) -> None:
    harness.aggregator.handle_loclist(99, "flake8", [{"text": "late", "line": 1}])
    assert harness.sink.calls == []


def test_disabled_channels_are_skipped() -> None:
    documents = InMemoryDocumentStore()
    states = DocumentStates()
    sink = RecordingSink()
    aggregator = ResultAggregator(
        states,
        DiagnosticNormalizer(documents),
        TempResourceTracker(states),
        sinks=[sink],
        channels=SinkChannels(signs=False, highlights=False, cursor=False),
    )
    document = documents.open(["x"])
    states.ensure(document)

    aggregator.handle_loclist(document, "flake8", [{"text": "t", "line": 1}])

    assert [call.channel for call in sink.calls] == ["lists", "statusline"]
    assert sink.settled == [document]


def test_clear_empties_stored_and_published_results(harness: _Harness) -> None:
    document = _open(harness)
    aggregator = harness.aggregator
    aggregator.handle_loclist(document, "flake8", [{"text": "stale", "line": 1}])

    aggregator.clear(document)
    aggregator.handle_loclist(document, "pylint", [{"text": "fresh", "line": 2}])

    assert _texts(harness.states.get(document).diagnostics) == ["fresh"]
    assert _texts(harness.sink.latest(document)) == ["fresh"]
