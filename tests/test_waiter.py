# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for :mod:`lintloop.waiter`."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

import pytest

from lintloop.documents import InMemoryDocumentStore
from lintloop.engine import LintEngine
from lintloop.errors import ClockFaultError, WaitTimeoutError
from lintloop.linters import ChainStep, Linter
from lintloop.registry import Job, JobRegistry
from lintloop.sinks import RecordingSink
from lintloop.state import DocumentStates
from lintloop.testing import ScriptedCommand, ScriptedProcessBackend
from lintloop.waiter import CompletionWaiter, MonotonicClock

EngineFactory = Callable[..., LintEngine]
LinterFactory = Callable[..., Linter]


class _StepClock:
    """Clock advancing by a fixed step on every reading."""

    def __init__(self, start: int = 1000, step: int = 10) -> None:
        self.now = start
        self.step = step

    def milliseconds(self) -> int:
        self.now += self.step
        return self.now


class _ZeroClock:
    def milliseconds(self) -> int:
        return 0


def _stuck_registry(linter: Linter) -> tuple[DocumentStates, JobRegistry]:
    states = DocumentStates()
    state, _ = states.ensure(1)
    registry = JobRegistry()
    registry.register(Job(handle=5, linter=linter, document=1))
    state.jobs.add(5)
    return states, registry


def test_idle_returns_without_pumping() -> None:
    pumped: list[float] = []

    def pump(timeout: float) -> int:
        pumped.append(timeout)
        return 0

    waiter = CompletionWaiter(DocumentStates(), JobRegistry(), pump, clock=_ZeroClock())
    waiter.wait_until_idle(1000)
    assert pumped == []


def test_stuck_job_times_out(linter_factory: LinterFactory) -> None:
    states, registry = _stuck_registry(linter_factory("flake8"))
    waiter = CompletionWaiter(states, registry, lambda timeout: 0, clock=_StepClock())

    with pytest.raises(WaitTimeoutError, match="Jobs did not complete on time!"):
        waiter.wait_until_idle(50)


def test_zero_clock_reading_is_fatal(linter_factory: LinterFactory) -> None:
    states, registry = _stuck_registry(linter_factory("flake8"))
    waiter = CompletionWaiter(states, registry, lambda timeout: 0, clock=_ZeroClock())

    with pytest.raises(ClockFaultError, match="Failed to read milliseconds from the clock!"):
        waiter.wait_until_idle(1000)


def test_monotonic_clock_is_non_zero() -> None:
    assert MonotonicClock().milliseconds() > 0


def test_short_job_finishes_within_deadline(
    make_engine: EngineFactory,
    documents: InMemoryDocumentStore,
    backend: ScriptedProcessBackend,
    sink: RecordingSink,
    linter_factory: LinterFactory,
) -> None:
    document = documents.open(["a", "b"])
    backend.script("flake8", ScriptedCommand(stdout=("2:1:done",), delay_ms=5))
    engine = make_engine()
    engine.run_linters(document, [linter_factory("flake8")])

    started = time.monotonic()
    engine.wait_until_idle(1000)

    assert time.monotonic() - started >= 0.005
    assert [item.text for item in engine.get_diagnostics(document)] == ["done"]
    assert sink.settled == [document]


def test_wait_picks_up_chain_steps_started_while_waiting(
    make_engine: EngineFactory,
    documents: InMemoryDocumentStore,
    backend: ScriptedProcessBackend,
    linter_factory: LinterFactory,
) -> None:
    document = documents.open(["a"])
    backend.script("step-one", ScriptedCommand(stdout=("ok",), delay_ms=5))
    backend.script("step-two", ScriptedCommand(stdout=("1:1:final",), delay_ms=30))

    def second(document: int, output: Sequence[str]) -> str:
        return "tool step-two" if output else ""

    chain = (ChainStep(lambda document: "tool step-one"), ChainStep(second))
    engine = make_engine()
    engine.run_linters(document, [linter_factory("tool", command_chain=chain)])

    engine.wait_until_idle(2000)

    assert backend.commands() == ["tool step-one", "tool step-two"]
    assert [item.text for item in engine.get_diagnostics(document)] == ["final"]
    assert not engine.is_checking(document)
