# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for document state, history and temporary resources."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from lintloop.models import HistoryStatus, RawDiagnostic
from lintloop.state import DocumentState, DocumentStates
from lintloop.tempfiles import TempResourceTracker


def test_ensure_reports_creation() -> None:
    states = DocumentStates()
    first, created = states.ensure(3)
    again, created_again = states.ensure(3)

    assert created is True
    assert created_again is False
    assert first is again


def test_history_is_trimmed_to_max_size() -> None:
    state = DocumentState(document=1)
    for index in range(5):
        state.add_history(HistoryStatus.STARTED, f"cmd {index}", job_id=index, max_size=3)

    assert [entry.command for entry in state.history] == ["cmd 2", "cmd 3", "cmd 4"]


def test_history_disabled_with_zero_size() -> None:
    state = DocumentState(document=1)
    state.add_history(HistoryStatus.STARTED, "cmd", job_id=1, max_size=0)
    assert state.history == []


def test_finish_history_updates_matching_entry() -> None:
    state = DocumentState(document=1)
    state.add_history(HistoryStatus.STARTED, "a", job_id=1, max_size=10)
    state.add_history(HistoryStatus.STARTED, "b", job_id=2, max_size=10)

    state.finish_history(1, 3)
    state.remember_output(1, ["out"])

    first, second = state.history
    assert (first.status, first.exit_code, first.output) == (HistoryStatus.FINISHED, 3, ["out"])
    assert second.status is HistoryStatus.STARTED


def test_partial_results_join_in_requested_order() -> None:
    state = DocumentState(document=1)
    state.store_partial("syntax", [RawDiagnostic(text="y", line=1)])
    state.store_partial("semantic", [RawDiagnostic(text="x", line=1)])

    assert [item.text for item in state.joined_partials(("semantic", "syntax"))] == ["x", "y"]
    assert [item.text for item in state.joined_partials(("missing", "syntax"))] == ["y"]


def test_is_checking_follows_jobs_and_active_linters() -> None:
    state = DocumentState(document=1)
    assert not state.is_checking
    state.active_linters.add("flake8")
    assert state.is_checking
    state.active_linters.clear()
    state.jobs.add(4)
    assert state.is_checking


@pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permissions required")
def test_temporary_file_lives_in_private_directory(tmp_path: Path) -> None:
    states = DocumentStates()
    states.ensure(1)
    tracker = TempResourceTracker(states, prefix="lintloop-test")

    path = tracker.create_temporary_file(1, "module.py", ["a = 1", "b = 2"])

    assert path.read_text(encoding="utf-8") == "a = 1\nb = 2\n"
    assert stat.S_IMODE(path.parent.stat().st_mode) == 0o700
    assert tracker.is_temporary_path(1, path)
    assert not tracker.is_temporary_path(1, tmp_path / "module.py")

    tracker.release(1)
    assert not path.parent.exists()
    assert states.get(1).temp_dirs == []


def test_managed_files_are_removed_on_release(tmp_path: Path) -> None:
    states = DocumentStates()
    states.ensure(1)
    tracker = TempResourceTracker(states)
    managed = tmp_path / "scratch.txt"
    managed.write_text("x", encoding="utf-8")

    tracker.manage_file(1, managed)
    tracker.manage_file(1, tmp_path / "never-created.txt")
    tracker.release(1)

    assert not managed.exists()
    assert states.get(1).temp_files == []
