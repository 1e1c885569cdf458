# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-document lint state and command history."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .models import Diagnostic, HistoryEntry, HistoryStatus, RawDiagnostic


@dataclass(slots=True)
class DocumentState:
    """Everything the engine tracks for one document.

    Attributes:
        jobs: Handles of jobs currently running for the document.
        active_linters: Linters with a running job or an unanswered request.
        diagnostics: Last merged and sorted list.
        temp_files: Files released once the document settles.
        temp_dirs: Directories removed recursively once the document settles.
        history: Command audit trail, oldest first.
        partial_results: Named slots for sources that report in several parts.
    """

    document: int
    jobs: set[int] = field(default_factory=set)
    active_linters: set[str] = field(default_factory=set)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    temp_files: list[Path] = field(default_factory=list)
    temp_dirs: list[Path] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)
    partial_results: dict[str, list[RawDiagnostic]] = field(default_factory=dict)

    @property
    def is_checking(self) -> bool:
        """Return whether any job or request for the document is outstanding."""

        return bool(self.active_linters or self.jobs)

    def store_partial(self, slot: str, items: Sequence[RawDiagnostic]) -> None:
        """Replace the contents of ``slot``.

        Args:
            slot: Name of the partial result, such as ``semantic``.
            items: Raw diagnostics the source reported for that part.
        """

        self.partial_results[slot] = list(items)

    def joined_partials(self, order: Sequence[str]) -> list[RawDiagnostic]:
        """Concatenate slots in ``order``; missing slots contribute nothing.

        Args:
            order: Slot names in the order their items are joined.

        Returns:
            list[RawDiagnostic]: Items of every listed slot.
        """

        joined: list[RawDiagnostic] = []
        for slot in order:
            joined.extend(self.partial_results.get(slot, ()))
        return joined

    def add_history(
        self,
        status: HistoryStatus,
        command: str,
        *,
        job_id: int | None = None,
        max_size: int,
    ) -> None:
        """Append a history record, dropping the oldest beyond ``max_size``.

        Args:
            status: Outcome being recorded.
            command: Command line or executable the record is about.
            job_id: Job handle when the record belongs to a started job.
            max_size: Maximum number of kept records; ``0`` records nothing.
        """

        if max_size <= 0:
            return
        self.history.append(HistoryEntry(status=status, command=command, job_id=job_id))
        if len(self.history) > max_size:
            del self.history[: len(self.history) - max_size]

    def finish_history(self, job_id: int, exit_code: int) -> None:
        """Mark the record for ``job_id`` as finished with ``exit_code``.

        Args:
            job_id: Handle of the job that exited.
            exit_code: Exit status reported for the job.
        """

        entry = self._history_for(job_id)
        if entry is not None:
            entry.status = HistoryStatus.FINISHED
            entry.exit_code = exit_code

    def remember_output(self, job_id: int, output: Sequence[str]) -> None:
        """Attach the captured ``output`` lines to the record for ``job_id``."""

        entry = self._history_for(job_id)
        if entry is not None:
            entry.output = list(output)

    def _history_for(self, job_id: int) -> HistoryEntry | None:
        """Return the newest record for ``job_id``, if one was kept."""

        for entry in reversed(self.history):
            if entry.job_id == job_id:
                return entry
        return None


class DocumentStates:
    """Map of document handle to :class:`DocumentState`."""

    def __init__(self) -> None:
        self._states: dict[int, DocumentState] = {}

    def ensure(self, document: int) -> tuple[DocumentState, bool]:
        """Return the state for ``document``, creating it when absent.

        Returns:
            tuple[DocumentState, bool]: The state and whether it was just created.
        """

        state = self._states.get(document)
        if state is not None:
            return state, False
        state = DocumentState(document=document)
        self._states[document] = state
        return state, True

    def get(self, document: int) -> DocumentState | None:
        """Return the state for ``document`` without creating it."""

        return self._states.get(document)

    def discard(self, document: int) -> None:
        """Forget ``document``; unknown handles are ignored."""

        self._states.pop(document, None)

    def all_job_handles(self) -> set[int]:
        """Return the handles of every job across every document."""

        handles: set[int] = set()
        for state in self._states.values():
            handles.update(state.jobs)
        return handles

    def __iter__(self) -> Iterator[DocumentState]:
        """Iterate over a snapshot, so callers may discard states while looping."""

        return iter(list(self._states.values()))

    def __contains__(self, document: object) -> bool:
        return document in self._states

    def __len__(self) -> int:
        return len(self._states)


__all__ = ["DocumentState", "DocumentStates"]
