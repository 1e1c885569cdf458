# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Table of running jobs keyed by process handle."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock

from .linters import Linter


@dataclass(slots=True)
class Job:
    """A running process owned by the registry.

    Attributes:
        handle: Process handle returned by the process collaborator.
        linter: Linter that started the job.
        document: Document the job checks.
        command: Shell command that was launched.
        output_lines: Output collected so far, in arrival order.
        chain_step: Index of the command-chain step being run, ``0`` without a chain.
    """

    handle: int
    linter: Linter
    document: int
    command: str = ""
    output_lines: list[str] = field(default_factory=list)
    chain_step: int = 0

    @property
    def has_next_step(self) -> bool:
        """Return whether another chain step follows this job."""

        return self.chain_step < self.linter.chain_length - 1


class JobRegistry:
    """Own every :class:`Job` between launch and exit handling."""

    def __init__(self) -> None:
        self._jobs: dict[int, Job] = {}
        self._lock = Lock()

    def register(self, job: Job) -> int:
        """Store ``job`` and return its handle."""

        with self._lock:
            self._jobs[job.handle] = job
        return job.handle

    def lookup(self, handle: int) -> Job | None:
        """Return the job for ``handle`` or ``None`` when it is not tracked."""

        with self._lock:
            return self._jobs.get(handle)

    def remove(self, handle: int) -> Job | None:
        """Forget ``handle``; unknown handles are ignored."""

        with self._lock:
            return self._jobs.pop(handle, None)

    def append_output(self, handle: int, line: str) -> bool:
        """Append ``line`` to the job's output.

        Returns:
            bool: ``False`` when the job was already removed.
        """

        with self._lock:
            job = self._jobs.get(handle)
            if job is None:
                return False
            job.output_lines.append(line)
            return True

    def handles(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(self._jobs)

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


__all__ = ["Job", "JobRegistry"]
