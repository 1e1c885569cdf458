# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Blocking wait for every outstanding job to finish."""

from __future__ import annotations

import time
from collections.abc import Callable

from .errors import ClockFaultError, WaitTimeoutError
from .interfaces import Clock
from .registry import JobRegistry
from .state import DocumentStates

EventPump = Callable[[float], int]


class MonotonicClock:
    """Millisecond readings from :func:`time.monotonic_ns`."""

    def milliseconds(self) -> int:
        return time.monotonic_ns() // 1_000_000


class CompletionWaiter:
    """Block until no job remains, pumping events between polls.

    Jobs started while waiting (the next step of a command chain) are picked
    up by re-checking after each drained snapshot. The time spent on a
    snapshot is subtracted from the remaining deadline.
    """

    def __init__(
        self,
        states: DocumentStates,
        registry: JobRegistry,
        pump: EventPump,
        *,
        clock: Clock | None = None,
        poll_ms: int = 10,
        settle_ms: int = 10,
    ) -> None:
        self._states = states
        self._registry = registry
        self._pump = pump
        self._clock = clock or MonotonicClock()
        self._poll = poll_ms / 1000
        self._settle = settle_ms / 1000

    def wait_until_idle(self, deadline_ms: int) -> None:
        """Return once every job exited.

        Args:
            deadline_ms: Milliseconds allowed before giving up.

        Raises:
            WaitTimeoutError: When jobs are still running after ``deadline_ms``.
            ClockFaultError: When the clock reads zero.
        """

        remaining = deadline_ms
        while True:
            handles = self._outstanding()
            if not handles:
                return
            started = self._now()
            while any(handle in self._registry for handle in handles):
                if self._now() - started > remaining:
                    raise WaitTimeoutError
                self._pump(self._poll)
            self._pump(self._settle)
            remaining -= self._now() - started
            if not self._outstanding():
                return
            if remaining <= 0:
                raise WaitTimeoutError

    def _outstanding(self) -> set[int]:
        return self._states.all_job_handles() | set(self._registry.handles())

    def _now(self) -> int:
        reading = self._clock.milliseconds()
        if reading == 0:
            raise ClockFaultError
        return reading


__all__ = ["CompletionWaiter", "EventPump", "MonotonicClock"]
