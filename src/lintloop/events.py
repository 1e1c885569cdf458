# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Event records and the single-threaded dispatcher that serialises them.

Collaborator callbacks may fire on worker threads. They never touch engine
state directly; instead they post an event to the dispatcher inbox and the
engine handles it the next time :meth:`EventDispatcher.process_pending` runs.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from queue import Empty, SimpleQueue
from threading import RLock
from typing import Any, TypeAlias, TypeVar

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OutputReceived:
    """One line of process output."""

    handle: int
    line: str


@dataclass(frozen=True, slots=True)
class ProcessExited:
    """A process finished and all of its output was delivered."""

    handle: int
    exit_code: int


@dataclass(frozen=True, slots=True)
class LspMessageReceived:
    """A response or notification arrived on a language-server connection."""

    connection_id: str
    message: Mapping[str, Any] = field(default_factory=dict)


EngineEvent: TypeAlias = OutputReceived | ProcessExited | LspMessageReceived
EventT = TypeVar("EventT", OutputReceived, ProcessExited, LspMessageReceived)


class EventDispatcher:
    """Inbox of engine events drained on one logical thread."""

    def __init__(self) -> None:
        self._queue: SimpleQueue[EngineEvent] = SimpleQueue()
        self._handlers: dict[type, Callable[[Any], None]] = {}
        self._lock = RLock()

    @property
    def lock(self) -> RLock:
        """Lock held while events are dispatched; hold it to mutate engine state."""

        return self._lock

    def register(self, event_type: type[EventT], handler: Callable[[EventT], None]) -> None:
        """Route events of ``event_type`` to ``handler``."""

        self._handlers[event_type] = handler

    def post(self, event: EngineEvent) -> None:
        """Queue ``event``; safe to call from any thread."""

        self._queue.put(event)

    def process_pending(self, timeout: float = 0.0) -> int:
        """Dispatch queued events.

        Waits up to ``timeout`` seconds for the first event to arrive, then
        drains everything already queued without further waiting.

        Args:
            timeout: Maximum number of seconds to wait for a first event.

        Returns:
            int: Number of events dispatched.
        """

        processed = 0
        deadline = time.monotonic() + timeout
        with self._lock:
            while True:
                remaining = deadline - time.monotonic()
                try:
                    if processed == 0 and remaining > 0:
                        event = self._queue.get(timeout=remaining)
                    else:
                        event = self._queue.get_nowait()
                except Empty:
                    return processed
                self._dispatch(event)
                processed += 1

    def _dispatch(self, event: EngineEvent) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            LOGGER.debug("no handler registered for %s", type(event).__name__)
            return
        handler(event)


__all__ = [
    "EngineEvent",
    "EventDispatcher",
    "LspMessageReceived",
    "OutputReceived",
    "ProcessExited",
]
