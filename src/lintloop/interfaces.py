# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Contracts for the collaborators the engine drives but does not own."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from .linters import Linter
    from .models import Diagnostic

OutputCallback: TypeAlias = Callable[[int, str], None]
ExitCallback: TypeAlias = Callable[[int, int], None]
LspResponseCallback: TypeAlias = Callable[[str, Mapping[str, Any]], None]


@runtime_checkable
class ProcessBackend(Protocol):
    """Start and stop external processes with line-buffered callbacks.

    A failed launch is reported by returning ``0`` from :meth:`start`, never by
    raising. Callbacks may fire on any thread.
    """

    @abstractmethod
    def start(
        self,
        argv: Sequence[str],
        *,
        stdin_text: str | None,
        on_stdout: OutputCallback | None,
        on_stderr: OutputCallback | None,
        on_exit: ExitCallback,
    ) -> int:
        """Launch ``argv`` and return a non-zero handle on success.

        Args:
            argv: Program and arguments to execute.
            stdin_text: Text written to stdin before it is closed, ``None`` for no input.
            on_stdout: Receives ``(handle, line)`` for every stdout line when provided.
            on_stderr: Receives ``(handle, line)`` for every stderr line when provided.
            on_exit: Receives ``(handle, exit_code)`` after all output was delivered.

        Returns:
            int: Process handle, ``0`` when the process could not be started.
        """
        raise NotImplementedError

    @abstractmethod
    def stop(self, handle: int) -> None:
        """Terminate the process identified by ``handle`` if it still runs."""
        raise NotImplementedError

    @abstractmethod
    def is_running(self, handle: int) -> bool:
        """Return whether the process identified by ``handle`` is still alive."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class LspDetails:
    """Connection opened (or reused) for a document's project root."""

    connection_id: str
    project_root: str


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    """Request or notification handed to the language-server transport.

    Attributes:
        method: JSON-RPC method, or the tsserver command name.
        params: Parameters (``arguments`` for tsserver) of the message.
        is_notification: ``True`` when no response is expected.
    """

    method: str
    params: Mapping[str, Any] = field(default_factory=dict)
    is_notification: bool = False


@runtime_checkable
class LspClient(Protocol):
    """Language-server transport and connection management."""

    @abstractmethod
    def start(self, document: int, linter: Linter, callback: LspResponseCallback) -> LspDetails | None:
        """Open or reuse a connection for ``document``.

        Args:
            document: Document handle being checked.
            linter: Language-server linter definition.
            callback: Receives ``(connection_id, message)`` for every incoming message.

        Returns:
            LspDetails | None: Connection details, ``None`` when unavailable.
        """
        raise NotImplementedError

    @abstractmethod
    def send(self, connection_id: str, message: OutgoingMessage, project_root: str) -> int:
        """Send ``message`` and return its request id, ``0`` when sending failed."""
        raise NotImplementedError


@runtime_checkable
class DocumentStore(Protocol):
    """Access to the in-memory documents being checked."""

    @abstractmethod
    def lines(self, document: int) -> Sequence[str]:
        """Return the current lines of ``document``."""
        raise NotImplementedError

    @abstractmethod
    def path(self, document: int) -> Path | None:
        """Return the file backing ``document``, ``None`` for unnamed documents."""
        raise NotImplementedError

    @abstractmethod
    def version(self, document: int) -> int:
        """Return a counter that increases whenever ``document`` changes."""
        raise NotImplementedError

    @abstractmethod
    def find(self, path: str | Path) -> int | None:
        """Return the handle of the open document backed by ``path``."""
        raise NotImplementedError


@runtime_checkable
class PresentationSink(Protocol):
    """Consumer of published diagnostic lists."""

    def set_signs(self, document: int, diagnostics: Sequence[Diagnostic]) -> None: ...

    def set_lists(self, document: int, diagnostics: Sequence[Diagnostic]) -> None: ...

    def update_statusline(self, document: int, diagnostics: Sequence[Diagnostic]) -> None: ...

    def set_highlights(self, document: int, diagnostics: Sequence[Diagnostic]) -> None: ...

    def echo_cursor_warning(self, document: int, diagnostics: Sequence[Diagnostic]) -> None: ...

    def lint_settled(self, document: int) -> None: ...


@runtime_checkable
class Clock(Protocol):
    """Monotonic millisecond clock."""

    @abstractmethod
    def milliseconds(self) -> int:
        """Return the current reading in milliseconds."""
        raise NotImplementedError


__all__ = [
    "Clock",
    "DocumentStore",
    "ExitCallback",
    "LspClient",
    "LspDetails",
    "LspResponseCallback",
    "OutgoingMessage",
    "OutputCallback",
    "PresentationSink",
    "ProcessBackend",
]
