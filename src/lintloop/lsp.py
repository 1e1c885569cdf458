# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Language-server checks and mapping of pushed diagnostics to linters."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final
from urllib.parse import unquote, urlparse

from pydantic import BaseModel, ConfigDict, Field

from .aggregator import ResultAggregator
from .events import EventDispatcher, LspMessageReceived
from .interfaces import DocumentStore, LspClient, OutgoingMessage
from .linters import Linter, LspKind
from .models import RawDiagnostic
from .severity import Severity
from .state import DocumentStates

LOGGER = logging.getLogger(__name__)

PUBLISH_DIAGNOSTICS_METHOD: Final[str] = "textDocument/publishDiagnostics"
DID_CHANGE_METHOD: Final[str] = "textDocument/didChange"
GETERR_COMMAND: Final[str] = "geterr"
SEMANTIC_SLOT: Final[str] = "semantic"
SYNTAX_SLOT: Final[str] = "syntax"
# Semantic results come first whenever the two halves are joined.
TSSERVER_SLOT_ORDER: Final[tuple[str, ...]] = (SEMANTIC_SLOT, SYNTAX_SLOT)
_TSSERVER_EVENTS: Final[dict[str, str]] = {"semanticDiag": SEMANTIC_SLOT, "syntaxDiag": SYNTAX_SLOT}

_LSP_SEVERITIES: Final[dict[int, Severity]] = {
    1: Severity.ERROR,
    2: Severity.WARNING,
    3: Severity.INFO,
    4: Severity.INFO,
}
_TSSERVER_CATEGORIES: Final[dict[str, Severity]] = {
    "warning": Severity.WARNING,
    "suggestion": Severity.INFO,
}


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class LspPosition(_Model):
    line: int
    character: int


class LspRange(_Model):
    start: LspPosition
    end: LspPosition


class LspDiagnostic(_Model):
    range: LspRange
    message: str
    severity: int | None = None
    code: str | int | None = None
    source: str | None = None


class PublishDiagnosticsParams(_Model):
    uri: str
    diagnostics: list[LspDiagnostic] = Field(default_factory=list)


class TsServerLocation(_Model):
    line: int
    offset: int


class TsServerDiagnostic(_Model):
    start: TsServerLocation
    end: TsServerLocation | None = None
    text: str
    code: str | int | None = None
    category: str | None = None


class TsServerDiagnosticBody(_Model):
    file: str
    diagnostics: list[TsServerDiagnostic] = Field(default_factory=list)


def uri_to_path(uri: str) -> Path:
    """Return the filesystem path named by a ``file://`` URI."""

    return Path(unquote(urlparse(uri).path))


def read_lsp_diagnostics(params: PublishDiagnosticsParams) -> list[RawDiagnostic]:
    """Convert a ``publishDiagnostics`` payload into raw diagnostics.

    Positions are zero-based in the protocol and one-based in the result.
    """

    items: list[RawDiagnostic] = []
    for diagnostic in params.diagnostics:
        items.append(
            RawDiagnostic(
                text=diagnostic.message,
                severity=_LSP_SEVERITIES.get(diagnostic.severity or 1, Severity.ERROR),
                line=diagnostic.range.start.line + 1,
                column=diagnostic.range.start.character + 1,
                end_line=diagnostic.range.end.line + 1,
                end_column=diagnostic.range.end.character + 1,
                code=diagnostic.code,
                detail=diagnostic.source,
            )
        )
    return items


def read_tsserver_diagnostics(body: TsServerDiagnosticBody) -> list[RawDiagnostic]:
    """Convert a tsserver diagnostic event body into raw diagnostics."""

    items: list[RawDiagnostic] = []
    for diagnostic in body.diagnostics:
        end = diagnostic.end
        items.append(
            RawDiagnostic(
                text=diagnostic.text,
                severity=_TSSERVER_CATEGORIES.get(diagnostic.category or "", Severity.ERROR),
                line=diagnostic.start.line,
                column=diagnostic.start.offset,
                end_line=end.line if end is not None else None,
                end_column=end.offset if end is not None else None,
                code=diagnostic.code,
            )
        )
    return items


def did_change_message(path: Path, version: int, text: str) -> OutgoingMessage:
    """Build the full-text ``didChange`` notification for a document."""

    return OutgoingMessage(
        method=DID_CHANGE_METHOD,
        params={
            "textDocument": {"uri": path.absolute().as_uri(), "version": version},
            "contentChanges": [{"text": text}],
        },
        is_notification=True,
    )


def geterr_message(path: Path) -> OutgoingMessage:
    """Build the tsserver request asking for a file's diagnostics."""

    return OutgoingMessage(
        method=GETERR_COMMAND,
        params={"files": [str(path)], "delay": 0},
        is_notification=True,
    )


class LspBridge:
    """Request diagnostics from language servers and route their replies."""

    def __init__(
        self,
        *,
        states: DocumentStates,
        documents: DocumentStore,
        dispatcher: EventDispatcher,
        aggregator: ResultAggregator,
        client: LspClient | None = None,
    ) -> None:
        self._states = states
        self._documents = documents
        self._dispatcher = dispatcher
        self._aggregator = aggregator
        self._client = client
        self._connections: dict[str, str] = {}
        dispatcher.register(LspMessageReceived, self.handle_message)

    def linter_for(self, connection_id: str) -> str | None:
        """Return the linter name recorded for ``connection_id``."""

        return self._connections.get(connection_id)

    def check(self, document: int, linter: Linter) -> bool:
        """Ask the linter's server for diagnostics of ``document``.

        Args:
            document: Document to check.
            linter: Language-server linter definition.

        Returns:
            bool: ``True`` when the request was sent; the linter is then active
            until the server pushes diagnostics.
        """

        state = self._states.get(document)
        path = self._documents.path(document)
        if state is None or self._client is None or path is None:
            return False
        details = self._client.start(document, linter, self._post_message)
        if details is None:
            LOGGER.debug("%s: no language server connection for document %d", linter.name, document)
            return False
        self._connections[details.connection_id] = linter.name
        if linter.lsp == LspKind.TSSERVER:
            message = geterr_message(path)
        else:
            text = "".join(f"{line}\n" for line in self._documents.lines(document))
            message = did_change_message(path, self._documents.version(document), text)
        request_id = self._client.send(details.connection_id, message, details.project_root)
        if request_id:
            state.active_linters.add(linter.name)
        return request_id != 0

    def handle_message(self, event: LspMessageReceived) -> None:
        """Dispatch an incoming server message by its kind."""

        message = event.message
        if message.get("jsonrpc") == "2.0" and "error" in message:
            LOGGER.debug("error from language server %s: %s", event.connection_id, message["error"])
            return
        if message.get("method") == PUBLISH_DIAGNOSTICS_METHOD:
            params = PublishDiagnosticsParams.model_validate(message.get("params", {}))
            self._handle_publish(event.connection_id, params)
            return
        if message.get("type") == "event":
            slot = _TSSERVER_EVENTS.get(str(message.get("event", "")))
            if slot is not None:
                body = TsServerDiagnosticBody.model_validate(message.get("body", {}))
                self._handle_tsserver(event.connection_id, slot, body)

    def _handle_publish(self, connection_id: str, params: PublishDiagnosticsParams) -> None:
        """Replace the linter's results with a pushed diagnostic set."""

        linter_name = self._connections.get(connection_id)
        document = self._documents.find(uri_to_path(params.uri))
        if linter_name is None or document is None or document not in self._states:
            LOGGER.debug("dropping diagnostics for %s from connection %s", params.uri, connection_id)
            return
        self._aggregator.handle_loclist(document, linter_name, read_lsp_diagnostics(params))

    def _handle_tsserver(self, connection_id: str, slot: str, body: TsServerDiagnosticBody) -> None:
        linter_name = self._connections.get(connection_id)
        document = self._documents.find(body.file)
        state = self._states.get(document) if document is not None else None
        if linter_name is None or state is None:
            LOGGER.debug("dropping %s diagnostics for %s", slot, body.file)
            return
        state.store_partial(slot, read_tsserver_diagnostics(body))
        self._aggregator.handle_loclist(state.document, linter_name, state.joined_partials(TSSERVER_SLOT_ORDER))

    def _post_message(self, connection_id: str, message: Mapping[str, Any]) -> None:
        self._dispatcher.post(LspMessageReceived(connection_id=connection_id, message=message))


__all__ = [
    "LspBridge",
    "PublishDiagnosticsParams",
    "TsServerDiagnosticBody",
    "did_change_message",
    "geterr_message",
    "read_lsp_diagnostics",
    "read_tsserver_diagnostics",
    "uri_to_path",
]
