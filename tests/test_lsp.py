# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Language-server requests and pushed diagnostics."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from lintloop.documents import InMemoryDocumentStore
from lintloop.engine import LintEngine
from lintloop.events import LspMessageReceived
from lintloop.linters import Linter, LspKind
from lintloop.lsp import (
    PublishDiagnosticsParams,
    TsServerDiagnosticBody,
    read_lsp_diagnostics,
    read_tsserver_diagnostics,
    uri_to_path,
)
from lintloop.severity import Severity
from lintloop.sinks import RecordingSink
from lintloop.testing import FakeLspClient

EngineFactory = Callable[..., LintEngine]

PYLS = Linter(name="pyls", lsp=LspKind.STDIO)
TSSERVER = Linter(name="tsserver", lsp=LspKind.TSSERVER)


def _publish(path: Path, *diagnostics: dict[str, Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": "textDocument/publishDiagnostics",
        "params": {"uri": path.absolute().as_uri(), "diagnostics": list(diagnostics)},
    }


def _lsp_item(message: str, line: int, character: int, severity: int = 1) -> dict[str, Any]:
    position = {"line": line, "character": character}
    return {"range": {"start": position, "end": position}, "message": message, "severity": severity}


def _ts_event(kind: str, path: Path, *texts: str) -> dict[str, Any]:
    location = {"line": 1, "offset": 1}
    return {
        "seq": 0,
        "type": "event",
        "event": kind,
        "body": {
            "file": str(path),
            "diagnostics": [{"start": location, "end": location, "text": text} for text in texts],
        },
    }


@pytest.fixture
def ts_document(documents: InMemoryDocumentStore, tmp_path: Path) -> tuple[int, Path]:
    path = tmp_path / "app.ts"
    return documents.open(["let a = 1;", "a = 'x';"], path=path), path


def test_generic_server_receives_did_change(
    make_engine: EngineFactory,
    lsp_client: FakeLspClient,
    documents: InMemoryDocumentStore,
    tmp_path: Path,
) -> None:
    path = tmp_path / "mod.py"
    document = documents.open(["import os"], path=path)
    engine = make_engine()

    engine.run_linters(document, [PYLS])

    (sent,) = lsp_client.sent
    assert sent.message.method == "textDocument/didChange"
    assert sent.message.params["textDocument"]["uri"] == path.absolute().as_uri()
    assert sent.message.params["contentChanges"] == [{"text": "import os\n"}]
    assert engine.is_checking(document)
    assert engine.lsp.linter_for(sent.connection_id) == "pyls"


def test_publish_diagnostics_are_merged(
    make_engine: EngineFactory,
    lsp_client: FakeLspClient,
    documents: InMemoryDocumentStore,
    sink: RecordingSink,
    tmp_path: Path,
) -> None:
    path = tmp_path / "mod.py"
    document = documents.open(["import os", "x = 1"], path=path)
    engine = make_engine()
    engine.run_linters(document, [PYLS])
    connection = lsp_client.sent[0].connection_id

    lsp_client.deliver(connection, _publish(path, _lsp_item("unused import", 0, 0, severity=2)))
    engine.process_pending()

    (item,) = sink.latest(document) or ()
    assert (item.text, item.line, item.column, item.severity) == ("unused import", 1, 1, Severity.WARNING)
    assert item.linter_name == "pyls"
    assert not engine.is_checking(document)
    assert sink.settled == [document]


def test_tsserver_halves_are_joined_semantic_first(
    make_engine: EngineFactory,
    lsp_client: FakeLspClient,
    sink: RecordingSink,
    ts_document: tuple[int, Path],
) -> None:
    document, path = ts_document
    engine = make_engine()
    engine.run_linters(document, [TSSERVER])
    sent = lsp_client.sent[0]
    assert sent.message.method == "geterr"
    assert sent.message.params == {"files": [str(path)], "delay": 0}

    lsp_client.deliver(sent.connection_id, _ts_event("semanticDiag", path, "x"))
    lsp_client.deliver(sent.connection_id, _ts_event("syntaxDiag", path, "y"))
    engine.process_pending()

    assert [item.text for item in sink.latest(document) or ()] == ["x", "y"]


def test_tsserver_half_replaces_only_itself(
    make_engine: EngineFactory,
    lsp_client: FakeLspClient,
    sink: RecordingSink,
    ts_document: tuple[int, Path],
) -> None:
    document, path = ts_document
    engine = make_engine()
    engine.run_linters(document, [TSSERVER])
    connection = lsp_client.sent[0].connection_id

    lsp_client.deliver(connection, _ts_event("syntaxDiag", path, "syntax-1"))
    lsp_client.deliver(connection, _ts_event("semanticDiag", path, "semantic-1"))
    lsp_client.deliver(connection, _ts_event("syntaxDiag", path, "syntax-2"))
    engine.process_pending()

    assert [item.text for item in sink.latest(document) or ()] == ["semantic-1", "syntax-2"]


def test_unknown_documents_and_errors_are_ignored(
    make_engine: EngineFactory,
    lsp_client: FakeLspClient,
    sink: RecordingSink,
    ts_document: tuple[int, Path],
    tmp_path: Path,
) -> None:
    document, path = ts_document
    engine = make_engine()
    engine.run_linters(document, [PYLS])
    connection = lsp_client.sent[0].connection_id

    lsp_client.deliver(connection, _publish(tmp_path / "closed.py", _lsp_item("late", 0, 0)))
    lsp_client.deliver(connection, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "boom"}})
    engine.lsp.handle_message(LspMessageReceived("unknown-connection", _publish(path, _lsp_item("stray", 0, 0))))
    engine.process_pending()

    assert sink.calls == []
    assert engine.is_checking(document)


def test_unavailable_connection_contributes_nothing(
    make_engine: EngineFactory,
    documents: InMemoryDocumentStore,
    sink: RecordingSink,
    tmp_path: Path,
) -> None:
    document = documents.open(["x"], path=tmp_path / "mod.py")
    engine = make_engine(lsp_client=FakeLspClient(available=False))

    engine.run_linters(document, [PYLS])

    assert not engine.is_checking(document)
    assert sink.latest(document) == ()


def test_failed_send_does_not_mark_linter_active(
    make_engine: EngineFactory,
    documents: InMemoryDocumentStore,
    tmp_path: Path,
) -> None:
    client = FakeLspClient(accept=False)
    document = documents.open(["x"], path=tmp_path / "mod.py")
    engine = make_engine(lsp_client=client)

    engine.run_linters(document, [PYLS])

    assert len(client.sent) == 1
    assert not engine.is_checking(document)


def test_lsp_reader_converts_positions_and_fields() -> None:
    params = PublishDiagnosticsParams.model_validate(
        {
            "uri": "file:///tmp/a%20b.py",
            "diagnostics": [
                {
                    "range": {"start": {"line": 4, "character": 2}, "end": {"line": 4, "character": 9}},
                    "message": "hint",
                    "severity": 4,
                    "code": 12,
                    "source": "pyflakes",
                },
                {"range": {"start": {"line": 0, "character": 0}, "end": {"line": 1, "character": 0}}, "message": "e"},
            ],
        }
    )

    hint, error = read_lsp_diagnostics(params)

    assert (hint.line, hint.column, hint.end_line, hint.end_column) == (5, 3, 5, 10)
    assert (hint.severity, hint.code, hint.detail) == (Severity.INFO, "12", "pyflakes")
    assert error.severity is Severity.ERROR
    assert uri_to_path(params.uri) == Path("/tmp/a b.py")


def test_tsserver_reader_maps_categories() -> None:
    body = TsServerDiagnosticBody.model_validate(
        {
            "file": "/src/app.ts",
            "diagnostics": [
                {"start": {"line": 3, "offset": 7}, "end": {"line": 3, "offset": 9}, "text": "w", "category": "warning"},
                {"start": {"line": 1, "offset": 1}, "text": "s", "category": "suggestion", "code": 6133},
                {"start": {"line": 2, "offset": 1}, "text": "e", "category": "error"},
            ],
        }
    )

    warning, suggestion, error = read_tsserver_diagnostics(body)

    assert (warning.line, warning.column, warning.end_column, warning.severity) == (3, 7, 9, Severity.WARNING)
    assert (suggestion.severity, suggestion.code, suggestion.end_line) == (Severity.INFO, "6133", None)
    assert error.severity is Severity.ERROR
