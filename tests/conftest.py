# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from lintloop.config import EngineConfig
from lintloop.documents import InMemoryDocumentStore
from lintloop.engine import LintEngine
from lintloop.executables import ExecutableProbe
from lintloop.linters import Linter
from lintloop.parsers import RegexParser
from lintloop.sinks import RecordingSink
from lintloop.testing import FakeLspClient, ScriptedProcessBackend

LINE_PATTERN = r"^(?P<line>\d+):(?P<column>\d+):(?P<message>.+)$"

EngineFactory = Callable[..., LintEngine]


def make_linter(name: str, command: str | None = None, **overrides: Any) -> Linter:
    """Return a process linter whose output lines look like ``line:column:text``."""

    fields: dict[str, Any] = {
        "name": name,
        "executable": name,
        "callback": RegexParser(LINE_PATTERN),
    }
    if "command_chain" not in overrides:
        fields["command"] = command if command is not None else f"{name} -"
    fields.update(overrides)
    return Linter(**fields)


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def backend() -> ScriptedProcessBackend:
    return ScriptedProcessBackend()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def lsp_client() -> FakeLspClient:
    return FakeLspClient()


@pytest.fixture
def probe() -> ExecutableProbe:
    """Everything is installed except the program called ``missing``."""
    return ExecutableProbe(checker=lambda name: name != "missing")


@pytest.fixture
def make_engine(
    documents: InMemoryDocumentStore,
    backend: ScriptedProcessBackend,
    sink: RecordingSink,
    lsp_client: FakeLspClient,
    probe: ExecutableProbe,
) -> EngineFactory:
    def factory(**overrides: Any) -> LintEngine:
        options: dict[str, Any] = {
            "backend": backend,
            "lsp_client": lsp_client,
            "sinks": [sink],
            "probe": probe,
            "config": EngineConfig(wait_poll_ms=2, wait_settle_ms=2),
        }
        options.update(overrides)
        return LintEngine(documents, **options)

    return factory


@pytest.fixture
def linter_factory() -> Callable[..., Linter]:
    return make_linter
