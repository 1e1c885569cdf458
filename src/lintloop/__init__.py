# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Asynchronous lint engine: run linters for documents and merge their results."""

from __future__ import annotations

from importlib import metadata

from .config import EngineConfig, LinterDefinition, load_config
from .documents import InMemoryDocumentStore
from .engine import LintEngine
from .errors import ClockFaultError, ConfigError, LinterDefinitionError, LintLoopError, WaitTimeoutError
from .linters import ChainStep, Linter, LspKind, OutputStream
from .models import Diagnostic, HistoryEntry, HistoryStatus, RawDiagnostic
from .severity import Severity

__all__ = [
    "ChainStep",
    "ClockFaultError",
    "ConfigError",
    "Diagnostic",
    "EngineConfig",
    "HistoryEntry",
    "HistoryStatus",
    "InMemoryDocumentStore",
    "LintEngine",
    "LintLoopError",
    "Linter",
    "LinterDefinition",
    "LinterDefinitionError",
    "LspKind",
    "OutputStream",
    "RawDiagnostic",
    "Severity",
    "WaitTimeoutError",
    "__version__",
    "load_config",
]

try:
    __version__ = metadata.version("lintloop")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
