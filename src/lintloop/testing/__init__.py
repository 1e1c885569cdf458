# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-process collaborators for driving the engine without real tools."""

from __future__ import annotations

from .lsp import FakeLspClient
from .process import ScriptedCommand, ScriptedProcessBackend, StartedCommand

__all__ = ["FakeLspClient", "ScriptedCommand", "ScriptedProcessBackend", "StartedCommand"]
