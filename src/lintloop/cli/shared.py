# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Output and failure helpers shared by CLI commands."""

from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.console import Console

from ..console import get_console
from ..logging import fail, ok, warn


class CLIError(RuntimeError):
    """Command failure carrying the exit status to report."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CommandOutput:
    """Where a command prints tables and status lines."""

    console: Console
    use_emoji: bool
    use_color: bool

    def ok(self, message: str) -> None:
        ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def fail(self, message: str) -> None:
        fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def echo(self, message: str) -> None:
        typer.echo(message)


def build_output(*, emoji: bool, no_color: bool) -> CommandOutput:
    color = not no_color
    return CommandOutput(console=get_console(color=color, emoji=emoji), use_emoji=emoji, use_color=color)


__all__ = ["CLIError", "CommandOutput", "build_output"]
