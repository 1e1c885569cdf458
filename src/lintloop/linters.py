# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Definitions for linters and their command chains."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from .errors import LinterDefinitionError
from .models import RawDiagnostic


class OutputStream(str, Enum):
    """Process streams whose lines are collected for a job."""

    STDOUT = "stdout"
    STDERR = "stderr"
    BOTH = "both"


class LspKind(str, Enum):
    """Kinds of language-server connections a linter may use."""

    STDIO = "stdio"
    SOCKET = "socket"
    TSSERVER = "tsserver"


RawItem: TypeAlias = RawDiagnostic | Mapping[str, object]
OutputHandler: TypeAlias = Callable[[int, list[str]], Sequence[RawItem]]
CommandCallback: TypeAlias = Callable[[int], str | None]
ExecutableCallback: TypeAlias = Callable[[int], str]
# The first step of a chain receives ``(document)``; later steps ``(document, previous_output)``.
ChainCallback: TypeAlias = Callable[..., str | None]


@dataclass(frozen=True, slots=True)
class ChainStep:
    """One command-producing step of a command chain.

    Attributes:
        callback: Returns the command to run, or an empty value to skip the step.
        output_stream: Optional override of the linter's output stream.
        read_buffer: Optional override of whether the document is fed on stdin.
    """

    callback: ChainCallback
    output_stream: OutputStream | None = None
    read_buffer: bool | None = None


@dataclass(frozen=True, slots=True)
class Linter:
    """Configured diagnostic source.

    Process linters provide ``executable``, a ``callback`` that turns output
    lines into raw diagnostics, and either ``command`` or ``command_chain``.
    Language-server linters set ``lsp`` and leave process fields empty.

    Attributes:
        lint_file: Marks expensive whole-file checks that survive ordinary
            re-lint cancellation.
        add_newline: Append an ``echo`` to the command so tools that omit a
            trailing newline still produce a final line.
    """

    name: str
    callback: OutputHandler | None = None
    executable: str | ExecutableCallback = ""
    command: str | CommandCallback | None = None
    command_chain: tuple[ChainStep, ...] = ()
    output_stream: OutputStream = OutputStream.STDOUT
    read_buffer: bool = True
    lint_file: bool = False
    lsp: LspKind | None = None
    add_newline: bool = False
    language: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise LinterDefinitionError("linter requires a non-empty name")
        if self.lsp is not None:
            return
        if self.callback is None:
            raise LinterDefinitionError(f"linter '{self.name}' requires an output callback")
        if not self.executable:
            raise LinterDefinitionError(f"linter '{self.name}' requires an executable")
        if self.command_chain and self.command is not None:
            raise LinterDefinitionError(f"linter '{self.name}' must not define both command and command_chain")
        if not self.command_chain and self.command is None:
            raise LinterDefinitionError(f"linter '{self.name}' requires a command or command_chain")

    @property
    def is_lsp(self) -> bool:
        """Return whether diagnostics come from a language server."""

        return self.lsp is not None

    @property
    def chain_length(self) -> int:
        """Return the number of steps in :attr:`command_chain`."""

        return len(self.command_chain)

    def resolve_executable(self, document: int) -> str:
        """Return the executable name for ``document``.

        Args:
            document: Document about to be linted.

        Returns:
            str: Program name passed to the executable check.
        """

        if callable(self.executable):
            return self.executable(document)
        return self.executable

    def resolve_command(self, document: int) -> str:
        """Return the single command for linters without a chain.

        Args:
            document: Document about to be linted.

        Returns:
            str: Command template; empty when the callback declined to run.
        """

        if callable(self.command):
            return self.command(document) or ""
        return self.command or ""


__all__ = [
    "ChainCallback",
    "ChainStep",
    "CommandCallback",
    "ExecutableCallback",
    "Linter",
    "LspKind",
    "OutputHandler",
    "OutputStream",
    "RawItem",
]
