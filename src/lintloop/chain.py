# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve the next command of a linter's command chain."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .linters import Linter, OutputStream


@dataclass(frozen=True, slots=True)
class ChainResolution:
    """Command selected for the next job of a linter.

    Attributes:
        command: Command to run; empty when nothing should run.
        output_stream: Streams whose lines are collected.
        read_buffer: Whether the document is fed to the process on stdin.
        next_index: Index of the step after the one that produced ``command``.
    """

    command: str
    output_stream: OutputStream
    read_buffer: bool
    next_index: int

    @property
    def chain_step(self) -> int:
        """Return the index of the step that produced :attr:`command`."""

        return self.next_index - 1

    def __bool__(self) -> bool:
        return bool(self.command)


class ChainExecutor:
    """Walk command chains, skipping steps that produce no command."""

    def resolve(
        self,
        document: int,
        linter: Linter,
        chain_index: int = 0,
        previous_output: Sequence[str] = (),
    ) -> ChainResolution:
        """Return the command to run for ``linter`` starting at ``chain_index``.

        The first step of a chain is called with the document only; later steps
        also receive the output of the step before. A step returning an empty
        command is skipped and the following step is tried with empty input.
        Only the last step reads the document unless a step says otherwise.

        Args:
            document: Document being checked.
            linter: Linter whose chain is evaluated.
            chain_index: Index of the first step to evaluate.
            previous_output: Output lines of the previous step.

        Returns:
            ChainResolution: Selected command, empty when the chain is exhausted.
        """

        output_stream = linter.output_stream
        read_buffer = linter.read_buffer
        if not linter.command_chain:
            return ChainResolution(
                command=linter.resolve_command(document),
                output_stream=output_stream,
                read_buffer=read_buffer,
                next_index=chain_index + 1,
            )

        steps = linter.command_chain
        index = chain_index
        chain_input = list(previous_output)
        command = ""
        while index < len(steps):
            step = steps[index]
            if index == 0:
                command = step.callback(document) or ""
            else:
                command = step.callback(document, chain_input) or ""
            if command:
                if step.output_stream is not None:
                    output_stream = step.output_stream
                if step.read_buffer is not None:
                    read_buffer = step.read_buffer
                elif index != len(steps) - 1:
                    read_buffer = False
                break
            chain_input = []
            index += 1

        return ChainResolution(
            command=command,
            output_stream=output_stream,
            read_buffer=read_buffer,
            next_index=index + 1,
        )


__all__ = ["ChainExecutor", "ChainResolution"]
