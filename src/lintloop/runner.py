# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Launch linter processes and retire them when they exit."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .aggregator import ResultAggregator
from .chain import ChainExecutor, ChainResolution
from .commands import ShellSettings, format_command, uses_temporary_file
from .events import EventDispatcher, OutputReceived, ProcessExited
from .interfaces import DocumentStore, OutputCallback, ProcessBackend
from .linters import Linter, OutputStream
from .models import HistoryStatus
from .registry import Job, JobRegistry
from .state import DocumentStates
from .tempfiles import TempResourceTracker

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HistorySettings:
    """How much command history is kept per document."""

    max_size: int = 20
    log_output: bool = False


def _document_text(lines: Sequence[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


class ProcessRunner:
    """Start jobs for process linters and handle their output and exit."""

    def __init__(
        self,
        *,
        states: DocumentStates,
        registry: JobRegistry,
        backend: ProcessBackend,
        dispatcher: EventDispatcher,
        documents: DocumentStore,
        chain: ChainExecutor,
        temp_files: TempResourceTracker,
        aggregator: ResultAggregator,
        shell: ShellSettings | None = None,
        history: HistorySettings | None = None,
    ) -> None:
        self._states = states
        self._registry = registry
        self._backend = backend
        self._dispatcher = dispatcher
        self._documents = documents
        self._chain = chain
        self._temp_files = temp_files
        self._aggregator = aggregator
        self._shell = shell or ShellSettings()
        self._history = history or HistorySettings()
        dispatcher.register(OutputReceived, self.handle_output)
        dispatcher.register(ProcessExited, self.handle_exit)

    def start(self, document: int, linter: Linter, resolution: ChainResolution) -> bool:
        """Launch the command selected by ``resolution``.

        Args:
            document: Document being checked.
            linter: Linter the command belongs to.
            resolution: Command, stream routing and stdin policy for the job.

        Returns:
            bool: ``True`` when a job was started.
        """

        state = self._states.get(document)
        if state is None or not resolution.command:
            return False

        read_buffer = resolution.read_buffer
        path = self._documents.path(document)
        temporary_file = None
        if uses_temporary_file(resolution.command):
            name = path.name if path is not None else f"document-{document}"
            temporary_file = self._temp_files.create_temporary_file(document, name, self._documents.lines(document))
            read_buffer = False
        command = format_command(resolution.command, filename=path, temporary_file=temporary_file)
        argv = self._shell.wrap(command, add_newline=linter.add_newline)
        stdin_text = _document_text(self._documents.lines(document)) if read_buffer else None
        on_stdout, on_stderr = self._output_callbacks(resolution.output_stream)

        handle = self._backend.start(
            argv,
            stdin_text=stdin_text,
            on_stdout=on_stdout,
            on_stderr=on_stderr,
            on_exit=self._post_exit,
        )
        if not handle:
            LOGGER.debug("%s: failed to start %r", linter.name, command)
            state.add_history(HistoryStatus.FAILED, command, max_size=self._history.max_size)
            return False

        self._registry.register(
            Job(
                handle=handle,
                linter=linter,
                document=document,
                command=command,
                chain_step=resolution.chain_step,
            )
        )
        state.jobs.add(handle)
        state.active_linters.add(linter.name)
        state.add_history(HistoryStatus.STARTED, command, job_id=handle, max_size=self._history.max_size)
        LOGGER.debug("%s: started job %d: %s", linter.name, handle, command)
        return True

    def stop(self, handle: int) -> None:
        """Stop ``handle`` and forget it; its later callbacks are ignored."""

        self._backend.stop(handle)
        self._registry.remove(handle)

    def handle_output(self, event: OutputReceived) -> None:
        """Append an output line to its job; lines for finished jobs are dropped."""

        if not self._registry.append_output(event.handle, event.line):
            LOGGER.debug("ignoring output for retired job %d", event.handle)

    def handle_exit(self, event: ProcessExited) -> None:
        """Retire the job and continue its chain or publish its results."""

        job = self._registry.remove(event.handle)
        if job is None:
            LOGGER.debug("ignoring exit of retired job %d", event.handle)
            return
        output = job.output_lines
        if output and not output[-1]:
            output.pop()

        state = self._states.get(job.document)
        if state is None:
            return
        state.finish_history(job.handle, event.exit_code)
        state.jobs.discard(job.handle)
        state.active_linters.discard(job.linter.name)

        if job.has_next_step:
            resolution = self._chain.resolve(job.document, job.linter, job.chain_step + 1, output)
            if not self.start(job.document, job.linter, resolution):
                self._aggregator.handle_loclist(job.document, job.linter.name, [])
            return

        if self._history.log_output:
            state.remember_output(job.handle, output)
        handler = job.linter.callback
        items = handler(job.document, output) if handler is not None else []
        self._aggregator.handle_loclist(job.document, job.linter.name, items)

    def _output_callbacks(self, stream: OutputStream) -> tuple[OutputCallback | None, OutputCallback | None]:
        """Return the stdout and stderr callbacks ``stream`` asks for."""

        if stream == OutputStream.STDERR:
            return None, self._post_output
        if stream == OutputStream.BOTH:
            return self._post_output, self._post_output
        return self._post_output, None

    def _post_output(self, handle: int, line: str) -> None:
        self._dispatcher.post(OutputReceived(handle=handle, line=line))

    def _post_exit(self, handle: int, exit_code: int) -> None:
        self._dispatcher.post(ProcessExited(handle=handle, exit_code=exit_code))


__all__ = ["HistorySettings", "ProcessRunner"]
