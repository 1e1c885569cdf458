# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Per-document lint orchestration."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .aggregator import ResultAggregator, SuppressionCheck, sort_diagnostics
from .chain import ChainExecutor
from .config import EngineConfig
from .events import EventDispatcher
from .executables import ExecutableProbe
from .interfaces import Clock, DocumentStore, LspClient, PresentationSink, ProcessBackend
from .linters import Linter
from .lsp import LspBridge
from .models import Diagnostic, HistoryEntry, HistoryStatus
from .normalize import DiagnosticNormalizer
from .process import SubprocessBackend
from .registry import JobRegistry
from .runner import ProcessRunner
from .state import DocumentState, DocumentStates
from .tempfiles import TempResourceTracker
from .waiter import CompletionWaiter

LOGGER = logging.getLogger(__name__)


class LintEngine:
    """Run linters for documents and keep their published results consistent.

    Every piece of mutable state (job table, document states, language-server
    connections) belongs to the engine instance, so independent engines can
    coexist. Collaborator callbacks are queued and handled when
    :meth:`process_pending` or :meth:`wait_until_idle` runs.

    Args:
        documents: Source of document contents and paths.
        backend: Process collaborator; defaults to :class:`SubprocessBackend`.
        lsp_client: Language-server transport; language-server linters are
            skipped when it is absent.
        sinks: Presentation sinks receiving published lists.
        config: Engine settings.
        probe: Executable checker.
        clock: Millisecond clock used by :meth:`wait_until_idle`.
        should_do_nothing: Returns ``True`` for documents whose results must
            not be forwarded to sinks right now.
    """

    def __init__(
        self,
        documents: DocumentStore,
        *,
        backend: ProcessBackend | None = None,
        lsp_client: LspClient | None = None,
        sinks: Sequence[PresentationSink] = (),
        config: EngineConfig | None = None,
        probe: ExecutableProbe | None = None,
        clock: Clock | None = None,
        should_do_nothing: SuppressionCheck | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._documents = documents
        self._states = DocumentStates()
        self._registry = JobRegistry()
        self._dispatcher = EventDispatcher()
        self._probe = probe or ExecutableProbe()
        self._history = self.config.history_settings()
        self._temp_files = TempResourceTracker(self._states, prefix=self.config.temp_prefix)
        self._chain = ChainExecutor()
        normalizer = DiagnosticNormalizer(
            documents,
            type_map=self.config.type_map,
            is_temporary_path=self._temp_files.is_temporary_path,
        )
        self._aggregator = ResultAggregator(
            self._states,
            normalizer,
            self._temp_files,
            sinks=sinks,
            channels=self.config.sink_channels(),
            should_do_nothing=should_do_nothing,
        )
        self._runner = ProcessRunner(
            states=self._states,
            registry=self._registry,
            backend=backend or SubprocessBackend(kill_delay_ms=self.config.kill_delay_ms),
            dispatcher=self._dispatcher,
            documents=documents,
            chain=self._chain,
            temp_files=self._temp_files,
            aggregator=self._aggregator,
            shell=self.config.shell_settings(),
            history=self._history,
        )
        self._lsp = LspBridge(
            states=self._states,
            documents=documents,
            dispatcher=self._dispatcher,
            aggregator=self._aggregator,
            client=lsp_client,
        )
        self._waiter = CompletionWaiter(
            self._states,
            self._registry,
            self._dispatcher.process_pending,
            clock=clock,
            poll_ms=self.config.wait_poll_ms,
            settle_ms=self.config.wait_settle_ms,
        )

    @property
    def aggregator(self) -> ResultAggregator:
        """Return the aggregator publishing this engine's results."""

        return self._aggregator

    @property
    def lsp(self) -> LspBridge:
        """Return the bridge handling language-server linters."""

        return self._lsp

    @property
    def registry(self) -> JobRegistry:
        """Return the table of running jobs."""

        return self._registry

    def run_linters(self, document: int, linters: Sequence[Linter], should_lint_file: bool = False) -> None:
        """Check ``document`` with ``linters``.

        Jobs left over from an earlier call are stopped first; jobs of
        file-level linters survive unless ``should_lint_file`` is set, in which
        case they are stopped and started again. Results of linters missing
        from ``linters`` are dropped.

        Args:
            document: Document to check.
            linters: Linters enabled for the document.
            should_lint_file: Whether file-level linters run this time.
        """

        with self._dispatcher.lock:
            state, created = self._states.ensure(document)
            self._stop_current_jobs(state, include_lint_file_jobs=should_lint_file)
            self._remove_problems_for_disabled_linters(state, linters)

            can_clear_results = True
            for linter in linters:
                if linter.lint_file and not should_lint_file:
                    # Results of a skipped file-level linter are still current.
                    can_clear_results = False
                    continue
                if self._run_linter(state, linter):
                    can_clear_results = False

            if can_clear_results:
                self._aggregator.clear(document)
            elif created:
                self._add_problems_from_other_documents(state, linters)

    def cleanup(self, document: int) -> None:
        """Stop every job for ``document`` and forget its state."""

        with self._dispatcher.lock:
            state = self._states.get(document)
            if state is None:
                return
            self._stop_current_jobs(state, include_lint_file_jobs=True)
            self._temp_files.release(document)
            self._states.discard(document)

    def close(self) -> None:
        """Clean up every tracked document."""

        for state in self._states:
            self.cleanup(state.document)

    def process_pending(self, timeout: float = 0.0) -> int:
        """Handle queued collaborator callbacks; see :meth:`EventDispatcher.process_pending`."""

        return self._dispatcher.process_pending(timeout)

    def wait_until_idle(self, deadline_ms: int) -> None:
        """Block until every job has exited.

        Raises:
            WaitTimeoutError: When jobs remain after ``deadline_ms``.
            ClockFaultError: When the clock reads zero.
        """

        self._waiter.wait_until_idle(deadline_ms)

    def get_diagnostics(self, document: int) -> list[Diagnostic]:
        """Return the merged list last published for ``document``."""

        state = self._states.get(document)
        return list(state.diagnostics) if state is not None else []

    def is_checking(self, document: int) -> bool:
        """Return whether any job or request for ``document`` is outstanding."""

        state = self._states.get(document)
        return state is not None and state.is_checking

    def history(self, document: int) -> list[HistoryEntry]:
        """Return the command history of ``document``, oldest first."""

        state = self._states.get(document)
        return list(state.history) if state is not None else []

    def _stop_current_jobs(self, state: DocumentState, *, include_lint_file_jobs: bool) -> None:
        """Stop running jobs, keeping file-level ones unless told otherwise.

        Args:
            state: Document whose jobs are stopped.
            include_lint_file_jobs: Stop jobs of file-level linters too.
        """

        kept_jobs: set[int] = set()
        kept_linters: set[str] = set()
        for handle in sorted(state.jobs):
            job = self._registry.lookup(handle)
            if job is not None and job.linter.lint_file and not include_lint_file_jobs:
                kept_jobs.add(handle)
                kept_linters.add(job.linter.name)
                continue
            LOGGER.debug("stopping job %d for document %d", handle, state.document)
            self._runner.stop(handle)
        state.jobs = kept_jobs
        state.active_linters = kept_linters

    @staticmethod
    def _remove_problems_for_disabled_linters(state: DocumentState, linters: Sequence[Linter]) -> None:
        """Drop stored results of linters missing from ``linters``."""

        enabled = {linter.name for linter in linters}
        state.diagnostics = [item for item in state.diagnostics if item.linter_name in enabled]

    def _run_linter(self, state: DocumentState, linter: Linter) -> bool:
        """Start ``linter`` for the document.

        Returns:
            bool: ``True`` when a job or request is now outstanding.
        """

        if linter.is_lsp:
            return self._lsp.check(state.document, linter)
        executable = linter.resolve_executable(state.document)
        found = self._probe.is_executable(executable)
        state.add_history(
            HistoryStatus.EXECUTABLE if found else HistoryStatus.MISSING,
            executable,
            max_size=self._history.max_size,
        )
        if not found:
            LOGGER.debug("%s: executable %r not found", linter.name, executable)
            return False
        resolution = self._chain.resolve(state.document, linter)
        return self._runner.start(state.document, linter, resolution)

    def _add_problems_from_other_documents(self, state: DocumentState, linters: Sequence[Linter]) -> None:
        """Publish items other documents already reported against this file."""

        path = self._documents.path(state.document)
        if path is None:
            return
        target = path.absolute()
        enabled = {linter.name for linter in linters}
        copied: list[Diagnostic] = []
        for other in self._states:
            if other.document == state.document:
                continue
            for item in other.diagnostics:
                if item.filename and item.linter_name in enabled and Path(item.filename).absolute() == target:
                    copied.append(item.model_copy(update={"document": state.document, "filename": None}))
        if not copied:
            return
        state.diagnostics = sort_diagnostics(dict.fromkeys(copied))
        self._aggregator.set_results(state.document, state.diagnostics)


__all__ = ["LintEngine"]
