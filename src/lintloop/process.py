# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Thread-backed process collaborator built on ``subprocess.Popen``."""

from __future__ import annotations

import itertools
import logging

# Bandit: commands are assembled by the engine from configured linter
# definitions and launched as argument lists.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from pathlib import Path
from threading import Lock, Thread, Timer
from typing import IO

from .interfaces import ExitCallback, OutputCallback

LOGGER = logging.getLogger(__name__)


def _pump(stream: IO[str], handle: int, callback: OutputCallback) -> None:
    """Forward each line of ``stream`` to ``callback`` until EOF."""

    with stream:
        for line in stream:
            callback(handle, line.rstrip("\r\n"))


def _feed(stream: IO[str], text: str) -> None:
    """Write ``text`` to the child's stdin and close it."""

    try:
        with stream:
            stream.write(text)
    except (BrokenPipeError, OSError) as exc:
        LOGGER.debug("stdin closed early: %s", exc)


class SubprocessBackend:
    """Run commands on background threads and report lines and exits.

    Output lines are delivered from reader threads; the exit callback fires
    only after both readers drained their stream.
    """

    def __init__(
        self,
        *,
        kill_delay_ms: int = 100,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._kill_delay = kill_delay_ms / 1000
        self._cwd = cwd
        self._env = dict(env) if env is not None else None
        self._counter = itertools.count(1)
        self._processes: dict[int, subprocess.Popen[str]] = {}
        self._lock = Lock()

    def start(
        self,
        argv: Sequence[str],
        *,
        stdin_text: str | None,
        on_stdout: OutputCallback | None,
        on_stderr: OutputCallback | None,
        on_exit: ExitCallback,
    ) -> int:
        """Launch ``argv``; return ``0`` when the process cannot be created."""

        try:
            # Bandit: argv is a list, shell expansion happens only through the
            # configured shell binary.
            process = subprocess.Popen(  # nosec B603
                list(argv),
                cwd=str(self._cwd) if self._cwd is not None else None,
                env=self._env,
                stdin=subprocess.PIPE if stdin_text is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE if on_stdout is not None else subprocess.DEVNULL,
                stderr=subprocess.PIPE if on_stderr is not None else subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except (OSError, ValueError) as exc:
            LOGGER.debug("could not start %s: %s", argv[0] if argv else "<empty>", exc)
            return 0

        handle = next(self._counter)
        with self._lock:
            self._processes[handle] = process

        readers: list[Thread] = []
        if on_stdout is not None and process.stdout is not None:
            readers.append(Thread(target=_pump, args=(process.stdout, handle, on_stdout), daemon=True))
        if on_stderr is not None and process.stderr is not None:
            readers.append(Thread(target=_pump, args=(process.stderr, handle, on_stderr), daemon=True))
        for reader in readers:
            reader.start()
        if stdin_text is not None and process.stdin is not None:
            Thread(target=_feed, args=(process.stdin, stdin_text), daemon=True).start()
        Thread(target=self._wait, args=(handle, process, readers, on_exit), daemon=True).start()
        return handle

    def stop(self, handle: int) -> None:
        """Terminate ``handle``; kill it if it is still alive after the delay."""

        with self._lock:
            process = self._processes.get(handle)
        if process is None or process.poll() is not None:
            return
        process.terminate()
        timer = Timer(self._kill_delay, self._kill, args=(process,))
        timer.daemon = True
        timer.start()

    def is_running(self, handle: int) -> bool:
        """Return whether the process behind ``handle`` has not exited yet."""

        with self._lock:
            process = self._processes.get(handle)
        return process is not None and process.poll() is None

    def _wait(
        self,
        handle: int,
        process: subprocess.Popen[str],
        readers: Sequence[Thread],
        on_exit: ExitCallback,
    ) -> None:
        """Report the exit of ``handle`` once its output is fully delivered."""

        for reader in readers:
            reader.join()
        exit_code = process.wait()
        with self._lock:
            self._processes.pop(handle, None)
        on_exit(handle, exit_code)

    @staticmethod
    def _kill(process: subprocess.Popen[str]) -> None:
        """Kill ``process`` if terminate did not end it."""

        if process.poll() is None:
            process.kill()


__all__ = ["SubprocessBackend"]
