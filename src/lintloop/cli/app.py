# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``lintloop`` command line application."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Final

import typer

from ..config import EngineConfig, load_config
from ..documents import InMemoryDocumentStore
from ..engine import LintEngine
from ..errors import ConfigError, WaitTimeoutError
from ..linters import Linter
from ..models import Diagnostic, HistoryEntry, HistoryStatus
from ..severity import Severity
from ..sinks import ConsoleSink
from .shared import CLIError, CommandOutput, build_output

EXIT_OK: Final[int] = 0
EXIT_DIAGNOSTICS: Final[int] = 1
EXIT_FAILURE: Final[int] = 2

app = typer.Typer(help="Run configured linters against a file.", no_args_is_help=True, add_completion=False)

PATH_ARGUMENT = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="File to check."),
]
LINTER_OPTION = Annotated[
    list[str] | None,
    typer.Option("--linter", "-l", help="Configured linter to run (repeatable, default: all)."),
]
ROOT_OPTION = Annotated[
    Path | None,
    typer.Option("--root", "-r", help="Project root holding the configuration (default: cwd)."),
]
TIMEOUT_OPTION = Annotated[
    int,
    typer.Option("--timeout", min=1, help="Milliseconds to wait for linters to finish."),
]
HISTORY_OPTION = Annotated[
    bool,
    typer.Option("--history", help="Print the command history after the run."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool,
    typer.Option("--no-color", help="Disable coloured output."),
]


@app.callback()
def main() -> None:
    """Asynchronous lint runner."""


@app.command("check")
def check(
    path: PATH_ARGUMENT,
    linter: LINTER_OPTION = None,
    root: ROOT_OPTION = None,
    timeout: TIMEOUT_OPTION = 30_000,
    history: HISTORY_OPTION = False,
    emoji: EMOJI_OPTION = True,
    no_color: COLOR_OPTION = False,
) -> None:
    """Check PATH with the configured linters and print the merged diagnostics."""

    output = build_output(emoji=emoji, no_color=no_color)
    try:
        config = _load(root or Path.cwd())
        linters = config.configured_linters(linter)
        diagnostics, entries = _run(config, linters, path, timeout, output)
    except CLIError as exc:
        output.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except ConfigError as exc:
        output.fail(str(exc))
        raise typer.Exit(code=EXIT_FAILURE) from exc

    _warn_missing(entries, output)
    if history:
        _print_history(entries, output)
    errors = sum(1 for item in diagnostics if item.severity is Severity.ERROR)
    if errors:
        output.fail(f"{errors} error(s), {len(diagnostics)} diagnostic(s) in {path}")
        raise typer.Exit(code=EXIT_DIAGNOSTICS)
    output.ok(f"{len(diagnostics)} diagnostic(s), no errors in {path}")
    raise typer.Exit(code=EXIT_OK)


def _load(root: Path) -> EngineConfig:
    config = load_config(root)
    if not config.linters:
        raise CLIError(f"no linters configured under {root}", exit_code=EXIT_FAILURE)
    return config


def _run(
    config: EngineConfig,
    linters: list[Linter],
    path: Path,
    timeout: int,
    output: CommandOutput,
) -> tuple[list[Diagnostic], list[HistoryEntry]]:
    documents = InMemoryDocumentStore()
    document = documents.open_file(path)
    sink = ConsoleSink(output.console, documents=documents, color=output.use_color)
    engine = LintEngine(documents, sinks=[sink], config=config)
    try:
        engine.run_linters(document, linters, should_lint_file=True)
        engine.wait_until_idle(timeout)
        return engine.get_diagnostics(document), engine.history(document)
    except WaitTimeoutError as exc:
        raise CLIError(str(exc), exit_code=EXIT_FAILURE) from exc
    finally:
        engine.close()


def _warn_missing(entries: list[HistoryEntry], output: CommandOutput) -> None:
    """Warn once for every linter executable that could not be found."""

    for entry in entries:
        if entry.status is HistoryStatus.MISSING:
            output.warn(f"executable not found: {entry.command}")


def _print_history(entries: list[HistoryEntry], output: CommandOutput) -> None:
    for entry in entries:
        suffix = f" (exit {entry.exit_code})" if entry.exit_code is not None else ""
        output.echo(f"{entry.status.value:<10} {entry.command}{suffix}")


__all__ = ["app", "check"]
