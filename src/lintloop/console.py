# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared rich consoles for command-line output."""

from __future__ import annotations

import sys

from rich.console import Console

from .cache import memoize


def stdout_is_terminal() -> bool:
    """Return whether standard output is attached to a terminal."""

    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        return False


@memoize(maxsize=8)
def _console(*, color: bool, emoji: bool, terminal: bool) -> Console:
    styled = color and terminal
    return Console(
        color_system="auto" if styled else None,
        no_color=not styled,
        emoji=emoji,
        highlight=False,
        soft_wrap=True,
    )


def get_console(*, color: bool, emoji: bool) -> Console:
    """Return the console shared by every caller with the same settings.

    Consoles resolve ``sys.stdout`` when printing, so output redirected after
    creation is still honoured.
    """

    return _console(color=color, emoji=emoji, terminal=stdout_is_terminal())


__all__ = ["get_console", "stdout_is_terminal"]
