# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""One-line status messages for the command line."""

from __future__ import annotations

from enum import Enum
from typing import Final

from rich.text import Text

from .console import get_console, stdout_is_terminal


class Status(str, Enum):
    OK = "ok"
    WARN = "warn"
    FAIL = "fail"


# glyph, style
_DECORATION: Final[dict[Status, tuple[str, str]]] = {
    Status.OK: ("✅", "green"),
    Status.WARN: ("⚠️", "yellow"),
    Status.FAIL: ("❌", "red"),
}


def status_line(status: Status, message: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print ``message`` decorated for ``status``.

    Args:
        status: Outcome the message reports.
        message: Text to print.
        use_emoji: Prefix the message with the status glyph.
        use_color: Force colour on or off; terminal detection decides when ``None``.
    """

    color = stdout_is_terminal() if use_color is None else use_color
    glyph, style = _DECORATION[status]
    text = Text(f"{glyph} {message}" if use_emoji else message)
    if color:
        text.stylize(style)
    get_console(color=color, emoji=use_emoji).print(text)


def ok(message: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status_line(Status.OK, message, use_emoji=use_emoji, use_color=use_color)


def warn(message: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status_line(Status.WARN, message, use_emoji=use_emoji, use_color=use_color)


def fail(message: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status_line(Status.FAIL, message, use_emoji=use_emoji, use_color=use_color)


__all__ = ["Status", "fail", "ok", "status_line", "warn"]
