# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Placeholder substitution and shell wrapping for linter commands."""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Final

FILENAME_PLACEHOLDER: Final[str] = "%s"
TEMPORARY_FILE_PLACEHOLDER: Final[str] = "%t"
_PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(r"%[%st]")
_NEWLINE_SUFFIX: Final[str] = "; echo"


def _placeholders(command: str) -> set[str]:
    """Return the placeholders, such as ``%s``, used in ``command``."""

    return {match.group(0) for match in _PLACEHOLDER_PATTERN.finditer(command)}


def uses_temporary_file(command: str) -> bool:
    """Return whether ``command`` references the temporary copy of the document."""

    return TEMPORARY_FILE_PLACEHOLDER in _placeholders(command)


def format_command(
    command: str,
    *,
    filename: Path | None,
    temporary_file: Path | None = None,
) -> str:
    """Substitute placeholders in ``command``.

    ``%%`` becomes a literal ``%``, ``%s`` the quoted path of the document and
    ``%t`` the quoted path of its temporary copy.

    Args:
        command: Command template produced by a linter.
        filename: Path of the document, ``None`` for unnamed documents.
        temporary_file: Path of the temporary copy when one was written.

    Returns:
        str: Command ready to hand to the shell.
    """

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "%%":
            return "%"
        if token == FILENAME_PLACEHOLDER:
            return shlex.quote(str(filename.absolute())) if filename is not None else "''"
        return shlex.quote(str(temporary_file)) if temporary_file is not None else "''"

    return _PLACEHOLDER_PATTERN.sub(_replace, command)


@dataclass(frozen=True, slots=True)
class ShellSettings:
    """Shell used to run command strings."""

    shell: str = "/bin/sh"
    flag: str = "-c"

    def wrap(self, command: str, *, add_newline: bool = False) -> list[str]:
        """Return the argv running ``command`` through the shell."""

        if add_newline:
            command = f"{command}{_NEWLINE_SUFFIX}"
        return [*shlex.split(self.shell), *shlex.split(self.flag), command]


__all__ = [
    "FILENAME_PLACEHOLDER",
    "ShellSettings",
    "TEMPORARY_FILE_PLACEHOLDER",
    "format_command",
    "uses_temporary_file",
]
