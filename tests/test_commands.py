# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for command placeholder substitution and shell wrapping."""

from __future__ import annotations

from pathlib import Path

from lintloop.commands import ShellSettings, format_command, uses_temporary_file


def test_placeholders_are_substituted_and_quoted(tmp_path: Path) -> None:
    document = tmp_path / "my file.py"
    temporary = tmp_path / "tmp" / "my file.py"

    command = format_command("lint %s --copy %t --width 100%%", filename=document, temporary_file=temporary)

    assert command == f"lint '{document}' --copy '{temporary}' --width 100%"


def test_escaped_percent_is_not_a_placeholder() -> None:
    assert uses_temporary_file("lint %t") is True
    assert uses_temporary_file("printf %%t") is False
    assert format_command("printf %%s", filename=None) == "printf %s"


def test_missing_filename_becomes_empty_argument() -> None:
    assert format_command("lint %s", filename=None) == "lint ''"


def test_shell_wrapping_appends_newline_workaround() -> None:
    shell = ShellSettings(shell="/bin/bash", flag="-c")

    assert shell.wrap("lint -") == ["/bin/bash", "-c", "lint -"]
    assert shell.wrap("lint -", add_newline=True) == ["/bin/bash", "-c", "lint -; echo"]
