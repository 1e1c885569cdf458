# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Engine configuration models and TOML loading."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .aggregator import SinkChannels
from .commands import ShellSettings
from .errors import ConfigError
from .linters import Linter, OutputStream
from .parsers import RegexParser
from .runner import HistorySettings
from .severity import REMAP_TARGETS

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
CONFIG_FILENAME: Final[str] = ".lintloop.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "lintloop"
_REMAP_KEYS: Final[frozenset[str]] = REMAP_TARGETS | {"IS"}


class LinterDefinition(BaseModel):
    """Process linter declared in configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    executable: str
    command: str
    pattern: str
    output_stream: OutputStream = OutputStream.STDOUT
    read_buffer: bool = True
    lint_file: bool = False
    add_newline: bool = False

    @field_validator("pattern")
    @classmethod
    def _validate_pattern(cls, value: str) -> str:
        """Compile the pattern so configuration errors surface on load."""
        RegexParser(value)
        return value

    def to_linter(self, name: str) -> Linter:
        """Build a :class:`Linter` whose output is parsed with :attr:`pattern`."""

        return Linter(
            name=name,
            executable=self.executable,
            command=self.command,
            callback=RegexParser(self.pattern),
            output_stream=self.output_stream,
            read_buffer=self.read_buffer,
            lint_file=self.lint_file,
            add_newline=self.add_newline,
        )


class EngineConfig(BaseModel):
    """Settings shared by every component of a :class:`~lintloop.engine.LintEngine`."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    history_enabled: bool = True
    history_log_output: bool = False
    max_history_size: int = Field(default=20, ge=0)
    set_signs: bool = True
    set_lists: bool = True
    update_statusline: bool = True
    set_highlights: bool = True
    echo_cursor: bool = True
    type_map: dict[str, dict[str, str]] = Field(default_factory=dict)
    shell: str = "/bin/sh"
    shell_flag: str = "-c"
    temp_prefix: str = "lintloop"
    wait_poll_ms: int = Field(default=10, ge=1)
    wait_settle_ms: int = Field(default=10, ge=0)
    kill_delay_ms: int = Field(default=100, ge=0)
    linters: dict[str, LinterDefinition] = Field(default_factory=dict)

    @field_validator("type_map")
    @classmethod
    def _validate_type_map(cls, value: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
        """Reject remapping keys that can never match."""
        for linter, table in value.items():
            unknown = sorted(set(table) - _REMAP_KEYS)
            if unknown:
                raise ValueError(f"type_map.{linter} has unknown keys: {', '.join(unknown)}")
        return value

    def history_settings(self) -> HistorySettings:
        """Return history limits; a disabled history keeps nothing."""

        return HistorySettings(
            max_size=self.max_history_size if self.history_enabled else 0,
            log_output=self.history_log_output,
        )

    def shell_settings(self) -> ShellSettings:
        """Return the shell used to run command strings."""

        return ShellSettings(shell=self.shell, flag=self.shell_flag)

    def sink_channels(self) -> SinkChannels:
        """Return which sink channels receive published lists."""

        return SinkChannels(
            signs=self.set_signs,
            lists=self.set_lists,
            statusline=self.update_statusline,
            highlights=self.set_highlights,
            cursor=self.echo_cursor,
        )

    def configured_linters(self, names: list[str] | None = None) -> list[Linter]:
        """Return configured linters, restricted to ``names`` when given.

        Raises:
            ConfigError: If ``names`` mentions a linter that is not configured.
        """

        selected = names or sorted(self.linters)
        missing = [name for name in selected if name not in self.linters]
        if missing:
            raise ConfigError(f"unknown linter(s): {', '.join(missing)}")
        return [self.linters[name].to_linter(name) for name in selected]


def _read_toml(path: Path) -> dict[str, Any]:
    """Parse ``path`` as TOML.

    Raises:
        ConfigError: If the file is not valid TOML.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def _pyproject_section(path: Path) -> dict[str, Any]:
    """Return the ``[tool.lintloop]`` table of a ``pyproject.toml`` file."""

    tool_section = _read_toml(path).get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"{path}: [tool.{PYPROJECT_SECTION_KEY}] must be a table")
    return dict(section)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base``, recursing into nested tables."""

    merged = dict(base)
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(existing, value)
        else:
            merged[key] = value
    return merged


def load_config(root: Path) -> EngineConfig:
    """Load configuration for the project at ``root``.

    ``[tool.lintloop]`` in ``pyproject.toml`` is read first and values from
    ``.lintloop.toml`` override it. Missing files yield the defaults.

    Args:
        root: Project directory to search.

    Returns:
        EngineConfig: Validated configuration.

    Raises:
        ConfigError: If a file is not valid TOML or the values fail validation.
    """

    data: dict[str, Any] = {}
    pyproject = root / PYPROJECT_FILENAME
    if pyproject.is_file():
        data = _pyproject_section(pyproject)
    dedicated = root / CONFIG_FILENAME
    if dedicated.is_file():
        data = _deep_merge(data, _read_toml(dedicated))
    try:
        return EngineConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid lintloop configuration in {root}: {exc}") from exc


__all__ = ["CONFIG_FILENAME", "EngineConfig", "LinterDefinition", "load_config"]
