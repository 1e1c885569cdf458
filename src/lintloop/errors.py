# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception taxonomy raised by the lint engine."""

from __future__ import annotations

from typing import Final

WAIT_TIMEOUT_MESSAGE: Final[str] = "Jobs did not complete on time!"
CLOCK_FAULT_MESSAGE: Final[str] = "Failed to read milliseconds from the clock!"


class LintLoopError(RuntimeError):
    """Base class for engine failures surfaced to callers."""


class WaitTimeoutError(LintLoopError):
    """Raised when outstanding jobs do not finish before the wait deadline."""

    def __init__(self, message: str = WAIT_TIMEOUT_MESSAGE) -> None:
        super().__init__(message)


class ClockFaultError(LintLoopError):
    """Raised when the clock collaborator reports an unusable reading."""

    def __init__(self, message: str = CLOCK_FAULT_MESSAGE) -> None:
        super().__init__(message)


class ConfigError(LintLoopError):
    """Raised when configuration input is invalid."""


class LinterDefinitionError(ValueError):
    """Raised when a linter definition cannot be executed."""


__all__ = [
    "CLOCK_FAULT_MESSAGE",
    "ClockFaultError",
    "ConfigError",
    "LintLoopError",
    "LinterDefinitionError",
    "WAIT_TIMEOUT_MESSAGE",
    "WaitTimeoutError",
]
