# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Executable lookup with permanent memory of positive answers."""

from __future__ import annotations

import os
from collections.abc import Callable
from shutil import which

from .cache import positive_cache


def find_executable(name: str) -> bool:
    """Return whether ``name`` resolves to an executable program."""

    if not name:
        return False
    if os.path.dirname(name):
        return os.path.isfile(name) and os.access(name, os.X_OK)
    return which(name) is not None


class ExecutableProbe:
    """Memoise executable checks.

    Found programs stay found for the life of the probe. A missing program is
    checked again every time, so installing it mid-session is picked up.
    """

    def __init__(self, checker: Callable[[str], bool] = find_executable) -> None:
        self._check = positive_cache(checker)

    def is_executable(self, name: str) -> bool:
        """Return whether ``name`` can be run; positive answers are cached."""

        return bool(self._check(name))

    def clear(self) -> None:
        """Forget every cached answer."""

        self._check.cache_clear()  # type: ignore[attr-defined]


__all__ = ["ExecutableProbe", "find_executable"]
