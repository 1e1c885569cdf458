# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Thread-safe memoization decorators.

:func:`memoize` keeps every answer up to an optional size bound, evicting the
least recently used entry. :func:`positive_cache` keeps only truthy answers,
for probes whose result can flip from "no" to "yes" but never back.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass
from functools import update_wrapper
from threading import Lock
from typing import Final, Generic, ParamSpec, TypeVar, cast

P = ParamSpec("P")
R = TypeVar("R")

_ABSENT: Final = object()


@dataclass(frozen=True, slots=True)
class CacheInfo:
    """Snapshot of a cache's counters."""

    current_size: int
    hits: int
    maxsize: int | None


def _key_for(args: tuple[object, ...], kwargs: Mapping[str, object]) -> Hashable:
    """Return a dictionary key for one call.

    Raises:
        TypeError: If an argument cannot be hashed.
    """

    values = (*args, *kwargs.values())
    if not all(isinstance(value, Hashable) for value in values):
        raise TypeError("cached callables require hashable arguments")
    if kwargs:
        return (args, tuple(sorted(kwargs.items())))
    return args


class _Cached(Generic[P, R]):
    def __init__(self, func: Callable[P, R], maxsize: int | None, keep: Callable[[R], bool] | None) -> None:
        self._func = func
        self._maxsize = maxsize
        self._keep = keep
        self._entries: OrderedDict[Hashable, R] = OrderedDict()
        self._hits = 0
        self._lock = Lock()
        update_wrapper(self, func)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R:
        key = _key_for(args, kwargs)
        with self._lock:
            found = self._entries.get(key, _ABSENT)
            if found is not _ABSENT:
                self._entries.move_to_end(key)
                self._hits += 1
                return cast(R, found)
        # The wrapped call runs unlocked; concurrent misses may both compute.
        value = self._func(*args, **kwargs)
        if self._keep is None or self._keep(value):
            with self._lock:
                self._entries[key] = value
                if self._maxsize is not None:
                    while len(self._entries) > self._maxsize:
                        self._entries.popitem(last=False)
        return value

    def cache_clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0

    def cache_metadata(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(current_size=len(self._entries), hits=self._hits, maxsize=self._maxsize)


def memoize(maxsize: int | None = None) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Cache every result of the decorated function.

    Args:
        maxsize: Upper bound on stored entries, ``None`` for no bound.

    Returns:
        Callable[[Callable[P, R]], Callable[P, R]]: Decorator adding
        ``cache_clear`` and ``cache_metadata`` to the wrapped function.
    """

    def decorate(func: Callable[P, R]) -> Callable[P, R]:
        return cast(Callable[P, R], _Cached(func, maxsize, None))

    return decorate


def positive_cache(func: Callable[P, R]) -> Callable[P, R]:
    """Cache only the truthy results of ``func``; falsy ones are recomputed."""

    return cast(Callable[P, R], _Cached(func, None, bool))


__all__ = ["CacheInfo", "memoize", "positive_cache"]
