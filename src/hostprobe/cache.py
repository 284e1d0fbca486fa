# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Time-boxed result cache.

Entries are keyed by ``CacheKey(kind, target)``; the kind carries its own
parameters (port, record type), so two probe kinds can never collide on the
same target string. Targets are not canonicalized: ``Example.com`` and
``example.com.`` are different keys.

Expired entries are removed lazily on ``get``; there is no size bound and no
background sweep.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from .config import ProbeSettings
from .models.probe import ProbeKind, ProbeResult

DEFAULT_FRESHNESS_WINDOW = ProbeSettings.cache_ttl

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheKey:
    kind: ProbeKind
    target: str


@dataclass
class CacheEntry:
    value: ProbeResult
    inserted_at: float


class ResultCache:
    """Freshness-window memoization store, safe to share across threads."""

    def __init__(self, freshness_window: float = DEFAULT_FRESHNESS_WINDOW, clock: Clock | None = None):
        self.freshness_window = freshness_window
        self._clock = clock or time.monotonic
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> ProbeResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at >= self.freshness_window:
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: CacheKey, value: ProbeResult) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_default_cache: ResultCache | None = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> ResultCache:
    """Return the process-wide cache, creating it on first use."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = ResultCache(freshness_window=ProbeSettings.from_env().cache_ttl)
        return _default_cache


def reset_default_cache() -> None:
    """Drop the process-wide cache (tests, or a config reload)."""
    global _default_cache
    with _default_cache_lock:
        _default_cache = None


__all__ = [
    "CacheEntry",
    "CacheKey",
    "ResultCache",
    "get_default_cache",
    "reset_default_cache",
]
