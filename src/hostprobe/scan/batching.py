# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fixed-size windowing shared by the batch scheduler and the propagation check."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")


def iter_windows(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items, preserving order."""
    if size < 1:
        raise ValueError("window size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]


__all__ = ["iter_windows"]
