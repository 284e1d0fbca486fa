# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scheduling, aggregation and multi-source lookups."""

from .aggregate import BatchSummary, count_completed, count_matching, failed, passed, summarize
from .batching import iter_windows
from .engine import ProbeEngine
from .hostinfo import HostInfoService
from .propagation import DEFAULT_SOURCES, PropagationChecker

__all__ = [
    "DEFAULT_SOURCES",
    "BatchSummary",
    "HostInfoService",
    "ProbeEngine",
    "PropagationChecker",
    "count_completed",
    "count_matching",
    "failed",
    "iter_windows",
    "passed",
    "summarize",
]
