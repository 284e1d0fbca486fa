# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Batch statistics."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from ..models.batch import BatchResult, PerTargetResult
from ..models.probe import ProbeKind

ItemPredicate = Callable[[PerTargetResult], bool]


def count_matching(items: Iterable[PerTargetResult], predicate: ItemPredicate) -> int:
    """Count items for which ``predicate`` holds; callers define their own pass/fail."""
    return sum(1 for item in items if predicate(item))


def has_any_result(item: PerTargetResult) -> bool:
    return bool(item.results)


def count_completed(items: Iterable[PerTargetResult]) -> int:
    """Targets that produced at least one result entry."""
    return count_matching(items, has_any_result)


def passed(kind: ProbeKind) -> ItemPredicate:
    def predicate(item: PerTargetResult) -> bool:
        result = item.results.get(kind)
        return result is not None and result.ok

    return predicate


def failed(kind: ProbeKind) -> ItemPredicate:
    def predicate(item: PerTargetResult) -> bool:
        result = item.results.get(kind)
        return result is not None and not result.ok

    return predicate


@dataclass
class KindSummary:
    passed: int = 0
    failed: int = 0
    reasons: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"passed": self.passed, "failed": self.failed, "reasons": dict(self.reasons)}


@dataclass
class BatchSummary:
    total: int
    completed: int
    elapsed_ms: int
    per_kind: dict[str, KindSummary] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "elapsed_ms": self.elapsed_ms,
            "per_kind": {label: summary.to_dict() for label, summary in self.per_kind.items()},
        }


def summarize(result: BatchResult) -> BatchSummary:
    summary = BatchSummary(total=result.total, completed=result.completed, elapsed_ms=result.elapsed_ms)
    for item in result.items:
        for kind, probe_result in item.results.items():
            bucket = summary.per_kind.setdefault(kind.label, KindSummary())
            if probe_result.ok:
                bucket.passed += 1
            else:
                bucket.failed += 1
                bucket.reasons[probe_result.reason] = bucket.reasons.get(probe_result.reason, 0) + 1
    return summary


__all__ = [
    "BatchSummary",
    "ItemPredicate",
    "KindSummary",
    "count_completed",
    "count_matching",
    "failed",
    "has_any_result",
    "passed",
    "summarize",
]
