# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Batch request/result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .probe import ProbeKind, ProbeResult


@dataclass
class PerTargetResult:
    """Results for one input target, keyed by probe kind in request order."""

    target: str
    results: dict[ProbeKind, ProbeResult] = field(default_factory=dict)

    def get(self, kind: ProbeKind) -> ProbeResult | None:
        return self.results.get(kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "results": {kind.label: result.to_dict() for kind, result in self.results.items()},
        }


@dataclass
class BatchResult:
    """
    Outcome of one batch run.

    ``items`` always mirrors the input target order (duplicates included).
    ``error`` is only set when the request itself was rejected.
    """

    total: int
    completed: int = 0
    items: list[PerTargetResult] = field(default_factory=list)
    elapsed_ms: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "total": self.total,
            "completed": self.completed,
            "elapsed_ms": self.elapsed_ms,
            "items": [item.to_dict() for item in self.items],
        }
        if self.error:
            payload["error"] = self.error
        return payload


__all__ = ["BatchResult", "PerTargetResult"]
