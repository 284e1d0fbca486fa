# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Bounded-concurrency probe engine.

Targets are processed in consecutive windows of ``concurrency_limit``. All
targets of a window run concurrently; the probe kinds requested for one target
run one after another, so a batch never has more than ``concurrency_limit``
probe operations in flight. Window N+1 starts only after window N finished.

Neither ``run_batch`` nor ``run_single_probe`` raises for probe failures:
every outcome comes back as a value.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from contextlib import suppress
from typing import Any

from ..cache import CacheKey, ResultCache, get_default_cache
from ..config import ProbeSettings, load_probe_settings
from ..errors import (
    REASON_CANCELLED,
    REASON_INTERNAL_ERROR,
    ErrorCategory,
    ProbeError,
)
from ..models.batch import BatchResult, PerTargetResult
from ..models.probe import ProbeFailure, ProbeKind, ProbeResult, parse_probe_kinds
from ..probes.base import Probe, ProbeTransports, elapsed_ms_since
from ..probes.registry import ProbeRegistry, default_registry
from .aggregate import count_completed
from .batching import iter_windows

logger = logging.getLogger(__name__)

ERROR_TARGETS_REQUIRED = "targets_required"
ERROR_INVALID_CONCURRENCY = "invalid_concurrency_limit"

ProbeKindRequest = Mapping[str, Any] | Iterable[ProbeKind]


def _target_host(target: Any) -> str:
    return str(target).strip() if target is not None else ""


class ProbeEngine:
    """Runs probes against single targets or whole batches, backed by the shared cache."""

    def __init__(
        self,
        *,
        settings: ProbeSettings | None = None,
        cache: ResultCache | None = None,
        registry: ProbeRegistry | None = None,
        transports: ProbeTransports | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.cache = cache if cache is not None else get_default_cache()
        self.registry = registry or default_registry()
        self.transports = transports or ProbeTransports()

    def build_probe(self, kind: ProbeKind) -> Probe:
        return self.registry.build(kind, self.transports)

    async def run_single_probe(self, kind: ProbeKind, target: str, timeout: float | None = None) -> ProbeResult:
        """Interactive check of one host; uses the longer interactive timeouts and skips the cache."""
        try:
            probe = self.build_probe(kind)
            effective_timeout = timeout if timeout is not None else probe.default_timeout(self.settings, batch=False)
            return await probe.execute(target, effective_timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Unexpected fault in %r probe of %s", kind, target, exc_info=True)
            return ProbeFailure.from_exception(exc)

    async def run_batch(
        self,
        targets: Sequence[str],
        probe_kinds: ProbeKindRequest,
        concurrency_limit: int | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchResult:
        """
        Probe every target with every requested kind.

        ``items`` mirrors ``targets`` (order and duplicates preserved). Setting
        ``cancel_event`` aborts in-flight probes; targets that never started keep
        an empty result map.
        """
        started = asyncio.get_running_loop().time()
        target_list = [targets] if isinstance(targets, str) else list(targets or [])
        try:
            return await self._run_batch(target_list, probe_kinds, concurrency_limit, cancel_event, started)
        except ProbeError as exc:
            return BatchResult(total=len(target_list), elapsed_ms=elapsed_ms_since(started), error=str(exc) or exc.reason)
        except Exception as exc:  # noqa: BLE001
            logger.error("Batch run failed: %s", exc, exc_info=True)
            return BatchResult(total=len(target_list), elapsed_ms=elapsed_ms_since(started), error=str(exc) or type(exc).__name__)

    async def _run_batch(
        self,
        targets: list[Any],
        probe_kinds: ProbeKindRequest,
        concurrency_limit: int | None,
        cancel_event: asyncio.Event | None,
        started: float,
    ) -> BatchResult:
        if not targets:
            return BatchResult(total=0, error=ERROR_TARGETS_REQUIRED)

        limit = self.settings.concurrency_limit if concurrency_limit is None else concurrency_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            return BatchResult(total=len(targets), error=ERROR_INVALID_CONCURRENCY)

        kinds = parse_probe_kinds(probe_kinds)
        probes = {kind: self.build_probe(kind) for kind in kinds}
        items = [PerTargetResult(target=target) for target in targets]

        for index, window in enumerate(iter_windows(items, limit)):
            if cancel_event is not None and cancel_event.is_set():
                logger.debug("Batch cancelled before window %d", index)
                break
            logger.debug("Running window %d (%d targets)", index, len(window))
            await self._run_window(window, probes, cancel_event)

        return BatchResult(
            total=len(items),
            completed=count_completed(items),
            items=items,
            elapsed_ms=elapsed_ms_since(started),
        )

    async def _run_window(
        self,
        window: Sequence[PerTargetResult],
        probes: dict[ProbeKind, Probe],
        cancel_event: asyncio.Event | None,
    ) -> None:
        tasks = [asyncio.create_task(self._run_target(item, probes)) for item in window]
        pending: set[asyncio.Future[Any]] = set(tasks)
        waiter = asyncio.create_task(cancel_event.wait()) if cancel_event is not None else None
        try:
            while pending:
                watched = pending | {waiter} if waiter is not None else pending
                done, _ = await asyncio.wait(watched, return_when=asyncio.FIRST_COMPLETED)
                pending -= done
                if waiter is not None and waiter in done:
                    break
        finally:
            if waiter is not None:
                waiter.cancel()
            for task in pending:
                task.cancel()
            # Children record their "cancelled" results before the window returns.
            with suppress(asyncio.CancelledError):
                await asyncio.gather(*pending, return_exceptions=True)

    async def _run_target(self, item: PerTargetResult, probes: dict[ProbeKind, Probe]) -> None:
        host = _target_host(item.target)
        try:
            for kind, probe in probes.items():
                item.results[kind] = await self._run_isolated(kind, probe, host)
        except asyncio.CancelledError:
            for kind in probes:
                item.results.setdefault(
                    kind,
                    ProbeFailure(reason=REASON_CANCELLED, category=ErrorCategory.CANCELLED, message="Batch cancelled"),
                )
            raise

    async def _run_isolated(self, kind: ProbeKind, probe: Probe, host: str) -> ProbeResult:
        try:
            return await self._probe_with_cache(kind, probe, host)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Unexpected fault in %s probe of %s", kind.label, host, exc_info=True)
            return ProbeFailure(
                reason=REASON_INTERNAL_ERROR,
                category=ErrorCategory.UNKNOWN_ERROR,
                message=str(exc) or type(exc).__name__,
            )

    async def _probe_with_cache(self, kind: ProbeKind, probe: Probe, host: str) -> ProbeResult:
        timeout = probe.default_timeout(self.settings, batch=True)
        if not host:
            return await probe.execute(host, timeout)

        key = CacheKey(kind=kind, target=host)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s %s", kind.label, host)
            return cached

        result = await probe.execute(host, timeout)
        if result.ok:
            self.cache.put(key, result)
        return result


__all__ = ["ERROR_INVALID_CONCURRENCY", "ERROR_TARGETS_REQUIRED", "ProbeEngine"]
