# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
DNS propagation check.

Queries one name through the DoH resolver once per vantage point (emulated
with EDNS client subnets) and reports each answer in catalogue order. A
failing source never affects the others.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ..config import ProbeSettings, load_probe_settings
from ..errors import REASON_EMPTY_TARGET, REASON_UNSUPPORTED_TYPE
from ..models.hostinfo import DohSource, PropagationResult, SourceResult
from ..models.probe import SUPPORTED_RECORD_TYPES, ProbeFailure
from ..probes.base import elapsed_ms_since
from ..resolvers.dns import format_records
from ..resolvers.doh import DohResolver
from .batching import iter_windows

logger = logging.getLogger(__name__)

DEFAULT_SOURCES: tuple[DohSource, ...] = (
    DohSource("Google", "8.8.8.8/32"),
    DohSource("OpenDNS", "208.67.222.222/32"),
    DohSource("Quad9", "9.9.9.9/32"),
    DohSource("Cloudflare", "1.1.1.1/32"),
    DohSource("Ashburn, United States", "52.0.0.0/16"),
    DohSource("Kansas City, United States", "199.192.0.0/24"),
    DohSource("Burnaby, Canada", "64.71.128.0/24"),
    DohSource("Mexico City, Mexico", "186.3.0.0/16"),
    DohSource("Sao Paulo, Brazil", "177.54.0.0/16"),
    DohSource("Dublin, Ireland", "46.16.0.0/16"),
    DohSource("Salford, United Kingdom", "193.120.0.0/14"),
    DohSource("Lille, France", "37.187.0.0/16"),
    DohSource("Leipzig, Germany", "85.214.0.0/16"),
    DohSource("Diemen, Netherlands", "146.185.0.0/16"),
    DohSource("St Petersburg, Russia", "93.158.0.0/16"),
    DohSource("Cullinan, South Africa", "196.40.0.0/16"),
    DohSource("Antalya, Turkey", "77.92.0.0/16"),
    DohSource("Islamabad, Pakistan", "203.99.0.0/16"),
    DohSource("Coimbatore, India", "103.64.0.0/16"),
    DohSource("Dhaka, Bangladesh", "103.78.0.0/16"),
    DohSource("Singapore", "139.99.0.0/16"),
    DohSource("Seoul, South Korea", "121.78.0.0/16"),
    DohSource("Auckland, New Zealand", "202.7.0.0/16"),
    DohSource("Melbourne, Australia", "203.0.113.128/25"),
)


class PropagationChecker:
    def __init__(self, resolver: DohResolver, *, settings: ProbeSettings | None = None):
        self.resolver = resolver
        self.settings = settings or load_probe_settings()

    async def check(
        self,
        name: str,
        record_type: str = "A",
        sources: Sequence[DohSource] = DEFAULT_SOURCES,
    ) -> PropagationResult:
        query = str(name or "").strip()
        rtype = str(record_type or "A").strip().upper()
        if not query:
            return PropagationResult(query=query, record_type=rtype, error=REASON_EMPTY_TARGET)
        if rtype not in SUPPORTED_RECORD_TYPES:
            return PropagationResult(query=query, record_type=rtype, error=REASON_UNSUPPORTED_TYPE)

        results: list[SourceResult] = []
        for window in iter_windows(list(sources), self.settings.doh_batch_size):
            settled = await asyncio.gather(*(self._query_source(query, rtype, source) for source in window))
            results.extend(settled)
        return PropagationResult(query=query, record_type=rtype, results=results)

    async def _query_source(self, name: str, record_type: str, source: DohSource) -> SourceResult:
        started = asyncio.get_running_loop().time()
        try:
            raw = await asyncio.wait_for(
                self.resolver.resolve(name, record_type, self.settings.doh_timeout, edns_client_subnet=source.edns),
                timeout=self.settings.doh_timeout,
            )
        except Exception as exc:  # noqa: BLE001
            failure = ProbeFailure.from_exception(exc, elapsed_ms_since(started))
            logger.debug("Propagation query via %s failed: %s", source.label, failure.reason)
            return SourceResult(
                source=source.label,
                edns=source.edns,
                ok=False,
                elapsed_ms=failure.elapsed_ms,
                error=failure.reason,
            )
        return SourceResult(
            source=source.label,
            edns=source.edns,
            ok=True,
            records=format_records(record_type, raw),
            elapsed_ms=elapsed_ms_since(started),
        )


__all__ = ["DEFAULT_SOURCES", "PropagationChecker"]
