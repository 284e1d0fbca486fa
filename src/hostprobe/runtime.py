# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level synchronous facade over the async probe engine and resolvers."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from contextlib import suppress
from datetime import datetime

from .cache import ResultCache
from .certs import decode_certificate_material
from .config import ProbeSettings, load_http_settings, load_probe_settings
from .http.client import HttpClient, create_default_http_client
from .models import (
    BatchResult,
    CertificateInfo,
    HostInfo,
    ProbeFailure,
    ProbeKind,
    ProbeResult,
    PropagationResult,
)
from .probes import ProbeRegistry, ProbeTransports
from .resolvers import DohResolver, GeoResolver, IpApiGeoResolver
from .scan.engine import ProbeEngine, ProbeKindRequest
from .scan.hostinfo import HostInfoService
from .scan.propagation import DEFAULT_SOURCES, PropagationChecker


class HostProbe:
    """
    Convenience wrapper that wires one HTTP client and one event loop across all workflows.

    Every call runs on the same ``asyncio.Runner`` so the lazily created httpx
    client stays bound to a single loop. Use it as a context manager or call
    ``close()`` when done.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        settings: ProbeSettings | None = None,
        cache: ResultCache | None = None,
        registry: ProbeRegistry | None = None,
        transports: ProbeTransports | None = None,
        geo_resolver: GeoResolver | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.http_settings = load_http_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.engine = ProbeEngine(settings=self.settings, cache=cache, registry=registry, transports=transports)
        self.doh_resolver = DohResolver(self.http_client, settings=self.http_settings)
        self.propagation_checker = PropagationChecker(self.doh_resolver, settings=self.settings)
        dns_resolver = self.engine.transports.dns_resolver
        self.host_info_service = HostInfoService(
            geo_resolver or IpApiGeoResolver(self.http_client, self.http_settings),
            reverse_resolver=dns_resolver if hasattr(dns_resolver, "reverse") else None,
            timeout=self.http_settings.timeout,
        )
        self._runner = asyncio.Runner()

    def run_batch(
        self,
        targets: Sequence[str],
        probe_kinds: ProbeKindRequest,
        concurrency_limit: int | None = None,
    ) -> BatchResult:
        return self._runner.run(self.engine.run_batch(targets, probe_kinds, concurrency_limit))

    def run_single_probe(self, kind: ProbeKind, target: str, timeout: float | None = None) -> ProbeResult:
        return self._runner.run(self.engine.run_single_probe(kind, target, timeout))

    def decode_certificate_material(
        self,
        pem: str,
        kind: str = "certificate",
        *,
        now: datetime | None = None,
    ) -> CertificateInfo | ProbeFailure:
        return decode_certificate_material(pem, kind, now=now)

    def check_propagation(self, name: str, record_type: str = "A", sources=DEFAULT_SOURCES) -> PropagationResult:  # noqa: ANN001
        return self._runner.run(self.propagation_checker.check(name, record_type, sources))

    def lookup_host(self, host: str) -> HostInfo | ProbeFailure:
        return self._runner.run(self.host_info_service.lookup(host))

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "aclose"):
                self._runner.run(self.http_client.aclose())
        self._runner.close()

    def __enter__(self) -> HostProbe:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["HostProbe"]
