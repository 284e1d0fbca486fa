# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe registry: probe kind type -> probe factory."""

from __future__ import annotations

from collections.abc import Callable

from ..errors import REASON_INVALID_KIND, InputError
from ..models.probe import ProbeKind
from .base import Probe, ProbeTransports
from .dns import DnsResolveProbe
from .tcp import TcpReachabilityProbe
from .tls import TlsCertificateProbe

ProbeFactory = Callable[[ProbeKind, ProbeTransports], Probe]


class ProbeRegistry:
    """Lookup table the scheduler builds probes from; new kinds only need a registration."""

    def __init__(self) -> None:
        self._factories: dict[type[ProbeKind], ProbeFactory] = {}

    def register(self, kind_type: type[ProbeKind], factory: ProbeFactory) -> None:
        self._factories[kind_type] = factory

    def register_probe(self, probe_cls: type[Probe]) -> type[Probe]:
        self.register(probe_cls.kind_type, probe_cls.from_kind)
        return probe_cls

    def build(self, kind: ProbeKind, transports: ProbeTransports) -> Probe:
        factory = self._factories.get(type(kind))
        if factory is None:
            raise InputError(f"No probe registered for {kind!r}", reason=REASON_INVALID_KIND)
        return factory(kind, transports)

    def __contains__(self, kind_type: object) -> bool:
        return kind_type in self._factories


def default_registry() -> ProbeRegistry:
    registry = ProbeRegistry()
    for probe_cls in (TcpReachabilityProbe, DnsResolveProbe, TlsCertificateProbe):
        registry.register_probe(probe_cls)
    return registry


__all__ = ["ProbeFactory", "ProbeRegistry", "default_registry"]
