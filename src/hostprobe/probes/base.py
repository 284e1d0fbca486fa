# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe base class and shared transports."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..config import ProbeSettings
from ..errors import REASON_EMPTY_TARGET, ProbeError
from ..models.probe import ProbeFailure, ProbeKind, ProbeResult, ProbeSuccess
from ..resolvers.dns import DnspythonResolver, DnsResolver
from .transport import CertificateFetcher, Connector, fetch_peer_certificate, open_tcp_connection

logger = logging.getLogger(__name__)


@dataclass
class ProbeTransports:
    """I/O collaborators handed to every probe; swap them out to probe without a network."""

    connect: Connector = open_tcp_connection
    fetch_certificate: CertificateFetcher = fetch_peer_certificate
    dns_resolver: DnsResolver = field(default_factory=DnspythonResolver)


def elapsed_ms_since(started: float) -> int:
    return max(0, int(round((asyncio.get_running_loop().time() - started) * 1000)))


class Probe(ABC):
    """
    One unit of network work: ``execute(target, timeout) -> ProbeResult``.

    ``execute`` never raises for expected failures. Empty targets and invalid
    configuration are rejected before any I/O; every other failure is timed
    from the moment the network operation started.
    """

    kind_type: ClassVar[type[ProbeKind]] = ProbeKind

    def __init__(self, kind: ProbeKind, transports: ProbeTransports):
        self.kind = kind
        self.transports = transports

    @classmethod
    def from_kind(cls, kind: ProbeKind, transports: ProbeTransports) -> "Probe":
        return cls(kind, transports)

    def validate(self) -> None:
        """Raise InputError when the probe configuration cannot be executed."""

    @abstractmethod
    def default_timeout(self, settings: ProbeSettings, *, batch: bool) -> float: ...

    @abstractmethod
    async def _run(self, target: str, timeout: float | None) -> Any: ...

    async def execute(self, target: str, timeout: float | None) -> ProbeResult:
        host = str(target or "").strip()
        if not host:
            return ProbeFailure.input_error(REASON_EMPTY_TARGET, "Target is empty")
        try:
            self.validate()
        except ProbeError as exc:
            return ProbeFailure.from_exception(exc)

        started = asyncio.get_running_loop().time()
        try:
            payload = await asyncio.wait_for(self._run(host, timeout), timeout=timeout)
        except Exception as exc:  # noqa: BLE001
            failure = ProbeFailure.from_exception(exc, elapsed_ms_since(started))
            logger.debug("%s probe of %s failed: %s (%s)", self.kind.label, host, failure.reason, failure.message)
            return failure
        return ProbeSuccess(payload=payload, elapsed_ms=elapsed_ms_since(started))

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"{self.__class__.__name__}({self.kind.label})"


__all__ = ["Probe", "ProbeTransports", "elapsed_ms_since"]
