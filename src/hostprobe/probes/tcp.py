# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""TCP reachability probe."""

from __future__ import annotations

import asyncio

from ..config import ProbeSettings
from ..models.probe import TcpReachability, TcpReachabilityPayload, validate_port
from .base import Probe, elapsed_ms_since


class TcpReachabilityProbe(Probe):
    """Reachable means the TCP handshake completed before the timeout."""

    kind_type = TcpReachability
    kind: TcpReachability

    def validate(self) -> None:
        validate_port(self.kind.port)

    def default_timeout(self, settings: ProbeSettings, *, batch: bool) -> float:
        return settings.batch_tcp_timeout if batch else settings.tcp_timeout

    async def _run(self, target: str, timeout: float | None) -> TcpReachabilityPayload:
        started = asyncio.get_running_loop().time()
        await self.transports.connect(target, self.kind.port)
        return TcpReachabilityPayload(reachable=True, latency_ms=elapsed_ms_since(started), port=self.kind.port)


__all__ = ["TcpReachabilityProbe"]
