# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""DNS resolution probe."""

from __future__ import annotations

from ..config import ProbeSettings
from ..errors import REASON_UNSUPPORTED_TYPE, InputError
from ..models.probe import SUPPORTED_RECORD_TYPES, DnsRecordsPayload, DnsResolve
from ..resolvers.dns import format_records
from .base import Probe


class DnsResolveProbe(Probe):
    kind_type = DnsResolve
    kind: DnsResolve

    def validate(self) -> None:
        if self.kind.record_type not in SUPPORTED_RECORD_TYPES:
            raise InputError(
                f"Unsupported record type: {self.kind.record_type or '(empty)'}",
                reason=REASON_UNSUPPORTED_TYPE,
            )

    def default_timeout(self, settings: ProbeSettings, *, batch: bool) -> float:
        return settings.dns_timeout

    async def _run(self, target: str, timeout: float | None) -> DnsRecordsPayload:
        record_type = self.kind.record_type
        raw = await self.transports.dns_resolver.resolve(target, record_type, timeout)
        return DnsRecordsPayload(record_type=record_type, records=format_records(record_type, raw))


__all__ = ["DnsResolveProbe"]
