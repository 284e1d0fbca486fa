# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
DNS resolver abstraction.

Resolvers return *raw* records (``MxRecord``, TXT chunk lists, plain
strings); ``format_records`` turns them into the display strings the DNS
probe reports. Keeping the two apart lets any backend (system resolver,
DNS-over-HTTPS, a test fake) share one rendering.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, Union

import dns.asyncresolver
import dns.rdatatype


@dataclass(frozen=True)
class MxRecord:
    priority: int
    exchange: str


RawRecord = Union[str, MxRecord, Sequence[str]]


class DnsResolver(Protocol):
    async def resolve(self, name: str, record_type: str, timeout: float | None = None) -> list[RawRecord]: ...


def format_record(record_type: str, record: RawRecord) -> str:
    if isinstance(record, MxRecord):
        return f"{record.priority} {record.exchange}"
    if isinstance(record, str):
        return record
    # TXT answers arrive as character-string chunks; render one value per record.
    return "".join(str(chunk) for chunk in record)


def format_records(record_type: str, records: Sequence[RawRecord]) -> list[str]:
    return [format_record(record_type, record) for record in records]


def _decode(chunk: bytes | str) -> str:
    if isinstance(chunk, bytes):
        return chunk.decode("utf-8", errors="replace")
    return chunk


class DnspythonResolver:
    """System-resolver backend built on ``dns.asyncresolver``."""

    def __init__(self, resolver: dns.asyncresolver.Resolver | None = None):
        self._resolver = resolver

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            self._resolver = dns.asyncresolver.Resolver()
        return self._resolver

    async def resolve(self, name: str, record_type: str, timeout: float | None = None) -> list[RawRecord]:
        answer = await self._get_resolver().resolve(name, record_type, lifetime=timeout)
        return [self._to_raw(record_type, rdata) for rdata in answer]

    async def reverse(self, address: str, timeout: float | None = None) -> list[str]:
        answer = await self._get_resolver().resolve_address(address, lifetime=timeout)
        return [rdata.target.to_text(omit_final_dot=True) for rdata in answer]

    @staticmethod
    def _to_raw(record_type: str, rdata) -> RawRecord:  # noqa: ANN001
        rdtype = dns.rdatatype.to_text(rdata.rdtype)
        if rdtype == "MX":
            return MxRecord(priority=int(rdata.preference), exchange=rdata.exchange.to_text(omit_final_dot=True))
        if rdtype == "TXT":
            return [_decode(chunk) for chunk in rdata.strings]
        if rdtype in {"A", "AAAA"}:
            return str(rdata.address)
        if rdtype in {"NS", "CNAME", "PTR"}:
            return rdata.target.to_text(omit_final_dot=True)
        return rdata.to_text()


__all__ = [
    "DnsResolver",
    "DnspythonResolver",
    "MxRecord",
    "RawRecord",
    "format_record",
    "format_records",
]
