# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Host information lookup: address resolution, reverse DNS, geolocation."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from collections.abc import Awaitable, Callable
from typing import Protocol

from ..errors import REASON_EMPTY_TARGET, REASON_RESOLUTION_FAILED, REASON_TIMEOUT, DnsError
from ..models.hostinfo import HostInfo
from ..models.probe import ProbeFailure
from ..resolvers.geo import GeoResolver

logger = logging.getLogger(__name__)

AddressLookup = Callable[[str], Awaitable[str]]


class ReverseResolver(Protocol):
    async def reverse(self, address: str, timeout: float | None = None) -> list[str]: ...


async def lookup_ipv4(host: str) -> str:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, family=socket.AF_INET, type=socket.SOCK_STREAM)
    if not infos:
        raise DnsError(f"Could not resolve {host}")
    return infos[0][4][0]


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


class HostInfoService:
    """
    Resolve a host and enrich it through the pluggable geolocation resolver.

    A failed geolocation lookup is reported as a failure; no placeholder
    location data is ever substituted.
    """

    def __init__(
        self,
        geo_resolver: GeoResolver,
        *,
        reverse_resolver: ReverseResolver | None = None,
        address_lookup: AddressLookup = lookup_ipv4,
        timeout: float = 10.0,
    ):
        self.geo_resolver = geo_resolver
        self.reverse_resolver = reverse_resolver
        self.address_lookup = address_lookup
        self.timeout = timeout

    async def lookup(self, host: str) -> HostInfo | ProbeFailure:
        target = str(host or "").strip()
        if not target:
            return ProbeFailure.input_error(REASON_EMPTY_TARGET, "Host is required")

        hostname = ""
        if is_ip_address(target):
            ip = target
            hostname = await self._reverse(ip)
        else:
            try:
                ip = await asyncio.wait_for(self.address_lookup(target), timeout=self.timeout)
            except Exception as exc:  # noqa: BLE001
                failure = ProbeFailure.from_exception(exc)
                if failure.reason != REASON_TIMEOUT:
                    failure.reason = REASON_RESOLUTION_FAILED
                failure.message = f"Could not resolve hostname: {failure.message}"
                return failure
            hostname = target

        try:
            geo = await asyncio.wait_for(self.geo_resolver.lookup(ip, self.timeout), timeout=self.timeout)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Geolocation lookup for %s failed: %s", ip, exc)
            return ProbeFailure.from_exception(exc)
        return HostInfo(host=target, ip=ip, hostname=hostname, geo=geo)

    async def _reverse(self, ip: str) -> str:
        if self.reverse_resolver is None:
            return ""
        try:
            names = await asyncio.wait_for(self.reverse_resolver.reverse(ip, self.timeout), timeout=self.timeout)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Reverse DNS for %s failed: %s", ip, exc)
            return ""
        return names[0] if names else ""


__all__ = ["HostInfoService", "is_ip_address", "lookup_ipv4"]
