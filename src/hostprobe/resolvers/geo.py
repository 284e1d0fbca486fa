# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""IP geolocation through ip-api.com."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Protocol

from ..config import HttpSettings, load_http_settings
from ..errors import REASON_HTTP_ERROR, ErrorCategory, NetworkError, ParseError
from ..http import HttpClient, HttpRequest, RetryConfig, send_with_retries
from ..models.hostinfo import AsnInfo, GeoInfo

IP_API_FIELDS = "status,message,country,countryCode,region,regionName,city,zip,lat,lon,timezone,isp,org,as,query"

_ASN_RE = re.compile(r"AS(\d+)\s+(.+)")


class GeoResolver(Protocol):
    async def lookup(self, ip: str, timeout: float | None = None) -> GeoInfo: ...


def parse_asn(as_field: str | None, ip: str, isp: str | None) -> AsnInfo:
    route = f"{ip}/24"
    if as_field:
        match = _ASN_RE.match(as_field)
        if match:
            return AsnInfo(asn=f"AS{match.group(1)}", name=match.group(2), route=route)
    return AsnInfo(asn="N/A", name=isp or "N/A", route=route)


def geo_from_ip_api(data: Mapping[str, Any], ip: str) -> GeoInfo:
    query = data.get("query") or ip
    location = ", ".join(part for part in (data.get("city"), data.get("regionName"), data.get("country")) if part)
    return GeoInfo(
        ip=query,
        isp=data.get("isp") or "Unknown",
        org=data.get("org") or "",
        country=data.get("country") or "Unknown",
        country_code=data.get("countryCode") or "XX",
        region=data.get("regionName") or "Unknown",
        city=data.get("city") or "Unknown",
        latitude=float(data.get("lat") or 0.0),
        longitude=float(data.get("lon") or 0.0),
        timezone=data.get("timezone") or "UTC",
        asn=parse_asn(data.get("as"), query, data.get("isp")),
        location=location or "Unknown",
    )


class IpApiGeoResolver:
    """Geolocation lookups against the free ip-api.com JSON endpoint."""

    def __init__(
        self,
        http_client: HttpClient,
        settings: HttpSettings | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.http_client = http_client
        self.settings = settings or load_http_settings()
        self.retry_config = retry_config

    async def lookup(self, ip: str, timeout: float | None = None) -> GeoInfo:
        request = HttpRequest(
            url=f"{self.settings.geo_url.rstrip('/')}/{ip}",
            params={"fields": IP_API_FIELDS},
            timeout=timeout,
        )
        response = await send_with_retries(self.http_client, request, retry_config=self.retry_config)
        if not response.ok:
            category = ErrorCategory(response.error_category) if response.error_category else ErrorCategory.NETWORK_ERROR
            raise NetworkError(
                response.error_message or f"IP API responded with status: {response.status_code}",
                reason=response.error_reason or REASON_HTTP_ERROR,
                category=category,
            )
        data = response.json()
        if not isinstance(data, dict):
            raise ParseError("IP API returned a non-JSON body")
        if data.get("status") != "success":
            raise NetworkError(f"IP API error: {data.get('message') or 'Unknown error'}", reason=REASON_HTTP_ERROR)
        return geo_from_ip_api(data, ip)


__all__ = ["GeoResolver", "IP_API_FIELDS", "IpApiGeoResolver", "geo_from_ip_api", "parse_asn"]
