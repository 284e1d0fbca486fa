# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Host information, geolocation and DNS propagation models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AsnInfo:
    asn: str = "N/A"
    name: str = "N/A"
    route: str = "N/A"
    type: str = "ISP"

    def to_dict(self) -> dict[str, Any]:
        return {"asn": self.asn, "name": self.name, "route": self.route, "type": self.type}


@dataclass
class GeoInfo:
    ip: str
    isp: str = "Unknown"
    org: str = ""
    country: str = "Unknown"
    country_code: str = "XX"
    region: str = "Unknown"
    city: str = "Unknown"
    latitude: float = 0.0
    longitude: float = 0.0
    timezone: str = "UTC"
    asn: AsnInfo = field(default_factory=AsnInfo)
    location: str = "Unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "ip": self.ip,
            "isp": self.isp,
            "org": self.org,
            "country": self.country,
            "country_code": self.country_code,
            "region": self.region,
            "city": self.city,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "asn": self.asn.to_dict(),
            "location": self.location,
        }


@dataclass
class HostInfo:
    host: str
    ip: str
    hostname: str = ""
    geo: GeoInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "ip": self.ip,
            "hostname": self.hostname,
            "geo": self.geo.to_dict() if self.geo else None,
        }


@dataclass(frozen=True)
class DohSource:
    """A vantage point emulated through an EDNS client subnet."""

    label: str
    edns: str


@dataclass
class SourceResult:
    source: str
    edns: str
    ok: bool
    records: list[str] = field(default_factory=list)
    elapsed_ms: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "source": self.source,
            "edns": self.edns,
            "ok": self.ok,
            "records": list(self.records),
            "elapsed_ms": self.elapsed_ms,
        }
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass
class PropagationResult:
    query: str
    record_type: str
    results: list[SourceResult] = field(default_factory=list)
    error: str | None = None

    @property
    def distinct_answers(self) -> list[tuple[str, ...]]:
        seen: list[tuple[str, ...]] = []
        for result in self.results:
            if not result.ok:
                continue
            answer = tuple(sorted(result.records))
            if answer not in seen:
                seen.append(answer)
        return seen

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": self.query,
            "record_type": self.record_type,
            "results": [result.to_dict() for result in self.results],
        }
        if self.error:
            payload["error"] = self.error
        return payload


__all__ = [
    "AsnInfo",
    "DohSource",
    "GeoInfo",
    "HostInfo",
    "PropagationResult",
    "SourceResult",
]
