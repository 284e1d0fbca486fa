# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pluggable resolvers: system DNS, DNS-over-HTTPS, IP geolocation."""

from .dns import DnspythonResolver, DnsResolver, MxRecord, RawRecord, format_record, format_records
from .doh import DohResolver, parse_answer_data
from .geo import GeoResolver, IpApiGeoResolver, geo_from_ip_api, parse_asn

__all__ = [
    "DnsResolver",
    "DnspythonResolver",
    "DohResolver",
    "GeoResolver",
    "IpApiGeoResolver",
    "MxRecord",
    "RawRecord",
    "format_record",
    "format_records",
    "geo_from_ip_api",
    "parse_answer_data",
    "parse_asn",
]
