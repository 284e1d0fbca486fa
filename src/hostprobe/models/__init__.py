# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for hostprobe."""

from .batch import BatchResult, PerTargetResult
from .certificate import CertificateInfo, DistinguishedName, MaterialKind, PublicKeyInfo, Validity
from .hostinfo import AsnInfo, DohSource, GeoInfo, HostInfo, PropagationResult, SourceResult
from .probe import (
    SUPPORTED_RECORD_TYPES,
    DnsRecordsPayload,
    DnsResolve,
    ProbeFailure,
    ProbeKind,
    ProbeResult,
    ProbeSuccess,
    TcpReachability,
    TcpReachabilityPayload,
    TlsCertificate,
    parse_probe_kinds,
)

__all__ = [
    "SUPPORTED_RECORD_TYPES",
    "AsnInfo",
    "BatchResult",
    "CertificateInfo",
    "DistinguishedName",
    "DnsRecordsPayload",
    "DnsResolve",
    "DohSource",
    "GeoInfo",
    "HostInfo",
    "MaterialKind",
    "PerTargetResult",
    "ProbeFailure",
    "ProbeKind",
    "ProbeResult",
    "ProbeSuccess",
    "PropagationResult",
    "PublicKeyInfo",
    "SourceResult",
    "TcpReachability",
    "TcpReachabilityPayload",
    "TlsCertificate",
    "Validity",
    "parse_probe_kinds",
]
