# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe implementations and registry."""

from .base import Probe, ProbeTransports
from .dns import DnsResolveProbe
from .registry import ProbeFactory, ProbeRegistry, default_registry
from .tcp import TcpReachabilityProbe
from .tls import TlsCertificateProbe
from .transport import build_inspection_context, fetch_peer_certificate, open_tcp_connection

__all__ = [
    "DnsResolveProbe",
    "Probe",
    "ProbeFactory",
    "ProbeRegistry",
    "ProbeTransports",
    "TcpReachabilityProbe",
    "TlsCertificateProbe",
    "build_inspection_context",
    "default_registry",
    "fetch_peer_certificate",
    "open_tcp_connection",
]
