# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
hostprobe package entrypoint.

This package runs bounded-concurrency network probes (TCP reachability, DNS
resolution, TLS certificate inspection) against many targets, aggregates the
per-target results, and decodes certificate material offline. Network I/O is
abstracted behind injectable transports and resolvers, and domain objects are
modeled with typed dataclasses.
"""

from .cache import CacheKey, ResultCache, get_default_cache, reset_default_cache
from .certs import decode_certificate_material
from .config import HttpSettings, ProbeSettings, load_http_settings, load_probe_settings
from .errors import ErrorCategory, ProbeError
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    RetryConfig,
    create_default_http_client,
)
from .log import setup_logging
from .models import (
    BatchResult,
    CertificateInfo,
    DnsResolve,
    PerTargetResult,
    ProbeFailure,
    ProbeKind,
    ProbeResult,
    ProbeSuccess,
    TcpReachability,
    TlsCertificate,
)
from .probes import Probe, ProbeRegistry, ProbeTransports
from .runtime import HostProbe
from .scan import ProbeEngine, PropagationChecker, count_completed, count_matching, summarize
from .version import __version__

__all__ = [
    "BatchResult",
    "CacheKey",
    "CertificateInfo",
    "DnsResolve",
    "ErrorCategory",
    "HostProbe",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "PerTargetResult",
    "Probe",
    "ProbeEngine",
    "ProbeError",
    "ProbeFailure",
    "ProbeKind",
    "ProbeRegistry",
    "ProbeResult",
    "ProbeSettings",
    "ProbeSuccess",
    "ProbeTransports",
    "PropagationChecker",
    "ResultCache",
    "RetryConfig",
    "TcpReachability",
    "TlsCertificate",
    "count_completed",
    "count_matching",
    "create_default_http_client",
    "decode_certificate_material",
    "get_default_cache",
    "load_http_settings",
    "load_probe_settings",
    "reset_default_cache",
    "setup_logging",
    "summarize",
    "__version__",
]
