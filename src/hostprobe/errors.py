# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import asyncio
import errno
import socket
import ssl
from enum import Enum

import dns.exception
import httpx


class ErrorCategory(str, Enum):
    INPUT_ERROR = "INPUT_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    DNS_ERROR = "DNS_ERROR"
    SSL_ERROR = "SSL_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    CANCELLED = "CANCELLED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Machine-readable failure reasons.
REASON_EMPTY_TARGET = "empty_target"
REASON_EMPTY_MATERIAL = "empty_material"
REASON_UNSUPPORTED_TYPE = "unsupported_type"
REASON_INVALID_KIND = "invalid_kind"
REASON_INVALID_PORT = "invalid_port"
REASON_TIMEOUT = "timeout"
REASON_CONNECTION_REFUSED = "connection_refused"
REASON_UNREACHABLE = "unreachable"
REASON_RESOLUTION_FAILED = "resolution_failed"
REASON_HANDSHAKE_FAILED = "handshake_failed"
REASON_NO_CERTIFICATE = "no_certificate"
REASON_PARSE_ERROR = "parse_error"
REASON_HTTP_ERROR = "http_error"
REASON_CANCELLED = "cancelled"
REASON_INTERNAL_ERROR = "internal_error"


class ProbeError(Exception):
    """Base class for expected probe failures."""

    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR
    reason: str = REASON_INTERNAL_ERROR

    def __init__(
        self,
        message: str = "",
        *,
        reason: str | None = None,
        category: ErrorCategory | None = None,
    ):
        super().__init__(message)
        if reason is not None:
            self.reason = reason
        if category is not None:
            self.category = category


class InputError(ProbeError):
    """Rejected before any I/O (empty target, unsupported record type)."""

    category = ErrorCategory.INPUT_ERROR
    reason = REASON_EMPTY_TARGET


class NetworkError(ProbeError):
    """Connection, resolution or handshake failure."""

    category = ErrorCategory.NETWORK_ERROR
    reason = REASON_UNREACHABLE


class DnsError(NetworkError):
    """Name resolution failure (NXDOMAIN, SERVFAIL, no answer)."""

    category = ErrorCategory.DNS_ERROR
    reason = REASON_RESOLUTION_FAILED


class ParseError(ProbeError):
    """Malformed certificate/CSR material or provider payload."""

    category = ErrorCategory.PARSE_ERROR
    reason = REASON_PARSE_ERROR


def categorize_exception(exc: BaseException) -> tuple[ErrorCategory, str]:
    """
    Map Python/asyncio/dnspython/httpx exceptions to (ErrorCategory, reason).
    """
    if isinstance(exc, ProbeError):
        return exc.category, exc.reason

    if isinstance(exc, asyncio.CancelledError):
        return ErrorCategory.CANCELLED, REASON_CANCELLED

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT, REASON_TIMEOUT

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, socket.timeout)):
        return ErrorCategory.TIMEOUT, REASON_TIMEOUT

    if isinstance(exc, dns.exception.DNSException):
        if isinstance(exc, dns.exception.Timeout):
            return ErrorCategory.TIMEOUT, REASON_TIMEOUT
        return ErrorCategory.DNS_ERROR, REASON_RESOLUTION_FAILED

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR, REASON_RESOLUTION_FAILED

    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)):
        return ErrorCategory.SSL_ERROR, REASON_HANDSHAKE_FAILED

    if isinstance(exc, ConnectionRefusedError):
        return ErrorCategory.NETWORK_ERROR, REASON_CONNECTION_REFUSED

    if isinstance(exc, httpx.HTTPError):
        return ErrorCategory.NETWORK_ERROR, REASON_HTTP_ERROR

    if isinstance(exc, OSError):
        if exc.errno == errno.ECONNREFUSED:
            return ErrorCategory.NETWORK_ERROR, REASON_CONNECTION_REFUSED
        if exc.errno == errno.ETIMEDOUT:
            return ErrorCategory.TIMEOUT, REASON_TIMEOUT
        return ErrorCategory.NETWORK_ERROR, REASON_UNREACHABLE

    if isinstance(exc, ValueError):
        return ErrorCategory.PARSE_ERROR, REASON_PARSE_ERROR

    return ErrorCategory.UNKNOWN_ERROR, REASON_INTERNAL_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.INPUT_ERROR: "Invalid input, nothing was probed",
        ErrorCategory.TIMEOUT: "Network timeout during probe",
        ErrorCategory.NETWORK_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.PARSE_ERROR: "Could not parse the response or material",
        ErrorCategory.CANCELLED: "Probe cancelled",
        ErrorCategory.UNKNOWN_ERROR: "Unexpected error during probe",
        None: "",
    }
    return mapping.get(category, "Probe failed")


__all__ = [
    "DnsError",
    "ErrorCategory",
    "InputError",
    "NetworkError",
    "ParseError",
    "ProbeError",
    "categorize_exception",
    "error_category_to_reason",
]
