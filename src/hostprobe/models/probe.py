# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe kinds and probe result models."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from ..errors import (
    REASON_INVALID_KIND,
    REASON_INVALID_PORT,
    ErrorCategory,
    InputError,
    categorize_exception,
)

SUPPORTED_RECORD_TYPES = ("A", "AAAA", "NS", "MX", "TXT", "CNAME")
MAX_PORT = 65535


def validate_port(port: Any) -> int:
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= MAX_PORT:
        raise InputError(f"Port out of range: {port!r}", reason=REASON_INVALID_PORT)
    return port


@dataclass(frozen=True)
class ProbeKind:
    """Base for the hashable probe configurations used as result and cache keys."""

    name: ClassVar[str] = "base"

    @property
    def label(self) -> str:
        return self.name

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.name}


@dataclass(frozen=True)
class TcpReachability(ProbeKind):
    port: int = 80

    name: ClassVar[str] = "tcp"

    @property
    def label(self) -> str:
        return f"tcp:{self.port}"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.name, "port": self.port}


@dataclass(frozen=True)
class DnsResolve(ProbeKind):
    record_type: str = "A"

    name: ClassVar[str] = "dns"

    def __post_init__(self) -> None:
        object.__setattr__(self, "record_type", str(self.record_type or "").strip().upper())

    @property
    def label(self) -> str:
        return f"dns:{self.record_type}"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.name, "record_type": self.record_type}


@dataclass(frozen=True)
class TlsCertificate(ProbeKind):
    port: int = 443

    name: ClassVar[str] = "tls"

    @property
    def label(self) -> str:
        return f"tls:{self.port}"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.name, "port": self.port}


def _payload_to_dict(payload: Any) -> Any:
    if hasattr(payload, "to_dict"):
        return payload.to_dict()
    if isinstance(payload, list):
        return [_payload_to_dict(item) for item in payload]
    return payload


@dataclass
class ProbeSuccess:
    payload: Any
    elapsed_ms: int = 0

    ok: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "success",
            "elapsed_ms": self.elapsed_ms,
            "payload": _payload_to_dict(self.payload),
        }


@dataclass
class ProbeFailure:
    """
    Failed probe outcome.

    ``reason`` is a short machine string (``timeout``, ``connection_refused``,
    ``resolution_failed`` ...); ``message`` is best-effort detail only.
    """

    reason: str
    elapsed_ms: int = 0
    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR
    message: str = ""

    ok: ClassVar[bool] = False

    @classmethod
    def from_exception(cls, exc: BaseException, elapsed_ms: int = 0) -> "ProbeFailure":
        category, reason = categorize_exception(exc)
        return cls(reason=reason, elapsed_ms=elapsed_ms, category=category, message=str(exc) or type(exc).__name__)

    @classmethod
    def input_error(cls, reason: str, message: str = "") -> "ProbeFailure":
        return cls(reason=reason, elapsed_ms=0, category=ErrorCategory.INPUT_ERROR, message=message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "failure",
            "elapsed_ms": self.elapsed_ms,
            "reason": self.reason,
            "category": self.category.value,
            "message": self.message,
        }


ProbeResult = Union[ProbeSuccess, ProbeFailure]


@dataclass
class TcpReachabilityPayload:
    reachable: bool
    latency_ms: int
    port: int

    def to_dict(self) -> dict[str, Any]:
        return {"reachable": self.reachable, "latency_ms": self.latency_ms, "port": self.port}


@dataclass
class DnsRecordsPayload:
    record_type: str
    records: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"record_type": self.record_type, "records": list(self.records)}


def _kinds_from_mapping(requested: Mapping[str, Any]) -> list[ProbeKind]:
    kinds: list[ProbeKind] = []
    for name, options in requested.items():
        if options is None or options is False:
            continue
        opts: Mapping[str, Any] = options if isinstance(options, Mapping) else {}
        if name in {"tcp", "ping"}:
            kinds.append(TcpReachability(port=validate_port(int(opts.get("port", TcpReachability.port)))))
        elif name in {"dns", "dig"}:
            record_types = opts.get("record_types")
            if record_types is None:
                record_types = [opts.get("record_type", DnsResolve.record_type)]
            kinds.extend(DnsResolve(record_type=str(rtype)) for rtype in record_types)
        elif name in {"tls", "ssl"}:
            kinds.append(TlsCertificate(port=validate_port(int(opts.get("port", TlsCertificate.port)))))
        else:
            raise InputError(f"Unknown probe kind: {name}", reason=REASON_INVALID_KIND)
    return kinds


def parse_probe_kinds(requested: Mapping[str, Any] | Iterable[ProbeKind]) -> list[ProbeKind]:
    """
    Normalize requested probe kinds into an ordered, duplicate-free list.

    Accepts ProbeKind instances or the mapping form
    ``{"tcp": {"port": 80}, "dns": {"record_type": "A"}, "tls": {"port": 443}}``.
    """
    try:
        if isinstance(requested, Mapping):
            kinds = _kinds_from_mapping(requested)
        else:
            kinds = list(requested)
    except (TypeError, ValueError) as exc:
        raise InputError(f"Invalid probe kind options: {exc}", reason=REASON_INVALID_KIND) from exc

    unique: list[ProbeKind] = []
    for kind in kinds:
        if not isinstance(kind, ProbeKind):
            raise InputError(f"Not a probe kind: {kind!r}", reason=REASON_INVALID_KIND)
        if kind not in unique:
            unique.append(kind)
    return unique


__all__ = [
    "MAX_PORT",
    "SUPPORTED_RECORD_TYPES",
    "DnsRecordsPayload",
    "DnsResolve",
    "ProbeFailure",
    "ProbeKind",
    "ProbeResult",
    "ProbeSuccess",
    "TcpReachability",
    "TcpReachabilityPayload",
    "TlsCertificate",
    "parse_probe_kinds",
    "validate_port",
]
