# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Certificate inspection models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

MaterialKind = Literal["certificate", "csr"]


@dataclass
class DistinguishedName:
    common_name: str | None = None
    organization: str | None = None
    organizational_unit: str | None = None
    country: str | None = None
    state: str | None = None
    locality: str | None = None
    email: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "common_name": self.common_name,
            "organization": self.organization,
            "organizational_unit": self.organizational_unit,
            "country": self.country,
            "state": self.state,
            "locality": self.locality,
            "email": self.email,
        }


@dataclass
class Validity:
    """
    Validity window.

    For CSRs both bounds are the decode time and ``days_remaining`` is None,
    since a signing request has no validity of its own.
    """

    not_before: datetime
    not_after: datetime
    is_valid: bool
    days_remaining: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "not_before": self.not_before.isoformat(),
            "not_after": self.not_after.isoformat(),
            "is_valid": self.is_valid,
            "days_remaining": self.days_remaining,
        }


@dataclass
class PublicKeyInfo:
    algorithm: str
    key_size: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"algorithm": self.algorithm, "key_size": self.key_size}


@dataclass
class CertificateInfo:
    """Flat field set extracted from a certificate or CSR."""

    kind: MaterialKind
    subject: DistinguishedName
    validity: Validity
    public_key: PublicKeyInfo
    issuer: DistinguishedName | None = None
    version: int | None = None
    serial_number: str | None = None
    signature_algorithm: str | None = None
    subject_alternative_names: list[str] = field(default_factory=list)

    @property
    def days_remaining(self) -> int | None:
        return self.validity.days_remaining

    @property
    def is_valid(self) -> bool:
        return self.validity.is_valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "version": self.version,
            "serial_number": self.serial_number,
            "signature_algorithm": self.signature_algorithm,
            "issuer": self.issuer.to_dict() if self.issuer else None,
            "subject": self.subject.to_dict(),
            "validity": self.validity.to_dict(),
            "public_key": self.public_key.to_dict(),
            "subject_alternative_names": list(self.subject_alternative_names),
        }


__all__ = [
    "CertificateInfo",
    "DistinguishedName",
    "MaterialKind",
    "PublicKeyInfo",
    "Validity",
]
