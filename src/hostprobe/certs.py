# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Certificate and CSR decoding.

Both the TLS probe (DER bytes from a handshake) and the offline decoder (PEM
text) funnel into the same field extraction so the two report identical
shapes.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa
from cryptography.x509.oid import NameOID

from .errors import REASON_EMPTY_MATERIAL, REASON_INVALID_KIND, REASON_PARSE_ERROR, ErrorCategory
from .models.certificate import (
    CertificateInfo,
    DistinguishedName,
    MaterialKind,
    PublicKeyInfo,
    Validity,
)
from .models.probe import ProbeFailure

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def _name_attribute(name: x509.Name, oid: x509.ObjectIdentifier) -> str | None:
    attributes = name.get_attributes_for_oid(oid)
    if not attributes:
        return None
    value = attributes[0].value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def parse_distinguished_name(name: x509.Name) -> DistinguishedName:
    return DistinguishedName(
        common_name=_name_attribute(name, NameOID.COMMON_NAME),
        organization=_name_attribute(name, NameOID.ORGANIZATION_NAME),
        organizational_unit=_name_attribute(name, NameOID.ORGANIZATIONAL_UNIT_NAME),
        country=_name_attribute(name, NameOID.COUNTRY_NAME),
        state=_name_attribute(name, NameOID.STATE_OR_PROVINCE_NAME),
        locality=_name_attribute(name, NameOID.LOCALITY_NAME),
        email=_name_attribute(name, NameOID.EMAIL_ADDRESS),
    )


def describe_public_key(public_key) -> PublicKeyInfo:  # noqa: ANN001
    if isinstance(public_key, rsa.RSAPublicKey):
        return PublicKeyInfo(algorithm="RSA", key_size=public_key.key_size)
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return PublicKeyInfo(algorithm="EC", key_size=public_key.curve.key_size)
    if isinstance(public_key, dsa.DSAPublicKey):
        return PublicKeyInfo(algorithm="DSA", key_size=public_key.key_size)
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return PublicKeyInfo(algorithm="Ed25519", key_size=256)
    if isinstance(public_key, ed448.Ed448PublicKey):
        return PublicKeyInfo(algorithm="Ed448", key_size=456)
    return PublicKeyInfo(algorithm=type(public_key).__name__)


def _general_name_value(name: x509.GeneralName) -> str:
    value = name.value
    if isinstance(value, x509.Name):
        return value.rfc4514_string()
    return str(value)


def subject_alternative_names(extensions: x509.Extensions) -> list[str]:
    try:
        extension = extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return [_general_name_value(name) for name in extension.value]


def days_until(moment: datetime, now: datetime) -> int:
    """Whole days from ``now`` to ``moment``, negative once ``moment`` has passed."""
    return math.floor((moment - now).total_seconds() / SECONDS_PER_DAY)


def certificate_info(cert: x509.Certificate, *, now: datetime | None = None) -> CertificateInfo:
    now = now or datetime.now(timezone.utc)
    not_before = cert.not_valid_before_utc
    not_after = cert.not_valid_after_utc
    return CertificateInfo(
        kind="certificate",
        version=cert.version.value + 1,
        serial_number=format(cert.serial_number, "x"),
        signature_algorithm=cert.signature_algorithm_oid.dotted_string,
        issuer=parse_distinguished_name(cert.issuer),
        subject=parse_distinguished_name(cert.subject),
        validity=Validity(
            not_before=not_before,
            not_after=not_after,
            is_valid=not_after > now,
            days_remaining=days_until(not_after, now),
        ),
        public_key=describe_public_key(cert.public_key()),
        subject_alternative_names=subject_alternative_names(cert.extensions),
    )


def csr_info(csr: x509.CertificateSigningRequest, *, now: datetime | None = None) -> CertificateInfo:
    now = now or datetime.now(timezone.utc)
    return CertificateInfo(
        kind="csr",
        version=1,
        signature_algorithm=csr.signature_algorithm_oid.dotted_string,
        subject=parse_distinguished_name(csr.subject),
        validity=Validity(not_before=now, not_after=now, is_valid=True, days_remaining=None),
        public_key=describe_public_key(csr.public_key()),
        subject_alternative_names=subject_alternative_names(csr.extensions),
    )


def certificate_info_from_der(der: bytes, *, now: datetime | None = None) -> CertificateInfo:
    """Decode a DER leaf certificate as returned by a TLS handshake."""
    return certificate_info(x509.load_der_x509_certificate(der), now=now)


def decode_certificate_material(
    pem: str,
    kind: MaterialKind | str = "certificate",
    *,
    now: datetime | None = None,
) -> CertificateInfo | ProbeFailure:
    """
    Decode PEM certificate or CSR text without any network I/O.

    Never raises: malformed input comes back as a ``parse_error`` failure.
    """
    material = (pem or "").strip()
    if not material:
        return ProbeFailure.input_error(REASON_EMPTY_MATERIAL, "Certificate/CSR input is required")
    if kind not in {"certificate", "csr"}:
        return ProbeFailure.input_error(REASON_INVALID_KIND, f"Unknown material kind: {kind}")

    try:
        if kind == "certificate":
            return certificate_info(x509.load_pem_x509_certificate(material.encode("utf-8")), now=now)
        return csr_info(x509.load_pem_x509_csr(material.encode("utf-8")), now=now)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Failed to decode %s material: %s", kind, exc)
        return ProbeFailure(
            reason=REASON_PARSE_ERROR,
            category=ErrorCategory.PARSE_ERROR,
            message=f"Failed to parse {kind}: {exc}",
        )


__all__ = [
    "certificate_info",
    "certificate_info_from_der",
    "csr_info",
    "days_until",
    "decode_certificate_material",
    "describe_public_key",
    "parse_distinguished_name",
    "subject_alternative_names",
]
