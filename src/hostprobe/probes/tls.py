# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""TLS certificate inspection probe."""

from __future__ import annotations

from ..certs import certificate_info_from_der
from ..config import ProbeSettings
from ..errors import REASON_NO_CERTIFICATE, ErrorCategory, NetworkError
from ..models.certificate import CertificateInfo
from ..models.probe import TlsCertificate, validate_port
from .base import Probe


class TlsCertificateProbe(Probe):
    """Fetches the leaf certificate without validating the chain."""

    kind_type = TlsCertificate
    kind: TlsCertificate

    def validate(self) -> None:
        validate_port(self.kind.port)

    def default_timeout(self, settings: ProbeSettings, *, batch: bool) -> float:
        return settings.batch_tls_timeout if batch else settings.tls_timeout

    async def _run(self, target: str, timeout: float | None) -> CertificateInfo:
        der = await self.transports.fetch_certificate(target, self.kind.port)
        if not der:
            raise NetworkError(
                "No SSL certificate found",
                reason=REASON_NO_CERTIFICATE,
                category=ErrorCategory.SSL_ERROR,
            )
        return certificate_info_from_der(der)


__all__ = ["TlsCertificateProbe"]
