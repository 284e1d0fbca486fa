# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Default network transports used by the probes."""

from __future__ import annotations

import asyncio
import ssl
from collections.abc import Awaitable, Callable
from contextlib import suppress

Connector = Callable[[str, int], Awaitable[None]]
CertificateFetcher = Callable[[str, int], Awaitable["bytes | None"]]


async def _close_writer(writer: asyncio.StreamWriter) -> None:
    writer.close()
    with suppress(Exception):
        await writer.wait_closed()


async def open_tcp_connection(host: str, port: int) -> None:
    """Establish and immediately close a TCP connection; no payload is exchanged."""
    _reader, writer = await asyncio.open_connection(host, port)
    await _close_writer(writer)


def build_inspection_context() -> ssl.SSLContext:
    """TLS context that accepts any peer certificate: inspection, not trust."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


async def fetch_peer_certificate(host: str, port: int) -> bytes | None:
    """Complete a TLS handshake and return the peer's leaf certificate as DER."""
    _reader, writer = await asyncio.open_connection(
        host,
        port,
        ssl=build_inspection_context(),
        server_hostname=host,
    )
    try:
        ssl_object = writer.get_extra_info("ssl_object")
        if ssl_object is None:
            return None
        return ssl_object.getpeercert(binary_form=True)
    finally:
        await _close_writer(writer)


__all__ = [
    "CertificateFetcher",
    "Connector",
    "build_inspection_context",
    "fetch_peer_certificate",
    "open_tcp_connection",
]
