# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""DNS-over-HTTPS resolver using Google's JSON API."""

from __future__ import annotations

import logging
import re
from typing import Any

from ..config import HttpSettings, load_http_settings
from ..errors import REASON_HTTP_ERROR, REASON_PARSE_ERROR, DnsError, ErrorCategory, NetworkError, ParseError
from ..http import HttpClient, HttpRequest, RetryConfig, send_with_retries
from .dns import MxRecord, RawRecord

logger = logging.getLogger(__name__)

DNS_TYPE_CODES = {"A": 1, "NS": 2, "CNAME": 5, "MX": 15, "TXT": 16, "AAAA": 28}

# RCODE names for the non-zero "Status" values Google reports most often.
DNS_STATUS_NAMES = {1: "FORMERR", 2: "SERVFAIL", 3: "NXDOMAIN", 4: "NOTIMP", 5: "REFUSED"}

_TXT_CHUNK_RE = re.compile(r'"((?:[^"\\]|\\.)*)"')


def parse_answer_data(record_type: str, data: str) -> RawRecord:
    """Convert one ``Answer[].data`` string into a raw record."""
    value = str(data).strip()
    if record_type == "MX":
        priority, _, exchange = value.partition(" ")
        try:
            return MxRecord(priority=int(priority), exchange=exchange.strip().rstrip("."))
        except ValueError as exc:
            raise ParseError(f"Malformed MX data: {value!r}") from exc
    if record_type == "TXT":
        chunks = _TXT_CHUNK_RE.findall(value)
        return [chunk.replace('\\"', '"') for chunk in chunks] if chunks else [value]
    if record_type in {"NS", "CNAME"}:
        return value.rstrip(".")
    return value


class DohResolver:
    """
    Resolver backend that queries a DoH JSON endpoint.

    ``edns_client_subnet`` lets a caller emulate a query issued from another
    network, which is what the propagation check relies on.
    """

    def __init__(
        self,
        http_client: HttpClient,
        *,
        settings: HttpSettings | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.http_client = http_client
        self.settings = settings or load_http_settings()
        self.retry_config = retry_config

    async def query(
        self,
        name: str,
        record_type: str,
        *,
        edns_client_subnet: str | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        params = {"name": name, "type": record_type}
        if edns_client_subnet:
            params["edns_client_subnet"] = edns_client_subnet
        request = HttpRequest(
            url=self.settings.doh_url,
            params=params,
            headers={"Accept": "application/dns-json"},
            timeout=timeout,
        )
        response = await send_with_retries(self.http_client, request, retry_config=self.retry_config)
        if not response.ok:
            category = ErrorCategory(response.error_category) if response.error_category else ErrorCategory.NETWORK_ERROR
            raise NetworkError(
                response.error_message or f"HTTP {response.status_code}",
                reason=response.error_reason or REASON_HTTP_ERROR,
                category=category,
            )
        payload = response.json()
        if not isinstance(payload, dict):
            raise ParseError("DoH response is not a JSON object", reason=REASON_PARSE_ERROR)
        return payload

    async def resolve(
        self,
        name: str,
        record_type: str,
        timeout: float | None = None,
        *,
        edns_client_subnet: str | None = None,
    ) -> list[RawRecord]:
        rtype = record_type.upper()
        payload = await self.query(name, rtype, edns_client_subnet=edns_client_subnet, timeout=timeout)
        status = payload.get("Status", 0)
        if status != 0:
            raise DnsError(f"{name} {rtype}: {DNS_STATUS_NAMES.get(status, f'status {status}')}")

        type_code = DNS_TYPE_CODES.get(rtype)
        records: list[RawRecord] = []
        for answer in payload.get("Answer") or []:
            if not isinstance(answer, dict) or "data" not in answer:
                continue
            if type_code is not None and answer.get("type") != type_code:
                continue
            records.append(parse_answer_data(rtype, answer["data"]))
        logger.debug("DoH %s %s via %s -> %d records", name, rtype, edns_client_subnet or "default", len(records))
        return records


__all__ = ["DNS_TYPE_CODES", "DohResolver", "parse_answer_data"]
