# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry helper for HttpClient implementations."""

from __future__ import annotations

import asyncio
import logging

from ..config import load_http_settings
from ..errors import ErrorCategory, categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse, RetryConfig

logger = logging.getLogger(__name__)


def build_default_retry_config() -> RetryConfig:
    """Create a RetryConfig from environment-backed HttpSettings."""
    cfg = RetryConfig.from_settings(load_http_settings())
    cfg.retry_on = {
        ErrorCategory.TIMEOUT.value,
        ErrorCategory.NETWORK_ERROR.value,
        ErrorCategory.DNS_ERROR.value,
        ErrorCategory.UNKNOWN_ERROR.value,
    }
    return cfg


async def send_with_retries(
    client: HttpClient,
    request: HttpRequest,
    *,
    retry_config: RetryConfig | None = None,
) -> HttpResponse:
    """Execute a request with basic retry/backoff semantics.

    Only transport failures are retried; an HTTP status error is returned as-is.
    """
    cfg = retry_config or build_default_retry_config()

    attempt = 0
    delay = cfg.initial_delay
    last_response: HttpResponse | None = None

    while attempt < cfg.max_attempts:
        try:
            response = await client.request(request)
        except Exception as exc:  # noqa: BLE001
            category, reason = categorize_exception(exc)
            response = HttpResponse(
                ok=False,
                error_category=category.value,
                error_reason=reason,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )
        last_response = response

        if response.ok:
            if attempt:
                response.meta["retry_count"] = attempt
            return response

        if response.status_code is not None:
            return response
        category = response.error_category or ErrorCategory.UNKNOWN_ERROR.value
        if category not in cfg.retry_on:
            return response

        attempt += 1
        if attempt >= cfg.max_attempts:
            break
        logger.debug("Retrying %s after %s (attempt %d)", request.url, category, attempt + 1)
        await asyncio.sleep(delay)
        delay *= cfg.backoff_factor

    if last_response is not None:
        return last_response
    return HttpResponse(ok=False, error_category=ErrorCategory.UNKNOWN_ERROR.value, error_message="No attempts made")
