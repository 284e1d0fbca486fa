# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import httpx

from ..config import HttpSettings
from ..errors import categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse


class HttpxClient(HttpClient):
    """Asynchronous httpx client wrapper."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or HttpSettings()
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        # Created lazily so the client binds to the loop that first uses it.
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                timeout=self.settings.timeout,
                verify=self.settings.verify_ssl,
            )
        return self._client

    async def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)

        try:
            resp = await self._get_client().request(
                request.method,
                request.url,
                params=dict(request.params) if request.params else None,
                headers=headers,
                timeout=request.timeout or self.settings.timeout,
            )
            return HttpResponse(
                ok=resp.is_success,
                status_code=resp.status_code,
                headers=dict(resp.headers),
                text=resp.text,
                url=str(resp.url),
                error_message=None if resp.is_success else f"HTTP {resp.status_code}",
            )
        except Exception as exc:  # noqa: BLE001
            category, reason = categorize_exception(exc)
            return HttpResponse(
                ok=False,
                error_category=category.value,
                error_reason=reason,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
            )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
