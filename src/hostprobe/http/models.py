# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used by the third-party resolvers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from ..config import HttpSettings

Headers = Dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    params: Optional[Mapping[str, str]] = None
    headers: Optional[Headers] = None
    timeout: Optional[float] = None


@dataclass
class HttpResponse:
    """Normalized HTTP response; transport failures are reported, never raised."""

    ok: bool
    status_code: Optional[int] = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    url: Optional[str] = None
    error_category: Optional[str] = None
    error_reason: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def json(self) -> Any:
        """Decode the body as JSON, returning None for empty or malformed bodies."""
        if not self.text:
            return None
        try:
            return json.loads(self.text)
        except ValueError:
            return None


@dataclass
class RetryConfig:
    """Retry policy for HTTP requests derived from HttpSettings."""

    max_attempts: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 0.5
    retry_on: Iterable[str] = field(default_factory=set)

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> "RetryConfig":
        """Build a retry config from the shared HttpSettings."""
        return cls(
            max_attempts=max(1, settings.max_retries),
            backoff_factor=settings.backoff_factor,
            initial_delay=settings.initial_delay,
        )
