# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for hostprobe."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"hostprobe/{__version__} (network diagnostics)"
DEFAULT_DOH_URL = "https://dns.google/resolve"
DEFAULT_GEO_URL = "http://ip-api.com/json"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _positive_float_env(name: str, default: float) -> float:
    value = _float_env(name, default)
    return value if value > 0 else default


def _positive_int_env(name: str, default: int) -> int:
    value = _int_env(name, default)
    return value if value > 0 else default


@dataclass
class ProbeSettings:
    """
    Probe and batch defaults.

    Interactive single-host checks get the longer timeouts; batch runs use the
    shorter ones so one slow host cannot stretch a whole window.
    """

    tcp_timeout: float = 5.0
    batch_tcp_timeout: float = 3.0
    tls_timeout: float = 10.0
    batch_tls_timeout: float = 3.0
    dns_timeout: float = 5.0
    concurrency_limit: int = 5
    cache_ttl: float = 300.0
    doh_timeout: float = 7.0
    doh_batch_size: int = 12

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            tcp_timeout=_positive_float_env("HOSTPROBE_TCP_TIMEOUT", cls.tcp_timeout),
            batch_tcp_timeout=_positive_float_env("HOSTPROBE_BATCH_TCP_TIMEOUT", cls.batch_tcp_timeout),
            tls_timeout=_positive_float_env("HOSTPROBE_TLS_TIMEOUT", cls.tls_timeout),
            batch_tls_timeout=_positive_float_env("HOSTPROBE_BATCH_TLS_TIMEOUT", cls.batch_tls_timeout),
            dns_timeout=_positive_float_env("HOSTPROBE_DNS_TIMEOUT", cls.dns_timeout),
            concurrency_limit=_positive_int_env("HOSTPROBE_CONCURRENCY", cls.concurrency_limit),
            cache_ttl=_positive_float_env("HOSTPROBE_CACHE_TTL", cls.cache_ttl),
            doh_timeout=_positive_float_env("HOSTPROBE_DOH_TIMEOUT", cls.doh_timeout),
            doh_batch_size=_positive_int_env("HOSTPROBE_DOH_BATCH_SIZE", cls.doh_batch_size),
        )


@dataclass
class HttpSettings:
    """HTTP client defaults for the third-party resolvers."""

    timeout: float = 10.0
    max_retries: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 0.5
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    doh_url: str = DEFAULT_DOH_URL
    geo_url: str = DEFAULT_GEO_URL

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout=_float_env("HOSTPROBE_HTTP_TIMEOUT", cls.timeout),
            max_retries=_int_env("HOSTPROBE_HTTP_RETRIES", cls.max_retries),
            backoff_factor=_float_env("HOSTPROBE_HTTP_BACKOFF", cls.backoff_factor),
            initial_delay=_float_env("HOSTPROBE_HTTP_INITIAL_DELAY", cls.initial_delay),
            user_agent=os.getenv("HOSTPROBE_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("HOSTPROBE_HTTP_VERIFY_SSL", cls.verify_ssl),
            doh_url=os.getenv("HOSTPROBE_DOH_URL", cls.doh_url),
            geo_url=os.getenv("HOSTPROBE_GEO_URL", cls.geo_url),
        )


def load_probe_settings() -> ProbeSettings:
    """Load probe settings from environment with sensible defaults."""
    return ProbeSettings.from_env()


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
