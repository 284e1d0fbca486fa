# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import errno
import importlib
import logging
import socket
import ssl

import dns.exception
import dns.resolver
import httpx
import pytest

from hostprobe import config, log
from hostprobe.config import DEFAULT_USER_AGENT
from hostprobe.errors import (
    REASON_UNSUPPORTED_TYPE,
    DnsError,
    ErrorCategory,
    InputError,
    NetworkError,
    categorize_exception,
    error_category_to_reason,
)


def test_probe_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("HOSTPROBE_TCP_TIMEOUT", "2.5")
    monkeypatch.setenv("HOSTPROBE_BATCH_TLS_TIMEOUT", "1.5")
    monkeypatch.setenv("HOSTPROBE_CONCURRENCY", "12")
    monkeypatch.setenv("HOSTPROBE_CACHE_TTL", "60")
    monkeypatch.setenv("HOSTPROBE_DOH_BATCH_SIZE", "4")

    settings = config.load_probe_settings()

    assert settings.tcp_timeout == 2.5
    assert settings.batch_tls_timeout == 1.5
    assert settings.concurrency_limit == 12
    assert settings.cache_ttl == 60
    assert settings.doh_batch_size == 4
    assert settings.batch_tcp_timeout == config.ProbeSettings.batch_tcp_timeout


def test_probe_settings_reject_non_positive_and_garbage(monkeypatch):
    monkeypatch.setenv("HOSTPROBE_CONCURRENCY", "0")
    monkeypatch.setenv("HOSTPROBE_TCP_TIMEOUT", "-3")
    monkeypatch.setenv("HOSTPROBE_DNS_TIMEOUT", "soon")

    settings = config.load_probe_settings()

    assert settings.concurrency_limit == 5
    assert settings.tcp_timeout == 5.0
    assert settings.dns_timeout == 5.0


def test_http_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("HOSTPROBE_HTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("HOSTPROBE_HTTP_RETRIES", "0")
    monkeypatch.setenv("HOSTPROBE_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("HOSTPROBE_HTTP_VERIFY_SSL", "off")
    monkeypatch.setenv("HOSTPROBE_DOH_URL", "https://doh.example/resolve")

    settings = config.load_http_settings()

    assert settings.timeout == 5.5
    assert settings.max_retries == 0
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.verify_ssl is False
    assert settings.doh_url == "https://doh.example/resolve"


def test_http_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("HOSTPROBE_HTTP_TIMEOUT", "not-a-number")
    monkeypatch.setenv("HOSTPROBE_HTTP_RETRIES", "ten")

    settings = config.load_http_settings()

    assert settings.timeout == config.HttpSettings.timeout
    assert settings.max_retries == config.HttpSettings.max_retries
    assert DEFAULT_USER_AGENT in settings.user_agent


def test_load_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("HOSTPROBE_CONCURRENCY", "3")
    assert config.load_probe_settings().concurrency_limit == 3
    monkeypatch.setenv("HOSTPROBE_CONCURRENCY", "8")
    assert config.load_probe_settings().concurrency_limit == 8


def test_setup_logging_honors_env_level(monkeypatch):
    monkeypatch.setenv("HOSTPROBE_LOG_LEVEL", "debug")
    importlib.reload(log)
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    log.setup_logging()
    assert captured["level"] == logging.DEBUG

    log.setup_logging("error")
    assert captured["level"] == logging.ERROR

    monkeypatch.delenv("HOSTPROBE_LOG_LEVEL")
    importlib.reload(log)


@pytest.mark.parametrize(
    ("exc", "category", "reason"),
    [
        (asyncio.TimeoutError(), ErrorCategory.TIMEOUT, "timeout"),
        (httpx.ConnectTimeout("slow"), ErrorCategory.TIMEOUT, "timeout"),
        (dns.exception.Timeout(), ErrorCategory.TIMEOUT, "timeout"),
        (dns.resolver.NXDOMAIN(), ErrorCategory.DNS_ERROR, "resolution_failed"),
        (socket.gaierror(socket.EAI_NONAME, "unknown"), ErrorCategory.DNS_ERROR, "resolution_failed"),
        (ssl.SSLError("bad handshake"), ErrorCategory.SSL_ERROR, "handshake_failed"),
        (ConnectionRefusedError(), ErrorCategory.NETWORK_ERROR, "connection_refused"),
        (OSError(errno.EHOSTUNREACH, "no route"), ErrorCategory.NETWORK_ERROR, "unreachable"),
        (OSError(errno.ETIMEDOUT, "timed out"), ErrorCategory.TIMEOUT, "timeout"),
        (httpx.ConnectError("down"), ErrorCategory.NETWORK_ERROR, "http_error"),
        (asyncio.CancelledError(), ErrorCategory.CANCELLED, "cancelled"),
        (ValueError("garbage"), ErrorCategory.PARSE_ERROR, "parse_error"),
        (RuntimeError("boom"), ErrorCategory.UNKNOWN_ERROR, "internal_error"),
    ],
)
def test_categorize_exception(exc, category, reason):
    assert categorize_exception(exc) == (category, reason)


def test_probe_errors_carry_category_and_reason():
    assert categorize_exception(InputError("bad", reason=REASON_UNSUPPORTED_TYPE)) == (
        ErrorCategory.INPUT_ERROR,
        REASON_UNSUPPORTED_TYPE,
    )
    assert categorize_exception(DnsError("nx")) == (ErrorCategory.DNS_ERROR, "resolution_failed")
    overridden = NetworkError("tls", reason="no_certificate", category=ErrorCategory.SSL_ERROR)
    assert categorize_exception(overridden) == (ErrorCategory.SSL_ERROR, "no_certificate")


def test_error_category_to_reason():
    assert "timeout" in error_category_to_reason(ErrorCategory.TIMEOUT).lower()
    assert error_category_to_reason(None) == ""
