# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from hostprobe.cache import ResultCache, reset_default_cache
from hostprobe.probes import ProbeTransports

FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeConnector:
    """Connector that records calls and tracks how many run at once."""

    def __init__(self, delay=0.0, failures=None):
        self.delay = delay
        self.failures = dict(failures or {})
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, host, port):
        self.calls.append((host, port))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            exc = self.failures.get(host)
            if exc is not None:
                raise exc
        finally:
            self.in_flight -= 1


class FakeResolver:
    def __init__(self, answers=None, exc=None):
        self.answers = answers or {}
        self.exc = exc
        self.calls = []
        self.timeouts = []

    async def resolve(self, name, record_type, timeout=None):
        self.calls.append((name, record_type))
        self.timeouts.append(timeout)
        if self.exc is not None:
            raise self.exc
        return list(self.answers.get(record_type, []))

    async def reverse(self, address, timeout=None):  # noqa: ARG002
        return [f"host-{address.replace('.', '-')}.example.net"]


class FakeFetcher:
    def __init__(self, der=None):
        self.der = der
        self.calls = []

    async def __call__(self, host, port):
        self.calls.append((host, port))
        return self.der


def build_name(common_name):
    return x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example Org"),
            x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
        ]
    )


def build_certificate(
    common_name="example.com",
    *,
    not_before=None,
    not_after=None,
    sans=("example.com", "www.example.com"),
    key=None,
):
    key = key or ec.generate_private_key(ec.SECP256R1())
    name = build_name(common_name)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(0x1234ABCD)
        .not_valid_before(not_before or FIXED_NOW - timedelta(days=10))
        .not_valid_after(not_after or FIXED_NOW + timedelta(days=30, hours=6))
    )
    if sans:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(san) for san in sans]),
            critical=False,
        )
    return builder.sign(key, hashes.SHA256())


def build_csr(common_name="csr.example.com", sans=("csr.example.com",)):
    key = ec.generate_private_key(ec.SECP256R1())
    builder = x509.CertificateSigningRequestBuilder().subject_name(build_name(common_name))
    if sans:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(san) for san in sans]),
            critical=False,
        )
    return builder.sign(key, hashes.SHA256())


def to_pem(obj):
    return obj.public_bytes(serialization.Encoding.PEM).decode("ascii")


def to_der(obj):
    return obj.public_bytes(serialization.Encoding.DER)


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def transports(connector, resolver):
    return ProbeTransports(connect=connector, fetch_certificate=FakeFetcher(), dns_resolver=resolver)


@pytest.fixture
def cache():
    return ResultCache()


@pytest.fixture(autouse=True)
def _fresh_default_cache():
    reset_default_cache()
    yield
    reset_default_cache()
