# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
from dataclasses import dataclass

import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.resolver
import pytest
from conftest import FakeConnector, FakeFetcher, FakeResolver, build_certificate, to_der

from hostprobe.config import ProbeSettings
from hostprobe.errors import ErrorCategory, InputError
from hostprobe.models import (
    DnsResolve,
    ProbeKind,
    TcpReachability,
    TlsCertificate,
    parse_probe_kinds,
)
from hostprobe.probes import (
    DnsResolveProbe,
    ProbeTransports,
    TcpReachabilityProbe,
    TlsCertificateProbe,
    default_registry,
)
from hostprobe.resolvers import DnspythonResolver, MxRecord


def _run(probe, target, timeout=1.0):
    return asyncio.run(probe.execute(target, timeout))


def test_empty_target_fails_without_io(transports, connector):
    probe = TcpReachabilityProbe(TcpReachability(80), transports)

    for target in ("", "   ", None):
        result = _run(probe, target)
        assert result.ok is False
        assert result.reason == "empty_target"
        assert result.category == ErrorCategory.INPUT_ERROR
        assert result.elapsed_ms == 0

    assert connector.calls == []


def test_tcp_probe_reports_reachable_and_trims_target(transports, connector):
    probe = TcpReachabilityProbe(TcpReachability(443), transports)

    result = _run(probe, "  example.com ")

    assert result.ok is True
    assert result.payload.reachable is True
    assert result.payload.port == 443
    assert connector.calls == [("example.com", 443)]


def test_tcp_probe_connection_refused(resolver):
    connector = FakeConnector(failures={"closed.example": ConnectionRefusedError()})
    probe = TcpReachabilityProbe(TcpReachability(22), ProbeTransports(connect=connector, dns_resolver=resolver))

    result = _run(probe, "closed.example")

    assert result.ok is False
    assert result.reason == "connection_refused"
    assert result.category == ErrorCategory.NETWORK_ERROR


def test_tcp_probe_timeout_elapsed_tracks_configured_timeout(resolver):
    connector = FakeConnector(delay=5.0)
    probe = TcpReachabilityProbe(TcpReachability(80), ProbeTransports(connect=connector, dns_resolver=resolver))

    result = _run(probe, "blackhole.example", timeout=0.1)

    assert result.ok is False
    assert result.reason == "timeout"
    assert result.category == ErrorCategory.TIMEOUT
    assert 80 <= result.elapsed_ms < 2000


def test_probe_default_timeouts_switch_on_batch():
    settings = ProbeSettings()
    transports = ProbeTransports(dns_resolver=FakeResolver())

    tcp = TcpReachabilityProbe(TcpReachability(), transports)
    tls = TlsCertificateProbe(TlsCertificate(), transports)

    assert tcp.default_timeout(settings, batch=True) == 3.0
    assert tcp.default_timeout(settings, batch=False) == 5.0
    assert tls.default_timeout(settings, batch=True) == 3.0
    assert tls.default_timeout(settings, batch=False) == 10.0


def test_dns_probe_formats_mx_and_txt(transports, resolver):
    resolver.answers = {
        "MX": [MxRecord(priority=10, exchange="mail.example.com"), MxRecord(priority=20, exchange="backup.example.com")],
        "TXT": [["v=spf1 ", "include:_spf.example.com ", "-all"]],
    }

    mx = _run(DnsResolveProbe(DnsResolve("mx"), transports), "example.com")
    txt = _run(DnsResolveProbe(DnsResolve("TXT"), transports), "example.com")

    assert mx.ok is True
    assert mx.payload.record_type == "MX"
    assert mx.payload.records == ["10 mail.example.com", "20 backup.example.com"]
    assert txt.payload.records == ["v=spf1 include:_spf.example.com -all"]


def test_dns_probe_empty_answer_is_success(transports):
    result = _run(DnsResolveProbe(DnsResolve("AAAA"), transports), "v4only.example")
    assert result.ok is True
    assert result.payload.records == []


def test_dns_probe_unsupported_type_is_rejected_before_io(transports, resolver):
    result = _run(DnsResolveProbe(DnsResolve("SRV"), transports), "example.com")

    assert result.ok is False
    assert result.reason == "unsupported_type"
    assert result.category == ErrorCategory.INPUT_ERROR
    assert resolver.calls == []


def test_dns_probe_resolution_failure():
    transports = ProbeTransports(dns_resolver=FakeResolver(exc=dns.resolver.NXDOMAIN()))
    result = _run(DnsResolveProbe(DnsResolve("A"), transports), "missing.example")
    assert result.ok is False
    assert result.reason == "resolution_failed"
    assert result.category == ErrorCategory.DNS_ERROR


@pytest.mark.parametrize("port", [0, -1, 70000, True])
def test_port_out_of_range_is_rejected_before_io(port):
    connector = FakeConnector()
    fetcher = FakeFetcher(der=b"unused")
    transports = ProbeTransports(connect=connector, fetch_certificate=fetcher, dns_resolver=FakeResolver())

    checks = (TcpReachabilityProbe(TcpReachability(port), transports), TlsCertificateProbe(TlsCertificate(port), transports))
    for check in checks:
        result = _run(check, "example.com")
        assert result.ok is False
        assert result.reason == "invalid_port"
        assert result.category == ErrorCategory.INPUT_ERROR

    assert connector.calls == []
    assert fetcher.calls == []


def test_dns_lookup_forwards_timeout_to_resolver(transports, resolver):
    result = _run(DnsResolveProbe(DnsResolve("A"), transports), "example.com", timeout=12.5)

    assert result.ok is True
    assert resolver.timeouts == [12.5]


def test_tls_probe_decodes_leaf_certificate():
    certificate = build_certificate("secure.example", sans=("secure.example",))
    fetcher = FakeFetcher(der=to_der(certificate))
    transports = ProbeTransports(fetch_certificate=fetcher, dns_resolver=FakeResolver())

    result = _run(TlsCertificateProbe(TlsCertificate(8443), transports), "secure.example")

    assert result.ok is True
    assert result.payload.subject.common_name == "secure.example"
    assert result.payload.issuer.organization == "Example Org"
    assert result.payload.subject_alternative_names == ["secure.example"]
    assert fetcher.calls == [("secure.example", 8443)]


def test_tls_probe_without_certificate():
    transports = ProbeTransports(fetch_certificate=FakeFetcher(der=None), dns_resolver=FakeResolver())

    result = _run(TlsCertificateProbe(TlsCertificate(), transports), "plain.example")

    assert result.ok is False
    assert result.reason == "no_certificate"
    assert result.category == ErrorCategory.SSL_ERROR


def test_parse_probe_kinds_mapping_and_dedup():
    kinds = parse_probe_kinds(
        {"tcp": {"port": 443}, "dns": {"record_types": ["a", "MX", "A"]}, "tls": True, "ping": None}
    )
    assert kinds == [TcpReachability(443), DnsResolve("A"), DnsResolve("MX"), TlsCertificate(443)]
    assert [kind.label for kind in kinds] == ["tcp:443", "dns:A", "dns:MX", "tls:443"]

    assert parse_probe_kinds([TcpReachability(), TcpReachability(80)]) == [TcpReachability(80)]


@pytest.mark.parametrize("requested", [{"traceroute": {}}, ["tcp"], {"tcp": {"port": "https"}}])
def test_parse_probe_kinds_rejects_unknown(requested):
    with pytest.raises(InputError) as excinfo:
        parse_probe_kinds(requested)
    assert excinfo.value.reason == "invalid_kind"


@pytest.mark.parametrize("requested", [{"tcp": {"port": 70000}}, {"ping": {"port": 0}}, {"tls": {"port": -443}}])
def test_kind_mapping_rejects_out_of_range_port(requested):
    with pytest.raises(InputError) as excinfo:
        parse_probe_kinds(requested)
    assert excinfo.value.reason == "invalid_port"


def test_registry_rejects_unregistered_kind():
    @dataclass(frozen=True)
    class Traceroute(ProbeKind):
        name = "traceroute"

    registry = default_registry()

    assert TcpReachability in registry
    with pytest.raises(InputError):
        registry.build(Traceroute(), ProbeTransports(dns_resolver=FakeResolver()))


class StubAsyncResolver:
    def __init__(self, rdatas):
        self.rdatas = rdatas
        self.lifetimes = []

    async def resolve(self, name, rdtype, lifetime=None):  # noqa: ARG002
        self.lifetimes.append(lifetime)
        return list(self.rdatas)


def _rdata(rdtype, text):
    return dns.rdata.from_text(dns.rdataclass.IN, dns.rdatatype.from_text(rdtype), text)


def test_dnspython_resolver_converts_rdata():
    stub = StubAsyncResolver([_rdata("MX", "10 mail.example.com.")])
    records = asyncio.run(DnspythonResolver(stub).resolve("example.com", "MX", timeout=2.0))
    assert records == [MxRecord(priority=10, exchange="mail.example.com")]
    assert stub.lifetimes == [2.0]

    txt = DnspythonResolver._to_raw("TXT", _rdata("TXT", '"v=spf1 " "-all"'))
    assert txt == ["v=spf1 ", "-all"]
    assert DnspythonResolver._to_raw("A", _rdata("A", "93.184.216.34")) == "93.184.216.34"
    assert DnspythonResolver._to_raw("CNAME", _rdata("CNAME", "target.example.net.")) == "target.example.net"
