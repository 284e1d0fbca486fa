# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""hostprobe CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import HttpSettings, load_http_settings
from ..errors import error_category_to_reason
from ..http import create_default_http_client
from ..log import setup_logging
from ..models import (
    SUPPORTED_RECORD_TYPES,
    BatchResult,
    CertificateInfo,
    DnsResolve,
    HostInfo,
    ProbeFailure,
    ProbeKind,
    PropagationResult,
    TcpReachability,
    TlsCertificate,
)
from ..runtime import HostProbe
from ..scan.aggregate import summarize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hostprobe", description="Multi-target network probe toolkit")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification for DoH/geolocation HTTP calls",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    batch = sub.add_parser("batch", help="Probe many targets with several probe kinds")
    batch.add_argument("targets", nargs="*", help="Hosts to probe")
    batch.add_argument("-f", "--file", help="Read targets from a file, one per line ('-' for stdin)")
    batch.add_argument("--tcp", dest="tcp_ports", type=int, action="append", metavar="PORT", help="TCP reachability port")
    batch.add_argument(
        "--dns",
        dest="record_types",
        action="append",
        type=str.upper,
        choices=SUPPORTED_RECORD_TYPES,
        metavar="TYPE",
        help="DNS record type to resolve",
    )
    batch.add_argument("--tls", dest="tls_ports", type=int, action="append", metavar="PORT", help="TLS certificate port")
    batch.add_argument("-c", "--concurrency", type=int, default=None, help="Targets probed at once")

    probe = sub.add_parser("probe", help="Run one probe against one host")
    probe.add_argument("kind", choices=("tcp", "dns", "tls"))
    probe.add_argument("target")
    probe.add_argument("--port", type=int, default=None)
    probe.add_argument("--record-type", type=str.upper, default="A", choices=SUPPORTED_RECORD_TYPES)
    probe.add_argument("--timeout", type=float, default=None, help="Seconds before giving up")

    decode = sub.add_parser("decode", help="Decode a PEM certificate or CSR")
    decode.add_argument("path", nargs="?", default="-", help="PEM file ('-' for stdin)")
    decode.add_argument("--csr", action="store_true", help="Input is a certificate signing request")

    propagation = sub.add_parser("propagation", help="Compare DNS answers across resolver vantage points")
    propagation.add_argument("name")
    propagation.add_argument("--type", dest="record_type", type=str.upper, default="A", choices=SUPPORTED_RECORD_TYPES)

    hostinfo = sub.add_parser("hostinfo", help="Resolve a host and look up its geolocation")
    hostinfo.add_argument("host")
    return parser


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def _collect_targets(args: argparse.Namespace) -> list[str]:
    targets = list(args.targets or [])
    if args.file:
        targets.extend(line.strip() for line in _read_text(args.file).splitlines() if line.strip())
    return targets


def _batch_kinds(args: argparse.Namespace) -> list[ProbeKind]:
    kinds: list[ProbeKind] = []
    kinds.extend(TcpReachability(port=port) for port in args.tcp_ports or [])
    kinds.extend(DnsResolve(record_type=rtype) for rtype in args.record_types or [])
    kinds.extend(TlsCertificate(port=port) for port in args.tls_ports or [])
    return kinds or [TcpReachability()]


def _single_kind(args: argparse.Namespace) -> ProbeKind:
    if args.kind == "tcp":
        return TcpReachability(port=args.port or TcpReachability.port)
    if args.kind == "tls":
        return TlsCertificate(port=args.port or TlsCertificate.port)
    return DnsResolve(record_type=args.record_type)


def _print_json(data: dict[str, Any] | Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _describe_result(payload: dict[str, Any]) -> str:
    if payload.get("status") != "success":
        return f"FAIL {payload.get('reason')} ({payload.get('elapsed_ms')} ms)"
    body = payload.get("payload") or {}
    if "records" in body:
        records = body.get("records") or []
        return f"ok {', '.join(records) if records else '-'}"
    if "validity" in body:
        subject = (body.get("subject") or {}).get("common_name") or "-"
        days = (body.get("validity") or {}).get("days_remaining")
        return f"ok {subject}, {days} days left"
    return f"ok {payload.get('elapsed_ms')} ms"


def _pretty_batch(result: BatchResult) -> None:
    if result.error:
        print(f"[hostprobe] Batch rejected: {result.error}")
        return
    print(f"[hostprobe] {result.completed}/{result.total} targets in {result.elapsed_ms} ms")
    for item in result.items:
        print(f"{item.target or '<empty>'}:")
        for label, payload in item.to_dict()["results"].items():
            print(f"  {label}: {_describe_result(payload)}")
    summary = summarize(result)
    for label, bucket in summary.per_kind.items():
        print(f"{label}: {bucket.passed} passed, {bucket.failed} failed")


def _pretty_certificate(info: CertificateInfo) -> None:
    subject = info.subject
    print(f"[hostprobe] {info.kind}: {subject.common_name or '-'}")
    if info.issuer:
        print(f"Issuer: {info.issuer.common_name or '-'} ({info.issuer.organization or '-'})")
    if info.serial_number:
        print(f"Serial: {info.serial_number}")
    print(f"Valid: {info.validity.not_before.isoformat()} .. {info.validity.not_after.isoformat()}")
    if info.days_remaining is not None:
        state = "valid" if info.is_valid else "expired"
        print(f"Status: {state}, {info.days_remaining} days remaining")
    key = info.public_key
    print(f"Public key: {key.algorithm}{f' {key.key_size} bits' if key.key_size else ''}")
    if info.subject_alternative_names:
        print(f"SANs: {', '.join(info.subject_alternative_names)}")


def _pretty_propagation(result: PropagationResult) -> None:
    if result.error:
        print(f"[hostprobe] Propagation check rejected: {result.error}")
        return
    print(f"[hostprobe] {result.query} {result.record_type}: {len(result.distinct_answers)} distinct answer(s)")
    for source in result.results:
        answer = ", ".join(source.records) if source.ok else f"FAIL {source.error}"
        print(f"- {source.source} ({source.edns}): {answer or '-'}")


def _pretty_host(info: HostInfo) -> None:
    print(f"[hostprobe] {info.host} -> {info.ip}")
    if info.hostname:
        print(f"Hostname: {info.hostname}")
    if info.geo:
        geo = info.geo
        print(f"Location: {geo.location}")
        print(f"ISP: {geo.isp}")
        print(f"ASN: {geo.asn.asn} {geo.asn.name}")


def _pretty_print(report: Any) -> None:
    if isinstance(report, ProbeFailure):
        print(f"[hostprobe] Failed: {report.reason} ({error_category_to_reason(report.category)})")
        if report.message:
            print(f"Detail: {report.message}")
    elif isinstance(report, BatchResult):
        _pretty_batch(report)
    elif isinstance(report, CertificateInfo):
        _pretty_certificate(report)
    elif isinstance(report, PropagationResult):
        _pretty_propagation(report)
    elif isinstance(report, HostInfo):
        _pretty_host(report)
    else:
        payload = report.to_dict() if hasattr(report, "to_dict") else report
        print(f"[hostprobe] {_describe_result(payload) if isinstance(payload, dict) else payload}")


def _exit_code(report: Any) -> int:
    if isinstance(report, ProbeFailure):
        return 1
    if getattr(report, "error", None):
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        targets = _collect_targets(args) if args.command == "batch" else []
        material = _read_text(args.path) if args.command == "decode" else ""
    except OSError as exc:
        print(f"hostprobe: cannot read input: {exc}", file=sys.stderr)
        return 2

    settings: HttpSettings = load_http_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    http_client = create_default_http_client(settings)

    with HostProbe(http_client=http_client) as probe:
        if args.command == "batch":
            report = probe.run_batch(targets, _batch_kinds(args), args.concurrency)
        elif args.command == "probe":
            report = probe.run_single_probe(_single_kind(args), args.target, args.timeout)
        elif args.command == "decode":
            report = probe.decode_certificate_material(material, "csr" if args.csr else "certificate")
        elif args.command == "propagation":
            report = probe.check_propagation(args.name, args.record_type)
        else:
            report = probe.lookup_host(args.host)

    if args.json:
        _print_json(report)
    else:
        _pretty_print(report)

    return _exit_code(report)


if __name__ == "__main__":
    raise SystemExit(main())
