# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from hostprobe.models import BatchResult, DnsResolve, PerTargetResult, ProbeFailure, ProbeSuccess, TcpReachability
from hostprobe.scan import count_completed, count_matching, failed, passed, summarize
from hostprobe.scan.batching import iter_windows

TCP = TcpReachability(80)
DNS = DnsResolve("A")


def _items():
    return [
        PerTargetResult("a.example", {TCP: ProbeSuccess(payload=None), DNS: ProbeSuccess(payload=None)}),
        PerTargetResult("b.example", {TCP: ProbeFailure(reason="timeout"), DNS: ProbeSuccess(payload=None)}),
        PerTargetResult("c.example", {TCP: ProbeFailure(reason="timeout"), DNS: ProbeFailure(reason="resolution_failed")}),
        PerTargetResult("d.example"),
    ]


def test_count_completed_counts_targets_with_any_result():
    assert count_completed(_items()) == 3
    assert count_completed([]) == 0


def test_count_matching_with_caller_predicates():
    items = _items()
    assert count_matching(items, passed(TCP)) == 1
    assert count_matching(items, failed(TCP)) == 2
    assert count_matching(items, passed(DNS)) == 2
    assert count_matching(items, lambda item: item.target.startswith("d")) == 1


def test_summarize_groups_by_kind_label():
    result = BatchResult(total=4, completed=3, items=_items(), elapsed_ms=42)

    summary = summarize(result).to_dict()

    assert summary["total"] == 4
    assert summary["per_kind"]["tcp:80"] == {"passed": 1, "failed": 2, "reasons": {"timeout": 2}}
    assert summary["per_kind"]["dns:A"] == {"passed": 2, "failed": 1, "reasons": {"resolution_failed": 1}}


def test_iter_windows_chunks_in_order():
    assert [list(window) for window in iter_windows([1, 2, 3, 4, 5], 2)] == [[1, 2], [3, 4], [5]]
    assert list(iter_windows([], 3)) == []
