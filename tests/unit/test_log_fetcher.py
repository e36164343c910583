#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import pytest

from fakes import FakeClusterClient, make_pod
from inspection_server.services.log_fetcher import ConcurrentLogFetcher


def _pods(client, count, empty_index=None):
    pods = []
    for i in range(1, count + 1):
        containers = [] if i == empty_index else ["app"]
        pod = client.add("pod", make_pod(f"p{i}", namespace="ns", containers=containers))
        client.logs[f"p{i}"] = "INFO started\nERROR boom\nINFO done"
        pods.append(pod)
    return pods


@pytest.mark.asyncio
async def test_pod_without_containers_is_skipped():
    client = FakeClusterClient()
    pods = _pods(client, 5, empty_index=3)

    records = await ConcurrentLogFetcher(workers=2, tail_lines=100, timeout=5).fetch(
        client, pods, "ERROR"
    )

    assert len(records) == 4
    assert {r.name for r in records} == {"p1", "p2", "p4", "p5"}
    for record in records:
        assert record.container == "app"
        assert record.lines == ["ERROR boom"]


@pytest.mark.asyncio
async def test_default_pattern_keeps_all_lines():
    client = FakeClusterClient()
    pods = _pods(client, 1)
    records = await ConcurrentLogFetcher(workers=1, tail_lines=10, timeout=5).fetch(client, pods)
    assert records[0].lines == ["INFO started", "ERROR boom", "INFO done"]


@pytest.mark.asyncio
async def test_invalid_pattern_yields_no_records():
    client = FakeClusterClient()
    pods = _pods(client, 3)
    records = await ConcurrentLogFetcher(workers=2, tail_lines=10, timeout=5).fetch(
        client, pods, "(unclosed"
    )
    assert records == []


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    client = FakeClusterClient()
    client.log_delay = 0.02
    pods = _pods(client, 8)

    records = await ConcurrentLogFetcher(workers=3, tail_lines=10, timeout=5).fetch(
        client, pods, "ERROR"
    )

    assert len(records) == 8
    assert 1 <= client.max_active_log_reads <= 3


@pytest.mark.asyncio
async def test_slow_and_failing_pods_are_skipped():
    client = FakeClusterClient()
    pods = _pods(client, 2)
    client.logs["p2"] = RuntimeError("connection reset")

    records = await ConcurrentLogFetcher(workers=2, tail_lines=10, timeout=5).fetch(
        client, pods, "ERROR"
    )
    assert [r.name for r in records] == ["p1"]

    client.logs["p2"] = "ERROR boom"
    client.log_delay = 0.5
    records = await ConcurrentLogFetcher(workers=2, tail_lines=10, timeout=0.05).fetch(
        client, pods, "ERROR"
    )
    assert records == []
