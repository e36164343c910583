#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 测试公共夹具
"""

import pytest

from fakes import FakeClusterClient, make_node, make_pod


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "integration: 集成测试")


@pytest.fixture
def cluster_client() -> FakeClusterClient:
    return FakeClusterClient("c1")


@pytest.fixture
def agent_cluster() -> FakeClusterClient:
    """带一个巡检 Agent 与所在节点的集群"""
    client = FakeClusterClient("c1")
    client.add(
        "pod",
        make_pod(
            "agent-1",
            namespace="cattle-inspection-system",
            labels={"name": "inspection-agent"},
            containers=["inspection-agent-container"],
            node_name="node-1",
            host_ip="10.0.0.1",
        ),
    )
    node = make_node(
        "node-1",
        limits={"cpu": "3500m", "memory": "2Gi"},
        requests={"cpu": "1", "memory": "1Gi", "pods": "10"},
    )
    client.add("node", node)
    client.nodes["node-1"] = node
    return client
