#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
License: Apache 2.0
Description: Kubernetes 集群客户端接口定义与空实现（Core层）
"""

from typing import Dict, List, Optional, Protocol, Tuple

# list_resources 支持的资源类型
RESOURCE_KINDS = (
    "pod",
    "deployment",
    "statefulset",
    "daemonset",
    "job",
    "replicaset",
    "namespace",
    "service",
    "ingress",
    "pvc",
    "pv",
    "node",
    "resourcequota",
    "secret",
    "configmap",
    "app",
)


class ClusterClient(Protocol):
    """单个集群的只读访问与 Agent 命令执行"""

    cluster_id: str

    async def list_resources(
        self,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> List[Dict]:
        ...

    async def read_endpoints(self, namespace: str, name: str) -> Optional[Dict]:
        ...

    async def read_node(self, name: str) -> Optional[Dict]:
        ...

    async def exec_command(
        self, namespace: str, pod: str, container: str, command: List[str]
    ) -> Tuple[str, str]:
        ...

    async def read_pod_log(
        self, namespace: str, pod: str, container: str, tail_lines: int
    ) -> str:
        ...


class NullClusterClient:
    def __init__(self, cluster_id: str = "") -> None:
        self.cluster_id = cluster_id

    async def list_resources(
        self,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> List[Dict]:
        return []

    async def read_endpoints(self, namespace: str, name: str) -> Optional[Dict]:
        return None

    async def read_node(self, name: str) -> Optional[Dict]:
        return None

    async def exec_command(
        self, namespace: str, pod: str, container: str, command: List[str]
    ) -> Tuple[str, str]:
        return "[]", ""

    async def read_pod_log(
        self, namespace: str, pod: str, container: str, tail_lines: int
    ) -> str:
        return ""
