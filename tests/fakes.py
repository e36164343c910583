#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 测试辅助 - 内存集群客户端与资源/告警数据构造
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

from inspection_server.common.exceptions import FetchError, NotificationError
from inspection_server.config.settings import AlertingConfig, K8sConfig, NotificationConfig
from inspection_server.services.alerting import AlertingService
from inspection_server.services.inspection_service import InspectionService
from inspection_server.services.kubernetes import KubernetesService
from inspection_server.services.log_fetcher import ConcurrentLogFetcher
from inspection_server.services.notification import NotificationService
from inspection_server.services.report_store import ReportStore


def _labels_match(labels: Dict[str, str], selector: Optional[str]) -> bool:
    if not selector:
        return True
    for term in selector.split(","):
        key, _, value = term.partition("=")
        if labels.get(key) != value:
            return False
    return True


class FakeClusterClient:
    """按 ClusterClient 协议实现的内存集群"""

    def __init__(self, cluster_id: str = "c1") -> None:
        self.cluster_id = cluster_id
        self.resources: Dict[str, List[Dict[str, Any]]] = {}
        self.endpoints: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.nodes: Dict[str, Dict[str, Any]] = {}
        self.logs: Dict[str, Any] = {}
        self.fail_kinds: Dict[str, Exception] = {}
        self.exec_handler: Optional[Callable[[str, List[str]], Tuple[str, str]]] = None
        self.exec_calls: List[Tuple[str, List[str]]] = []
        self.log_delay = 0.0
        self.active_log_reads = 0
        self.max_active_log_reads = 0

    def add(self, kind: str, obj: Dict[str, Any]) -> Dict[str, Any]:
        self.resources.setdefault(kind, []).append(obj)
        return obj

    async def list_resources(
        self,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> List[Dict]:
        if kind in self.fail_kinds:
            raise self.fail_kinds[kind]
        objects = []
        for obj in self.resources.get(kind, []):
            metadata = obj.get("metadata") or {}
            if namespace and metadata.get("namespace") != namespace:
                continue
            if not _labels_match(metadata.get("labels") or {}, label_selector):
                continue
            objects.append(obj)
        return objects

    async def read_endpoints(self, namespace: str, name: str) -> Optional[Dict]:
        return self.endpoints.get((namespace, name))

    async def read_node(self, name: str) -> Optional[Dict]:
        return self.nodes.get(name)

    async def exec_command(
        self, namespace: str, pod: str, container: str, command: List[str]
    ) -> Tuple[str, str]:
        self.exec_calls.append((pod, command))
        if self.exec_handler is None:
            return "[]", ""
        return self.exec_handler(pod, command)

    async def read_pod_log(
        self, namespace: str, pod: str, container: str, tail_lines: int
    ) -> str:
        self.active_log_reads += 1
        self.max_active_log_reads = max(self.max_active_log_reads, self.active_log_reads)
        try:
            if self.log_delay:
                await asyncio.sleep(self.log_delay)
            value = self.logs.get(pod, "")
            if isinstance(value, Exception):
                raise value
            return value
        finally:
            self.active_log_reads -= 1


def make_pod(
    name: str,
    namespace: str = "default",
    labels: Optional[Dict[str, str]] = None,
    containers: Optional[List[str]] = None,
    node_name: str = "",
    host_ip: str = "",
) -> Dict[str, Any]:
    return {
        "metadata": {"name": name, "namespace": namespace, "labels": labels or {}},
        "spec": {
            "node_name": node_name,
            "containers": [{"name": c} for c in (containers if containers is not None else ["app"])],
        },
        "status": {"host_ip": host_ip},
    }


def make_deployment(
    name: str,
    namespace: str = "default",
    replicas: int = 1,
    available: int = 1,
    probes: bool = True,
    match_labels: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    container: Dict[str, Any] = {"name": "app"}
    if probes:
        container["liveness_probe"] = {"http_get": {"path": "/healthz"}}
        container["readiness_probe"] = {"http_get": {"path": "/ready"}}
    return {
        "metadata": {"name": name, "namespace": namespace, "labels": {}},
        "spec": {
            "replicas": replicas,
            "selector": {"match_labels": match_labels or {"app": name}},
            "template": {"spec": {"containers": [container]}},
        },
        "status": {
            "available_replicas": available,
            "conditions": [{"type": "Available", "status": "True", "reason": None}],
        },
    }


def make_node(
    name: str,
    allocatable: Optional[Dict[str, str]] = None,
    limits: Optional[Dict[str, str]] = None,
    requests: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    annotations = {}
    if limits is not None:
        annotations["management.cattle.io/pod-limits"] = json.dumps(limits)
    if requests is not None:
        annotations["management.cattle.io/pod-requests"] = json.dumps(requests)
    return {
        "metadata": {"name": name, "labels": {}, "annotations": annotations},
        "status": {"allocatable": allocatable or {"cpu": "4", "memory": "8Gi", "pods": "110"}},
    }


def command_stdout(results: List[Dict[str, Any]]) -> str:
    return json.dumps(results)


def alert(
    labels: Dict[str, str],
    state: str = "Alerting",
    summary: Optional[str] = "告警摘要",
) -> Dict[str, Any]:
    annotations = {} if summary is None else {"summary": summary}
    return {"labels": labels, "annotations": annotations, "state": state}


def rule_groups(*groups: Tuple[str, List[Dict[str, Any]]]) -> Dict[str, Any]:
    """构造告警规则接口返回体，每个规则组一条规则"""
    return {
        "data": {
            "groups": [
                {"name": name, "rules": [{"name": f"{name}-rule", "alerts": alerts}]}
                for name, alerts in groups
            ]
        }
    }


class StaticAlertingService(AlertingService):
    """返回固定告警规则数据的告警服务"""

    def __init__(self, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(AlertingConfig(server_url="http://grafana.test", bearer_token=""))
        self.payload = payload

    async def fetch_rules(self) -> Dict[str, Any]:
        if self.payload is None:
            raise FetchError("数据源不可达")
        return self.payload


class RecordingNotificationService(NotificationService):
    def __init__(self, fail: bool = False) -> None:
        super().__init__(
            NotificationConfig(enabled=True, feishu_base_url="https://feishu.test", timeout=5)
        )
        self.fail = fail
        self.sent: List[Tuple[str, str, str, Optional[str]]] = []

    async def notify(self, target, title, text, attachment_path=None) -> str:
        if self.fail:
            raise NotificationError("feishu_webhook", "code=19021, msg=sign match fail")
        self.sent.append((target.id, title, text, attachment_path))
        return "recorded"


def build_service(
    clients: List[FakeClusterClient],
    kubeconfig_dir: str,
    alert_payload: Optional[Dict[str, Any]] = None,
    notification: Optional[NotificationService] = None,
) -> InspectionService:
    """以内存集群构造巡检服务，未注册的集群 ID 会因 kubeconfig 缺失而不可用"""
    kubernetes = KubernetesService(
        K8sConfig(in_cluster=False, kubeconfig_dir=kubeconfig_dir, local_cluster="local")
    )
    for client in clients:
        kubernetes.register_client(client.cluster_id, client)
    return InspectionService(
        store=ReportStore(),
        kubernetes=kubernetes,
        alerting=StaticAlertingService(alert_payload),
        notification=notification or RecordingNotificationService(),
        log_fetcher=ConcurrentLogFetcher(workers=2, tail_lines=20, timeout=5),
    )
