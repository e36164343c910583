#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 外部告警信号数据模型
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from inspection_server.models.inspection_models import Item


class AlertState(str, Enum):
    ALERTING = "Alerting"
    PENDING = "Pending"
    NORMAL = "Normal"
    NODATA = "NoData"
    ERROR = "Error"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["AlertState"]:
        """解析告警状态，兼容 "Normal (NoData)" 之类的带原因写法"""
        if not raw:
            return None
        head = raw.split(" (", 1)[0].strip().lower()
        for state in cls:
            if state.value.lower() == head:
                return state
        return None


class AlertKind(str, Enum):
    CLUSTER = "cluster"
    NODE = "node"
    WORKLOAD = "workload"
    NAMESPACE = "namespace"
    PVC = "pvc"
    PV = "pv"


class AlertSignal(BaseModel):
    source: str
    alert_name: str
    state: AlertState
    kind: AlertKind
    labels: Dict[str, str] = Field(default_factory=dict)
    summary: str = ""


BUCKETS = (
    "cluster",
    "node",
    "deployment",
    "statefulset",
    "daemonset",
    "job",
    "namespace",
    "service",
    "ingress",
    "pvc",
    "pv",
)


class ClusterAlertItems(BaseModel):
    """单个集群按资源类型分桶的告警检查项"""

    cluster: Dict[str, List[Item]] = Field(default_factory=dict)
    node: Dict[str, List[Item]] = Field(default_factory=dict)
    deployment: Dict[str, List[Item]] = Field(default_factory=dict)
    statefulset: Dict[str, List[Item]] = Field(default_factory=dict)
    daemonset: Dict[str, List[Item]] = Field(default_factory=dict)
    job: Dict[str, List[Item]] = Field(default_factory=dict)
    namespace: Dict[str, List[Item]] = Field(default_factory=dict)
    service: Dict[str, List[Item]] = Field(default_factory=dict)
    ingress: Dict[str, List[Item]] = Field(default_factory=dict)
    pvc: Dict[str, List[Item]] = Field(default_factory=dict)
    pv: Dict[str, List[Item]] = Field(default_factory=dict)

    def bucket(self, name: str) -> Dict[str, List[Item]]:
        if name not in BUCKETS:
            raise KeyError(name)
        return getattr(self, name)

    def add(self, bucket: str, key: str, item: Item) -> None:
        self.bucket(bucket).setdefault(key, []).append(item)

    def get(self, bucket: str, key: str) -> List[Item]:
        return list(self.bucket(bucket).get(key, []))
