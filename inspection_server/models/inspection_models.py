#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Inspection 数据模型
"""

from typing import ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from inspection_server.common.constants import InspectionConstants


class Item(BaseModel):
    """单个实体的单项检查结果，生成后不可变"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    message: str = ""
    passed: bool = Field(alias="pass")
    level: int = InspectionConstants.DEFAULT_ITEM_LEVEL


class ItemsCount(BaseModel):
    pass_count: int = 0
    total_count: int = 0

    @classmethod
    def from_items(cls, items: List[Item]) -> "ItemsCount":
        return cls(
            pass_count=sum(1 for i in items if i.passed), total_count=len(items)
        )


class Entity(BaseModel):
    """被巡检对象基类，items_count 始终由 items 实时计算"""

    kind: ClassVar[str] = ""

    items: List[Item] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def items_count(self) -> ItemsCount:
        return ItemsCount.from_items(self.items)

    def alert_key(self) -> str:
        """告警分桶中对应的键"""
        raise NotImplementedError

    def identifier(self) -> str:
        """巡检汇总中展示的实体标识"""
        return self.alert_key()


class NamespacedEntity(Entity):
    namespace: str
    name: str

    def alert_key(self) -> str:
        return f"{self.namespace}/{self.name}"


class PodLogRecord(BaseModel):
    namespace: str
    name: str
    container: str
    lines: List[str] = Field(default_factory=list)


class CommandCheckResult(BaseModel):
    """Agent 执行单条命令的返回"""

    description: str = ""
    command: str = ""
    response: Union[str, List[str]] = ""
    error: str = ""


class WorkloadData(NamespacedEntity):
    kind: ClassVar[str] = "workload"

    workload_kind: str = Field(description="Deployment/StatefulSet/DaemonSet/Job")
    conditions: List[str] = Field(default_factory=list)
    pods: List[PodLogRecord] = Field(default_factory=list)

    def identifier(self) -> str:
        return f"{self.workload_kind}: {self.namespace}/{self.name}"


class NamespaceData(Entity):
    kind: ClassVar[str] = "namespace"

    name: str
    resource_counts: Dict[str, int] = Field(default_factory=dict)

    def alert_key(self) -> str:
        return self.name


class ServiceData(NamespacedEntity):
    kind: ClassVar[str] = "service"


class IngressData(NamespacedEntity):
    kind: ClassVar[str] = "ingress"


class PVCData(NamespacedEntity):
    kind: ClassVar[str] = "pvc"

    phase: str = ""


class PVData(Entity):
    kind: ClassVar[str] = "pv"

    name: str
    phase: str = ""

    def alert_key(self) -> str:
        return self.name


class NodeResource(BaseModel):
    limits_cpu: float = 0
    limits_memory: float = 0
    requests_cpu: float = 0
    requests_memory: float = 0
    requests_pods: float = 0
    allocatable_cpu: float = 0
    allocatable_memory: float = 0
    allocatable_pods: float = 0


class NodeData(Entity):
    kind: ClassVar[str] = "node"

    name: str
    host_ip: str = ""
    resource: NodeResource = Field(default_factory=NodeResource)
    commands: List[CommandCheckResult] = Field(default_factory=list)

    def alert_key(self) -> str:
        return self.host_ip or self.name

    def identifier(self) -> str:
        if self.host_ip:
            return f"{self.name} / {self.host_ip}"
        return self.name


class ClusterCoreData(Entity):
    kind: ClassVar[str] = "cluster"

    cluster_name: str
    health_check: List[CommandCheckResult] = Field(default_factory=list)

    def alert_key(self) -> str:
        return self.cluster_name


class Inspection(BaseModel):
    """同名失败检查项跨实体的汇总"""

    title: str
    level: int
    names: List[str] = Field(default_factory=list)


class ClusterCore(BaseModel):
    core: Optional[ClusterCoreData] = None
    inspections: List[Inspection] = Field(default_factory=list)


class ClusterNode(BaseModel):
    nodes: List[NodeData] = Field(default_factory=list)
    inspections: List[Inspection] = Field(default_factory=list)


class ClusterResource(BaseModel):
    workloads: List[WorkloadData] = Field(default_factory=list)
    namespaces: List[NamespaceData] = Field(default_factory=list)
    services: List[ServiceData] = Field(default_factory=list)
    ingresses: List[IngressData] = Field(default_factory=list)
    pvcs: List[PVCData] = Field(default_factory=list)
    pvs: List[PVData] = Field(default_factory=list)
    inspections: List[Inspection] = Field(default_factory=list)


class KubernetesResult(BaseModel):
    """单个集群的巡检结果"""

    cluster_id: str
    cluster_name: str
    cluster_core: ClusterCore = Field(default_factory=ClusterCore)
    cluster_node: ClusterNode = Field(default_factory=ClusterNode)
    cluster_resource: ClusterResource = Field(default_factory=ClusterResource)

    def all_inspections(self) -> List[Inspection]:
        return (
            self.cluster_core.inspections
            + self.cluster_node.inspections
            + self.cluster_resource.inspections
        )


class ReportGlobal(BaseModel):
    name: str
    rating: str
    report_time: str


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    global_info: ReportGlobal = Field(alias="global")
    kubernetes: List[KubernetesResult] = Field(default_factory=list)


class TaskCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="任务名称")
    template_id: str = Field(..., description="巡检模板ID")
    notify_id: Optional[str] = Field(default=None, description="通知目标ID")
    async_run: bool = Field(default=True, alias="async", description="是否异步执行")


class InspectionTask(BaseModel):
    id: str
    name: str
    template_id: str
    notify_id: Optional[str] = None
    state: str = InspectionConstants.TASK_STATE_RUNNING
    rating: Optional[str] = None
    report_id: Optional[str] = None
    error: Optional[str] = None
    start_time: str
    end_time: Optional[str] = None
