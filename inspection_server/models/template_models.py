#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检模板与通知目标数据模型
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


def split_csv(value: str) -> List[str]:
    """逗号分隔字符串转列表，忽略空白项"""
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class SelectorConfig(BaseModel):
    """单类资源的选择器配置"""

    enable: bool = Field(default=True, description="是否启用该类检查")
    selector_namespace: str = Field(
        default="", description="命名空间，逗号分隔，为空表示全部命名空间"
    )
    selector_labels: Dict[str, str] = Field(default_factory=dict, description="标签选择器")

    def namespaces(self) -> List[Optional[str]]:
        """返回需要遍历的命名空间，None 表示全部"""
        return split_csv(self.selector_namespace) or [None]

    def label_selector(self) -> Optional[str]:
        if not self.selector_labels:
            return None
        return ",".join(f"{k}={v}" for k, v in sorted(self.selector_labels.items()))


class WorkloadSelectorConfig(SelectorConfig):
    log_pattern: Optional[str] = Field(
        default=None, description="Pod 日志异常关键字正则，为空时不检查日志"
    )


class WorkloadConfig(BaseModel):
    deployment: WorkloadSelectorConfig = Field(default_factory=WorkloadSelectorConfig)
    statefulset: WorkloadSelectorConfig = Field(default_factory=WorkloadSelectorConfig)
    daemonset: WorkloadSelectorConfig = Field(default_factory=WorkloadSelectorConfig)
    job: WorkloadSelectorConfig = Field(default_factory=WorkloadSelectorConfig)


class NameCheckConfig(BaseModel):
    include_name: str = Field(default="", description="命名空间名称需包含的内容")
    excluded_namespaces: str = Field(default="", description="逗号分隔的豁免命名空间")


class NamespaceConfig(SelectorConfig):
    name_check: NameCheckConfig = Field(default_factory=NameCheckConfig)


class CommandConfig(BaseModel):
    """Agent 上执行的巡检命令"""

    description: str
    command: str
    level: int = 2


class NodeConfig(BaseModel):
    enable: bool = True
    selector_labels: Dict[str, str] = Field(default_factory=dict)
    commands: List[CommandConfig] = Field(default_factory=list)


class ClusterNodeConfig(BaseModel):
    enable: bool = True
    node_config: List[NodeConfig] = Field(default_factory=list)


class ChartVersionCheckConfig(BaseModel):
    enable: bool = False
    allow_version: List[str] = Field(default_factory=list, description="允许的 chart 版本")
    excluded_namespaces: str = Field(default="", description="逗号分隔的豁免命名空间")


class ClusterCoreConfig(BaseModel):
    enable: bool = True
    chart_version_check: ChartVersionCheckConfig = Field(
        default_factory=ChartVersionCheckConfig
    )


class ClusterResourceConfig(BaseModel):
    workload_config: WorkloadConfig = Field(default_factory=WorkloadConfig)
    namespace_config: NamespaceConfig = Field(default_factory=NamespaceConfig)
    service_config: SelectorConfig = Field(default_factory=SelectorConfig)
    ingress_config: SelectorConfig = Field(default_factory=SelectorConfig)
    pvc_config: SelectorConfig = Field(default_factory=SelectorConfig)
    pv_config: SelectorConfig = Field(default_factory=SelectorConfig)


class KubernetesConfig(BaseModel):
    """单个集群的巡检配置"""

    enable: bool = True
    cluster_id: str
    cluster_name: str = ""
    cluster_core_config: ClusterCoreConfig = Field(default_factory=ClusterCoreConfig)
    cluster_node_config: ClusterNodeConfig = Field(default_factory=ClusterNodeConfig)
    cluster_resource_config: ClusterResourceConfig = Field(
        default_factory=ClusterResourceConfig
    )

    @property
    def display_name(self) -> str:
        return self.cluster_name or self.cluster_id


class TemplateCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="模板名称")
    kubernetes: List[KubernetesConfig] = Field(default_factory=list)


class InspectionTemplate(TemplateCreateRequest):
    id: str


class NotifyCreateRequest(BaseModel):
    """通知目标，按已填写的字段决定发送渠道"""

    name: str = Field(..., min_length=1)
    app_id: str = ""
    app_secret: str = ""
    webhook_url: str = ""
    secret: str = ""
    mobiles: str = Field(default="", description="逗号分隔的手机号")
    emails: str = Field(default="", description="逗号分隔的邮箱")
    chat_id: str = Field(default="", description="群聊 ID，用于发送报告附件")


class NotifyTarget(NotifyCreateRequest):
    id: str
