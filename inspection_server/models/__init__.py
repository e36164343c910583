#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 模块初始化文件
"""

from .alert_models import AlertKind, AlertSignal, AlertState, ClusterAlertItems
from .base import BaseResponse
from .inspection_models import (
    ClusterCore,
    ClusterCoreData,
    ClusterNode,
    ClusterResource,
    CommandCheckResult,
    Entity,
    IngressData,
    Inspection,
    InspectionTask,
    Item,
    ItemsCount,
    KubernetesResult,
    NamespaceData,
    NodeData,
    NodeResource,
    PodLogRecord,
    PVCData,
    PVData,
    Report,
    ReportGlobal,
    ServiceData,
    TaskCreateRequest,
    WorkloadData,
)
from .template_models import (
    InspectionTemplate,
    KubernetesConfig,
    NotifyCreateRequest,
    NotifyTarget,
    SelectorConfig,
    TemplateCreateRequest,
)

__all__ = [
    # 告警模型
    "AlertKind",
    "AlertSignal",
    "AlertState",
    "ClusterAlertItems",
    # 响应模型
    "BaseResponse",
    # 巡检结果模型
    "ClusterCore",
    "ClusterCoreData",
    "ClusterNode",
    "ClusterResource",
    "CommandCheckResult",
    "Entity",
    "IngressData",
    "Inspection",
    "InspectionTask",
    "Item",
    "ItemsCount",
    "KubernetesResult",
    "NamespaceData",
    "NodeData",
    "NodeResource",
    "PodLogRecord",
    "PVCData",
    "PVData",
    "Report",
    "ReportGlobal",
    "ServiceData",
    "TaskCreateRequest",
    "WorkloadData",
    # 模板模型
    "InspectionTemplate",
    "KubernetesConfig",
    "NotifyCreateRequest",
    "NotifyTarget",
    "SelectorConfig",
    "TemplateCreateRequest",
]
