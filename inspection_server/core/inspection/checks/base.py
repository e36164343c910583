#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Base 检查
"""


from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from inspection_server.common.exceptions import InspectionError, ListError
from inspection_server.core.interfaces.k8s_client import ClusterClient
from inspection_server.models.alert_models import ClusterAlertItems
from inspection_server.models.inspection_models import Entity
from inspection_server.models.template_models import SelectorConfig


@dataclass
class AgentSettings:
    """巡检 Agent 的位置与执行参数"""

    namespace: str = "cattle-inspection-system"
    selector: str = "name=inspection-agent"
    container: str = "inspection-agent-container"
    script: str = "/opt/inspection/inspection.sh"


@dataclass
class CheckContext:
    client: ClusterClient
    cluster_id: str
    cluster_name: str
    alerts: Optional[ClusterAlertItems] = None
    # 告警中 prometheus_from 的取值，集群级告警按它分桶
    alert_source: str = ""
    agent: AgentSettings = field(default_factory=AgentSettings)
    log_fetcher: Any = None


class EntityCheck(Protocol):
    name: str

    async def collect(self, ctx: CheckContext, cfg: Any) -> List[Entity]:
        ...


def meta(obj: Dict[str, Any]) -> Dict[str, Any]:
    return obj.get("metadata") or {}


def spec(obj: Dict[str, Any]) -> Dict[str, Any]:
    return obj.get("spec") or {}


def status(obj: Dict[str, Any]) -> Dict[str, Any]:
    return obj.get("status") or {}


async def list_kind(
    ctx: CheckContext,
    kind: str,
    namespace: Optional[str] = None,
    label_selector: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """列举资源，失败统一转换为 ListError"""
    try:
        return await ctx.client.list_resources(
            kind, namespace=namespace, label_selector=label_selector
        )
    except ListError:
        raise
    except InspectionError as e:
        raise ListError(kind, e.message, cluster_id=ctx.cluster_id)
    except Exception as e:
        raise ListError(kind, str(e), cluster_id=ctx.cluster_id)


async def list_selected(
    ctx: CheckContext, kind: str, cfg: SelectorConfig
) -> List[Dict[str, Any]]:
    """按选择器配置遍历命名空间列举资源"""
    objects: List[Dict[str, Any]] = []
    selector = cfg.label_selector()
    for namespace in cfg.namespaces():
        objects.extend(await list_kind(ctx, kind, namespace, selector))
    return objects
