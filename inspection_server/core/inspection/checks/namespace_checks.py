#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 命名空间检查
"""


from __future__ import annotations

from typing import Dict, List, Optional

from inspection_server.common.constants import InspectionConstants
from inspection_server.common.logger import get_logger
from inspection_server.core.inspection.checks.base import CheckContext, list_kind, meta
from inspection_server.core.inspection.items import merge_entity
from inspection_server.models.inspection_models import Item, NamespaceData
from inspection_server.models.template_models import NamespaceConfig, split_csv

logger = get_logger("inspection.core.checks.namespace")

QUOTA_CHECK = "有资源配置设置"
EMPTY_CHECK = "命名空间下资源非空"
NAME_CHECK = "命名空间名称是否符合规范"

COUNTED_KINDS = (
    "pod",
    "service",
    "deployment",
    "replicaset",
    "statefulset",
    "daemonset",
    "job",
    "secret",
    "configmap",
)


def name_check_item(name: str, cfg: NamespaceConfig) -> Optional[Item]:
    include = cfg.name_check.include_name
    if not include or name in split_csv(cfg.name_check.excluded_namespaces):
        return None
    ok = include in name
    return Item(
        name=NAME_CHECK,
        message="" if ok else f"未包含 {include} 内容",
        passed=ok,
        level=1,
    )


class NamespaceCheck:
    name = "namespace"

    async def _resource_counts(self, ctx: CheckContext, namespace: str) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for kind in COUNTED_KINDS:
            objects = await list_kind(ctx, kind, namespace)
            if kind == "configmap":
                objects = [
                    o
                    for o in objects
                    if meta(o).get("name") != InspectionConstants.ROOT_CA_CONFIGMAP
                ]
            counts[kind] = len(objects)
        return counts

    async def collect(self, ctx: CheckContext, cfg: NamespaceConfig) -> List[NamespaceData]:
        namespaces: List[NamespaceData] = []
        for ns in await list_kind(ctx, "namespace", None, cfg.label_selector()):
            name = meta(ns).get("name", "")
            counts = await self._resource_counts(ctx, name)
            quotas = await list_kind(ctx, "resourcequota", name)

            items = [
                Item(
                    name=QUOTA_CHECK,
                    message="" if quotas else f"命名空间 {name} 没有设置配额",
                    passed=bool(quotas),
                    level=1,
                ),
                Item(
                    name=EMPTY_CHECK,
                    message="" if sum(counts.values()) else f"命名空间 {name} 下资源为空",
                    passed=sum(counts.values()) > 0,
                    level=1,
                ),
            ]
            item = name_check_item(name, cfg)
            if item is not None:
                items.append(item)

            entity = NamespaceData(name=name, resource_counts=counts, items=items)
            namespaces.append(merge_entity(entity, ctx.alerts, "namespace"))
        logger.info(f"集群 {ctx.cluster_name} 命名空间巡检完成，共 {len(namespaces)} 个")
        return namespaces
