#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Ingress 检查
"""


from __future__ import annotations

from typing import Dict, List

from inspection_server.common.logger import get_logger
from inspection_server.core.inspection.checks.base import (
    CheckContext,
    list_selected,
    meta,
    spec,
)
from inspection_server.core.inspection.items import merge_entity
from inspection_server.models.inspection_models import IngressData, Item
from inspection_server.models.template_models import SelectorConfig

logger = get_logger("inspection.core.checks.ingress")

DUPLICATE_PATH_CHECK = "不存在重复的 Path 路径"


def find_duplicate_paths(ingresses: List[Dict]) -> Dict[str, List[str]]:
    """host+path 到使用它的 Ingress 列表，只保留被多个 Ingress 共用的"""
    owners: Dict[str, List[str]] = {}
    for ing in ingresses:
        m = meta(ing)
        key = f"{m.get('namespace', '')}/{m.get('name', '')}"
        for rule in spec(ing).get("rules") or []:
            host = rule.get("host") or ""
            for path in (rule.get("http") or {}).get("paths") or []:
                users = owners.setdefault(host + (path.get("path") or ""), [])
                if key not in users:
                    users.append(key)
    return {k: v for k, v in owners.items() if len(v) > 1}


class IngressCheck:
    name = "ingress"

    async def collect(self, ctx: CheckContext, cfg: SelectorConfig) -> List[IngressData]:
        objects = await list_selected(ctx, "ingress", cfg)

        conflicts: Dict[str, List[str]] = {}
        for users in find_duplicate_paths(objects).values():
            for key in users:
                for other in users:
                    if other not in conflicts.setdefault(key, []):
                        conflicts[key].append(other)

        ingresses: List[IngressData] = []
        for ing in objects:
            m = meta(ing)
            namespace, name = m.get("namespace", ""), m.get("name", "")
            involved = conflicts.get(f"{namespace}/{name}")
            item = Item(
                name=DUPLICATE_PATH_CHECK,
                message=f"Ingress {','.join(involved)} 存在重复的 Path 路径" if involved else "",
                passed=not involved,
                level=1,
            )
            entity = IngressData(namespace=namespace, name=name, items=[item])
            ingresses.append(merge_entity(entity, ctx.alerts, "ingress"))
        logger.info(f"集群 {ctx.cluster_name} Ingress 巡检完成，共 {len(ingresses)} 个")
        return ingresses
