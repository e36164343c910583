#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Service 检查
"""


from __future__ import annotations

from typing import List

from inspection_server.common.exceptions import InspectionError, ListError
from inspection_server.common.logger import get_logger
from inspection_server.core.inspection.checks.base import CheckContext, list_selected, meta
from inspection_server.core.inspection.items import merge_entity
from inspection_server.models.inspection_models import Item, ServiceData
from inspection_server.models.template_models import SelectorConfig

logger = get_logger("inspection.core.checks.service")

ENDPOINTS_CHECK = "存在对应 Endpoints 且 Subsets 非空"


class ServiceCheck:
    name = "service"

    async def _endpoints_item(self, ctx: CheckContext, namespace: str, name: str) -> Item:
        try:
            endpoints = await ctx.client.read_endpoints(namespace, name)
        except InspectionError as e:
            raise ListError("endpoints", e.message, cluster_id=ctx.cluster_id)
        except Exception as e:
            raise ListError("endpoints", str(e), cluster_id=ctx.cluster_id)

        if endpoints is None:
            logger.warning(f"Service {namespace}/{name} 没有对应的 Endpoints")
            return Item(
                name=ENDPOINTS_CHECK,
                message=f"命名空间 {namespace} 下 Service {name} 找不到对应 endpoint",
                passed=False,
                level=1,
            )
        if not endpoints.get("subsets"):
            return Item(
                name=ENDPOINTS_CHECK,
                message=f"命名空间 {namespace} 下 Service {name} 对应 Endpoints 没有 Subsets",
                passed=False,
                level=1,
            )
        return Item(name=ENDPOINTS_CHECK, passed=True, level=1)

    async def collect(self, ctx: CheckContext, cfg: SelectorConfig) -> List[ServiceData]:
        services: List[ServiceData] = []
        for svc in await list_selected(ctx, "service", cfg):
            m = meta(svc)
            namespace, name = m.get("namespace", ""), m.get("name", "")
            entity = ServiceData(
                namespace=namespace,
                name=name,
                items=[await self._endpoints_item(ctx, namespace, name)],
            )
            services.append(merge_entity(entity, ctx.alerts, "service"))
        logger.info(f"集群 {ctx.cluster_name} Service 巡检完成，共 {len(services)} 个")
        return services
