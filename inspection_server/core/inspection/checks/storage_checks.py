#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: PVC / PV 检查
"""


from __future__ import annotations

from typing import List

from inspection_server.common.logger import get_logger
from inspection_server.core.inspection.checks.base import (
    CheckContext,
    list_kind,
    list_selected,
    meta,
    status,
)
from inspection_server.core.inspection.items import merge_entity
from inspection_server.models.inspection_models import Item, PVCData, PVData
from inspection_server.models.template_models import SelectorConfig

logger = get_logger("inspection.core.checks.storage")

PVC_BOUND_CHECK = "PVC 已绑定"
PV_STATUS_CHECK = "PV 状态正常"


class PVCCheck:
    name = "pvc"

    async def collect(self, ctx: CheckContext, cfg: SelectorConfig) -> List[PVCData]:
        pvcs: List[PVCData] = []
        for pvc in await list_selected(ctx, "pvc", cfg):
            m = meta(pvc)
            namespace, name = m.get("namespace", ""), m.get("name", "")
            phase = status(pvc).get("phase") or ""
            bound = phase == "Bound"
            item = Item(
                name=PVC_BOUND_CHECK,
                message="" if bound else f"命名空间 {namespace} 下 PVC {name} 状态为 {phase or '未知'}",
                passed=bound,
                level=1,
            )
            entity = PVCData(namespace=namespace, name=name, phase=phase, items=[item])
            pvcs.append(merge_entity(entity, ctx.alerts, "pvc"))
        logger.info(f"集群 {ctx.cluster_name} PVC 巡检完成，共 {len(pvcs)} 个")
        return pvcs


class PVCheck:
    name = "pv"

    async def collect(self, ctx: CheckContext, cfg: SelectorConfig) -> List[PVData]:
        pvs: List[PVData] = []
        for pv in await list_kind(ctx, "pv", None, cfg.label_selector()):
            name = meta(pv).get("name", "")
            phase = status(pv).get("phase") or ""
            healthy = phase != "Failed"
            item = Item(
                name=PV_STATUS_CHECK,
                message="" if healthy else f"PV {name} 状态为 {phase}",
                passed=healthy,
                level=1,
            )
            entity = PVData(name=name, phase=phase, items=[item])
            pvs.append(merge_entity(entity, ctx.alerts, "pv"))
        logger.info(f"集群 {ctx.cluster_name} PV 巡检完成，共 {len(pvs)} 个")
        return pvs
