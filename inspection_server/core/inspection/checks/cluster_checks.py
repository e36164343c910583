#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 集群核心组件检查
"""


from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from inspection_server.common.exceptions import ExecError
from inspection_server.common.logger import get_logger
from inspection_server.core.inspection.checks.agent import (
    command_items,
    list_agent_pods,
    run_agent_commands,
)
from inspection_server.core.inspection.checks.base import (
    CheckContext,
    list_kind,
    meta,
    spec,
)
from inspection_server.core.inspection.items import merge_entity
from inspection_server.models.inspection_models import (
    ClusterCoreData,
    CommandCheckResult,
    Item,
)
from inspection_server.models.template_models import (
    ChartVersionCheckConfig,
    ClusterCoreConfig,
    CommandConfig,
    split_csv,
)

logger = get_logger("inspection.core.checks.cluster")

CHART_CHECK = "是否为预期的 chart 版本"


def _chart_version(app: Dict[str, Any]) -> Optional[str]:
    chart_meta = (spec(app).get("chart") or {}).get("metadata") or {}
    version = chart_meta.get("version")
    return version if isinstance(version, str) else None


class ClusterCoreCheck:
    """核心组件健康检查，命令列表在构造时传入"""

    name = "cluster"

    def __init__(self, commands: Sequence[CommandConfig]) -> None:
        self.commands = list(commands)

    async def _health_check(self, ctx: CheckContext) -> List[CommandCheckResult]:
        if not self.commands:
            return []
        pods = await list_agent_pods(ctx)
        if not pods:
            logger.warning(f"集群 {ctx.cluster_name} 未找到巡检 Agent，跳过核心组件检查")
            return []
        pod = pods[0]
        results, stderr = await run_agent_commands(ctx, pod, self.commands)
        if stderr:
            raise ExecError(
                meta(pod).get("name", ""), f"stderr: {stderr}", cluster_id=ctx.cluster_id
            )
        return results

    async def _chart_item(self, ctx: CheckContext, cfg: ChartVersionCheckConfig) -> Item:
        excluded = split_csv(cfg.excluded_namespaces)
        mismatched: List[str] = []
        for app in await list_kind(ctx, "app"):
            m = meta(app)
            if m.get("namespace") in excluded:
                continue
            version = _chart_version(app)
            if version is None:
                logger.warning(f"App {m.get('namespace')}/{m.get('name')} 未找到 chart 版本")
                continue
            if version not in cfg.allow_version:
                mismatched.append(
                    f"app {m.get('namespace')} / {m.get('name')} 的版本为 {version}"
                )
        return Item(
            name=CHART_CHECK,
            message="\n".join(mismatched),
            passed=not mismatched,
            level=1,
        )

    async def collect(self, ctx: CheckContext, cfg: ClusterCoreConfig) -> ClusterCoreData:
        results = await self._health_check(ctx)
        items = command_items(results, self.commands)
        if cfg.chart_version_check.enable:
            items.append(await self._chart_item(ctx, cfg.chart_version_check))

        core = ClusterCoreData(
            cluster_name=ctx.cluster_name, health_check=results, items=items
        )
        logger.info(
            f"集群 {ctx.cluster_name} 核心组件巡检完成，通过 "
            f"{core.items_count.pass_count}/{core.items_count.total_count}"
        )
        return merge_entity(core, ctx.alerts, "cluster", ctx.alert_source or None)
