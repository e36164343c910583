#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检 Agent 命令通道
"""


from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from inspection_server.common.exceptions import DecodeError, ExecError, InspectionError
from inspection_server.common.logger import get_logger
from inspection_server.core.inspection.checks.base import CheckContext, list_kind, meta
from inspection_server.models.inspection_models import CommandCheckResult, Item
from inspection_server.models.template_models import CommandConfig

logger = get_logger("inspection.core.agent")


def build_agent_command(script: str, commands: Sequence[CommandConfig]) -> List[str]:
    """拼接 Agent 脚本及 "<描述>: <命令>" 参数"""
    return [script] + [f"{c.description}: {c.command}" for c in commands]


def parse_command_results(
    stdout: str, cluster_id: Optional[str] = None
) -> List[CommandCheckResult]:
    try:
        raw = json.loads(stdout or "[]")
    except json.JSONDecodeError as e:
        raise DecodeError(f"Agent 输出不是合法 JSON: {e}", cluster_id=cluster_id)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DecodeError("Agent 输出应为 JSON 数组", cluster_id=cluster_id)
    try:
        return [CommandCheckResult(**r) for r in raw]
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Agent 输出字段格式错误: {e}", cluster_id=cluster_id)


def command_items(
    results: Sequence[CommandCheckResult], commands: Sequence[CommandConfig]
) -> List[Item]:
    """命令结果转检查项，error 非空即失败，级别取命令配置"""
    levels = {c.description: c.level for c in commands}
    items: List[Item] = []
    for r in results:
        kwargs: Dict[str, Any] = {}
        if r.description in levels:
            kwargs["level"] = levels[r.description]
        items.append(
            Item(name=r.description, message=r.error, passed=not r.error, **kwargs)
        )
    return items


async def list_agent_pods(ctx: CheckContext) -> List[Dict[str, Any]]:
    return await list_kind(
        ctx, "pod", namespace=ctx.agent.namespace, label_selector=ctx.agent.selector
    )


async def run_agent_commands(
    ctx: CheckContext, pod: Dict[str, Any], commands: Sequence[CommandConfig]
) -> Tuple[List[CommandCheckResult], str]:
    """在 Agent Pod 中执行命令，返回解析后的结果和 stderr"""
    pod_meta = meta(pod)
    pod_name = pod_meta.get("name", "")
    namespace = pod_meta.get("namespace") or ctx.agent.namespace
    command = build_agent_command(ctx.agent.script, commands)
    logger.info(
        f"在集群 {ctx.cluster_name} 的 Pod {namespace}/{pod_name} 中执行 {len(commands)} 条命令"
    )
    try:
        stdout, stderr = await ctx.client.exec_command(
            namespace, pod_name, ctx.agent.container, command
        )
    except ExecError:
        raise
    except InspectionError as e:
        raise ExecError(pod_name, e.message, cluster_id=ctx.cluster_id)
    except Exception as e:
        raise ExecError(pod_name, str(e), cluster_id=ctx.cluster_id)
    return parse_command_results(stdout, ctx.cluster_id), stderr
