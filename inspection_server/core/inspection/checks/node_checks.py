#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 节点检查
"""


from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from kubernetes.utils.quantity import parse_quantity

from inspection_server.common.constants import InspectionConstants
from inspection_server.common.exceptions import DecodeError, ExecError, ListError
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
    status,
)
from inspection_server.core.inspection.items import merge_entity
from inspection_server.models.inspection_models import (
    CommandCheckResult,
    Item,
    NodeData,
    NodeResource,
)
from inspection_server.models.template_models import ClusterNodeConfig, CommandConfig

logger = get_logger("inspection.core.checks.node")

EXEC_CHECK = "巡检命令执行"

# 检查项名称, 占用字段, 可分配字段, 消息中的资源描述
RESOURCE_CHECKS = (
    ("Limits CPU 超过 80 %", "limits_cpu", "allocatable_cpu", "limits CPU"),
    ("Limits Memory 超过 80 %", "limits_memory", "allocatable_memory", "limits Memory"),
    ("Requests CPU 超过 80 %", "requests_cpu", "allocatable_cpu", "requests CPU"),
    ("Requests Memory 超过 80 %", "requests_memory", "allocatable_memory", "requests Memory"),
    ("Requests Pods 超过 80 %", "requests_pods", "allocatable_pods", "requests Pods"),
)


def quantity(value: Any) -> float:
    if value in (None, ""):
        return 0.0
    try:
        return float(parse_quantity(value))
    except ValueError:
        logger.warning(f"无法解析资源数量: {value}")
        return 0.0


def _annotation_resources(annotations: Dict[str, str], key: str) -> Dict[str, Any]:
    raw = annotations.get(key)
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"节点注解 {key} 不是合法 JSON: {raw}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def node_resource(node: Dict[str, Any]) -> NodeResource:
    annotations = meta(node).get("annotations") or {}
    limits = _annotation_resources(annotations, InspectionConstants.POD_LIMITS_ANNOTATION)
    requests = _annotation_resources(
        annotations, InspectionConstants.POD_REQUESTS_ANNOTATION
    )
    allocatable = status(node).get("allocatable") or {}
    return NodeResource(
        limits_cpu=quantity(limits.get("cpu")),
        limits_memory=quantity(limits.get("memory")),
        requests_cpu=quantity(requests.get("cpu")),
        requests_memory=quantity(requests.get("memory")),
        requests_pods=quantity(requests.get("pods")),
        allocatable_cpu=quantity(allocatable.get("cpu")),
        allocatable_memory=quantity(allocatable.get("memory")),
        allocatable_pods=quantity(allocatable.get("pods")),
    )


def resource_items(node_name: str, resource: NodeResource) -> List[Item]:
    threshold = InspectionConstants.NODE_RESOURCE_THRESHOLD / 100
    items: List[Item] = []
    for title, used_field, total_field, label in RESOURCE_CHECKS:
        used = getattr(resource, used_field)
        total = getattr(resource, total_field)
        high = total > 0 and used / total > threshold
        if high:
            logger.info(f"节点 {node_name} {label} 占用过高: {used}/{total}")
        items.append(
            Item(
                name=title,
                message=f"节点 {node_name} {label} 超过百分之 80" if high else "",
                passed=not high,
                level=2,
            )
        )
    return items


class NodeCheck:
    name = "node"

    async def _node_commands(
        self, ctx: CheckContext, cfg: ClusterNodeConfig
    ) -> Dict[str, List[CommandConfig]]:
        """节点名到需要执行的命令列表"""
        commands: Dict[str, List[CommandConfig]] = {}
        for group in cfg.node_config:
            if not group.enable:
                continue
            selector = (
                ",".join(f"{k}={v}" for k, v in sorted(group.selector_labels.items()))
                or None
            )
            for node in await list_kind(ctx, "node", None, selector):
                commands.setdefault(meta(node).get("name", ""), []).extend(group.commands)
        return commands

    async def _command_items(
        self,
        ctx: CheckContext,
        pod: Dict[str, Any],
        node_name: str,
        commands: List[CommandConfig],
    ) -> Tuple[List[Item], List[CommandCheckResult]]:
        try:
            results, stderr = await run_agent_commands(ctx, pod, commands)
        except (ExecError, DecodeError) as e:
            logger.error(f"节点 {node_name} 巡检命令执行失败: {e.message}")
            return [Item(name=EXEC_CHECK, message=e.message, passed=False, level=2)], []
        if stderr:
            logger.error(f"节点 {node_name} 巡检命令 stderr: {stderr}")
        for r in results:
            if r.error:
                logger.error(f"节点 {node_name} 巡检失败 ({r.description}): {r.error}")
        return command_items(results, commands), results

    async def _read_node(self, ctx: CheckContext, name: str) -> Dict[str, Any]:
        try:
            node: Optional[Dict[str, Any]] = await ctx.client.read_node(name)
        except Exception as e:
            raise ListError("node", str(e), cluster_id=ctx.cluster_id)
        if node is None:
            raise ListError("node", f"节点 {name} 不存在", cluster_id=ctx.cluster_id)
        return node

    async def collect(self, ctx: CheckContext, cfg: ClusterNodeConfig) -> List[NodeData]:
        node_commands = await self._node_commands(ctx, cfg)
        nodes: List[NodeData] = []
        for pod in await list_agent_pods(ctx):
            node_name = spec(pod).get("node_name") or ""
            if not node_name:
                logger.warning(f"Agent Pod {meta(pod).get('name')} 尚未调度到节点")
                continue
            node = await self._read_node(ctx, node_name)
            resource = node_resource(node)
            items = resource_items(node_name, resource)

            results: List[CommandCheckResult] = []
            commands = node_commands.get(node_name, [])
            if commands:
                extra, results = await self._command_items(ctx, pod, node_name, commands)
                items.extend(extra)

            entity = NodeData(
                name=node_name,
                host_ip=status(pod).get("host_ip") or "",
                resource=resource,
                commands=results,
                items=items,
            )
            nodes.append(merge_entity(entity, ctx.alerts, "node"))
        logger.info(f"集群 {ctx.cluster_name} 节点巡检完成，共 {len(nodes)} 个")
        return nodes
