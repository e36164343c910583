#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 工作负载检查（Deployment/StatefulSet/DaemonSet/Job）
"""


from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from inspection_server.common.logger import get_logger
from inspection_server.core.inspection.checks.base import (
    CheckContext,
    list_kind,
    list_selected,
    meta,
    spec,
    status,
)
from inspection_server.core.inspection.items import merge_entity
from inspection_server.models.inspection_models import Item, PodLogRecord, WorkloadData
from inspection_server.models.template_models import WorkloadConfig, WorkloadSelectorConfig

logger = get_logger("inspection.core.checks.workload")

HEALTH_CHECK = "健康状态"
PROBE_CHECK = "健康检查设置"
LOG_CHECK = "日志未匹配异常关键字"


def _int(value: Any, default: int = 0) -> int:
    return default if value is None else int(value)


def is_deployment_available(obj: Dict[str, Any]) -> bool:
    st = status(obj)
    for c in st.get("conditions") or []:
        if (c.get("type") == "Failed" and c.get("status") == "False") or c.get(
            "reason"
        ) == "Error":
            return False
    return _int(st.get("available_replicas")) >= _int(spec(obj).get("replicas"), 1)


def is_statefulset_available(obj: Dict[str, Any]) -> bool:
    return _int(status(obj).get("ready_replicas")) >= _int(spec(obj).get("replicas"), 1)


def is_daemonset_available(obj: Dict[str, Any]) -> bool:
    st = status(obj)
    return _int(st.get("number_available")) >= _int(st.get("desired_number_scheduled"))


def is_job_completed(obj: Dict[str, Any]) -> bool:
    return _int(status(obj).get("succeeded")) >= _int(spec(obj).get("completions"), 1)


# 配置字段, 资源类型, 展示名称, 健康判定
WORKLOAD_KINDS: Tuple[Tuple[str, str, str, Callable[[Dict[str, Any]], bool]], ...] = (
    ("deployment", "deployment", "Deployment", is_deployment_available),
    ("statefulset", "statefulset", "StatefulSet", is_statefulset_available),
    ("daemonset", "daemonset", "DaemonSet", is_daemonset_available),
    ("job", "job", "Job", is_job_completed),
)


def check_containers_probe(containers: List[Dict[str, Any]]) -> Item:
    missing: List[str] = []
    for container in containers:
        name = container.get("name", "")
        if not container.get("liveness_probe"):
            missing.append(f"容器 {name} 没有设置 LivenessProbe")
        if not container.get("readiness_probe"):
            missing.append(f"容器 {name} 没有设置 ReadinessProbe")
    return Item(
        name=PROBE_CHECK, message="\n".join(missing), passed=not missing, level=1
    )


def _conditions(obj: Dict[str, Any]) -> List[str]:
    return [
        f"{c.get('type', '')}/{c.get('status', '')}/{c.get('reason') or ''}"
        for c in status(obj).get("conditions") or []
    ]


def _pod_template_containers(obj: Dict[str, Any]) -> List[Dict[str, Any]]:
    template = spec(obj).get("template") or {}
    return (template.get("spec") or {}).get("containers") or []


def _match_labels(obj: Dict[str, Any]) -> Optional[str]:
    labels = (spec(obj).get("selector") or {}).get("match_labels") or {}
    if not labels:
        return None
    return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))


class WorkloadCheck:
    name = "workload"

    async def _log_item(
        self,
        ctx: CheckContext,
        obj: Dict[str, Any],
        pattern: str,
    ) -> Tuple[Item, List[PodLogRecord]]:
        namespace = meta(obj).get("namespace", "")
        selector = _match_labels(obj)
        pods = await list_kind(ctx, "pod", namespace, selector) if selector else []
        records = await ctx.log_fetcher.fetch(ctx.client, pods, pattern)
        hits = [r for r in records if r.lines]
        message = "\n".join(
            f"Pod {r.namespace}/{r.name} 匹配到 {len(r.lines)} 行异常日志" for r in hits
        )
        return Item(name=LOG_CHECK, message=message, passed=not hits, level=1), records

    async def _inspect(
        self,
        ctx: CheckContext,
        obj: Dict[str, Any],
        display_kind: str,
        healthy: Callable[[Dict[str, Any]], bool],
        cfg: WorkloadSelectorConfig,
    ) -> WorkloadData:
        m = meta(obj)
        namespace, name = m.get("namespace", ""), m.get("name", "")
        logger.debug(f"巡检 {display_kind} {namespace}/{name}")

        ok = healthy(obj)
        items = [
            Item(
                name=HEALTH_CHECK,
                message=""
                if ok
                else f"命名空间 {namespace} 下的 {display_kind} {name} 处于非健康状态",
                passed=ok,
                level=1,
            ),
            check_containers_probe(_pod_template_containers(obj)),
        ]

        pods: List[PodLogRecord] = []
        if cfg.log_pattern and ctx.log_fetcher is not None:
            log_item, pods = await self._log_item(ctx, obj, cfg.log_pattern)
            items.append(log_item)

        return WorkloadData(
            workload_kind=display_kind,
            namespace=namespace,
            name=name,
            conditions=_conditions(obj),
            pods=pods,
            items=items,
        )

    async def collect(self, ctx: CheckContext, cfg: WorkloadConfig) -> List[WorkloadData]:
        workloads: List[WorkloadData] = []
        for field_name, kind, display_kind, healthy in WORKLOAD_KINDS:
            selector_cfg: WorkloadSelectorConfig = getattr(cfg, field_name)
            if not selector_cfg.enable:
                continue
            for obj in await list_selected(ctx, kind, selector_cfg):
                workload = await self._inspect(ctx, obj, display_kind, healthy, selector_cfg)
                workloads.append(merge_entity(workload, ctx.alerts, kind))
        logger.info(f"集群 {ctx.cluster_name} 工作负载巡检完成，共 {len(workloads)} 个")
        return workloads
