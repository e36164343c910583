#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 告警信号解析，将外部告警归属到具体的巡检实体
"""


from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from inspection_server.common.exceptions import (
    DecodeError,
    EmptyRuleSetError,
    MissingLabelError,
)
from inspection_server.common.logger import get_logger
from inspection_server.models.alert_models import (
    AlertKind,
    AlertSignal,
    AlertState,
    ClusterAlertItems,
)
from inspection_server.models.inspection_models import Item

logger = get_logger("inspection.core.alerts")

GROUP_PREFIX = "inspection-"

# 规则组名称后缀到告警类型
GROUP_KINDS: Dict[str, AlertKind] = {
    "cluster": AlertKind.CLUSTER,
    "node": AlertKind.NODE,
    "workload": AlertKind.WORKLOAD,
    "resource": AlertKind.WORKLOAD,
    "namespace": AlertKind.NAMESPACE,
    "pvc": AlertKind.PVC,
    "pv": AlertKind.PV,
}

REQUIRED_LABELS: Dict[AlertKind, Tuple[str, ...]] = {
    AlertKind.CLUSTER: (),
    AlertKind.NODE: ("instance",),
    AlertKind.WORKLOAD: ("created_by_kind", "created_by_name", "namespace"),
    AlertKind.NAMESPACE: ("namespace", "resource"),
    AlertKind.PVC: ("namespace", "persistentvolumeclaim"),
    AlertKind.PV: ("persistentvolume",),
}

OWNER_BUCKETS = {
    "ReplicaSet": "deployment",
    "Deployment": "deployment",
    "StatefulSet": "statefulset",
    "DaemonSet": "daemonset",
    "Job": "job",
}


def resolve_replicaset_owner(name: str) -> str:
    """ReplicaSet 名称按最后一个 "-" 截断得到所属 Deployment 名称"""
    index = name.rfind("-")
    if index <= 0:
        return name
    return name[:index]


def kind_from_group(group_name: str) -> Optional[AlertKind]:
    if not group_name.startswith(GROUP_PREFIX):
        return None
    return GROUP_KINDS.get(group_name[len(GROUP_PREFIX):])


def _require(labels: Dict[str, str], name: str, alert_name: str) -> str:
    value = labels.get(name)
    if not value:
        raise MissingLabelError(alert_name=alert_name, label=name)
    return value


def _as_dict(value: Any, field_name: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"告警数据 {field_name} 应为对象，实际为 {type(value).__name__}")
    return value


def _as_list(value: Any, field_name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"告警数据 {field_name} 应为数组，实际为 {type(value).__name__}")
    return value


def _entries(value: Any, field_name: str) -> List[Dict[str, Any]]:
    """数组字段中的每个元素都必须是对象"""
    entries = _as_list(value, field_name)
    for entry in entries:
        if not isinstance(entry, dict):
            raise DecodeError(
                f"告警数据 {field_name} 元素应为对象，实际为 {type(entry).__name__}"
            )
    return entries


def _to_signal(
    kind: AlertKind, rule_name: str, alert: Dict[str, Any]
) -> Optional[AlertSignal]:
    labels = {k: str(v) for k, v in _as_dict(alert.get("labels"), "labels").items()}
    annotations = _as_dict(alert.get("annotations"), "annotations")

    source = _require(labels, "prometheus_from", rule_name)
    alert_name = _require(labels, "alertname", rule_name)
    summary = annotations.get("summary")
    if summary is None:
        raise MissingLabelError(alert_name=rule_name, label="summary")
    for label in REQUIRED_LABELS[kind]:
        _require(labels, label, alert_name)

    state = AlertState.parse(alert.get("state"))
    if state is None:
        logger.warning(f"告警 {alert_name} 状态无法识别: {alert.get('state')}")
        return None

    return AlertSignal(
        source=source,
        alert_name=alert_name,
        state=state,
        kind=kind,
        labels=labels,
        summary=summary,
    )


def extract_signals(payload: Any) -> List[AlertSignal]:
    """
    从告警规则接口返回体中解析告警信号

    Args:
        payload: {data: {groups: [{name, rules: [{name, alerts: [...]}]}]}}

    Returns:
        List[AlertSignal]: 解析成功的告警信号，缺少标签的告警被跳过
    """
    if not isinstance(payload, dict):
        raise DecodeError("告警数据不是 JSON 对象")
    data = _as_dict(payload.get("data"), "data")
    groups = _entries(data.get("groups"), "groups")
    if not groups:
        raise EmptyRuleSetError()

    signals: List[AlertSignal] = []
    for group in groups:
        group_name = str(group.get("name") or "")
        kind = kind_from_group(group_name)
        if kind is None:
            logger.debug(f"忽略非巡检规则组: {group_name}")
            continue
        for rule in _entries(group.get("rules"), "rules"):
            rule_name = str(rule.get("name") or "")
            for alert in _entries(rule.get("alerts"), "alerts"):
                try:
                    signal = _to_signal(kind, rule_name, alert)
                except MissingLabelError as e:
                    logger.warning(f"跳过告警: {e.message}")
                    continue
                if signal is not None:
                    signals.append(signal)

    logger.info(f"共解析告警信号 {len(signals)} 条")
    return signals


def _signal_item(signal: AlertSignal, name: str) -> Item:
    passed = signal.state == AlertState.NORMAL
    level_label = signal.labels.get("level", "")
    kwargs: Dict[str, Any] = {}
    if level_label.lstrip("-").isdigit():
        kwargs["level"] = int(level_label)
    return Item(
        name=name,
        message="" if passed else signal.summary,
        passed=passed,
        **kwargs,
    )


def _entity_key(signal: AlertSignal) -> Optional[Tuple[str, str]]:
    labels = signal.labels
    if signal.kind == AlertKind.CLUSTER:
        return "cluster", signal.source
    if signal.kind == AlertKind.NODE:
        return "node", labels["instance"].split(":", 1)[0]
    if signal.kind == AlertKind.WORKLOAD:
        owner_kind = labels["created_by_kind"]
        bucket = OWNER_BUCKETS.get(owner_kind)
        if bucket is None:
            logger.warning(
                f"告警 {signal.alert_name} 的所属类型 {owner_kind} 不支持，已跳过"
            )
            return None
        owner = labels["created_by_name"]
        if owner_kind == "ReplicaSet":
            owner = resolve_replicaset_owner(owner)
        return bucket, f"{labels['namespace']}/{owner}"
    if signal.kind == AlertKind.PVC:
        return "pvc", f"{labels['namespace']}/{labels['persistentvolumeclaim']}"
    if signal.kind == AlertKind.PV:
        return "pv", labels["persistentvolume"]
    if signal.kind == AlertKind.NAMESPACE:
        return "namespace", labels["namespace"]
    return None


def resolve_signals(signals: List[AlertSignal]) -> Dict[str, ClusterAlertItems]:
    """按集群来源、资源分桶、实体键归并告警检查项"""
    resolved: Dict[str, ClusterAlertItems] = {}
    for signal in signals:
        if signal.state in (AlertState.NODATA, AlertState.ERROR):
            logger.debug(f"告警 {signal.alert_name} 状态为 {signal.state.value}，不计入")
            continue

        target = _entity_key(signal)
        if target is None:
            continue
        bucket, key = target

        name = signal.alert_name
        if signal.kind == AlertKind.NAMESPACE:
            name = f"{signal.alert_name} - {signal.labels['resource']}"

        resolved.setdefault(signal.source, ClusterAlertItems()).add(
            bucket, key, _signal_item(signal, name)
        )
    return resolved


class AlertSignalResolver:
    """告警信号解析器"""

    def resolve(self, payload: Any) -> Dict[str, ClusterAlertItems]:
        return resolve_signals(extract_signals(payload))
