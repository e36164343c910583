#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import pytest

from fakes import alert, rule_groups
from inspection_server.common.exceptions import DecodeError, EmptyRuleSetError
from inspection_server.core.inspection.alerts import (
    AlertSignalResolver,
    extract_signals,
    kind_from_group,
    resolve_replicaset_owner,
)
from inspection_server.models.alert_models import AlertKind, AlertState


def _labels(**extra):
    labels = {"prometheus_from": "prod", "alertname": "PodRestart"}
    labels.update(extra)
    return labels


def test_resolve_replicaset_owner_cuts_at_last_dash():
    assert resolve_replicaset_owner("web-6f9d8c7b4") == "web"
    assert resolve_replicaset_owner("my-web-app-6f9d8c7b4") == "my-web-app"
    assert resolve_replicaset_owner("standalone") == "standalone"


def test_replicaset_alert_resolves_to_deployment_key():
    payload = rule_groups(
        (
            "inspection-workload",
            [
                alert(
                    _labels(
                        created_by_kind="ReplicaSet",
                        created_by_name="web-6f9d8c7b4",
                        namespace="shop",
                    )
                )
            ],
        )
    )
    resolved = AlertSignalResolver().resolve(payload)

    items = resolved["prod"].get("deployment", "shop/web")
    assert len(items) == 1
    assert items[0].name == "PodRestart"
    assert items[0].passed is False
    assert items[0].message == "告警摘要"


def test_statefulset_and_daemonset_owner_used_verbatim():
    payload = rule_groups(
        (
            "inspection-workload",
            [
                alert(_labels(created_by_kind="StatefulSet", created_by_name="db-0x", namespace="a")),
                alert(_labels(created_by_kind="DaemonSet", created_by_name="agent-x", namespace="b")),
            ],
        )
    )
    resolved = AlertSignalResolver().resolve(payload)["prod"]
    assert resolved.get("statefulset", "a/db-0x")
    assert resolved.get("daemonset", "b/agent-x")


def test_state_mapping():
    payload = rule_groups(
        (
            "inspection-pv",
            [
                alert({**_labels(persistentvolume="pv-ok")}, state="Normal"),
                alert({**_labels(persistentvolume="pv-pending")}, state="Pending"),
                alert({**_labels(persistentvolume="pv-nodata")}, state="NoData"),
                alert({**_labels(persistentvolume="pv-error")}, state="Error"),
            ],
        )
    )
    resolved = AlertSignalResolver().resolve(payload)["prod"]

    ok = resolved.get("pv", "pv-ok")
    assert ok[0].passed is True and ok[0].message == ""
    pending = resolved.get("pv", "pv-pending")
    assert pending[0].passed is False and pending[0].message == "告警摘要"
    assert resolved.get("pv", "pv-nodata") == []
    assert resolved.get("pv", "pv-error") == []


def test_state_with_reason_suffix_is_parsed():
    assert AlertState.parse("Normal (NoData)") == AlertState.NORMAL
    assert AlertState.parse("alerting") == AlertState.ALERTING
    assert AlertState.parse("Firing") is None


def test_pvc_alert_missing_label_is_skipped():
    payload = rule_groups(
        (
            "inspection-pvc",
            [
                alert(_labels(namespace="shop")),
                alert(_labels(namespace="shop", persistentvolumeclaim="data")),
            ],
        )
    )
    resolved = AlertSignalResolver().resolve(payload)
    pvc_bucket = resolved["prod"].pvc
    assert list(pvc_bucket) == ["shop/data"]


def test_missing_summary_is_skipped():
    payload = rule_groups(("inspection-pv", [alert(_labels(persistentvolume="p"), summary=None)]))
    assert extract_signals(payload) == []


def test_node_key_strips_port():
    payload = rule_groups(("inspection-node", [alert(_labels(instance="10.0.0.1:9100"))]))
    resolved = AlertSignalResolver().resolve(payload)
    assert resolved["prod"].get("node", "10.0.0.1")


def test_cluster_alert_keyed_by_source():
    payload = rule_groups(("inspection-cluster", [alert(_labels())]))
    resolved = AlertSignalResolver().resolve(payload)
    assert resolved["prod"].get("cluster", "prod")


def test_namespace_item_name_includes_resource():
    payload = rule_groups(
        (
            "inspection-namespace",
            [
                alert(_labels(alertname="QuotaHigh", namespace="shop", resource="cpu")),
                alert(_labels(alertname="QuotaHigh", namespace="shop", resource="memory")),
            ],
        )
    )
    items = AlertSignalResolver().resolve(payload)["prod"].get("namespace", "shop")
    assert {i.name for i in items} == {"QuotaHigh - cpu", "QuotaHigh - memory"}


def test_multiple_alerts_on_same_entity_accumulate():
    labels = _labels(persistentvolume="pv1")
    payload = rule_groups(("inspection-pv", [alert(labels), alert(labels)]))
    assert len(AlertSignalResolver().resolve(payload)["prod"].get("pv", "pv1")) == 2


def test_level_label_overrides_default():
    payload = rule_groups(("inspection-pv", [alert(_labels(persistentvolume="pv1", level="3"))]))
    item = AlertSignalResolver().resolve(payload)["prod"].get("pv", "pv1")[0]
    assert item.level == 3


def test_unsupported_owner_kind_is_skipped():
    payload = rule_groups(
        (
            "inspection-workload",
            [alert(_labels(created_by_kind="CronJob", created_by_name="x", namespace="a"))],
        )
    )
    assert AlertSignalResolver().resolve(payload) == {}


def test_non_inspection_groups_are_ignored():
    assert kind_from_group("kubernetes-apps") is None
    assert kind_from_group("inspection-resource") == AlertKind.WORKLOAD
    payload = rule_groups(("kubernetes-apps", [alert(_labels())]))
    assert AlertSignalResolver().resolve(payload) == {}


def test_empty_groups_raise():
    with pytest.raises(EmptyRuleSetError):
        AlertSignalResolver().resolve({"data": {"groups": []}})


@pytest.mark.parametrize(
    "payload",
    [
        ["not", "a", "dict"],
        {"data": {"groups": "oops"}},
        {"data": {"groups": ["inspection-node"]}},
        {"data": {"groups": [{"name": "inspection-node", "rules": [None]}]}},
        {"data": {"groups": [{"name": "inspection-node", "rules": [{"alerts": ["x"]}]}]}},
        {"data": {"groups": [{"name": "inspection-node", "rules": {"alerts": []}}]}},
        {"data": {"groups": [{"name": "inspection-pv", "rules": [{"alerts": [{"labels": "a=b"}]}]}]}},
    ],
)
def test_malformed_payload_raises_decode_error(payload):
    with pytest.raises(DecodeError):
        AlertSignalResolver().resolve(payload)
