#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os

import pytest

from fakes import (
    FakeClusterClient,
    RecordingNotificationService,
    alert,
    build_service,
    make_deployment,
    rule_groups,
)
from inspection_server.common.exceptions import ListError, ResourceNotFoundError
from inspection_server.common.logger import task_name_ctx
from inspection_server.config.settings import config
from inspection_server.models.inspection_models import TaskCreateRequest
from inspection_server.models.template_models import (
    KubernetesConfig,
    NotifyCreateRequest,
    TemplateCreateRequest,
)
from inspection_server.services.inspection_service import not_ready_result


def _cluster(cluster_id, name="", enable=True):
    return KubernetesConfig(cluster_id=cluster_id, cluster_name=name, enable=enable)


def test_not_ready_result():
    result = not_ready_result(_cluster("c9", "edge"), "集群 c9 未就绪")
    [inspection] = result.cluster_core.inspections
    assert inspection.title == "cluster c9 is not ready"
    assert inspection.level == 3
    assert inspection.names == ["集群 c9 未就绪"]
    assert result.cluster_name == "edge"


@pytest.mark.asyncio
async def test_unreachable_cluster_does_not_stop_others(agent_cluster, tmp_path):
    service = build_service([agent_cluster], str(tmp_path))
    template = await service.create_template(
        TemplateCreateRequest(
            name="daily",
            kubernetes=[_cluster("c1", "prod"), _cluster("missing"), _cluster("off", enable=False)],
        )
    )

    report = await service.inspect("daily", template)

    assert [r.cluster_id for r in report.kubernetes] == ["c1", "missing"]
    prod, missing = report.kubernetes
    assert [n.name for n in prod.cluster_node.nodes] == ["node-1"]
    assert [i.title for i in prod.cluster_node.inspections] == ["Limits CPU 超过 80 %"]
    assert missing.cluster_core.inspections[0].title == "cluster missing is not ready"
    assert report.global_info.rating == "Low"
    assert service.rating.rate_cluster(prod) == "Medium"


@pytest.mark.asyncio
async def test_list_failure_marks_cluster_not_ready(agent_cluster, tmp_path):
    agent_cluster.fail_kinds["pvc"] = ListError("pvc", "forbidden")
    service = build_service([agent_cluster], str(tmp_path))
    template = await service.create_template(
        TemplateCreateRequest(name="daily", kubernetes=[_cluster("c1", "prod")])
    )

    [result] = (await service.inspect("daily", template)).kubernetes

    [inspection] = result.cluster_core.inspections
    assert inspection.level == 3
    assert "forbidden" in inspection.names[0]
    assert result.cluster_node.nodes == []


@pytest.mark.asyncio
async def test_alerts_merged_by_cluster_name(agent_cluster, tmp_path):
    agent_cluster.add("deployment", make_deployment("web", namespace="shop"))
    payload = rule_groups(
        (
            "inspection-workload",
            [
                alert(
                    {
                        "prometheus_from": "prod",
                        "alertname": "PodRestart",
                        "created_by_kind": "ReplicaSet",
                        "created_by_name": "web-6f9d8c7b4",
                        "namespace": "shop",
                        "level": "3",
                    }
                )
            ],
        )
    )
    service = build_service([agent_cluster], str(tmp_path), alert_payload=payload)
    template = await service.create_template(
        TemplateCreateRequest(name="daily", kubernetes=[_cluster("c1", "prod")])
    )

    report = await service.inspect("daily", template)

    [web] = report.kubernetes[0].cluster_resource.workloads
    assert [i.name for i in web.items][-1] == "PodRestart"
    titles = {i.title: i for i in report.kubernetes[0].cluster_resource.inspections}
    assert titles["PodRestart"].names == ["Deployment: shop/web"]
    assert report.global_info.rating == "Low"


@pytest.mark.asyncio
async def test_cluster_alerts_merged_by_cluster_id(agent_cluster, tmp_path):
    payload = rule_groups(
        (
            "inspection-cluster",
            [alert({"prometheus_from": "c1", "alertname": "EtcdDown", "level": "3"})],
        )
    )
    service = build_service([agent_cluster], str(tmp_path), alert_payload=payload)
    template = await service.create_template(
        TemplateCreateRequest(name="daily", kubernetes=[_cluster("c1", "prod")])
    )

    report = await service.inspect("daily", template)

    core = report.kubernetes[0].cluster_core
    assert [i.name for i in core.core.items] == ["EtcdDown"]
    assert [i.title for i in core.inspections] == ["EtcdDown"]
    assert report.global_info.rating == "Low"


@pytest.mark.asyncio
async def test_malformed_alert_feed_runs_without_alerts(agent_cluster, tmp_path):
    payload = {"data": {"groups": [{"name": "inspection-node", "rules": [None]}]}}
    service = build_service([agent_cluster], str(tmp_path), alert_payload=payload)
    template = await service.create_template(
        TemplateCreateRequest(name="daily", kubernetes=[_cluster("c1", "prod")])
    )

    report = await service.inspect("daily", template)

    assert report.kubernetes[0].cluster_core.core.items == []


@pytest.mark.asyncio
async def test_unexpected_producer_error_marks_cluster_not_ready(agent_cluster, tmp_path):
    agent_cluster.add(
        "deployment", make_deployment("web", namespace="shop", replicas="three")
    )
    other = FakeClusterClient("c2")
    service = build_service([agent_cluster, other], str(tmp_path))
    template = await service.create_template(
        TemplateCreateRequest(
            name="daily", kubernetes=[_cluster("c1", "prod"), _cluster("c2", "edge")]
        )
    )

    broken, healthy = (await service.inspect("daily", template)).kubernetes

    [inspection] = broken.cluster_core.inspections
    assert inspection.level == 3
    assert inspection.title == "cluster c1 is not ready"
    assert "ValueError" in inspection.names[0]
    assert healthy.cluster_core.inspections == []


    assert report.global_info.rating == "Low"


@pytest.mark.asyncio
async def test_sync_task_completes_and_notifies(agent_cluster, tmp_path, monkeypatch):
    monkeypatch.setattr(config.report, "enable", True)
    monkeypatch.setattr(config.report, "output_dir", str(tmp_path / "print"))
    monkeypatch.setattr(config, "server_url", "http://inspection.test/")
    notification = RecordingNotificationService()
    service = build_service([agent_cluster], str(tmp_path), notification=notification)

    template = await service.create_template(
        TemplateCreateRequest(name="daily", kubernetes=[_cluster("c1", "prod")])
    )
    notify = await service.create_notify(
        NotifyCreateRequest(name="ops", webhook_url="https://hook", secret="s")
    )
    task = await service.create_task(
        TaskCreateRequest(name="daily", template_id=template.id, notify_id=notify.id, async_run=False)
    )

    assert task.state == "巡检完成"
    assert task.rating == "Medium"
    assert task.end_time is not None
    report = await service.get_report(task.report_id)
    assert (await service.get_task(task.id)).report_id == report.id

    files = os.listdir(tmp_path / "print")
    assert files == [f"Report({report.global_info.report_time}).md"]

    [(notify_id, title, text, attachment)] = notification.sent
    assert notify_id == notify.id
    assert title == "巡检报告 daily"
    assert text.splitlines()[:3] == [
        "该巡检报告的健康等级为: Medium",
        "集群 prod 巡检警告：",
        "Limits CPU 超过 80 %",
    ]
    assert text.endswith(f"http://inspection.test/api/v1/inspection/reports/{report.id}/markdown")
    assert attachment.endswith(".md")
    assert task_name_ctx.get() is None


@pytest.mark.asyncio
async def test_notification_failure_marks_task_failed(agent_cluster, tmp_path):
    service = build_service(
        [agent_cluster], str(tmp_path), notification=RecordingNotificationService(fail=True)
    )
    template = await service.create_template(
        TemplateCreateRequest(name="daily", kubernetes=[_cluster("c1", "prod")])
    )
    notify = await service.create_notify(NotifyCreateRequest(name="ops", webhook_url="h", secret="s"))

    task = await service.create_task(
        TaskCreateRequest(name="daily", template_id=template.id, notify_id=notify.id, async_run=False)
    )

    assert task.state == "巡检失败"
    assert "19021" in task.error
    assert task.report_id is not None
    assert (await service.get_report(task.report_id)).id == task.report_id


@pytest.mark.asyncio
async def test_async_task_runs_in_background(agent_cluster, tmp_path):
    service = build_service([agent_cluster], str(tmp_path))
    template = await service.create_template(
        TemplateCreateRequest(name="daily", kubernetes=[_cluster("c1", "prod")])
    )

    task = await service.create_task(TaskCreateRequest(name="daily", template_id=template.id))
    assert task.state == "巡检中"

    await service._background[task.id]
    stored = await service.get_task(task.id)
    assert stored.state == "巡检完成"
    assert "# 巡检报告 daily" in await service.get_report_markdown(stored.report_id)


@pytest.mark.asyncio
async def test_unknown_template_or_notify_rejected(tmp_path):
    service = build_service([], str(tmp_path))
    with pytest.raises(ResourceNotFoundError):
        await service.create_task(TaskCreateRequest(name="x", template_id="nope"))

    template = await service.create_template(TemplateCreateRequest(name="daily"))
    with pytest.raises(ResourceNotFoundError):
        await service.create_task(
            TaskCreateRequest(name="x", template_id=template.id, notify_id="nope")
        )
    assert await service.list_tasks() == []
