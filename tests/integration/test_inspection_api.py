#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from httpx import ASGITransport, AsyncClient
import pytest

from fakes import build_service
from inspection_server.main import app
from inspection_server.services.factory import ServiceFactory


@pytest.fixture
def inspection_service(agent_cluster, tmp_path):
    service = build_service([agent_cluster], str(tmp_path))
    ServiceFactory.register("inspection", service)
    yield service
    ServiceFactory.reset()


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_sync_task_produces_report(inspection_service):
    async with _client() as ac:
        resp = await ac.post(
            "/api/v1/inspection/templates",
            json={"name": "daily", "kubernetes": [{"cluster_id": "c1", "cluster_name": "prod"}]},
        )
        assert resp.status_code == 200
        template_id = resp.json()["data"]["id"]

        resp = await ac.post(
            "/api/v1/inspection/tasks",
            json={"name": "daily", "template_id": template_id, "async": False},
        )
        assert resp.status_code == 200
        task = resp.json()["data"]
        assert task["state"] == "巡检完成"
        assert task["rating"] == "Medium"

        resp = await ac.get(f"/api/v1/inspection/reports/{task['report_id']}")
        body = resp.json()
        assert body["code"] == 0
        report = body["data"]
        assert report["global"]["rating"] == "Medium"
        node = report["kubernetes"][0]["cluster_node"]["nodes"][0]
        assert node["items_count"]["total_count"] == len(node["items"])
        assert node["items"][0]["pass"] is False

        resp = await ac.get(f"/api/v1/inspection/reports/{task['report_id']}/markdown")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/markdown")
        assert resp.text.startswith("# 巡检报告 daily")

        resp = await ac.get("/api/v1/inspection/tasks")
        assert resp.json()["data"]["total"] == 1


@pytest.mark.asyncio
async def test_unknown_task_returns_404(inspection_service):
    async with _client() as ac:
        resp = await ac.get("/api/v1/inspection/tasks/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["code"] == 404


@pytest.mark.asyncio
async def test_task_with_unknown_template_returns_404(inspection_service):
    async with _client() as ac:
        resp = await ac.post(
            "/api/v1/inspection/tasks", json={"name": "daily", "template_id": "nope"}
        )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_invalid_template_body_returns_400(inspection_service):
    async with _client() as ac:
        resp = await ac.post("/api/v1/inspection/templates", json={"name": ""})
    assert resp.status_code == 400
    assert resp.json()["code"] == 400


@pytest.mark.asyncio
async def test_health_endpoints(inspection_service):
    async with _client() as ac:
        resp = await ac.get("/health")
        assert resp.status_code == 200
        resp = await ac.get("/health/components")
        assert resp.status_code == 200
        assert "inspection" in resp.json()["data"]["services"]
