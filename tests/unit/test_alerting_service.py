#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import pytest
import requests

from fakes import alert, rule_groups
from inspection_server.common.exceptions import DecodeError, FetchError
from inspection_server.config.settings import AlertingConfig
from inspection_server.services.alerting import AlertingService


class _Response:
    def __init__(self, body=None, status_code=200, invalid=False):
        self.body = body
        self.status_code = status_code
        self.invalid = invalid

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.invalid:
            raise ValueError("Expecting value")
        return self.body


def _service():
    return AlertingService(
        AlertingConfig(
            server_url="https://rancher.test/",
            bearer_token="token-abc",
            rules_path="/api/v1/rules",
            timeout=5,
            verify_ssl=False,
        )
    )


@pytest.mark.asyncio
async def test_fetch_and_resolve(monkeypatch):
    captured = {}
    payload = rule_groups(
        ("inspection-pv", [alert({"prometheus_from": "prod", "alertname": "PVFull", "persistentvolume": "pv1"})])
    )

    def fake_get(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return _Response(payload)

    monkeypatch.setattr(requests, "get", fake_get)
    resolved = await _service().get_alert_items()

    assert captured["url"] == "https://rancher.test/api/v1/rules"
    assert captured["headers"] == {"Authorization": "Bearer token-abc"}
    assert captured["verify"] is False
    assert resolved["prod"].get("pv", "pv1")[0].name == "PVFull"


@pytest.mark.asyncio
async def test_http_error_raises_fetch_error(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, **kw: _Response(status_code=502))
    with pytest.raises(FetchError):
        await _service().fetch_rules()


@pytest.mark.asyncio
async def test_connection_error_raises_fetch_error(monkeypatch):
    def refuse(url, **kwargs):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "get", refuse)
    with pytest.raises(FetchError):
        await _service().fetch_rules()


@pytest.mark.asyncio
async def test_invalid_json_raises_decode_error(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, **kw: _Response(invalid=True))
    with pytest.raises(DecodeError):
        await _service().fetch_rules()


@pytest.mark.asyncio
async def test_missing_server_url():
    service = AlertingService(AlertingConfig(server_url=""))
    with pytest.raises(FetchError):
        await service.fetch_rules()
    assert await service.health_check() is False
