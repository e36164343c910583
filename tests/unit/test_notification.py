#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import base64
import hashlib
import hmac
import json

import pytest
import requests

from inspection_server.common.exceptions import NotificationError
from inspection_server.config.settings import NotificationConfig
from inspection_server.services.notification import (
    FeishuChatClient,
    FeishuUserClient,
    FeishuWebhookClient,
    NotificationService,
    select_notification_client,
    webhook_sign,
)
from inspection_server.models.template_models import NotifyTarget


class _Response:
    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code
        self.text = json.dumps(body)

    def json(self):
        return self.body


@pytest.fixture
def settings():
    return NotificationConfig(enabled=True, feishu_base_url="https://feishu.test", timeout=5)


@pytest.fixture
def posts(monkeypatch):
    """记录 requests.post 调用，按 URL 后缀返回预置响应"""
    calls = []
    responses = {
        "tenant_access_token/internal": {"code": 0, "tenant_access_token": "t-123"},
        "batch_get_id": {"code": 0, "data": {"user_list": [{"user_id": "ou_1"}, {"mobile": "139"}]}},
        "im/v1/files": {"code": 0, "data": {"file_key": "file_v2_1"}},
    }

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        for suffix, body in responses.items():
            if suffix in url:
                return _Response(body)
        return _Response({"code": 0, "msg": "success"})

    monkeypatch.setattr(requests, "post", fake_post)
    return calls


def _target(**kwargs):
    return NotifyTarget(id="n1", name="ops", **kwargs)


def test_webhook_sign_matches_hmac_of_empty_message():
    expected = base64.b64encode(
        hmac.new(b"1700000000\nsecret", b"", digestmod=hashlib.sha256).digest()
    ).decode()
    assert webhook_sign(1700000000, "secret") == expected


def test_client_selection(settings):
    assert isinstance(
        select_notification_client(_target(webhook_url="https://hook", secret="s"), settings),
        FeishuWebhookClient,
    )
    user = select_notification_client(
        _target(app_id="a", app_secret="b", mobiles="139, 138", emails=""), settings
    )
    assert isinstance(user, FeishuUserClient)
    assert user.mobiles == ["139", "138"]
    assert isinstance(
        select_notification_client(_target(app_id="a", app_secret="b", chat_id="oc_1"), settings),
        FeishuChatClient,
    )
    assert select_notification_client(_target(), settings).channel == "null"


@pytest.mark.asyncio
async def test_webhook_payload(settings, posts):
    client = FeishuWebhookClient(settings, "https://hook.test/abc", "secret")
    await client.send("巡检报告 daily", "该巡检报告的健康等级为: Low")

    [(url, kwargs)] = posts
    payload = kwargs["json"]
    assert url == "https://hook.test/abc"
    assert payload["msg_type"] == "text"
    assert payload["content"]["text"] == "巡检报告 daily\n该巡检报告的健康等级为: Low"
    assert payload["sign"] == webhook_sign(int(payload["timestamp"]), "secret")
    assert kwargs["timeout"] == 5


@pytest.mark.asyncio
async def test_non_zero_code_raises(settings, monkeypatch):
    monkeypatch.setattr(
        requests, "post", lambda url, **kw: _Response({"code": 19021, "msg": "sign match fail"})
    )
    with pytest.raises(NotificationError) as exc:
        await FeishuWebhookClient(settings, "https://hook.test/abc", "secret").send("t", "x")
    assert "19021" in exc.value.message


@pytest.mark.asyncio
async def test_http_error_raises(settings, monkeypatch):
    monkeypatch.setattr(requests, "post", lambda url, **kw: _Response({}, status_code=500))
    with pytest.raises(NotificationError):
        await FeishuWebhookClient(settings, "https://hook.test/abc", "secret").send("t", "x")


@pytest.mark.asyncio
async def test_user_client_messages_each_found_user(settings, posts):
    client = FeishuUserClient(settings, "a", "b", ["139", "138"], [])
    await client.send("巡检报告", "正文")

    message_calls = [kw for url, kw in posts if url.endswith("/open-apis/im/v1/messages")]
    assert len(message_calls) == 1
    assert message_calls[0]["json"]["receive_id"] == "ou_1"
    assert message_calls[0]["params"] == {"receive_id_type": "open_id"}
    assert message_calls[0]["headers"]["Authorization"] == "Bearer t-123"


@pytest.mark.asyncio
async def test_chat_client_uploads_attachment(settings, posts, tmp_path):
    report = tmp_path / "Report(2024-01-01 00:00:00).md"
    report.write_text("# 巡检报告", encoding="utf-8")

    await FeishuChatClient(settings, "a", "b", "oc_1").send("巡检报告", "正文", str(report))

    messages = [kw["json"] for url, kw in posts if url.endswith("/open-apis/im/v1/messages")]
    assert [m["msg_type"] for m in messages] == ["text", "file"]
    assert json.loads(messages[1]["content"]) == {"file_key": "file_v2_1"}


@pytest.mark.asyncio
async def test_chat_client_without_chat_id_raises(settings, posts):
    with pytest.raises(NotificationError):
        await FeishuChatClient(settings, "a", "b", "").send("t", "x")
    assert posts == []


@pytest.mark.asyncio
async def test_disabled_service_skips(posts):
    service = NotificationService(
        NotificationConfig(enabled=False, feishu_base_url="https://feishu.test", timeout=5)
    )
    channel = await service.notify(_target(webhook_url="https://hook", secret="s"), "t", "x")
    assert channel == "null"
    assert posts == []
