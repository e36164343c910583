#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检结果通知（飞书机器人 Webhook / 用户私信 / 群聊附件）
"""

import asyncio
import base64
import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, List, Optional

import requests

from inspection_server.common.exceptions import NotificationError
from inspection_server.common.logger import get_logger
from inspection_server.config.settings import NotificationConfig, config
from inspection_server.core.interfaces.notification_client import (
    NotificationClient,
    NullNotificationClient,
)
from inspection_server.models.template_models import NotifyTarget, split_csv
from inspection_server.services.base import BaseService

logger = get_logger("inspection.services.notification")


def webhook_sign(timestamp: int, secret: str) -> str:
    """飞书自定义机器人签名：以 "timestamp\\nsecret" 为密钥对空串做 HmacSHA256"""
    key = f"{timestamp}\n{secret}".encode("utf-8")
    digest = hmac.new(key, b"", digestmod=hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def _check_response(channel: str, response: requests.Response) -> Dict[str, Any]:
    if response.status_code >= 300:
        raise NotificationError(channel, f"HTTP {response.status_code}: {response.text}")
    try:
        body = response.json()
    except ValueError:
        raise NotificationError(channel, f"返回体不是合法 JSON: {response.text}")
    code = body.get("code", body.get("StatusCode", 0))
    if code not in (0, None):
        raise NotificationError(channel, f"code={code}, msg={body.get('msg', '')}")
    return body


class _FeishuClient:
    channel = "feishu"

    def __init__(self, settings: NotificationConfig) -> None:
        self.settings = settings
        self.base_url = settings.feishu_base_url.rstrip("/")

    async def _post(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await asyncio.to_thread(
                requests.post, url, timeout=self.settings.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise NotificationError(self.channel, str(e))
        return _check_response(self.channel, response)


class _FeishuAppClient(_FeishuClient):
    """使用应用凭据调用开放平台接口"""

    def __init__(self, settings: NotificationConfig, app_id: str, app_secret: str) -> None:
        super().__init__(settings)
        self.app_id = app_id
        self.app_secret = app_secret

    async def tenant_token(self) -> str:
        body = await self._post(
            f"{self.base_url}/open-apis/auth/v3/tenant_access_token/internal",
            json={"app_id": self.app_id, "app_secret": self.app_secret},
        )
        token = body.get("tenant_access_token")
        if not token:
            raise NotificationError(self.channel, "未获取到 tenant_access_token")
        return token

    async def send_message(
        self,
        token: str,
        receive_id_type: str,
        receive_id: str,
        msg_type: str,
        content: Dict[str, Any],
    ) -> None:
        await self._post(
            f"{self.base_url}/open-apis/im/v1/messages",
            params={"receive_id_type": receive_id_type},
            headers={"Authorization": f"Bearer {token}"},
            json={
                "receive_id": receive_id,
                "msg_type": msg_type,
                "content": json.dumps(content, ensure_ascii=False),
            },
        )


class FeishuWebhookClient(_FeishuClient):
    channel = "feishu_webhook"

    def __init__(self, settings: NotificationConfig, webhook_url: str, secret: str) -> None:
        super().__init__(settings)
        self.webhook_url = webhook_url
        self.secret = secret

    async def send(self, title: str, text: str, attachment_path: Optional[str] = None) -> None:
        timestamp = int(time.time())
        await self._post(
            self.webhook_url,
            json={
                "timestamp": str(timestamp),
                "sign": webhook_sign(timestamp, self.secret),
                "msg_type": "text",
                "content": {"text": f"{title}\n{text}"},
            },
        )
        logger.info("飞书机器人通知发送成功")


class FeishuUserClient(_FeishuAppClient):
    """按手机号/邮箱查找用户后逐个私信"""

    channel = "feishu_user"

    def __init__(
        self,
        settings: NotificationConfig,
        app_id: str,
        app_secret: str,
        mobiles: List[str],
        emails: List[str],
    ) -> None:
        super().__init__(settings, app_id, app_secret)
        self.mobiles = mobiles
        self.emails = emails

    async def lookup_user_ids(self, token: str) -> List[str]:
        body = await self._post(
            f"{self.base_url}/open-apis/contact/v3/users/batch_get_id",
            params={"user_id_type": "open_id"},
            headers={"Authorization": f"Bearer {token}"},
            json={"mobiles": self.mobiles, "emails": self.emails},
        )
        users = (body.get("data") or {}).get("user_list") or []
        ids = [u["user_id"] for u in users if u.get("user_id")]
        missing = len(self.mobiles) + len(self.emails) - len(ids)
        if missing > 0:
            logger.warning(f"有 {missing} 个通知对象未找到对应飞书用户")
        return ids

    async def send(self, title: str, text: str, attachment_path: Optional[str] = None) -> None:
        token = await self.tenant_token()
        user_ids = await self.lookup_user_ids(token)
        if not user_ids:
            raise NotificationError(self.channel, "未找到任何通知用户")
        for user_id in user_ids:
            await self.send_message(
                token, "open_id", user_id, "text", {"text": f"{title}\n{text}"}
            )
        logger.info(f"飞书私信通知发送成功，共 {len(user_ids)} 人")


class FeishuChatClient(_FeishuAppClient):
    """向群聊发送文本与报告附件"""

    channel = "feishu_chat"

    def __init__(
        self, settings: NotificationConfig, app_id: str, app_secret: str, chat_id: str
    ) -> None:
        super().__init__(settings, app_id, app_secret)
        self.chat_id = chat_id

    async def upload_file(self, token: str, path: str) -> str:
        with open(path, "rb") as f:
            content = f.read()
        body = await self._post(
            f"{self.base_url}/open-apis/im/v1/files",
            headers={"Authorization": f"Bearer {token}"},
            data={"file_type": "stream", "file_name": os.path.basename(path)},
            files={"file": (os.path.basename(path), content)},
        )
        file_key = (body.get("data") or {}).get("file_key")
        if not file_key:
            raise NotificationError(self.channel, "上传附件未返回 file_key")
        return file_key

    async def send(self, title: str, text: str, attachment_path: Optional[str] = None) -> None:
        if not self.chat_id:
            raise NotificationError(self.channel, "未配置群聊 chat_id")
        token = await self.tenant_token()
        await self.send_message(
            token, "chat_id", self.chat_id, "text", {"text": f"{title}\n{text}"}
        )
        if attachment_path:
            file_key = await self.upload_file(token, attachment_path)
            await self.send_message(
                token, "chat_id", self.chat_id, "file", {"file_key": file_key}
            )
        logger.info(f"飞书群聊通知发送成功: {self.chat_id}")


def select_notification_client(
    target: NotifyTarget, settings: Optional[NotificationConfig] = None
) -> NotificationClient:
    """按通知目标已填写的字段选择发送渠道"""
    settings = settings or config.notification
    if target.webhook_url and target.secret:
        return FeishuWebhookClient(settings, target.webhook_url, target.secret)
    if target.app_id and target.app_secret:
        mobiles, emails = split_csv(target.mobiles), split_csv(target.emails)
        if mobiles or emails:
            return FeishuUserClient(
                settings, target.app_id, target.app_secret, mobiles, emails
            )
        return FeishuChatClient(settings, target.app_id, target.app_secret, target.chat_id)
    logger.warning(f"通知目标 {target.name} 未配置有效渠道")
    return NullNotificationClient()


class NotificationService(BaseService):
    def __init__(self, settings: Optional[NotificationConfig] = None) -> None:
        super().__init__("notification")
        self.settings = settings or config.notification

    async def _do_initialize(self) -> None:
        pass

    async def _do_health_check(self) -> bool:
        return True

    async def notify(
        self,
        target: NotifyTarget,
        title: str,
        text: str,
        attachment_path: Optional[str] = None,
    ) -> str:
        """发送通知并返回使用的渠道名称"""
        if not self.settings.enabled:
            self.logger.info("通知已关闭，跳过发送")
            return NullNotificationClient.channel
        sink = select_notification_client(target, self.settings)
        self.logger.info(f"通过 {sink.channel} 发送巡检通知: {title}")
        await sink.send(title, text, attachment_path)
        return sink.channel
