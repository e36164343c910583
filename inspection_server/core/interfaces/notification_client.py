#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Core层通知客户端接口定义与空实现
"""

from typing import Optional, Protocol


class NotificationClient(Protocol):
    channel: str

    async def send(
        self, title: str, text: str, attachment_path: Optional[str] = None
    ) -> None:
        ...


class NullNotificationClient:
    channel = "null"

    async def send(
        self, title: str, text: str, attachment_path: Optional[str] = None
    ) -> None:
        return None
