#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 告警规则数据源服务（Grafana 统一告警规则接口）
"""

import asyncio
from typing import Any, Dict, Optional

import requests

from inspection_server.common.exceptions import DecodeError, FetchError
from inspection_server.config.settings import AlertingConfig, config
from inspection_server.core.inspection.alerts import AlertSignalResolver
from inspection_server.models.alert_models import ClusterAlertItems
from inspection_server.services.base import BaseService


class AlertingService(BaseService):
    """
    告警数据服务 - 拉取告警规则组并解析为各集群的告警检查项
    """

    def __init__(self, settings: Optional[AlertingConfig] = None) -> None:
        super().__init__("alerting")
        self.settings = settings or config.alerting
        self.resolver = AlertSignalResolver()

    async def _do_initialize(self) -> None:
        if not self.settings.server_url:
            self.logger.warning("未配置告警数据源地址，巡检将不包含外部告警")

    async def _do_health_check(self) -> bool:
        if not self.settings.server_url:
            return False
        try:
            await self.fetch_rules()
            return True
        except (FetchError, DecodeError):
            return False

    def _get(self) -> requests.Response:
        headers = {}
        if self.settings.bearer_token:
            headers["Authorization"] = f"Bearer {self.settings.bearer_token}"
        return requests.get(
            self.settings.url,
            headers=headers,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    async def fetch_rules(self) -> Dict[str, Any]:
        """获取原始告警规则数据"""
        if not self.settings.server_url:
            raise FetchError("未配置告警数据源地址")

        self.logger.debug(f"获取告警规则: {self.settings.url}")
        try:
            response = await self.run_blocking(
                self._get, timeout=self.settings.timeout + 5
            )
            response.raise_for_status()
        except asyncio.TimeoutError:
            raise FetchError(f"请求超时 ({self.settings.timeout}s)")
        except requests.exceptions.RequestException as e:
            raise FetchError(str(e), details={"url": self.settings.url})

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"告警数据不是合法 JSON: {e}")

    async def get_alert_items(self) -> Dict[str, ClusterAlertItems]:
        """获取告警数据并按集群解析为检查项"""
        payload = await self.fetch_rules()
        resolved = self.resolver.resolve(payload)
        self.logger.info(f"告警数据解析完成，涉及集群 {len(resolved)} 个")
        return resolved
