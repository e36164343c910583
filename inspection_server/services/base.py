#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检服务基类，统一初始化、健康检查缓存与阻塞调用
"""

from abc import ABC, abstractmethod
import asyncio
from datetime import datetime
import time
from typing import Any, Callable, Dict, Optional

from inspection_server.common.constants import ServiceConstants
from inspection_server.common.exceptions import ServiceUnavailableError
from inspection_server.common.logger import get_logger


class BaseService(ABC):
    """
    巡检各协作方（集群访问、告警数据源、通知、存储）的公共基类

    子类实现 `_do_initialize` 与 `_do_health_check`；初始化失败统一转换为
    ServiceUnavailableError，健康检查结果按 HEALTH_CHECK_CACHE_SECONDS 缓存。
    """

    def __init__(self, service_name: str) -> None:
        self.service_name = service_name
        self.logger = get_logger(f"inspection.services.{service_name}")
        self._initialized = False
        self._init_error: Optional[str] = None
        self._healthy = False
        self._checked_at: Optional[float] = None
        self._checked_time: Optional[datetime] = None

    async def initialize(self) -> None:
        """幂等初始化"""
        if self._initialized:
            return
        self.logger.info(f"初始化服务: {self.service_name}")
        try:
            await self._do_initialize()
        except Exception as e:
            self._init_error = str(e)
            self.logger.error(f"服务 {self.service_name} 初始化失败: {self._init_error}")
            raise ServiceUnavailableError(
                service_name=self.service_name,
                details={"error": self._init_error, "phase": "initialization"},
            )
        self._initialized = True
        self._init_error = None
        self.logger.info(f"服务 {self.service_name} 已就绪")

    @abstractmethod
    async def _do_initialize(self) -> None:
        pass

    def _health_cached(self) -> bool:
        return (
            self._checked_at is not None
            and time.monotonic() - self._checked_at
            < ServiceConstants.HEALTH_CHECK_CACHE_SECONDS
        )

    async def health_check(self) -> bool:
        if self._health_cached():
            return self._healthy
        try:
            self._healthy = bool(await self._do_health_check())
        except Exception as e:
            self.logger.warning(f"服务 {self.service_name} 健康检查异常: {str(e)}")
            self._healthy = False
        self._checked_at = time.monotonic()
        self._checked_time = datetime.now()
        return self._healthy

    @abstractmethod
    async def _do_health_check(self) -> bool:
        """子类实现具体的健康检查逻辑"""

    def is_initialized(self) -> bool:
        return self._initialized

    async def run_blocking(
        self, func: Callable[..., Any], *args: Any, timeout: float, **kwargs: Any
    ) -> Any:
        """在线程中执行同步调用（requests / kubernetes 客户端），超时抛出 asyncio.TimeoutError"""
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs), timeout=timeout
        )

    def get_service_info(self) -> Dict[str, Any]:
        return {
            "name": self.service_name,
            "initialized": self._initialized,
            "healthy": self._healthy,
            "init_error": self._init_error,
            "last_health_check": (
                self._checked_time.isoformat() if self._checked_time else None
            ),
        }
