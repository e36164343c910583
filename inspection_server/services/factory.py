#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 服务工厂，提供服务单例、初始化、健康检查聚合
"""

import asyncio
from typing import Any, Callable, Dict, Optional, Type, TypeVar, cast

from inspection_server.common.constants import ServiceConstants
from inspection_server.common.logger import get_logger
from inspection_server.services.base import BaseService

logger = get_logger("inspection.services.factory")

TService = TypeVar("TService", bound=BaseService)


class ServiceFactory:
    """服务工厂，按名称管理服务单例

    - 首次获取时创建实例并等待 `initialize` 完成
    - 测试中可通过 `register` 注入预先构造的实例
    """

    _instances: Dict[str, BaseService] = {}
    _locks: Dict[str, asyncio.Lock] = {}

    @classmethod
    async def get_service(
        cls,
        name: str,
        service_cls: Type[TService],
        builder: Optional[Callable[[], TService]] = None,
    ) -> TService:
        """按名称返回已初始化的服务单例

        Args:
            name: 单例键，如 "inspection"。
            service_cls: `BaseService` 子类。
            builder: 可选的构造函数，缺省时调用 `service_cls()`。
        """
        existing = cls._instances.get(name)
        if existing is None:
            lock = cls._locks.setdefault(name, asyncio.Lock())
            async with lock:
                existing = cls._instances.get(name)
                if existing is None:
                    existing = builder() if builder else service_cls()
                    await existing.initialize()
                    cls._instances[name] = existing
                    logger.info(f"服务单例已创建: {name}")
        return cast(TService, existing)

    @classmethod
    def register(cls, name: str, instance: BaseService) -> None:
        cls._instances[name] = instance

    @classmethod
    def peek(cls, name: str) -> Optional[BaseService]:
        return cls._instances.get(name)

    @classmethod
    async def health(cls) -> Dict[str, Any]:
        """检查全部已创建服务，返回各服务信息与整体状态"""
        services: Dict[str, Any] = {}
        results = []
        for name, service in list(cls._instances.items()):
            results.append(await service.health_check())
            services[name] = service.get_service_info()

        if not results:
            overall = "empty"
        elif all(results):
            overall = ServiceConstants.STATUS_HEALTHY
        elif any(results):
            overall = ServiceConstants.STATUS_DEGRADED
        else:
            overall = ServiceConstants.STATUS_UNHEALTHY
        return {"services": services, "overall": overall}

    @classmethod
    def reset(cls) -> None:
        cls._instances.clear()
        cls._locks.clear()
        logger.debug("服务工厂已重置")
