#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Pod 日志并发拉取与关键字过滤
"""

import asyncio
import re
from typing import Any, Dict, List, Optional

from inspection_server.common.logger import get_logger
from inspection_server.config.settings import config
from inspection_server.core.interfaces.k8s_client import ClusterClient
from inspection_server.models.inspection_models import PodLogRecord

logger = get_logger("inspection.services.log_fetcher")

DEFAULT_PATTERN = ".*"


class ConcurrentLogFetcher:
    """
    按 Pod 并发拉取最近 N 行日志，过滤出匹配正则的行

    - 并发数受信号量限制，所有 Pod 处理完才返回
    - 单个 Pod 失败（无容器、正则非法、拉取失败或超时）只记录日志，不返回记录
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        tail_lines: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.workers = max(1, workers or config.inspection.log_fetch_workers)
        self.tail_lines = tail_lines or config.inspection.log_tail_lines
        self.timeout = timeout or config.inspection.log_fetch_timeout

    async def _fetch_one(
        self,
        cluster_client: ClusterClient,
        pod: Dict[str, Any],
        pattern: str,
        timeout: float,
    ) -> Optional[PodLogRecord]:
        metadata = pod.get("metadata") or {}
        namespace, name = metadata.get("namespace", ""), metadata.get("name", "")
        containers = (pod.get("spec") or {}).get("containers") or []
        if not containers:
            logger.debug(f"Pod {namespace}/{name} 没有容器，跳过日志检查")
            return None

        try:
            regex = re.compile(pattern)
        except re.error as e:
            logger.error(f"Pod {namespace}/{name} 日志过滤正则 {pattern!r} 非法: {e}")
            return None

        container = containers[0].get("name", "")
        try:
            text = await asyncio.wait_for(
                cluster_client.read_pod_log(namespace, name, container, self.tail_lines),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"获取 Pod {namespace}/{name} 日志超时 ({timeout}s)")
            return None
        except Exception as e:
            logger.error(f"获取 Pod {namespace}/{name} 日志失败: {str(e)}")
            return None

        lines = [line for line in (text or "").splitlines() if regex.search(line)]
        return PodLogRecord(namespace=namespace, name=name, container=container, lines=lines)

    async def fetch(
        self,
        cluster_client: ClusterClient,
        pods: List[Dict[str, Any]],
        pattern: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[PodLogRecord]:
        """拉取一组 Pod 的日志，返回顺序不固定"""
        pattern = pattern or DEFAULT_PATTERN
        timeout = timeout or self.timeout
        semaphore = asyncio.Semaphore(self.workers)
        lock = asyncio.Lock()
        records: List[PodLogRecord] = []

        async def worker(pod: Dict[str, Any]) -> None:
            async with semaphore:
                record = await self._fetch_one(cluster_client, pod, pattern, timeout)
            if record is not None:
                async with lock:
                    records.append(record)

        await asyncio.gather(*(worker(pod) for pod in pods))
        logger.info(f"日志拉取完成: Pod {len(pods)} 个，有效记录 {len(records)} 条")
        return records
