#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 模块初始化文件
"""

from .alerting import AlertingService
from .factory import ServiceFactory
from .inspection_service import InspectionService
from .kubernetes import KubernetesClusterClient, KubernetesService
from .log_fetcher import ConcurrentLogFetcher
from .notification import NotificationService, select_notification_client
from .report_store import ReportStore

__all__ = [
    "AlertingService",
    "ConcurrentLogFetcher",
    "InspectionService",
    "KubernetesClusterClient",
    "KubernetesService",
    "NotificationService",
    "ReportStore",
    "ServiceFactory",
    "select_notification_client",
]
