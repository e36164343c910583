#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Core层外部协作方接口
"""

from .k8s_client import ClusterClient, NullClusterClient
from .notification_client import NotificationClient, NullNotificationClient

__all__ = [
    "ClusterClient",
    "NotificationClient",
    "NullClusterClient",
    "NullNotificationClient",
]
