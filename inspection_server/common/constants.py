#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 常量定义模块
"""


class AppConstants:
    """应用级常量"""

    APP_NAME = "AI-CloudOps Inspection"
    APP_VERSION = "1.0.0"
    APP_DESCRIPTION = "Kubernetes 多集群巡检聚合与评级服务"
    INSPECTION_PREFIX = "/api/v1/inspection"


class ServiceConstants:
    """服务相关常量"""

    HEALTH_CHECK_CACHE_SECONDS = 30
    MAX_SHUTDOWN_WAIT = 30

    VALIDATION_ERROR_MESSAGE = "请求参数验证失败"
    INTERNAL_SERVER_ERROR_MESSAGE = "内部服务器错误"

    STATUS_HEALTHY = "healthy"
    STATUS_UNHEALTHY = "unhealthy"
    STATUS_DEGRADED = "degraded"


class InspectionConstants:
    """巡检相关常量"""

    # 检查项默认级别
    DEFAULT_ITEM_LEVEL = 2

    # 进入通知摘要的最低级别
    DIGEST_MIN_LEVEL = 2

    # 集群不可用时的巡检级别
    CLUSTER_NOT_READY_LEVEL = 3

    REPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
    REPORT_FILE_NAME = "Report({report_time}).md"

    TASK_STATE_RUNNING = "巡检中"
    TASK_STATE_SUCCESS = "巡检完成"
    TASK_STATE_FAILED = "巡检失败"

    RATING_LABELS = {
        0: "Excellent",
        1: "High",
        2: "Medium",
        3: "Low",
    }
    RATING_UNKNOWN = "Unknown"

    # 节点资源占用阈值
    NODE_RESOURCE_THRESHOLD = 80.0
    POD_LIMITS_ANNOTATION = "management.cattle.io/pod-limits"
    POD_REQUESTS_ANNOTATION = "management.cattle.io/pod-requests"

    # 每个命名空间默认存在的根证书 ConfigMap
    ROOT_CA_CONFIGMAP = "kube-root-ca.crt"


class HttpStatusCodes:
    """HTTP状态码常量"""

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
