#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检业务异常体系，集群相关异常在 details 中携带 cluster_id
"""

from typing import Any, Dict, Optional


class InspectionError(Exception):
    """
    巡检平台基础异常类

    巡检异常基类，携带错误码与结构化 details，由 API 层映射为 HTTP 状态
    """

    def __init__(
        self,
        message: str,
        error_code: str = "INSPECTION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


def _with_cluster(
    details: Optional[Dict[str, Any]], cluster_id: Optional[str]
) -> Dict[str, Any]:
    merged = dict(details or {})
    if cluster_id:
        merged["cluster_id"] = cluster_id
    return merged


class FetchError(InspectionError):
    """告警数据源不可达或返回非 2xx"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=f"告警数据获取失败: {message}",
            error_code="FETCH_ERROR",
            details=details,
        )


class DecodeError(InspectionError):
    """告警数据或 Agent 执行输出无法解析"""

    def __init__(
        self,
        message: str,
        cluster_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=f"数据解析失败: {message}",
            error_code="DECODE_ERROR",
            details=_with_cluster(details, cluster_id),
        )


class EmptyRuleSetError(InspectionError):
    """告警数据源返回空规则组"""

    def __init__(self, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message="告警规则组为空",
            error_code="EMPTY_RULE_SET",
            details=details,
        )


class MissingLabelError(InspectionError):
    """单条告警缺少必需标签，仅用于跳过该告警"""

    def __init__(
        self, alert_name: str, label: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.label = label
        super().__init__(
            message=f"告警 {alert_name} 缺少标签 {label}",
            error_code="MISSING_LABEL",
            details=details,
        )


class ListError(InspectionError):
    """资源列举失败，终止当前集群的巡检"""

    def __init__(
        self,
        kind: str,
        message: str,
        cluster_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.kind = kind
        super().__init__(
            message=f"获取 {kind} 列表失败: {message}",
            error_code="LIST_ERROR",
            details=_with_cluster(details, cluster_id),
        )


class ExecError(InspectionError):
    """远程命令执行失败"""

    def __init__(
        self,
        pod: str,
        message: str,
        cluster_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.pod = pod
        super().__init__(
            message=f"在 Pod {pod} 中执行命令失败: {message}",
            error_code="EXEC_ERROR",
            details=_with_cluster(details, cluster_id),
        )


class ClusterNotReadyError(InspectionError):
    """集群客户端不可用"""

    def __init__(
        self, cluster_id: str, message: str = "", details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"集群 {cluster_id} 未就绪{': ' + message if message else ''}",
            error_code="CLUSTER_NOT_READY",
            details=_with_cluster(details, cluster_id),
        )


class ServiceUnavailableError(InspectionError):
    """依赖服务初始化失败或未就绪"""

    def __init__(
        self, service_name: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"{service_name} 服务暂不可用",
            error_code="SERVICE_UNAVAILABLE",
            details=details,
        )


class ValidationError(InspectionError):
    """请求参数校验失败"""

    def __init__(
        self, field: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"参数 {field} 不合法: {message}",
            error_code="VALIDATION_ERROR",
            details=details,
        )


class NotificationError(InspectionError):
    """通知发送失败"""

    def __init__(
        self, channel: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"通知渠道 {channel} 发送失败: {message}",
            error_code="NOTIFICATION_ERROR",
            details=details,
        )


class ReportStoreError(InspectionError):
    """报告存储失败"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=f"报告存储失败: {message}",
            error_code="REPORT_STORE_ERROR",
            details=details,
        )


class ResourceNotFoundError(InspectionError):
    """模板、任务或报告不存在"""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=f"未找到{resource_type}: {resource_id}",
            error_code="RESOURCE_NOT_FOUND",
            details=details,
        )
