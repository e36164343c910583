#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 配置管理模块
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv()
ENV = os.getenv("ENV", "development")

_TRUE_VALUES = {"true", "1", "yes", "on"}


def _config_candidates() -> List[Path]:
    """按优先级返回候选配置文件：环境专属文件在前，config.yaml 兜底"""
    config_dir = ROOT_DIR / "config"
    candidates = []
    if ENV != "development":
        candidates.append(config_dir / f"config.{ENV}.yaml")
    candidates.append(config_dir / "config.yaml")
    return candidates


def load_config() -> Dict[str, Any]:
    """读取第一个存在的 YAML 配置文件，均不存在时返回空字典"""
    candidates = _config_candidates()
    for path in candidates:
        if not path.exists():
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            print(f"读取配置文件 {path} 失败，忽略该文件: {e}")
            return {}
    print(f"警告: 未找到配置文件 ({', '.join(str(p) for p in candidates)})，使用环境变量与默认值")
    return {}


CONFIG = load_config()


def _lookup(config_path: str) -> Any:
    node: Any = CONFIG
    for key in config_path.split("."):
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


def get_env_or_config(
    env_key: str, config_path: str, default: Any = None, transform: Any = None
) -> Any:
    """
    解析单个配置项，优先级：环境变量 > YAML 配置 > 默认值

    Args:
        env_key: 环境变量名
        config_path: YAML 中以点分隔的键路径，如 "alerting.server_url"
        default: 两处均未设置时的取值
        transform: 可选的类型转换，bool 按字符串真值解析
    """
    value = os.getenv(env_key)
    if value is None:
        value = _lookup(config_path)
        if value is None or value == "" or value == {}:
            value = default

    if value is None or transform is None:
        return value
    if transform is bool and isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return transform(value)


DEFAULT_CORE_COMMANDS: List[Dict[str, Any]] = [
    {
        "description": "API Server Ready Check",
        "command": "kubectl get --raw='/readyz'",
        "level": 2,
    },
    {
        "description": "API Server Live Check",
        "command": "kubectl get --raw='/livez'",
        "level": 2,
    },
    {
        "description": "ETCD Ready Check",
        "command": "kubectl get --raw='/readyz/etcd'",
        "level": 2,
    },
    {
        "description": "ETCD Live Check",
        "command": "kubectl get --raw='/livez/etcd'",
        "level": 2,
    },
]


@dataclass
class AlertingConfig:
    """告警规则数据源配置（Grafana 统一告警）"""

    server_url: str = field(
        default_factory=lambda: get_env_or_config(
            "SERVER_URL", "alerting.server_url", ""
        )
    )
    bearer_token: str = field(
        default_factory=lambda: get_env_or_config(
            "BEARER_TOKEN", "alerting.bearer_token", ""
        )
    )
    rules_path: str = field(
        default_factory=lambda: get_env_or_config(
            "ALERTING_RULES_PATH",
            "alerting.rules_path",
            "/api/v1/namespaces/cattle-global-monitoring/services/"
            "http:access-grafana:80/proxy/api/prometheus/grafana/api/v1/rules",
        )
    )
    timeout: int = field(
        default_factory=lambda: get_env_or_config(
            "ALERTING_TIMEOUT", "alerting.timeout", 30, int
        )
    )
    verify_ssl: bool = field(
        default_factory=lambda: get_env_or_config(
            "ALERTING_VERIFY_SSL", "alerting.verify_ssl", False, bool
        )
    )

    @property
    def url(self) -> str:
        return f"{self.server_url.rstrip('/')}{self.rules_path}"


@dataclass
class K8sConfig:
    """Kubernetes 集群访问配置"""

    in_cluster: bool = field(
        default_factory=lambda: get_env_or_config(
            "K8S_IN_CLUSTER", "kubernetes.in_cluster", False, bool
        )
    )
    kubeconfig_dir: str = field(
        default_factory=lambda: get_env_or_config(
            "K8S_KUBECONFIG_DIR", "kubernetes.kubeconfig_dir", "/opt/db/kubeconfig/"
        )
    )
    local_cluster: str = field(
        default_factory=lambda: get_env_or_config(
            "K8S_LOCAL_CLUSTER", "kubernetes.local_cluster", "local"
        )
    )


@dataclass
class InspectionConfig:
    """巡检执行配置"""

    agent_namespace: str = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_AGENT_NAMESPACE",
            "inspection.agent_namespace",
            "cattle-inspection-system",
        )
    )
    agent_selector: str = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_AGENT_SELECTOR",
            "inspection.agent_selector",
            "name=inspection-agent",
        )
    )
    agent_container: str = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_AGENT_CONTAINER",
            "inspection.agent_container",
            "inspection-agent-container",
        )
    )
    agent_script: str = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_AGENT_SCRIPT",
            "inspection.agent_script",
            "/opt/inspection/inspection.sh",
        )
    )
    exec_timeout: int = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_EXEC_TIMEOUT", "inspection.exec_timeout", 120, int
        )
    )
    log_tail_lines: int = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_LOG_TAIL_LINES", "inspection.log_tail_lines", 50, int
        )
    )
    log_fetch_workers: int = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_LOG_FETCH_WORKERS", "inspection.log_fetch_workers", 10, int
        )
    )
    log_fetch_timeout: float = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_LOG_FETCH_TIMEOUT", "inspection.log_fetch_timeout", 60.0, float
        )
    )
    core_commands: List[Dict[str, Any]] = field(
        default_factory=lambda: CONFIG.get("inspection", {}).get(
            "core_commands", [dict(c) for c in DEFAULT_CORE_COMMANDS]
        )
    )
    retention_enabled: bool = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_RETENTION_ENABLED", "inspection.retention_enabled", True, bool
        )
    )
    max_reports: int = field(
        default_factory=lambda: get_env_or_config(
            "INSPECTION_MAX_REPORTS", "inspection.max_reports", 100, int
        )
    )


@dataclass
class NotificationConfig:
    """通知配置"""

    enabled: bool = field(
        default_factory=lambda: get_env_or_config(
            "NOTIFICATION_ENABLED", "notification.enabled", True, bool
        )
    )
    feishu_base_url: str = field(
        default_factory=lambda: get_env_or_config(
            "FEISHU_BASE_URL", "notification.feishu_base_url", "https://open.feishu.cn"
        )
    )
    timeout: int = field(
        default_factory=lambda: get_env_or_config(
            "NOTIFICATION_TIMEOUT", "notification.timeout", 15, int
        )
    )


@dataclass
class ReportConfig:
    """报告附件配置"""

    enable: bool = field(
        default_factory=lambda: get_env_or_config(
            "REPORT_ENABLE", "report.enable", False, bool
        )
    )
    output_dir: str = field(
        default_factory=lambda: get_env_or_config(
            "REPORT_OUTPUT_DIR", "report.output_dir", "/opt/db/print/"
        )
    )


@dataclass
class AppConfig:
    """应用程序主配置类"""

    debug: bool = field(
        default_factory=lambda: get_env_or_config("DEBUG", "app.debug", False, bool)
    )
    host: str = field(
        default_factory=lambda: get_env_or_config("HOST", "app.host", "0.0.0.0")
    )
    port: int = field(
        default_factory=lambda: get_env_or_config("PORT", "app.port", 8080, int)
    )
    log_level: str = field(
        default_factory=lambda: get_env_or_config("LOG_LEVEL", "app.log_level", "INFO")
    )
    server_url: Optional[str] = field(
        default_factory=lambda: get_env_or_config(
            "APP_SERVER_URL", "app.server_url", ""
        )
    )

    alerting: AlertingConfig = field(default_factory=AlertingConfig)
    k8s: K8sConfig = field(default_factory=K8sConfig)
    inspection: InspectionConfig = field(default_factory=InspectionConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


config = AppConfig()
