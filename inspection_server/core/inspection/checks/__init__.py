#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 各类资源的检查项生成
"""

from .agent import build_agent_command, parse_command_results
from .base import AgentSettings, CheckContext
from .cluster_checks import ClusterCoreCheck
from .ingress_checks import IngressCheck
from .namespace_checks import NamespaceCheck
from .node_checks import NodeCheck
from .service_checks import ServiceCheck
from .storage_checks import PVCCheck, PVCheck
from .workload_checks import WorkloadCheck

__all__ = [
    "AgentSettings",
    "CheckContext",
    "ClusterCoreCheck",
    "IngressCheck",
    "NamespaceCheck",
    "NodeCheck",
    "PVCCheck",
    "PVCheck",
    "ServiceCheck",
    "WorkloadCheck",
    "build_agent_command",
    "parse_command_results",
]
