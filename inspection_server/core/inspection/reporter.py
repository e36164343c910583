#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Reporter 报告
"""


from __future__ import annotations

from typing import List

from inspection_server.common.constants import InspectionConstants
from inspection_server.core.inspection.rating import cluster_level, level_to_rating
from inspection_server.models.inspection_models import Inspection, Report


def report_file_name(report: Report) -> str:
    return InspectionConstants.REPORT_FILE_NAME.format(
        report_time=report.global_info.report_time
    )


def _inspection_lines(title: str, inspections: List[Inspection]) -> List[str]:
    lines = [f"### {title}"]
    if not inspections:
        lines.append("无异常")
        return lines
    for i, inspection in enumerate(inspections, 1):
        lines.append(f"{i}. [L{inspection.level}] {inspection.title}")
        for name in inspection.names:
            lines.append(f"   - {name}")
    return lines


def report_to_markdown(report: Report) -> str:
    summary = report.global_info
    lines: List[str] = []
    lines.append(f"# 巡检报告 {summary.name}")
    lines.append("")
    lines.append("## 概览")
    lines.append(f"- 报告ID: {report.id}")
    lines.append(f"- 巡检时间: {summary.report_time}")
    lines.append(f"- 健康等级: {summary.rating}")
    lines.append(f"- 集群数: {len(report.kubernetes)}")

    for cluster in report.kubernetes:
        lines.append("")
        lines.append(f"## 集群 {cluster.cluster_name}")
        lines.append(f"- 健康等级: {level_to_rating(cluster_level(cluster))}")
        core = cluster.cluster_core.core
        if core is not None:
            lines.append(
                f"- 核心组件检查: {core.items_count.pass_count}/{core.items_count.total_count} 通过"
            )
        lines.append(f"- 节点数: {len(cluster.cluster_node.nodes)}")
        lines.append("")
        lines.extend(_inspection_lines("核心组件", cluster.cluster_core.inspections))
        lines.extend(_inspection_lines("节点", cluster.cluster_node.inspections))
        lines.extend(_inspection_lines("资源", cluster.cluster_resource.inspections))
    return "\n".join(lines)
