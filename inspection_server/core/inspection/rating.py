#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Rating 评级
"""


from __future__ import annotations

from typing import Iterable, List, Optional

from inspection_server.common.constants import InspectionConstants
from inspection_server.models.inspection_models import Inspection, KubernetesResult


def max_level(inspections: Iterable[Inspection]) -> int:
    return max((i.level for i in inspections), default=0)


def level_to_rating(level: int) -> str:
    return InspectionConstants.RATING_LABELS.get(level, InspectionConstants.RATING_UNKNOWN)


def cluster_level(result: KubernetesResult) -> int:
    return max(0, max_level(result.all_inspections()))


def report_level(results: Iterable[KubernetesResult]) -> int:
    return max((cluster_level(r) for r in results), default=0)


def build_digest(results: Iterable[KubernetesResult]) -> List[str]:
    """每个集群一行标题，随后列出级别不低于阈值的巡检项"""
    lines: List[str] = []
    for result in results:
        lines.append(f"集群 {result.cluster_name} 巡检警告：")
        for inspection in result.all_inspections():
            if inspection.level >= InspectionConstants.DIGEST_MIN_LEVEL:
                lines.append(inspection.title)
    return lines


def notification_text(
    rating: str, digest: List[str], report_url: Optional[str] = None
) -> str:
    lines = [f"该巡检报告的健康等级为: {rating}"]
    lines.extend(digest)
    if report_url:
        lines.append(f"巡检报告地址: {report_url}")
    return "\n".join(lines)


class RatingEngine:
    """把所有集群的巡检汇总为评级与通知摘要"""

    def rate_cluster(self, result: KubernetesResult) -> str:
        return level_to_rating(cluster_level(result))

    def rate(self, results: List[KubernetesResult]) -> str:
        return level_to_rating(report_level(results))

    def digest(self, results: List[KubernetesResult]) -> List[str]:
        return build_digest(results)
