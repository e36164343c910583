#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检聚合与评级引擎
"""

from .alerts import AlertSignalResolver, resolve_replicaset_owner
from .grouper import InspectionGrouper, group_inspections
from .items import merge_entity, merge_items
from .rating import RatingEngine

__all__ = [
    "AlertSignalResolver",
    "InspectionGrouper",
    "RatingEngine",
    "group_inspections",
    "merge_entity",
    "merge_items",
    "resolve_replicaset_owner",
]
