#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 检查项合并
"""


from __future__ import annotations

from typing import Iterable, List, Optional, TypeVar

from inspection_server.models.alert_models import ClusterAlertItems
from inspection_server.models.inspection_models import Entity, Item

TEntity = TypeVar("TEntity", bound=Entity)


def merge_items(native: Iterable[Item], resolved: Optional[Iterable[Item]]) -> List[Item]:
    """原生检查项在前，告警检查项在后，不做去重"""
    merged = list(native)
    if resolved:
        merged.extend(resolved)
    return merged


def merge_entity(
    entity: TEntity,
    alerts: Optional[ClusterAlertItems],
    bucket: str,
    key: Optional[str] = None,
) -> TEntity:
    """把告警分桶中属于该实体的检查项追加到实体上，key 缺省取 entity.alert_key()"""
    if alerts is None:
        return entity
    extra = alerts.get(bucket, key or entity.alert_key())
    if extra:
        entity.items = merge_items(entity.items, extra)
    return entity
