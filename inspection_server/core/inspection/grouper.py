#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 按检查项名称汇总失败实体
"""


from __future__ import annotations

from typing import Dict, Iterable, List

from inspection_server.models.inspection_models import Entity, Inspection


def group_inspections(entities: Iterable[Entity]) -> List[Inspection]:
    """
    汇总实体中未通过的检查项

    以检查项名称为键，每个名称生成一个 Inspection。级别取第一次出现时的级别，
    后续同名检查项级别不同也不会改写。同一实体在同一名称下只记录一次。
    """
    grouped: Dict[str, Inspection] = {}
    for entity in entities:
        identifier = entity.identifier()
        for item in entity.items:
            if item.passed:
                continue
            inspection = grouped.get(item.name)
            if inspection is None:
                inspection = Inspection(title=item.name, level=item.level)
                grouped[item.name] = inspection
            if identifier not in inspection.names:
                inspection.names.append(identifier)
    return list(grouped.values())


class InspectionGrouper:
    def group(self, entities: Iterable[Entity]) -> List[Inspection]:
        return group_inspections(entities)
