#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检模板、通知目标、任务与报告的内存存储
"""

import asyncio
from collections import OrderedDict
from typing import Dict, List, Optional

from inspection_server.common.exceptions import ReportStoreError, ResourceNotFoundError
from inspection_server.config.settings import InspectionConfig, config
from inspection_server.models.inspection_models import InspectionTask, Report
from inspection_server.models.template_models import InspectionTemplate, NotifyTarget
from inspection_server.services.base import BaseService


class ReportStore(BaseService):
    """
    内存存储

    报告与任务按写入顺序保存，开启保留策略后超过 max_reports 时淘汰最早的记录。
    """

    def __init__(self, settings: Optional[InspectionConfig] = None) -> None:
        super().__init__("report_store")
        self.settings = settings or config.inspection
        self._templates: Dict[str, InspectionTemplate] = {}
        self._notifies: Dict[str, NotifyTarget] = {}
        self._tasks: "OrderedDict[str, InspectionTask]" = OrderedDict()
        self._reports: "OrderedDict[str, Report]" = OrderedDict()
        self._lock = asyncio.Lock()

    async def _do_initialize(self) -> None:
        if self.settings.retention_enabled:
            self.logger.info(f"报告保留策略已开启，最多保留 {self.settings.max_reports} 份")

    async def _do_health_check(self) -> bool:
        return True

    def _trim(self, records: "OrderedDict") -> None:
        if not self.settings.retention_enabled:
            return
        while len(records) > max(1, self.settings.max_reports):
            key, _ = records.popitem(last=False)
            self.logger.debug(f"淘汰过期记录: {key}")

    # 模板
    async def save_template(self, template: InspectionTemplate) -> InspectionTemplate:
        async with self._lock:
            self._templates[template.id] = template
        return template

    async def get_template(self, template_id: str) -> InspectionTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise ResourceNotFoundError("巡检模板", template_id)
        return template

    async def list_templates(self) -> List[InspectionTemplate]:
        return list(self._templates.values())

    # 通知目标
    async def save_notify(self, notify: NotifyTarget) -> NotifyTarget:
        async with self._lock:
            self._notifies[notify.id] = notify
        return notify

    async def get_notify(self, notify_id: str) -> NotifyTarget:
        notify = self._notifies.get(notify_id)
        if notify is None:
            raise ResourceNotFoundError("通知目标", notify_id)
        return notify

    async def list_notifies(self) -> List[NotifyTarget]:
        return list(self._notifies.values())

    # 任务
    async def save_task(self, task: InspectionTask) -> InspectionTask:
        async with self._lock:
            self._tasks[task.id] = task
            self._tasks.move_to_end(task.id)
            self._trim(self._tasks)
        return task

    async def get_task(self, task_id: str) -> InspectionTask:
        task = self._tasks.get(task_id)
        if task is None:
            raise ResourceNotFoundError("巡检任务", task_id)
        return task

    async def list_tasks(self) -> List[InspectionTask]:
        return list(reversed(self._tasks.values()))

    # 报告
    async def save_report(self, report: Report) -> Report:
        if not report.id:
            raise ReportStoreError("报告缺少 ID")
        async with self._lock:
            if report.id in self._reports:
                raise ReportStoreError(f"报告 {report.id} 已存在")
            self._reports[report.id] = report
            self._trim(self._reports)
        self.logger.info(f"巡检报告已保存: {report.id}")
        return report

    async def get_report(self, report_id: str) -> Report:
        report = self._reports.get(report_id)
        if report is None:
            raise ResourceNotFoundError("巡检报告", report_id)
        return report

    def stats(self) -> Dict[str, int]:
        return {
            "templates": len(self._templates),
            "notifies": len(self._notifies),
            "tasks": len(self._tasks),
            "reports": len(self._reports),
        }
