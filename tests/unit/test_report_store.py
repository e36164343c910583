#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import pytest

from inspection_server.common.exceptions import ReportStoreError, ResourceNotFoundError
from inspection_server.config.settings import InspectionConfig
from inspection_server.models.inspection_models import InspectionTask, Report, ReportGlobal
from inspection_server.services.report_store import ReportStore


def _report(report_id):
    return Report(
        id=report_id,
        global_info=ReportGlobal(name="daily", rating="Excellent", report_time="2024-01-01 00:00:00"),
    )


def _store(max_reports=2, retention=True):
    return ReportStore(InspectionConfig(retention_enabled=retention, max_reports=max_reports))


@pytest.mark.asyncio
async def test_reports_evicted_oldest_first():
    store = _store(max_reports=2)
    for report_id in ("r1", "r2", "r3"):
        await store.save_report(_report(report_id))

    with pytest.raises(ResourceNotFoundError):
        await store.get_report("r1")
    assert (await store.get_report("r3")).id == "r3"
    assert store.stats()["reports"] == 2


@pytest.mark.asyncio
async def test_retention_disabled_keeps_everything():
    store = _store(max_reports=1, retention=False)
    for report_id in ("r1", "r2", "r3"):
        await store.save_report(_report(report_id))
    assert store.stats()["reports"] == 3


@pytest.mark.asyncio
async def test_duplicate_or_empty_report_id_rejected():
    store = _store()
    await store.save_report(_report("r1"))
    with pytest.raises(ReportStoreError):
        await store.save_report(_report("r1"))
    with pytest.raises(ReportStoreError):
        await store.save_report(_report(""))


@pytest.mark.asyncio
async def test_tasks_listed_newest_first():
    store = _store(max_reports=10)
    for task_id in ("t1", "t2", "t3"):
        await store.save_task(
            InspectionTask(id=task_id, name=task_id, template_id="tpl", start_time="2024-01-01 00:00:00")
        )
    assert [t.id for t in await store.list_tasks()] == ["t3", "t2", "t1"]


@pytest.mark.asyncio
async def test_missing_records_raise_not_found():
    store = _store()
    for getter in (store.get_template, store.get_notify, store.get_task, store.get_report):
        with pytest.raises(ResourceNotFoundError):
            await getter("missing")
