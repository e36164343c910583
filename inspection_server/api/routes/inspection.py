#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Inspection API 路由
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Request
from fastapi.responses import PlainTextResponse

from inspection_server.api.decorators import api_response, log_api_call
from inspection_server.models import (
    BaseResponse,
    NotifyCreateRequest,
    TaskCreateRequest,
    TemplateCreateRequest,
)
from inspection_server.services.factory import ServiceFactory
from inspection_server.services.inspection_service import InspectionService

router = APIRouter(tags=["inspection"])


async def get_inspection_service() -> InspectionService:
    return await ServiceFactory.get_service("inspection", InspectionService)


def _page(items: list) -> Dict[str, Any]:
    return {"items": items, "total": len(items)}


@router.post("/templates", summary="创建巡检模板", response_model=BaseResponse)
@api_response("创建巡检模板")
@log_api_call(log_request=True)
async def create_template(
    request: Request, body: TemplateCreateRequest = Body(...)
) -> Any:
    svc = await get_inspection_service()
    return await svc.create_template(body)


@router.get("/templates", summary="获取巡检模板列表", response_model=BaseResponse)
@api_response("获取巡检模板列表")
async def list_templates() -> Dict[str, Any]:
    svc = await get_inspection_service()
    templates = await svc.store.list_templates()
    return _page([t.model_dump() for t in templates])


@router.get("/templates/{template_id}", summary="获取巡检模板", response_model=BaseResponse)
@api_response("获取巡检模板")
async def get_template(template_id: str) -> Any:
    svc = await get_inspection_service()
    return await svc.store.get_template(template_id)


@router.post("/notifies", summary="创建通知目标", response_model=BaseResponse)
@api_response("创建通知目标")
@log_api_call(log_request=True)
async def create_notify(request: Request, body: NotifyCreateRequest = Body(...)) -> Any:
    svc = await get_inspection_service()
    return await svc.create_notify(body)


@router.get("/notifies", summary="获取通知目标列表", response_model=BaseResponse)
@api_response("获取通知目标列表")
async def list_notifies() -> Dict[str, Any]:
    svc = await get_inspection_service()
    notifies = await svc.store.list_notifies()
    return _page([n.model_dump() for n in notifies])


@router.post("/tasks", summary="创建并执行巡检任务", response_model=BaseResponse)
@api_response("创建巡检任务")
@log_api_call(log_request=True, log_response=True)
async def create_task(
    request: Request,
    body: TaskCreateRequest = Body(
        ...,
        examples=[{"name": "daily", "template_id": "<template-id>", "async": True}],
    ),
) -> Any:
    svc = await get_inspection_service()
    return await svc.create_task(body)


@router.get("/tasks", summary="获取巡检任务列表", response_model=BaseResponse)
@api_response("获取巡检任务列表")
async def list_tasks() -> Dict[str, Any]:
    svc = await get_inspection_service()
    tasks = await svc.list_tasks()
    return _page([t.model_dump() for t in tasks])


@router.get("/tasks/{task_id}", summary="查询巡检任务状态", response_model=BaseResponse)
@api_response("查询巡检任务状态")
async def get_task(task_id: str) -> Any:
    svc = await get_inspection_service()
    return await svc.get_task(task_id)


@router.get("/reports/{report_id}", summary="获取巡检报告详情", response_model=BaseResponse)
@api_response("获取巡检报告")
async def get_report(report_id: str) -> Any:
    svc = await get_inspection_service()
    return await svc.get_report(report_id)


@router.get(
    "/reports/{report_id}/markdown",
    summary="获取 Markdown 格式巡检报告",
    response_class=PlainTextResponse,
)
async def get_report_markdown(report_id: str) -> PlainTextResponse:
    svc = await get_inspection_service()
    content = await svc.get_report_markdown(report_id)
    return PlainTextResponse(content, media_type="text/markdown; charset=utf-8")


@router.get("/alerting", summary="获取原始告警规则数据", response_model=BaseResponse)
@api_response("获取告警数据")
async def get_alerting() -> Any:
    svc = await get_inspection_service()
    return await svc.alerting.fetch_rules()
