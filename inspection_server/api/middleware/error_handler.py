#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 全局异常处理，所有错误统一输出 {code, message, data} 响应体
"""

from datetime import datetime
import json
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from inspection_server.api.decorators import http_status_for
from inspection_server.common.constants import HttpStatusCodes, ServiceConstants
from inspection_server.common.exceptions import InspectionError
from inspection_server.common.logger import get_logger
from inspection_server.models.base import BaseResponse

logger = get_logger("inspection.api.error_handler")


def _envelope(
    request: Request, status_code: int, message: str, detail: Any, **extra: Any
) -> JSONResponse:
    data = {
        "detail": detail,
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
        "request_id": getattr(request.state, "request_id", None),
        "timestamp": datetime.now().isoformat(),
    }
    data.update(extra)
    body = BaseResponse(code=status_code, message=message, data=data)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _jsonable(value: Any) -> Any:
    """将校验错误中的 bytes、异常对象等转换为可序列化内容"""
    if isinstance(value, bytes):
        return value[:100].decode("utf-8", errors="ignore")
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    status_code = exc.status_code
    if status_code >= HttpStatusCodes.INTERNAL_SERVER_ERROR:
        logger.error(f"{request.method} {request.url.path} -> {status_code}: {exc.detail}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc.detail}")
    return _envelope(request, status_code, str(exc.detail), exc.detail)


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, (RequestValidationError, ValidationError)):
        detail = _jsonable(exc.errors())
    else:
        detail = str(exc)
    logger.warning(f"请求参数校验失败 {request.url.path}: {detail}")
    return _envelope(
        request,
        HttpStatusCodes.BAD_REQUEST,
        ServiceConstants.VALIDATION_ERROR_MESSAGE,
        detail,
    )


async def inspection_exception_handler(
    request: Request, exc: InspectionError
) -> JSONResponse:
    """处理未经 api_response 包装就抛出的巡检异常"""
    status_code = http_status_for(exc)
    logger.error(f"巡检异常 [{exc.error_code}] {request.url.path}: {exc.message}")
    return _envelope(
        request, status_code, exc.message, _jsonable(exc.details), error_code=exc.error_code
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"{request.method} {request.url.path} 出现未处理异常 {type(exc).__name__}: {exc}",
        exc_info=exc,
    )
    return _envelope(
        request,
        HttpStatusCodes.INTERNAL_SERVER_ERROR,
        ServiceConstants.INTERNAL_SERVER_ERROR_MESSAGE,
        str(exc),
        type=type(exc).__name__,
    )


def setup_error_handlers(app: FastAPI) -> None:
    # fastapi.HTTPException 继承自 Starlette 的 HTTPException
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    for exc_cls in (RequestValidationError, ValidationError):
        app.add_exception_handler(exc_cls, validation_exception_handler)
    app.add_exception_handler(InspectionError, inspection_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.info("全局异常处理器已注册")
