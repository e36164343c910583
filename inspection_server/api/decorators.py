#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 路由装饰器，统一响应封装、异常映射与请求日志
"""

import functools
from typing import Any, Callable, Dict

from fastapi import HTTPException, Request
from pydantic import BaseModel

from inspection_server.common.constants import HttpStatusCodes
from inspection_server.common.exceptions import (
    DecodeError,
    EmptyRuleSetError,
    FetchError,
    InspectionError,
    NotificationError,
    ResourceNotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from inspection_server.common.logger import get_logger
from inspection_server.models import BaseResponse

logger = get_logger("inspection.api.decorators")


def _to_payload(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(by_alias=True)
    if isinstance(result, list):
        return [_to_payload(r) for r in result]
    return result


def api_response(operation_name: str = "操作") -> Callable:
    """将路由处理结果统一封装为 BaseResponse 结构"""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Dict[str, Any]:
            try:
                result = await func(*args, **kwargs)

                if isinstance(result, BaseResponse):
                    return result.model_dump()
                return BaseResponse(
                    code=0, message=f"{operation_name}成功", data=_to_payload(result)
                ).model_dump()

            except HTTPException:
                raise
            except InspectionError as e:
                logger.error(f"{operation_name}失败 [{e.error_code}]: {e.message}")
                raise HTTPException(
                    status_code=http_status_for(e),
                    detail=e.message,
                )
            except Exception as e:
                logger.error(f"{operation_name}出现未预期异常: {e}", exc_info=True)
                raise HTTPException(
                    status_code=HttpStatusCodes.INTERNAL_SERVER_ERROR,
                    detail=f"{operation_name}失败，请查看服务日志",
                )

        return wrapper

    return decorator


def log_api_call(log_request: bool = True, log_response: bool = False) -> Callable:
    """记录请求与（可选）响应信息"""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            request = kwargs.get("request")
            if not isinstance(request, Request):
                request = next((a for a in args if isinstance(a, Request)), None)

            if log_request and request is not None:
                logger.info(
                    f"{request.method} {request.url.path} "
                    f"- request_id: {getattr(request.state, 'request_id', '')}"
                )

            result = await func(*args, **kwargs)

            if log_response and isinstance(result, dict):
                logger.info(
                    f"API响应: {func.__name__} - 状态: {result.get('code', 'unknown')}, "
                    f"消息: {result.get('message', '')}"
                )

            return result

        return wrapper

    return decorator


_STATUS_BY_ERROR = (
    (ResourceNotFoundError, HttpStatusCodes.NOT_FOUND),
    (ValidationError, HttpStatusCodes.BAD_REQUEST),
    (ServiceUnavailableError, HttpStatusCodes.SERVICE_UNAVAILABLE),
    ((FetchError, DecodeError, EmptyRuleSetError, NotificationError), HttpStatusCodes.BAD_GATEWAY),
)


def http_status_for(exc: InspectionError) -> int:
    """巡检异常到 HTTP 状态码的映射，未列出的类型返回 500"""
    for error_types, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_types):
            return status_code
    return HttpStatusCodes.INTERNAL_SERVER_ERROR
