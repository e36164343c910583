#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 请求上下文中间件 - 注入 request_id 并记录请求开始/结束
"""

import time
from uuid import uuid4

from fastapi import FastAPI, Request

from inspection_server.common.logger import get_logger

logger = get_logger("inspection.api.middleware.request_context")


def _derive_request_id(request: Request) -> str:
    # 优先使用上游传入的 X-Request-ID
    return request.headers.get("x-request-id") or uuid4().hex


def setup_request_context(app: FastAPI) -> None:
    """注册请求上下文中间件"""

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):  # type: ignore[misc]
        request_id = _derive_request_id(request)
        request.state.request_id = request_id
        started = time.time()
        logger.debug(f"request.start {request.method} {request.url.path} request_id={request_id}")
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} "
            f"{(time.time() - started) * 1000:.1f}ms request_id={request_id}"
        )
        return response
