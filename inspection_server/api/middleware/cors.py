#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 跨域请求处理中间件
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inspection_server.common.logger import get_logger
from inspection_server.config.settings import config

logger = get_logger("inspection.api.cors")


def setup_cors(app: FastAPI) -> None:
    # 凭据模式不支持通配符
    allowed_origins = [
        f"http://localhost:{config.port}",
        f"http://127.0.0.1:{config.port}",
    ]
    if config.server_url:
        allowed_origins.append(config.server_url.rstrip("/"))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info("CORS中间件设置完成")
