#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 路由注册
"""

from fastapi import FastAPI

from inspection_server.common.constants import AppConstants
from inspection_server.common.logger import get_logger

from .health import router as health_router
from .inspection import router as inspection_router

logger = get_logger("inspection.api.routes")


def register_routes(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(inspection_router, prefix=AppConstants.INSPECTION_PREFIX)
    logger.info(f"已注册巡检路由: {AppConstants.INSPECTION_PREFIX}")

    @app.get("/", tags=["root"])
    async def root():
        return {
            "name": AppConstants.APP_NAME,
            "version": AppConstants.APP_VERSION,
            "description": AppConstants.APP_DESCRIPTION,
            "docs": "/docs",
        }
