#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 系统健康检查与探针接口
"""

from datetime import datetime
import time
from typing import Any, Dict

from fastapi import APIRouter

from inspection_server.api.decorators import api_response
from inspection_server.common.constants import AppConstants
from inspection_server.models import BaseResponse
from inspection_server.services.factory import ServiceFactory

router = APIRouter(tags=["health"])

_start_time = time.time()


@router.get("/health", summary="存活检查", response_model=BaseResponse)
@api_response("健康检查")
async def liveness() -> Dict[str, Any]:
    return {
        "status": "alive",
        "version": AppConstants.APP_VERSION,
        "timestamp": datetime.now().isoformat(),
        "uptime": round(time.time() - _start_time, 2),
    }


@router.get("/health/components", summary="组件健康检查", response_model=BaseResponse)
@api_response("组件健康检查")
async def components_health() -> Dict[str, Any]:
    status = await ServiceFactory.health()
    status["timestamp"] = datetime.now().isoformat()
    return status
