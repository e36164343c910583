#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 巡检服务主应用程序入口
"""

import asyncio
from contextlib import asynccontextmanager
import time

from fastapi import FastAPI, Request, Response

from inspection_server.api.middleware import register_middleware
from inspection_server.api.routes import register_routes
from inspection_server.common.constants import AppConstants, ServiceConstants
from inspection_server.common.logger import get_logger
from inspection_server.config.logging import setup_logging
from inspection_server.config.settings import config
from inspection_server.services.factory import ServiceFactory
from inspection_server.services.inspection_service import InspectionService

logger = get_logger("inspection")


class AppState:
    """进程级运行状态：在途请求数与关闭标记"""

    def __init__(self) -> None:
        self.started_at = time.time()
        self.in_flight = 0
        self.draining = False

    def uptime(self) -> float:
        return time.time() - self.started_at

    async def drain(self, max_wait: float) -> None:
        """等待在途请求结束，超过 max_wait 秒后放弃"""
        self.draining = True
        deadline = time.time() + max_wait
        while self.in_flight > 0:
            if time.time() > deadline:
                logger.warning(f"等待超时，仍有 {self.in_flight} 个请求未完成，强制关闭")
                return
            logger.info(f"等待 {self.in_flight} 个在途请求完成...")
            await asyncio.sleep(0.5)


app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """预热巡检服务，关闭时等待在途请求并释放服务单例"""
    logger.info(
        f"{AppConstants.APP_NAME} v{AppConstants.APP_VERSION} 启动中 "
        f"(debug={config.debug}, log_level={config.log_level})"
    )
    try:
        await ServiceFactory.get_service("inspection", InspectionService)
    except Exception as e:
        logger.warning(f"巡检服务预热失败，将在首次请求时重试: {str(e)}")

    logger.info(
        f"启动完成，耗时 {app_state.uptime():.2f}s，监听 http://{config.host}:{config.port}，"
        f"巡检接口前缀 {AppConstants.INSPECTION_PREFIX}"
    )

    yield

    logger.info("开始优雅关闭...")
    await app_state.drain(ServiceConstants.MAX_SHUTDOWN_WAIT)
    ServiceFactory.reset()
    logger.info(f"服务已停止，累计运行 {app_state.uptime():.2f}s")


def _track_requests(app: FastAPI) -> None:
    @app.middleware("http")
    async def in_flight_counter(request: Request, call_next):
        if app_state.draining:
            return Response(
                content="Service is shutting down",
                status_code=503,
                headers={"Retry-After": "60"},
            )
        app_state.in_flight += 1
        try:
            return await call_next(request)
        finally:
            app_state.in_flight -= 1


def create_app() -> FastAPI:
    """
    创建巡检服务 FastAPI 应用

    Returns:
        FastAPI: 已注册日志、中间件与路由的应用实例
    """
    app = FastAPI(
        title=AppConstants.APP_NAME,
        description=AppConstants.APP_DESCRIPTION,
        version=AppConstants.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    setup_logging(app)
    _track_requests(app)
    register_middleware(app)
    register_routes(app)
    logger.info("中间件与路由注册完成")
    return app


app = create_app()


def main() -> None:
    from uvicorn import Config, Server

    server = Server(
        Config(
            app="inspection_server.main:app",
            host=config.host,
            port=config.port,
            reload=config.debug,
            reload_dirs=["inspection_server", "config"] if config.debug else None,
            log_level="debug" if config.debug else "info",
            access_log=True,
        )
    )
    logger.info(f"在 {config.host}:{config.port} 启动巡检服务")
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("收到中断信号，正在关闭服务...")


if __name__ == "__main__":
    main()
