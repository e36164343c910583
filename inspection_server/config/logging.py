#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 日志初始化，输出格式包含巡检任务名
"""

import logging
import sys
from typing import Any, Optional

from inspection_server.common.logger import TaskNameFilter
from inspection_server.config.settings import config


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(task_name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 第三方库日志级别
_LIBRARY_LEVELS = {
    "urllib3": logging.WARNING,
    "requests": logging.WARNING,
    "kubernetes": logging.WARNING,
    "uvicorn": logging.INFO,
    "fastapi": logging.INFO,
}


def setup_logging(app: Optional[Any] = None) -> None:
    """初始化根日志器：标准输出、统一格式，并注入巡检任务名"""
    level_name = config.log_level.upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.addFilter(TaskNameFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("inspection").setLevel(level)

    for name, lib_level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(lib_level)

    if app is not None:
        app.state.log_level = level_name
    logging.getLogger("inspection.logging").info(f"日志初始化完成，级别 {level_name}")
