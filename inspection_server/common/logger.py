#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 日志工具，提供带巡检任务上下文的日志获取方法
"""

import contextvars
import logging
from typing import Optional


# 当前巡检任务名上下文变量
task_name_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "task_name", default=None
)


class TaskNameFilter(logging.Filter):
    """从contextvars注入task_name到日志记录。"""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if not hasattr(record, "task_name"):
            record.task_name = task_name_ctx.get() or "-"
        return True


def get_logger(name: str) -> logging.Logger:
    """获取带TaskNameFilter的日志器。"""
    logger = logging.getLogger(name)
    if not any(isinstance(f, TaskNameFilter) for f in logger.filters):
        logger.addFilter(TaskNameFilter())
    return logger
