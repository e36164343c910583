#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: 模块初始化文件
"""

__version__ = "1.0.0"
__author__ = "Bamboo"
__description__ = "Kubernetes 多集群巡检平台，提供告警聚合、巡检汇总与健康评级功能"
