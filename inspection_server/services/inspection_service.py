#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Kubernetes 多集群巡检服务：采集 + 告警合并 + 汇总评级 + 报告与通知
"""

import asyncio
from datetime import datetime
import os
from typing import Dict, List, Optional
import uuid

from inspection_server.common.constants import AppConstants, InspectionConstants
from inspection_server.common.exceptions import (
    DecodeError,
    EmptyRuleSetError,
    FetchError,
    InspectionError,
)
from inspection_server.common.logger import get_logger, task_name_ctx
from inspection_server.config.settings import config
from inspection_server.core.inspection.checks import (
    AgentSettings,
    CheckContext,
    ClusterCoreCheck,
    IngressCheck,
    NamespaceCheck,
    NodeCheck,
    PVCCheck,
    PVCheck,
    ServiceCheck,
    WorkloadCheck,
)
from inspection_server.core.inspection.grouper import InspectionGrouper
from inspection_server.core.inspection.rating import RatingEngine, notification_text
from inspection_server.core.inspection.reporter import report_file_name, report_to_markdown
from inspection_server.models.alert_models import ClusterAlertItems
from inspection_server.models.inspection_models import (
    ClusterCore,
    ClusterNode,
    ClusterResource,
    Inspection,
    InspectionTask,
    KubernetesResult,
    Report,
    ReportGlobal,
    TaskCreateRequest,
)
from inspection_server.models.template_models import (
    CommandConfig,
    InspectionTemplate,
    KubernetesConfig,
    NotifyCreateRequest,
    NotifyTarget,
    TemplateCreateRequest,
)
from inspection_server.services.alerting import AlertingService
from inspection_server.services.base import BaseService
from inspection_server.services.kubernetes import KubernetesService
from inspection_server.services.log_fetcher import ConcurrentLogFetcher
from inspection_server.services.notification import NotificationService
from inspection_server.services.report_store import ReportStore

logger = get_logger("inspection.services.inspection")


def _now() -> str:
    return datetime.now().strftime(InspectionConstants.REPORT_TIME_FORMAT)


def not_ready_result(cluster: KubernetesConfig, error: str) -> KubernetesResult:
    """集群整体巡检失败时，以一条最高级别的巡检项出现在报告中"""
    inspection = Inspection(
        title=f"cluster {cluster.cluster_id} is not ready",
        level=InspectionConstants.CLUSTER_NOT_READY_LEVEL,
        names=[error],
    )
    return KubernetesResult(
        cluster_id=cluster.cluster_id,
        cluster_name=cluster.display_name,
        cluster_core=ClusterCore(inspections=[inspection]),
    )


class InspectionService(BaseService):
    """巡检服务：按模板逐个集群巡检，生成报告并发送通知"""

    def __init__(
        self,
        store: Optional[ReportStore] = None,
        kubernetes: Optional[KubernetesService] = None,
        alerting: Optional[AlertingService] = None,
        notification: Optional[NotificationService] = None,
        log_fetcher: Optional[ConcurrentLogFetcher] = None,
    ) -> None:
        super().__init__("inspection")
        self.store = store or ReportStore()
        self.kubernetes = kubernetes or KubernetesService()
        self.alerting = alerting or AlertingService()
        self.notification = notification or NotificationService()
        self.log_fetcher = log_fetcher or ConcurrentLogFetcher()

        settings = config.inspection
        self.agent = AgentSettings(
            namespace=settings.agent_namespace,
            selector=settings.agent_selector,
            container=settings.agent_container,
            script=settings.agent_script,
        )
        self.core_commands = [CommandConfig(**c) for c in settings.core_commands]
        self.grouper = InspectionGrouper()
        self.rating = RatingEngine()
        self._background: Dict[str, asyncio.Task] = {}

    async def _do_initialize(self) -> None:
        for dependency in (self.store, self.kubernetes, self.alerting, self.notification):
            await dependency.initialize()

    async def _do_health_check(self) -> bool:
        return await self.kubernetes.health_check()

    # 模板与通知目标
    async def create_template(self, req: TemplateCreateRequest) -> InspectionTemplate:
        template = InspectionTemplate(id=str(uuid.uuid4()), **req.model_dump())
        await self.store.save_template(template)
        self.logger.info(f"巡检模板已创建: {template.name} ({template.id})")
        return template

    async def create_notify(self, req: NotifyCreateRequest) -> NotifyTarget:
        notify = NotifyTarget(id=str(uuid.uuid4()), **req.model_dump())
        await self.store.save_notify(notify)
        self.logger.info(f"通知目标已创建: {notify.name} ({notify.id})")
        return notify

    # 任务
    async def create_task(self, req: TaskCreateRequest) -> InspectionTask:
        """创建巡检任务，async_run 为真时后台执行并立即返回"""
        await self.store.get_template(req.template_id)
        if req.notify_id:
            await self.store.get_notify(req.notify_id)

        task = InspectionTask(
            id=str(uuid.uuid4()),
            name=req.name,
            template_id=req.template_id,
            notify_id=req.notify_id,
            start_time=_now(),
        )
        await self.store.save_task(task)
        if req.async_run:
            return await self.run_task_async(task)
        return await self.run_task(task)

    async def run_task_async(self, task: InspectionTask) -> InspectionTask:
        job = asyncio.create_task(self.run_task(task))
        self._background[task.id] = job
        job.add_done_callback(lambda _: self._background.pop(task.id, None))
        return task

    async def run_task(self, task: InspectionTask) -> InspectionTask:
        """执行一次巡检任务，任务状态在 store 中更新"""
        token = task_name_ctx.set(task.name)
        try:
            task.state = InspectionConstants.TASK_STATE_RUNNING
            await self.store.save_task(task)
            self.logger.info(f"开始巡检任务: {task.name} ({task.id})")

            template = await self.store.get_template(task.template_id)
            report = await self.inspect(task.name, template)
            await self.store.save_report(report)
            task.rating = report.global_info.rating
            task.report_id = report.id

            attachment = self._write_markdown(report)
            if task.notify_id:
                await self._notify(task.notify_id, report, attachment)

            task.state = InspectionConstants.TASK_STATE_SUCCESS
            self.logger.info(f"巡检任务完成，健康等级: {task.rating}")
        except InspectionError as e:
            self.logger.error(f"巡检任务失败: {e.message}")
            task.state = InspectionConstants.TASK_STATE_FAILED
            task.error = e.message
        except Exception as e:
            self.logger.exception(f"巡检任务异常: {str(e)}")
            task.state = InspectionConstants.TASK_STATE_FAILED
            task.error = str(e)
        finally:
            task.end_time = _now()
            await self.store.save_task(task)
            task_name_ctx.reset(token)
        return task

    # 巡检
    async def inspect(self, name: str, template: InspectionTemplate) -> Report:
        """按模板巡检所有启用的集群并生成报告"""
        alerts = await self._fetch_alerts()

        results: List[KubernetesResult] = []
        for cluster in template.kubernetes:
            if not cluster.enable:
                self.logger.info(f"集群 {cluster.display_name} 未启用巡检，跳过")
                continue
            results.append(await self.inspect_cluster(cluster, alerts))

        return Report(
            id=str(uuid.uuid4()),
            global_info=ReportGlobal(
                name=name, rating=self.rating.rate(results), report_time=_now()
            ),
            kubernetes=results,
        )

    async def _fetch_alerts(self) -> Dict[str, ClusterAlertItems]:
        try:
            return await self.alerting.get_alert_items()
        except (FetchError, DecodeError, EmptyRuleSetError) as e:
            self.logger.warning(f"{e.message}，本次巡检不包含外部告警")
            return {}

    async def inspect_cluster(
        self, cluster: KubernetesConfig, alerts: Dict[str, ClusterAlertItems]
    ) -> KubernetesResult:
        """巡检单个集群，失败时返回 not ready 结果，不影响其他集群"""
        self.logger.info(f"开始巡检集群: {cluster.display_name}")
        source = cluster.display_name
        if source not in alerts and cluster.cluster_id in alerts:
            source = cluster.cluster_id
        try:
            client = self.kubernetes.get_client(cluster.cluster_id)
            ctx = CheckContext(
                client=client,
                cluster_id=cluster.cluster_id,
                cluster_name=cluster.display_name,
                alerts=alerts.get(source),
                alert_source=source,
                agent=self.agent,
                log_fetcher=self.log_fetcher,
            )
            result = await self._collect(ctx, cluster)
        except InspectionError as e:
            self.logger.error(f"集群 {cluster.display_name} 巡检失败: {e.message}")
            return not_ready_result(cluster, e.message)
        except Exception as e:
            self.logger.exception(f"集群 {cluster.display_name} 巡检出现未预期异常: {e}")
            return not_ready_result(cluster, f"{type(e).__name__}: {e}")

        self.logger.info(
            f"集群 {cluster.display_name} 巡检完成，健康等级: {self.rating.rate_cluster(result)}"
        )
        return result

    async def _collect(self, ctx: CheckContext, cluster: KubernetesConfig) -> KubernetesResult:
        core_cfg = cluster.cluster_core_config
        node_cfg = cluster.cluster_node_config
        resource_cfg = cluster.cluster_resource_config

        core = ClusterCore()
        if core_cfg.enable:
            core_data = await ClusterCoreCheck(self.core_commands).collect(ctx, core_cfg)
            core = ClusterCore(core=core_data, inspections=self.grouper.group([core_data]))

        node = ClusterNode()
        if node_cfg.enable:
            nodes = await NodeCheck().collect(ctx, node_cfg)
            node = ClusterNode(nodes=nodes, inspections=self.grouper.group(nodes))

        resource = ClusterResource()
        inspections: List[Inspection] = []

        resource.workloads = await WorkloadCheck().collect(ctx, resource_cfg.workload_config)
        inspections.extend(self.grouper.group(resource.workloads))

        if resource_cfg.namespace_config.enable:
            resource.namespaces = await NamespaceCheck().collect(
                ctx, resource_cfg.namespace_config
            )
            inspections.extend(self.grouper.group(resource.namespaces))
        if resource_cfg.service_config.enable:
            resource.services = await ServiceCheck().collect(ctx, resource_cfg.service_config)
            inspections.extend(self.grouper.group(resource.services))
        if resource_cfg.ingress_config.enable:
            resource.ingresses = await IngressCheck().collect(ctx, resource_cfg.ingress_config)
            inspections.extend(self.grouper.group(resource.ingresses))
        if resource_cfg.pvc_config.enable:
            resource.pvcs = await PVCCheck().collect(ctx, resource_cfg.pvc_config)
            inspections.extend(self.grouper.group(resource.pvcs))
        if resource_cfg.pv_config.enable:
            resource.pvs = await PVCheck().collect(ctx, resource_cfg.pv_config)
            inspections.extend(self.grouper.group(resource.pvs))
        resource.inspections = inspections

        return KubernetesResult(
            cluster_id=ctx.cluster_id,
            cluster_name=ctx.cluster_name,
            cluster_core=core,
            cluster_node=node,
            cluster_resource=resource,
        )

    # 报告与通知
    def _write_markdown(self, report: Report) -> Optional[str]:
        if not config.report.enable:
            return None
        os.makedirs(config.report.output_dir, exist_ok=True)
        path = os.path.join(config.report.output_dir, report_file_name(report))
        with open(path, "w", encoding="utf-8") as f:
            f.write(report_to_markdown(report))
        self.logger.info(f"巡检报告已写入: {path}")
        return path

    def report_url(self, report: Report) -> Optional[str]:
        if not config.server_url:
            return None
        base = config.server_url.rstrip("/")
        return f"{base}{AppConstants.INSPECTION_PREFIX}/reports/{report.id}/markdown"

    async def _notify(self, notify_id: str, report: Report, attachment: Optional[str]) -> None:
        target = await self.store.get_notify(notify_id)
        text = notification_text(
            report.global_info.rating,
            self.rating.digest(report.kubernetes),
            self.report_url(report),
        )
        await self.notification.notify(
            target, f"巡检报告 {report.global_info.name}", text, attachment
        )

    # 查询
    async def get_task(self, task_id: str) -> InspectionTask:
        return await self.store.get_task(task_id)

    async def list_tasks(self) -> List[InspectionTask]:
        return await self.store.list_tasks()

    async def get_report(self, report_id: str) -> Report:
        return await self.store.get_report(report_id)

    async def get_report_markdown(self, report_id: str) -> str:
        return report_to_markdown(await self.store.get_report(report_id))
