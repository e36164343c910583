#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
AI-CloudOps-inspection
Author: Bamboo
Email: bamboocloudops@gmail.com
License: Apache 2.0
Description: Kubernetes多集群访问服务
"""

import asyncio
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream

from inspection_server.common.exceptions import (
    ClusterNotReadyError,
    ExecError,
    ListError,
)
from inspection_server.common.logger import get_logger
from inspection_server.config.settings import K8sConfig, config
from inspection_server.services.base import BaseService

logger = get_logger("inspection.services.kubernetes")

CATALOG_GROUP = "catalog.cattle.io"
CATALOG_VERSION = "v1"
CATALOG_APPS = "apps"


class KubernetesClusterClient:
    """单个集群的 Kubernetes 访问，同步 SDK 调用放到线程中执行"""

    def __init__(
        self, cluster_id: str, api_client: client.ApiClient, exec_timeout: int = 120
    ) -> None:
        self.cluster_id = cluster_id
        self.api_client = api_client
        self.exec_timeout = exec_timeout
        self.core_v1 = client.CoreV1Api(api_client)
        self.apps_v1 = client.AppsV1Api(api_client)
        self.batch_v1 = client.BatchV1Api(api_client)
        self.networking_v1 = client.NetworkingV1Api(api_client)
        self.custom_objects = client.CustomObjectsApi(api_client)

    def _list_calls(self) -> Dict[str, Tuple[Optional[Callable], Callable]]:
        """资源类型 -> (命名空间内列举, 全局列举)"""
        core, apps = self.core_v1, self.apps_v1
        return {
            "pod": (core.list_namespaced_pod, core.list_pod_for_all_namespaces),
            "service": (core.list_namespaced_service, core.list_service_for_all_namespaces),
            "secret": (core.list_namespaced_secret, core.list_secret_for_all_namespaces),
            "configmap": (
                core.list_namespaced_config_map,
                core.list_config_map_for_all_namespaces,
            ),
            "resourcequota": (
                core.list_namespaced_resource_quota,
                core.list_resource_quota_for_all_namespaces,
            ),
            "pvc": (
                core.list_namespaced_persistent_volume_claim,
                core.list_persistent_volume_claim_for_all_namespaces,
            ),
            "deployment": (
                apps.list_namespaced_deployment,
                apps.list_deployment_for_all_namespaces,
            ),
            "statefulset": (
                apps.list_namespaced_stateful_set,
                apps.list_stateful_set_for_all_namespaces,
            ),
            "daemonset": (
                apps.list_namespaced_daemon_set,
                apps.list_daemon_set_for_all_namespaces,
            ),
            "replicaset": (
                apps.list_namespaced_replica_set,
                apps.list_replica_set_for_all_namespaces,
            ),
            "job": (
                self.batch_v1.list_namespaced_job,
                self.batch_v1.list_job_for_all_namespaces,
            ),
            "ingress": (
                self.networking_v1.list_namespaced_ingress,
                self.networking_v1.list_ingress_for_all_namespaces,
            ),
            "namespace": (None, core.list_namespace),
            "pv": (None, core.list_persistent_volume),
            "node": (None, core.list_node),
        }

    def _list_sync(
        self, kind: str, namespace: Optional[str], label_selector: Optional[str]
    ) -> List[Dict]:
        kwargs: Dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector

        if kind == "app":
            result = self.custom_objects.list_cluster_custom_object(
                CATALOG_GROUP, CATALOG_VERSION, CATALOG_APPS, **kwargs
            )
            return list(result.get("items") or [])

        calls = self._list_calls()
        if kind not in calls:
            raise ListError(kind, "不支持的资源类型", cluster_id=self.cluster_id)
        namespaced, cluster_wide = calls[kind]
        if namespace and namespaced is not None:
            result = namespaced(namespace, **kwargs)
        else:
            result = cluster_wide(**kwargs)
        return [obj.to_dict() for obj in result.items]

    async def list_resources(
        self,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> List[Dict]:
        try:
            return await asyncio.to_thread(self._list_sync, kind, namespace, label_selector)
        except ApiException as e:
            logger.error(f"集群 {self.cluster_id} 获取 {kind} 列表失败: {e.reason}")
            raise ListError(
                kind, f"{e.status} {e.reason}", cluster_id=self.cluster_id
            )

    async def read_endpoints(self, namespace: str, name: str) -> Optional[Dict]:
        try:
            endpoints = await asyncio.to_thread(
                self.core_v1.read_namespaced_endpoints, name, namespace
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise ListError("endpoints", f"{e.status} {e.reason}", cluster_id=self.cluster_id)
        return endpoints.to_dict()

    async def read_node(self, name: str) -> Optional[Dict]:
        try:
            node = await asyncio.to_thread(self.core_v1.read_node, name)
        except ApiException as e:
            if e.status == 404:
                return None
            raise ListError("node", f"{e.status} {e.reason}", cluster_id=self.cluster_id)
        return node.to_dict()

    def _exec_sync(
        self, namespace: str, pod: str, container: str, command: List[str]
    ) -> Tuple[str, str]:
        resp = stream(
            self.core_v1.connect_get_namespaced_pod_exec,
            pod,
            namespace,
            container=container,
            command=command,
            stderr=True,
            stdin=False,
            stdout=True,
            tty=False,
            _preload_content=False,
        )
        try:
            resp.run_forever(timeout=self.exec_timeout)
            return resp.read_stdout() or "", resp.read_stderr() or ""
        finally:
            resp.close()

    async def exec_command(
        self, namespace: str, pod: str, container: str, command: List[str]
    ) -> Tuple[str, str]:
        logger.info(f"集群 {self.cluster_id} 在 {namespace}/{pod}:{container} 中执行命令")
        try:
            return await asyncio.to_thread(
                self._exec_sync, namespace, pod, container, command
            )
        except ApiException as e:
            raise ExecError(pod, f"{e.status} {e.reason}", cluster_id=self.cluster_id)
        except Exception as e:
            raise ExecError(pod, str(e), cluster_id=self.cluster_id)

    async def read_pod_log(
        self, namespace: str, pod: str, container: str, tail_lines: int
    ) -> str:
        return await asyncio.to_thread(
            self.core_v1.read_namespaced_pod_log,
            name=pod,
            namespace=namespace,
            container=container,
            tail_lines=tail_lines,
        )


class KubernetesService(BaseService):
    """集群客户端注册表：本地集群使用 in-cluster 凭据，其余集群按 ID 读取 kubeconfig"""

    def __init__(self, settings: Optional[K8sConfig] = None) -> None:
        super().__init__("kubernetes")
        self.settings = settings or config.k8s
        self.exec_timeout = config.inspection.exec_timeout
        self._clients: Dict[str, KubernetesClusterClient] = {}

    async def _do_initialize(self) -> None:
        if not self.settings.in_cluster and not os.path.isdir(self.settings.kubeconfig_dir):
            self.logger.warning(f"kubeconfig 目录不存在: {self.settings.kubeconfig_dir}")

    async def _do_health_check(self) -> bool:
        return self.settings.in_cluster or os.path.isdir(self.settings.kubeconfig_dir)

    def _load_api_client(self, cluster_id: str) -> client.ApiClient:
        if self.settings.in_cluster and cluster_id == self.settings.local_cluster:
            configuration = client.Configuration()
            k8s_config.load_incluster_config(client_configuration=configuration)
            return client.ApiClient(configuration)

        config_file = os.path.join(self.settings.kubeconfig_dir, cluster_id)
        if not os.path.exists(config_file):
            raise ClusterNotReadyError(cluster_id, f"kubeconfig 文件不存在: {config_file}")
        return k8s_config.new_client_from_config(config_file=config_file)

    def get_client(self, cluster_id: str) -> KubernetesClusterClient:
        """获取集群客户端，加载失败抛出 ClusterNotReadyError"""
        if cluster_id in self._clients:
            return self._clients[cluster_id]
        try:
            api_client = self._load_api_client(cluster_id)
        except ClusterNotReadyError:
            raise
        except Exception as e:
            self.logger.error(f"加载集群 {cluster_id} 配置失败: {str(e)}")
            raise ClusterNotReadyError(cluster_id, str(e))

        cluster_client = KubernetesClusterClient(
            cluster_id, api_client, exec_timeout=self.exec_timeout
        )
        self._clients[cluster_id] = cluster_client
        self.logger.info(f"集群 {cluster_id} 客户端初始化完成")
        return cluster_client

    def register_client(self, cluster_id: str, cluster_client: Any) -> None:
        """注册外部构造的集群客户端"""
        self._clients[cluster_id] = cluster_client
