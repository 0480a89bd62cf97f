# control-plane/k8s/client.py
"""
Kubernetes object store
Read-only access to workloads and SpiderSubnet resources
"""

from typing import List, Optional
import logging

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from config import settings
from core.constants import (
    SPIDERPOOL_API_GROUP,
    SPIDERPOOL_API_VERSION,
    SPIDER_SUBNET_PLURAL,
)
from schemas.subnet import SpiderSubnet

logger = logging.getLogger(__name__)

__all__ = ["KubeObjectStore", "ApiException", "load_kube_config", "is_not_found"]


def load_kube_config() -> None:
    """
    Load cluster credentials
    In-cluster service account first, kubeconfig as fallback
    """
    if settings.IN_CLUSTER:
        try:
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
            return
        except ConfigException as e:
            logger.warning(f"In-cluster config unavailable, falling back to kubeconfig: {e}")

    config.load_kube_config(config_file=settings.KUBECONFIG)
    logger.info("Loaded kubeconfig")


def is_not_found(error: ApiException) -> bool:
    return error.status == 404


class KubeObjectStore:
    """
    Thin facade over the typed Kubernetes APIs

    Every getter raises kubernetes ApiException on failure (404 when the
    object is gone); callers decide how to wrap it.
    """

    def __init__(self, api_client: Optional[client.ApiClient] = None):
        self.core_v1 = client.CoreV1Api(api_client)
        self.apps_v1 = client.AppsV1Api(api_client)
        self.batch_v1 = client.BatchV1Api(api_client)
        self.custom = client.CustomObjectsApi(api_client)

    # === Pods ===

    def get_pod(self, namespace: str, name: str) -> client.V1Pod:
        return self.core_v1.read_namespaced_pod(name=name, namespace=namespace)

    def list_pods(self, namespace: Optional[str] = None, label_selector: Optional[str] = None) -> List[client.V1Pod]:
        kwargs = {}
        if label_selector:
            kwargs["label_selector"] = label_selector
        if namespace:
            return self.core_v1.list_namespaced_pod(namespace=namespace, **kwargs).items
        return self.core_v1.list_pod_for_all_namespaces(**kwargs).items

    # === Workloads ===

    def get_replica_set(self, namespace: str, name: str) -> client.V1ReplicaSet:
        return self.apps_v1.read_namespaced_replica_set(name=name, namespace=namespace)

    def get_deployment(self, namespace: str, name: str) -> client.V1Deployment:
        return self.apps_v1.read_namespaced_deployment(name=name, namespace=namespace)

    def get_daemon_set(self, namespace: str, name: str) -> client.V1DaemonSet:
        return self.apps_v1.read_namespaced_daemon_set(name=name, namespace=namespace)

    def get_stateful_set(self, namespace: str, name: str) -> client.V1StatefulSet:
        return self.apps_v1.read_namespaced_stateful_set(name=name, namespace=namespace)

    def get_job(self, namespace: str, name: str) -> client.V1Job:
        return self.batch_v1.read_namespaced_job(name=name, namespace=namespace)

    def get_cron_job(self, namespace: str, name: str) -> client.V1CronJob:
        return self.batch_v1.read_namespaced_cron_job(name=name, namespace=namespace)

    # === Spiderpool resources ===

    def get_subnet(self, name: str) -> SpiderSubnet:
        obj = self.custom.get_cluster_custom_object(
            group=SPIDERPOOL_API_GROUP,
            version=SPIDERPOOL_API_VERSION,
            plural=SPIDER_SUBNET_PLURAL,
            name=name,
        )
        return SpiderSubnet.model_validate(obj)

    def list_subnets(self) -> List[SpiderSubnet]:
        result = self.custom.list_cluster_custom_object(
            group=SPIDERPOOL_API_GROUP,
            version=SPIDERPOOL_API_VERSION,
            plural=SPIDER_SUBNET_PLURAL,
        )
        return [SpiderSubnet.model_validate(item) for item in result.get("items", [])]

