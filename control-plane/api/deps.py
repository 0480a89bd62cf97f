# control-plane/api/deps.py
"""
Shared FastAPI dependencies
Tests swap these out through app.dependency_overrides
"""

from functools import lru_cache

from fastapi import Depends

from k8s.client import KubeObjectStore, load_kube_config
from core.pod_manager import PodManager
from core.subnet_webhook import SubnetWebhook


@lru_cache()
def get_object_store() -> KubeObjectStore:
    """
    Cluster reader, built on first use
    Credentials are loaded lazily so the app starts without a cluster
    """
    load_kube_config()
    return KubeObjectStore()


def get_pod_manager(store: KubeObjectStore = Depends(get_object_store)) -> PodManager:
    return PodManager(store)


def get_subnet_webhook(store: KubeObjectStore = Depends(get_object_store)) -> SubnetWebhook:
    return SubnetWebhook(store=store)
