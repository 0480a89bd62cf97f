"""
Kubernetes access modules
"""

from .client import KubeObjectStore, ApiException, load_kube_config, is_not_found

__all__ = [
    "KubeObjectStore",
    "ApiException",
    "load_kube_config",
    "is_not_found",
]
