# control-plane/core/__init__.py
"""
Core business logic modules
"""

from .pod_manager import PodManager, PodTopController, get_controller_of
from .demand import pod_count, calculate_job_pod_num, get_app_replicas, desired_pool_ip_number
from .subnet_anno import (
    get_subnet_anno_config,
    get_pool_ip_number,
    should_reclaim_ip_pool,
    is_default_ip_pool_mode,
)
from .naming import subnet_pool_name, app_label_value, parse_app_label_value
from .capacity import gen_subnet_free_ips
from .subnet_webhook import SubnetWebhook

__all__ = [
    # Owner graph
    "PodManager",
    "PodTopController",
    "get_controller_of",
    # Demand
    "pod_count",
    "calculate_job_pod_num",
    "get_app_replicas",
    "desired_pool_ip_number",
    # Annotations
    "get_subnet_anno_config",
    "get_pool_ip_number",
    "should_reclaim_ip_pool",
    "is_default_ip_pool_mode",
    # Naming
    "subnet_pool_name",
    "app_label_value",
    "parse_app_label_value",
    # Capacity
    "gen_subnet_free_ips",
    # Webhook
    "SubnetWebhook",
]
