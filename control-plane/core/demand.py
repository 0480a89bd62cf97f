# control-plane/core/demand.py
"""
Demand Calculator - how many pods, hence IPs, a workload needs
Pure functions, no I/O
"""

from typing import Any, Optional

from schemas.annotation import PodSubnetAnnoConfig, FixedIPNumber
from .constants import ControllerKind


def get_app_replicas(replicas: Optional[int]) -> int:
    """Replica count, None counts as 0 (the API server applies its own default)"""
    if replicas is None:
        return 0
    return int(replicas)


def calculate_job_pod_num(parallelism: Optional[int], completions: Optional[int]) -> int:
    """
    Pods a Job needs at once

    Unset parallelism and completions both default to 1 on the API server.
    A fixed completion count dominates parallelism. Zero or negative values
    count as 1; negatives are refused by the API server anyway.
    See https://kubernetes.io/docs/concepts/workloads/controllers/job/
    """
    if parallelism is not None and completions is None:
        # parallel Jobs with a work queue
        return max(1, int(parallelism))

    if completions is not None:
        # non-parallel Jobs, or parallel Jobs with a fixed completion count
        return max(1, int(completions))

    return 1


def pod_count(kind: ControllerKind, app: Any) -> Optional[int]:
    """
    Expected pod count of a resolved top controller

    `app` is the kubernetes client object returned by the owner resolver.
    Returns None for Unknown controllers: no demand can be computed for them.
    """
    if kind == ControllerKind.POD:
        return 1

    if kind in (ControllerKind.DEPLOYMENT, ControllerKind.REPLICA_SET, ControllerKind.STATEFUL_SET):
        return get_app_replicas(app.spec.replicas)

    if kind == ControllerKind.JOB:
        return calculate_job_pod_num(app.spec.parallelism, app.spec.completions)

    if kind == ControllerKind.CRON_JOB:
        job_spec = app.spec.job_template.spec
        return calculate_job_pod_num(job_spec.parallelism, job_spec.completions)

    if kind == ControllerKind.DAEMON_SET:
        if app.status is None:
            return 0
        return get_app_replicas(app.status.desired_number_scheduled)

    return None


def desired_pool_ip_number(anno_config: PodSubnetAnnoConfig, app_pod_count: int) -> int:
    """
    IP count an auto-created pool should hold

    Fixed: exactly the requested number.
    Flexible: the workload's pod count plus the requested headroom.
    """
    if isinstance(anno_config.ip_number, FixedIPNumber):
        return anno_config.ip_number.value
    return app_pod_count + anno_config.ip_number.value
