# control-plane/api/v1/pods.py
"""
Pod Subnet Resolution Endpoints
Read-only view of the subnet decision for a live pod
"""

from fastapi import APIRouter, Depends, Path
from typing import List
import logging

from config import settings
from schemas.annotation import PodSubnetAnnoConfig
from schemas.base import ErrorResponse
from schemas.pod import AutoPoolResponse, PodSubnetConfigResponse, TopControllerResponse
from core.constants import ControllerKind, IPV4, IPV6
from core.demand import pod_count, desired_pool_ip_number
from core.exceptions import SubnetControlPlaneError
from core.logutils import request_logger
from core.naming import subnet_pool_name
from core.pod_manager import PodManager, PodTopController
from core.subnet_anno import get_subnet_anno_config, is_default_ip_pool_mode
from api.deps import get_pod_manager

logger = logging.getLogger(__name__)

router = APIRouter()


def build_auto_pools(config: PodSubnetAnnoConfig, top: PodTopController) -> List[AutoPoolResponse]:
    """
    Auto-created IPPool names for every interface and IP version the pod selects

    Unknown controllers get no auto pool, there is no workload to own it.
    """
    if top.kind == ControllerKind.UNKNOWN:
        return []

    pools: List[AutoPoolResponse] = []
    for item in config.interfaces():
        for ip_version, subnet_name in ((IPV4, item.ipv4_subnet), (IPV6, item.ipv6_subnet)):
            if subnet_name is None:
                continue
            if ip_version == IPV4 and not settings.ENABLE_IPV4:
                continue
            if ip_version == IPV6 and not settings.ENABLE_IPV6:
                continue
            pools.append(AutoPoolResponse(
                interface=item.interface,
                ip_version=ip_version,
                subnet=subnet_name,
                pool_name=subnet_pool_name(
                    top.kind.value, top.namespace, top.name,
                    ip_version, item.interface, top.uid
                )
            ))
    return pools


@router.get(
    "/{namespace}/{name}/subnet-config",
    response_model=PodSubnetConfigResponse,
    responses={
        400: {"description": "Invalid subnet annotations", "model": ErrorResponse},
        404: {"description": "Pod not found", "model": ErrorResponse},
        502: {"description": "Pod owner lookup failed", "model": ErrorResponse},
    },
    summary="Resolve a pod's subnet configuration",
    description="""
    Run the SpiderSubnet resolution for one pod.

    **Flow:**
    1. Parse the pod's subnet annotations
    2. Resolve the pod's top controller through its owner references
    3. Compute the controller's pod count and the desired IPPool size
    4. Name the auto-created IPPool per interface and IP version

    Pods without subnet annotations are reported in default IPPool mode.
    """
)
def get_pod_subnet_config(
    namespace: str = Path(..., description="Pod namespace"),
    name: str = Path(..., description="Pod name"),
    pod_manager: PodManager = Depends(get_pod_manager)
):
    """Resolve the subnet decision of one pod"""
    log = request_logger("pod-subnet", Pod=f"{namespace}/{name}")

    # ApiException (404 and friends) is mapped by the app exception handler
    pod = pod_manager.get_pod_by_name(namespace, name)

    try:
        anno_config = get_subnet_anno_config(pod.metadata.annotations or {}, log)
        if is_default_ip_pool_mode(anno_config):
            return PodSubnetConfigResponse(
                namespace=namespace,
                name=name,
                default_ip_pool_mode=True
            )

        top = pod_manager.get_pod_top_controller(pod, log)
    except SubnetControlPlaneError as e:
        log.error(f"Failed to resolve subnet config: {e.message}")
        raise e.to_http_exception()

    log = log.with_fields(Controller=f"{top.kind.value}/{top.name}")
    count = pod_count(top.kind, top.app)
    desired = desired_pool_ip_number(anno_config, count) if count is not None else None

    log.info(f"Resolved pod count {count}, desired IP number {desired}")

    return PodSubnetConfigResponse(
        namespace=namespace,
        name=name,
        default_ip_pool_mode=False,
        subnet_config=anno_config,
        top_controller=TopControllerResponse(
            kind=top.kind.value,
            namespace=top.namespace,
            name=top.name,
            uid=top.uid
        ),
        pod_count=count,
        desired_ip_number=desired,
        auto_pools=build_auto_pools(anno_config, top)
    )
