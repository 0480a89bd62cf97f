# control-plane/api/v1/subnets.py
"""
SpiderSubnet Capacity Endpoints
"""

from fastapi import APIRouter, Depends, Path
import logging

from schemas.base import ErrorResponse
from schemas.subnet import SubnetFreeIPsResponse
from core.capacity import gen_subnet_free_ips
from core.exceptions import IPRangeError
from core.iprange import convert_ips_to_ip_ranges
from k8s.client import KubeObjectStore
from api.deps import get_object_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{name}/free-ips",
    response_model=SubnetFreeIPsResponse,
    responses={
        400: {"description": "Subnet holds malformed IP ranges", "model": ErrorResponse},
        404: {"description": "Subnet not found", "model": ErrorResponse},
    },
    summary="Free IPs of a subnet",
    description="Addresses of the subnet not delegated to any controlled IPPool, as compacted ranges"
)
def get_subnet_free_ips(
    name: str = Path(..., description="SpiderSubnet name"),
    store: KubeObjectStore = Depends(get_object_store)
):
    """Free-capacity query, computed from the current subnet object"""
    subnet = store.get_subnet(name)

    try:
        free_ips = gen_subnet_free_ips(subnet)
    except IPRangeError as e:
        logger.error(f"Failed to calculate free IPs of Subnet '{name}': {e.message}")
        raise e.to_http_exception()

    return SubnetFreeIPsResponse(
        name=subnet.name,
        ip_version=subnet.spec.ip_version,
        free_ip_count=len(free_ips),
        free_ips=convert_ips_to_ip_ranges(subnet.spec.ip_version, free_ips)
    )
