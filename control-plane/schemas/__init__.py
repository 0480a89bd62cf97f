"""
Pydantic Schemas for the Subnet Control Plane
Organized by domain: subnets, annotations, pods, admission
"""

from .base import ErrorResponse, HealthResponse
from .subnet import (
    ObjectMeta,
    Route,
    SubnetSpec,
    PoolIPPreAllocation,
    SubnetStatus,
    SpiderSubnet,
    SubnetFreeIPsResponse,
)
from .annotation import (
    AnnoSubnetItem,
    SingleSubnet,
    MultipleSubnets,
    FixedIPNumber,
    FlexibleIPNumber,
    PodSubnetAnnoConfig,
)
from .pod import (
    TopControllerResponse,
    AutoPoolResponse,
    PodSubnetConfigResponse,
)
from .admission import (
    AdmissionRequest,
    AdmissionResponse,
    AdmissionReview,
    Status,
    StatusCause,
    StatusDetails,
)

__all__ = [
    # Base
    "ErrorResponse",
    "HealthResponse",
    # Subnet
    "ObjectMeta",
    "Route",
    "SubnetSpec",
    "PoolIPPreAllocation",
    "SubnetStatus",
    "SpiderSubnet",
    "SubnetFreeIPsResponse",
    # Annotation
    "AnnoSubnetItem",
    "SingleSubnet",
    "MultipleSubnets",
    "FixedIPNumber",
    "FlexibleIPNumber",
    "PodSubnetAnnoConfig",
    # Pod
    "TopControllerResponse",
    "AutoPoolResponse",
    "PodSubnetConfigResponse",
    # Admission
    "AdmissionRequest",
    "AdmissionResponse",
    "AdmissionReview",
    "Status",
    "StatusCause",
    "StatusDetails",
]
