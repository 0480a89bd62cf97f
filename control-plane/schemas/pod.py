# control-plane/schemas/pod.py
"""
Pod subnet resolution schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

from .annotation import PodSubnetAnnoConfig


class TopControllerResponse(BaseModel):
    """Resolved top controller of a pod"""
    kind: str = Field(..., examples=["Deployment"])
    namespace: str
    name: str
    uid: Optional[str] = None


class AutoPoolResponse(BaseModel):
    """Auto-created IPPool a pod's workload draws from"""
    interface: str = Field(..., examples=["eth0"])
    ip_version: int = Field(..., examples=[4])
    subnet: str = Field(..., description="SpiderSubnet name")
    pool_name: str = Field(..., examples=["auto-deployment-default-nginx-v4-eth0-7e6f0ab12cd3"])


class PodSubnetConfigResponse(BaseModel):
    """
    Subnet decision for one pod
    Default IPPool mode pods carry no subnet config and no auto pools
    """
    namespace: str
    name: str
    default_ip_pool_mode: bool
    subnet_config: Optional[PodSubnetAnnoConfig] = None
    top_controller: Optional[TopControllerResponse] = None
    pod_count: Optional[int] = Field(None, description="Pods the top controller expects, null for Unknown controllers")
    desired_ip_number: Optional[int] = Field(None, description="IPs each auto-created IPPool should hold")
    auto_pools: List[AutoPoolResponse] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "namespace": "default",
                "name": "nginx-7c5ddbdf54-x2x7q",
                "default_ip_pool_mode": False,
                "subnet_config": {
                    "subnets": {"mode": "single", "item": {"interface": "eth0", "ipv4": ["subnet-v4"], "ipv6": []}},
                    "ip_number": {"kind": "flexible", "value": 1},
                    "reclaim_ip_pool": True
                },
                "top_controller": {
                    "kind": "Deployment",
                    "namespace": "default",
                    "name": "nginx",
                    "uid": "2f4a53c1-0a3e-4c5e-9d7b-7e6f0ab12cd3"
                },
                "pod_count": 3,
                "desired_ip_number": 4,
                "auto_pools": [
                    {
                        "interface": "eth0",
                        "ip_version": 4,
                        "subnet": "subnet-v4",
                        "pool_name": "auto-deployment-default-nginx-v4-eth0-7e6f0ab12cd3"
                    }
                ]
            }
        }
    )
