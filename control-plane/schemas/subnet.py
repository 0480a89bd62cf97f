# control-plane/schemas/subnet.py
"""
SpiderSubnet custom resource schemas
Field aliases follow the CRD's camelCase wire names
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime


class ObjectMeta(BaseModel):
    """Subset of Kubernetes ObjectMeta the webhook reads or writes"""
    name: str = ""
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = Field(None, alias="resourceVersion")
    generation: Optional[int] = None
    deletion_timestamp: Optional[datetime] = Field(None, alias="deletionTimestamp")
    finalizers: List[str] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Route(BaseModel):
    """Static route handed to pods drawing from the subnet"""
    dst: str = Field(..., description="Destination CIDR", examples=["172.16.0.0/16"])
    gw: str = Field(..., description="Next hop inside the subnet", examples=["10.6.0.1"])


class SubnetSpec(BaseModel):
    """Declared address space of a SpiderSubnet"""
    ip_version: Optional[int] = Field(None, alias="ipVersion", description="4 or 6")
    subnet: str = Field(..., description="Subnet CIDR", examples=["10.6.0.0/16"])
    ips: List[str] = Field(
        default_factory=list,
        description="Usable IP ranges",
        examples=[["10.6.0.10-10.6.0.100"]]
    )
    exclude_ips: List[str] = Field(default_factory=list, alias="excludeIPs")
    gateway: Optional[str] = None
    vlan: Optional[int] = None
    routes: List[Route] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class PoolIPPreAllocation(BaseModel):
    """Addresses a subnet has delegated to one controlled IPPool"""
    ips: List[str] = Field(default_factory=list)


class SubnetStatus(BaseModel):
    controlled_ip_pools: Dict[str, PoolIPPreAllocation] = Field(
        default_factory=dict, alias="controlledIPPools"
    )
    total_ip_count: Optional[int] = Field(None, alias="totalIPCount")
    allocated_ip_count: Optional[int] = Field(None, alias="allocatedIPCount")

    model_config = ConfigDict(populate_by_name=True)


class SpiderSubnet(BaseModel):
    """
    SpiderSubnet resource
    Cluster scoped address space that auto-created IPPools are carved from
    """
    api_version: str = Field("spiderpool.spidernet.io/v1", alias="apiVersion")
    kind: str = "SpiderSubnet"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: SubnetSpec
    status: SubnetStatus = Field(default_factory=SubnetStatus)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "apiVersion": "spiderpool.spidernet.io/v1",
                "kind": "SpiderSubnet",
                "metadata": {"name": "default-v4-subnet"},
                "spec": {
                    "ipVersion": 4,
                    "subnet": "10.6.0.0/16",
                    "ips": ["10.6.0.10-10.6.0.100"],
                    "excludeIPs": ["10.6.0.50"],
                    "gateway": "10.6.0.1"
                },
                "status": {
                    "controlledIPPools": {
                        "auto-deployment-default-nginx-v4-eth0-ab12cd34ef56": {
                            "ips": ["10.6.0.10-10.6.0.12"]
                        }
                    }
                }
            }
        }
    )

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def is_terminating(self) -> bool:
        return self.metadata.deletion_timestamp is not None

    def has_finalizer(self, finalizer: str) -> bool:
        return finalizer in self.metadata.finalizers

    def to_k8s_dict(self) -> dict:
        """Wire form, as stored in the API server"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SubnetFreeIPsResponse(BaseModel):
    """Free capacity of one subnet"""
    name: str
    ip_version: int
    free_ip_count: int
    free_ips: List[str] = Field(..., description="Compacted free IP ranges")
