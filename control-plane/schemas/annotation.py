# control-plane/schemas/annotation.py
"""
Pod subnet annotation schemas

The subnet selection and the pool size are tagged variants, so a config can
never hold both a single and a multiple subnet selection, nor both a fixed and
a flexible IP number.
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Union, Literal, Annotated


class AnnoSubnetItem(BaseModel):
    """
    One interface's subnet selection
    JSON form: {"interface": "eth0", "ipv4": ["subnet-a"], "ipv6": ["subnet-b"]}
    """
    interface: str = ""
    ipv4: List[str] = Field(default_factory=list)
    ipv6: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator('ipv4', 'ipv6', mode='before')
    @classmethod
    def null_as_empty(cls, v):
        """JSON null means no subnet for that IP version"""
        return [] if v is None else v

    @property
    def ipv4_subnet(self) -> Optional[str]:
        return self.ipv4[0] if self.ipv4 else None

    @property
    def ipv6_subnet(self) -> Optional[str]:
        return self.ipv6[0] if self.ipv6 else None


class SingleSubnet(BaseModel):
    """Annotation 'ipam.spidernet.io/subnet'"""
    mode: Literal["single"] = "single"
    item: AnnoSubnetItem

    model_config = ConfigDict(frozen=True)


class MultipleSubnets(BaseModel):
    """Annotation 'ipam.spidernet.io/subnets', one entry per interface"""
    mode: Literal["multiple"] = "multiple"
    items: List[AnnoSubnetItem] = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)


class FixedIPNumber(BaseModel):
    """Pool holds exactly this many IPs ('5')"""
    kind: Literal["fixed"] = "fixed"
    value: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class FlexibleIPNumber(BaseModel):
    """Pool holds the workload's pod count plus this many IPs ('+5')"""
    kind: Literal["flexible"] = "flexible"
    value: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


SubnetSelection = Annotated[Union[SingleSubnet, MultipleSubnets], Field(discriminator="mode")]
IPNumber = Annotated[Union[FixedIPNumber, FlexibleIPNumber], Field(discriminator="kind")]


class PodSubnetAnnoConfig(BaseModel):
    """Normalized subnet selection of one pod"""
    subnets: SubnetSelection
    ip_number: IPNumber
    reclaim_ip_pool: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def single_subnet(self) -> Optional[AnnoSubnetItem]:
        if isinstance(self.subnets, SingleSubnet):
            return self.subnets.item
        return None

    @property
    def multiple_subnets(self) -> List[AnnoSubnetItem]:
        if isinstance(self.subnets, MultipleSubnets):
            return list(self.subnets.items)
        return []

    @property
    def assign_ip_num(self) -> int:
        if isinstance(self.ip_number, FixedIPNumber):
            return self.ip_number.value
        return 0

    @property
    def flexible_ip_num(self) -> Optional[int]:
        if isinstance(self.ip_number, FlexibleIPNumber):
            return self.ip_number.value
        return None

    def interfaces(self) -> List[AnnoSubnetItem]:
        """Selections in interface order"""
        if isinstance(self.subnets, SingleSubnet):
            return [self.subnets.item]
        return list(self.subnets.items)
