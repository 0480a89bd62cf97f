"""Tests for the pod subnet annotation resolver."""

import json

import pytest

from core.constants import (
    ANNO_SPIDER_SUBNET,
    ANNO_SPIDER_SUBNETS,
    ANNO_SPIDER_SUBNET_POOL_IP_NUMBER,
    ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL,
)
from core.exceptions import (
    InvalidIPNumberError,
    MalformedAnnotationError,
    SubnetAnnotationError,
)
from core.subnet_anno import (
    contains_duplicate,
    get_pool_ip_number,
    get_subnet_anno_config,
    is_default_ip_pool_mode,
    should_reclaim_ip_pool,
)
from schemas.annotation import (
    AnnoSubnetItem,
    FixedIPNumber,
    FlexibleIPNumber,
    MultipleSubnets,
    PodSubnetAnnoConfig,
    SingleSubnet,
)


def _multi(*items) -> str:
    return json.dumps(list(items))


class TestGetSubnetAnnoConfig:
    """Tests for get_subnet_anno_config."""

    def test_no_annotation(self, log) -> None:
        """Test pods without subnet annotations get no config."""
        assert get_subnet_anno_config({"other": "value"}, log) is None

    def test_single_defaults(self, log) -> None:
        """Test single mode fills the default interface and flexible IP number."""
        annotations = {ANNO_SPIDER_SUBNET: json.dumps({"ipv4": ["subnet-v4"]})}

        config = get_subnet_anno_config(annotations, log, default_flexible_ip_number=1)

        assert config.single_subnet == AnnoSubnetItem(interface="eth0", ipv4=["subnet-v4"])
        assert config.multiple_subnets == []
        assert config.ip_number == FlexibleIPNumber(value=1)
        assert config.reclaim_ip_pool is True

    def test_single_custom_default_interface(self, log) -> None:
        """Test the default interface can be overridden."""
        annotations = {ANNO_SPIDER_SUBNET: json.dumps({"ipv6": ["subnet-v6"]})}

        config = get_subnet_anno_config(annotations, log, default_interface="net0")

        assert config.single_subnet.interface == "net0"
        assert config.single_subnet.ipv6 == ["subnet-v6"]

    def test_single_truncates_to_first_subnet(self, log) -> None:
        """Test only the first subnet per IP version is kept."""
        annotations = {
            ANNO_SPIDER_SUBNET: json.dumps({
                "interface": "eth0",
                "ipv4": ["subnet-a", "subnet-b"],
                "ipv6": ["subnet-c", "subnet-d"],
            })
        }

        config = get_subnet_anno_config(annotations, log)

        assert config.single_subnet.ipv4 == ["subnet-a"]
        assert config.single_subnet.ipv6 == ["subnet-c"]

    def test_multiple_wins_over_single(self, log) -> None:
        """Test the multiple subnets annotation takes precedence."""
        annotations = {
            ANNO_SPIDER_SUBNETS: _multi(
                {"interface": "eth0", "ipv4": ["subnet-a"]},
                {"interface": "net1", "ipv4": ["subnet-b"]},
            ),
            ANNO_SPIDER_SUBNET: json.dumps({"ipv4": ["subnet-c"]}),
        }

        config = get_subnet_anno_config(annotations, log)

        assert isinstance(config.subnets, MultipleSubnets)
        assert [item.interface for item in config.multiple_subnets] == ["eth0", "net1"]
        assert config.single_subnet is None

    def test_fixed_ip_number(self, log) -> None:
        """Test a plain number gives a fixed pool size."""
        annotations = {
            ANNO_SPIDER_SUBNET: json.dumps({"ipv4": ["subnet-v4"]}),
            ANNO_SPIDER_SUBNET_POOL_IP_NUMBER: "5",
        }

        config = get_subnet_anno_config(annotations, log)

        assert config.ip_number == FixedIPNumber(value=5)
        assert config.assign_ip_num == 5
        assert config.flexible_ip_num is None

    def test_flexible_ip_number(self, log) -> None:
        """Test a trailing plus gives a flexible pool size."""
        annotations = {
            ANNO_SPIDER_SUBNET: json.dumps({"ipv4": ["subnet-v4"]}),
            ANNO_SPIDER_SUBNET_POOL_IP_NUMBER: "3+",
        }

        config = get_subnet_anno_config(annotations, log)

        assert config.ip_number == FlexibleIPNumber(value=3)
        assert config.assign_ip_num == 0
        assert config.flexible_ip_num == 3

    def test_reclaim_false(self, log) -> None:
        """Test the reclaim annotation is honoured."""
        annotations = {
            ANNO_SPIDER_SUBNET: json.dumps({"ipv4": ["subnet-v4"]}),
            ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL: "false",
        }

        assert get_subnet_anno_config(annotations, log).reclaim_ip_pool is False

    def test_idempotent(self, log) -> None:
        """Test the same annotations always resolve to equal configs."""
        annotations = {
            ANNO_SPIDER_SUBNETS: _multi(
                {"interface": "eth0", "ipv4": ["subnet-a"], "ipv6": ["subnet-b"]},
            ),
            ANNO_SPIDER_SUBNET_POOL_IP_NUMBER: "+2",
        }

        assert get_subnet_anno_config(annotations, log) == get_subnet_anno_config(annotations, log)

    @pytest.mark.parametrize("annotation", [ANNO_SPIDER_SUBNETS, ANNO_SPIDER_SUBNET])
    def test_malformed_json(self, log, annotation) -> None:
        """Test undecodable annotations name the annotation and value."""
        with pytest.raises(MalformedAnnotationError) as exc_info:
            get_subnet_anno_config({annotation: "{not json"}, log)

        assert exc_info.value.annotation == annotation
        assert exc_info.value.value == "{not json"
        assert annotation in exc_info.value.message

    def test_single_null(self, log) -> None:
        """Test a null single annotation is rejected."""
        with pytest.raises(SubnetAnnotationError):
            get_subnet_anno_config({ANNO_SPIDER_SUBNET: "null"}, log)

    @pytest.mark.parametrize("value", ["[]", "null"])
    def test_multiple_empty(self, log, value) -> None:
        """Test an empty multiple annotation is rejected."""
        with pytest.raises(SubnetAnnotationError, match="no subnets specified"):
            get_subnet_anno_config({ANNO_SPIDER_SUBNETS: value}, log)

    def test_dual_empty_entry(self, log) -> None:
        """Test an entry without any subnet is rejected."""
        annotations = {ANNO_SPIDER_SUBNET: json.dumps({"interface": "eth0", "ipv4": [], "ipv6": None})}

        with pytest.raises(SubnetAnnotationError, match="dual empty"):
            get_subnet_anno_config(annotations, log)

    def test_blank_subnet(self, log) -> None:
        """Test a blank subnet name is rejected."""
        annotations = {ANNO_SPIDER_SUBNET: json.dumps({"ipv4": ["  "]})}

        with pytest.raises(SubnetAnnotationError, match="empty IPv4"):
            get_subnet_anno_config(annotations, log)

    def test_multiple_duplicate_subnet(self, log) -> None:
        """Test two interfaces may not share a subnet."""
        annotations = {
            ANNO_SPIDER_SUBNETS: _multi(
                {"interface": "eth0", "ipv4": ["subnet-a"]},
                {"interface": "net1", "ipv4": ["subnet-a"]},
            )
        }

        with pytest.raises(SubnetAnnotationError, match="same subnet"):
            get_subnet_anno_config(annotations, log)

    def test_multiple_duplicate_ipv6_subnet(self, log) -> None:
        """Test two interfaces may not share an IPv6 subnet."""
        annotations = {
            ANNO_SPIDER_SUBNETS: _multi(
                {"interface": "eth0", "ipv6": ["subnet-a"]},
                {"interface": "net1", "ipv6": ["subnet-a"]},
            )
        }

        with pytest.raises(SubnetAnnotationError, match="same subnet"):
            get_subnet_anno_config(annotations, log)

    def test_multiple_duplicate_interface(self, log) -> None:
        """Test two entries may not name the same interface."""
        annotations = {
            ANNO_SPIDER_SUBNETS: _multi(
                {"interface": "eth0", "ipv4": ["subnet-a"]},
                {"interface": "eth0", "ipv4": ["subnet-b"]},
            )
        }

        with pytest.raises(SubnetAnnotationError, match="same Interface name"):
            get_subnet_anno_config(annotations, log)

    def test_interface_names_are_case_sensitive(self, log) -> None:
        """Test interfaces differing only in case are distinct."""
        annotations = {
            ANNO_SPIDER_SUBNETS: _multi(
                {"interface": "eth0", "ipv4": ["subnet-a"]},
                {"interface": "ETH0", "ipv4": ["subnet-b"]},
            )
        }

        config = get_subnet_anno_config(annotations, log)
        assert len(config.multiple_subnets) == 2

    def test_invalid_ip_number(self, log) -> None:
        """Test a bad IP number annotation fails resolution."""
        annotations = {
            ANNO_SPIDER_SUBNET: json.dumps({"ipv4": ["subnet-v4"]}),
            ANNO_SPIDER_SUBNET_POOL_IP_NUMBER: "abc",
        }

        with pytest.raises(InvalidIPNumberError):
            get_subnet_anno_config(annotations, log)


class TestGetPoolIPNumber:
    """Tests for get_pool_ip_number."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("5", (False, 5)),
            ("0", (False, 0)),
            ("3+", (True, 3)),
            ("+3", (True, 3)),
        ],
    )
    def test_valid(self, value, expected) -> None:
        """Test fixed and flexible IP numbers."""
        assert get_pool_ip_number(value) == expected

    @pytest.mark.parametrize("value", ["1+2+", "1+2", "+1+", "abc", "", "+", "-1", "1.5", " 3"])
    def test_invalid(self, value) -> None:
        """Test malformed IP numbers are rejected."""
        with pytest.raises(InvalidIPNumberError):
            get_pool_ip_number(value)


class TestShouldReclaimIPPool:
    """Tests for should_reclaim_ip_pool."""

    def test_default_true(self) -> None:
        """Test pools are reclaimed unless told otherwise."""
        assert should_reclaim_ip_pool({}) is True

    @pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true_values(self, value) -> None:
        """Test every accepted spelling of true."""
        assert should_reclaim_ip_pool({ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL: value}) is True

    @pytest.mark.parametrize("value", ["0", "f", "F", "FALSE", "false", "False"])
    def test_false_values(self, value) -> None:
        """Test every accepted spelling of false."""
        assert should_reclaim_ip_pool({ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL: value}) is False

    @pytest.mark.parametrize("value", ["yes", "tRuE", ""])
    def test_invalid(self, value) -> None:
        """Test other values are rejected."""
        with pytest.raises(SubnetAnnotationError):
            should_reclaim_ip_pool({ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL: value})


class TestIsDefaultIPPoolMode:
    """Tests for is_default_ip_pool_mode."""

    def test_no_config(self) -> None:
        """Test pods without config use the default IPPool mode."""
        assert is_default_ip_pool_mode(None) is True

    def test_single(self) -> None:
        """Test single subnet pods use SpiderSubnet."""
        config = PodSubnetAnnoConfig(
            subnets=SingleSubnet(item=AnnoSubnetItem(interface="eth0", ipv4=["subnet-v4"])),
            ip_number=FlexibleIPNumber(value=1),
        )
        assert is_default_ip_pool_mode(config) is False

    def test_multiple(self) -> None:
        """Test multiple subnet pods use SpiderSubnet."""
        config = PodSubnetAnnoConfig(
            subnets=MultipleSubnets(items=[AnnoSubnetItem(interface="eth0", ipv4=["subnet-v4"])]),
            ip_number=FixedIPNumber(value=2),
        )
        assert is_default_ip_pool_mode(config) is False


class TestContainsDuplicate:
    """Tests for contains_duplicate."""

    def test_duplicate(self) -> None:
        assert contains_duplicate(["a", "b", "a"]) is True

    def test_unique(self) -> None:
        assert contains_duplicate(["a", "b"]) is False
