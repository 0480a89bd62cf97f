# control-plane/core/subnet_anno.py
"""
Annotation Resolver - builds a pod's subnet selection from its annotations
"""

import re
from typing import Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from config import settings
from schemas.annotation import (
    AnnoSubnetItem,
    SingleSubnet,
    MultipleSubnets,
    FixedIPNumber,
    FlexibleIPNumber,
    PodSubnetAnnoConfig,
)
from .constants import (
    ANNO_SPIDER_SUBNETS,
    ANNO_SPIDER_SUBNET,
    ANNO_SPIDER_SUBNET_POOL_IP_NUMBER,
    ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL,
)
from .exceptions import MalformedAnnotationError, SubnetAnnotationError, InvalidIPNumberError
from .logutils import LoggerLike

_MULTIPLE_SUBNETS = TypeAdapter(Optional[List[AnnoSubnetItem]])
_SINGLE_SUBNET = TypeAdapter(Optional[AnnoSubnetItem])

_FIXED_IP_NUMBER = re.compile(r"([0-9]+)")
_FLEXIBLE_IP_NUMBER = re.compile(r"\+([0-9]+)|([0-9]+)\+")

# strconv.ParseBool vocabulary
_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def get_subnet_anno_config(
    pod_annotations: Dict[str, str],
    log: LoggerLike,
    default_interface: Optional[str] = None,
    default_flexible_ip_number: Optional[int] = None
) -> Optional[PodSubnetAnnoConfig]:
    """
    Resolve a pod's SpiderSubnet configuration

    Args:
        pod_annotations: Pod metadata annotations
        log: Request-scoped logger
        default_interface: Overrides the cluster default interface name
        default_flexible_ip_number: Overrides the cluster default flexible IP number

    Returns:
        The normalized config, or None when the pod carries no subnet
        annotation and falls back to the default IPPool mode

    Raises:
        MalformedAnnotationError: a subnet annotation is not valid JSON
        SubnetAnnotationError: the decoded selection breaks a structural rule
    """
    if default_interface is None:
        default_interface = settings.CLUSTER_DEFAULT_INTERFACE_NAME
    if default_flexible_ip_number is None:
        default_flexible_ip_number = settings.CLUSTER_SUBNET_DEFAULT_FLEXIBLE_IP_NUMBER

    multiple: Optional[List[AnnoSubnetItem]] = None
    single: Optional[AnnoSubnetItem] = None

    # annotation: ipam.spidernet.io/subnets
    if ANNO_SPIDER_SUBNETS in pod_annotations:
        value = pod_annotations[ANNO_SPIDER_SUBNETS]
        log.debug(f"found SpiderSubnet feature annotation '{ANNO_SPIDER_SUBNETS}' value '{value}'")
        try:
            multiple = _MULTIPLE_SUBNETS.validate_json(value) or []
        except ValidationError as e:
            raise MalformedAnnotationError(ANNO_SPIDER_SUBNETS, value, e)

    # annotation: ipam.spidernet.io/subnet
    elif ANNO_SPIDER_SUBNET in pod_annotations:
        value = pod_annotations[ANNO_SPIDER_SUBNET]
        log.debug(f"found SpiderSubnet feature annotation '{ANNO_SPIDER_SUBNET}' value '{value}'")
        try:
            single = _SINGLE_SUBNET.validate_json(value)
        except ValidationError as e:
            raise MalformedAnnotationError(ANNO_SPIDER_SUBNET, value, e)
        if single is None:
            raise SubnetAnnotationError(f"no subnets specified in annotation '{ANNO_SPIDER_SUBNET}'")

    else:
        log.debug("no SpiderSubnet feature annotation found, use default IPAM mode")
        return None

    # annotation: ipam.spidernet.io/ippool-ip-number
    if ANNO_SPIDER_SUBNET_POOL_IP_NUMBER in pod_annotations:
        pool_ip_num = pod_annotations[ANNO_SPIDER_SUBNET_POOL_IP_NUMBER]
        log.debug(f"use IPPool IP number '{pool_ip_num}'")
        is_flexible, ip_num = get_pool_ip_number(pool_ip_num)
        if is_flexible:
            ip_number = FlexibleIPNumber(value=ip_num)
        else:
            ip_number = FixedIPNumber(value=ip_num)
    else:
        log.debug(
            f"no specified IPPool IP number, default to use cluster default subnet "
            f"flexible IP number: {default_flexible_ip_number}"
        )
        ip_number = FlexibleIPNumber(value=default_flexible_ip_number)

    # annotation: ipam.spidernet.io/ippool-reclaim
    reclaim_ip_pool = should_reclaim_ip_pool(pod_annotations)

    if multiple is not None:
        subnets = _mutate_and_validate_multiple(multiple)
    else:
        subnets = _mutate_and_validate_single(single, default_interface)

    return PodSubnetAnnoConfig(
        subnets=subnets,
        ip_number=ip_number,
        reclaim_ip_pool=reclaim_ip_pool,
    )


def _truncate(item: AnnoSubnetItem, context: str) -> AnnoSubnetItem:
    """Keep only the first subnet per IP version, rejecting blank ones"""
    ipv4 = item.ipv4[:1]
    ipv6 = item.ipv6[:1]

    if ipv4 and not ipv4[0].strip():
        raise SubnetAnnotationError(f"it's invalid to set an empty IPv4 subnet with {context}")
    if ipv6 and not ipv6[0].strip():
        raise SubnetAnnotationError(f"it's invalid to set an empty IPv6 subnet with {context}")
    if not ipv4 and not ipv6:
        raise SubnetAnnotationError(
            f"it's invalid to set dual empty subnet with {context}: {item.model_dump()}"
        )

    return item.model_copy(update={"ipv4": ipv4, "ipv6": ipv6})


def _mutate_and_validate_multiple(items: List[AnnoSubnetItem]) -> MultipleSubnets:
    if not items:
        raise SubnetAnnotationError(f"no subnets specified in annotation '{ANNO_SPIDER_SUBNETS}'")

    normalized = [_truncate(item, "multiple interfaces") for item in items]

    v4_subnets = [item.ipv4[0] for item in normalized if item.ipv4]
    v6_subnets = [item.ipv6[0] for item in normalized if item.ipv6]
    if contains_duplicate(v4_subnets) or contains_duplicate(v6_subnets):
        raise SubnetAnnotationError(
            "it's invalid to use the same subnet for multiple interfaces",
            {"ipv4": v4_subnets, "ipv6": v6_subnets},
        )

    interfaces = [item.interface for item in normalized]
    if contains_duplicate(interfaces):
        raise SubnetAnnotationError(
            "it's invalid to use the same Interface name for multiple interfaces",
            {"interfaces": interfaces},
        )

    return MultipleSubnets(items=normalized)


def _mutate_and_validate_single(item: AnnoSubnetItem, default_interface: str) -> SingleSubnet:
    normalized = _truncate(item, "single interface")
    if not normalized.interface:
        normalized = normalized.model_copy(update={"interface": default_interface})
    return SingleSubnet(item=normalized)


def get_pool_ip_number(value: str) -> Tuple[bool, int]:
    """
    Parse the IPPool IP number annotation

    "5" is a fixed count, "5+" (or "+5") is flexible: at least 5, growing
    with the workload.

    Returns:
        Tuple of (is_flexible, ip_number)

    Raises:
        InvalidIPNumberError: anything but digits with at most one leading
            or trailing '+'
    """
    fixed = _FIXED_IP_NUMBER.fullmatch(value)
    if fixed:
        return False, int(fixed.group(1))

    flexible = _FLEXIBLE_IP_NUMBER.fullmatch(value)
    if flexible:
        return True, int(flexible.group(1) or flexible.group(2))

    if value.count("+") > 1:
        raise InvalidIPNumberError(value)
    raise InvalidIPNumberError(value, "IP number must be a non-negative integer with an optional leading or trailing '+'")


def should_reclaim_ip_pool(pod_annotations: Dict[str, str]) -> bool:
    """Annotation 'ipam.spidernet.io/ippool-reclaim', true when absent"""
    value = pod_annotations.get(ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL)
    if value is None:
        return True
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise SubnetAnnotationError(
        f"failed to parse spider subnet '{ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL}', "
        f"error: invalid syntax '{value}'"
    )


def is_default_ip_pool_mode(subnet_config: Optional[PodSubnetAnnoConfig]) -> bool:
    """Whether the pod uses the default IPPool mode instead of SpiderSubnet"""
    if subnet_config is None:
        return True

    # SpiderSubnet with multiple interfaces
    if subnet_config.multiple_subnets:
        return False

    # SpiderSubnet with single interface
    if subnet_config.single_subnet is not None:
        return False

    return False


def contains_duplicate(values: List[str]) -> bool:
    return len(set(values)) != len(values)
