# control-plane/core/subnet_webhook.py
"""
SpiderSubnet admission webhook

Defaulting is best effort and never denies a request; validation is the
enforcement point and reports every violation of a request at once.
"""

import ipaddress
from typing import Dict, List, Optional

from kubernetes.client.exceptions import ApiException

from config import settings
from schemas.subnet import SpiderSubnet
from .constants import SPIDER_FINALIZER, SPIDER_SUBNET_KIND, IPV4, IPV6
from .exceptions import (
    AdmissionForbiddenError,
    AdmissionInvalidError,
    FieldError,
    IPRangeError,
    field_forbidden,
    field_internal,
    field_invalid,
    field_required,
)
from .iprange import (
    contains_ip_range,
    intervals_contain,
    ip_version_of_cidr,
    is_ip_range,
    merge_ip_ranges,
    parse_cidr,
    uncovered_ip_ranges,
    usable_intervals,
)
from .logutils import LoggerLike

MAX_VLAN_ID = 4094


class SubnetWebhook:
    """
    Mutating and validating hooks for SpiderSubnet

    Args:
        store: Object store used to list existing subnets on create,
               None skips the CIDR overlap check
        enable_ipv4 / enable_ipv6: Default to the cluster settings
    """

    def __init__(self, store=None, enable_ipv4: Optional[bool] = None, enable_ipv6: Optional[bool] = None):
        self.store = store
        self.enable_ipv4 = settings.ENABLE_IPV4 if enable_ipv4 is None else enable_ipv4
        self.enable_ipv6 = settings.ENABLE_IPV6 if enable_ipv6 is None else enable_ipv6

    # === Mutating ===

    def default(self, subnet: SpiderSubnet, log: LoggerLike) -> SpiderSubnet:
        """
        Return the defaulted subnet

        On failure the subnet is returned untouched and validation gets to
        reject it.
        """
        log.debug(f"Request Subnet: {subnet.to_k8s_dict()}")
        try:
            return self.mutate_subnet(subnet, log)
        except IPRangeError as e:
            log.error(f"Failed to mutate Subnet: {e}")
            return subnet

    def mutate_subnet(self, subnet: SpiderSubnet, log: LoggerLike) -> SpiderSubnet:
        if subnet.is_terminating:
            log.info("Terminating Subnet, nothing to mutate")
            return subnet

        mutated = subnet.model_copy(deep=True)
        spec = mutated.spec

        if not mutated.has_finalizer(SPIDER_FINALIZER):
            mutated.metadata.finalizers.append(SPIDER_FINALIZER)
            log.debug(f"Add finalizer '{SPIDER_FINALIZER}'")

        if spec.ip_version is None:
            spec.ip_version = ip_version_of_cidr(spec.subnet)
            log.debug(f"Set 'spec.ipVersion' to {spec.ip_version}")

        if spec.ips:
            merged = merge_ip_ranges(spec.ip_version, spec.ips)
            spec.ips = merged
            log.debug(f"Merge 'spec.ips' to {merged}")

        if spec.exclude_ips:
            merged = merge_ip_ranges(spec.ip_version, spec.exclude_ips)
            spec.exclude_ips = merged
            log.debug(f"Merge 'spec.excludeIPs' to {merged}")

        return mutated

    # === Validating ===

    def validate_create(self, subnet: SpiderSubnet, log: LoggerLike) -> None:
        """
        Raises:
            AdmissionInvalidError: with all violations of the new subnet
        """
        log.debug(f"Request Subnet: {subnet.to_k8s_dict()}")

        errs = self.validate_subnet_spec(subnet)
        if not errs:
            errs.extend(self.validate_subnet_cidr_overlap(subnet, log))

        if errs:
            error = AdmissionInvalidError(SPIDER_SUBNET_KIND, subnet.name, errs)
            log.error(f"Failed to create Subnet: {error.message}")
            raise error

    def validate_update(self, old_subnet: SpiderSubnet, new_subnet: SpiderSubnet, log: LoggerLike) -> None:
        """
        Raises:
            AdmissionForbiddenError: the subnet is terminating and the update
                changes anything but its finalizers, or keeps ours
            AdmissionInvalidError: with all violations of the new subnet
        """
        log.debug(f"Request old Subnet: {old_subnet.to_k8s_dict()}")
        log.debug(f"Request new Subnet: {new_subnet.to_k8s_dict()}")

        if new_subnet.is_terminating:
            if new_subnet.has_finalizer(SPIDER_FINALIZER):
                raise AdmissionForbiddenError("cannot update a terminating Subnet")
            if new_subnet.spec != old_subnet.spec:
                raise AdmissionForbiddenError("cannot change the spec of a terminating Subnet")
            old_meta, new_meta = old_subnet.metadata, new_subnet.metadata
            if new_meta.labels != old_meta.labels or new_meta.annotations != old_meta.annotations:
                raise AdmissionForbiddenError("cannot change the metadata of a terminating Subnet")
            # finalizers may only be dropped while deletion is pending
            if not set(new_meta.finalizers).issubset(old_meta.finalizers):
                raise AdmissionForbiddenError("cannot add finalizers to a terminating Subnet")
            return

        errs: List[FieldError] = []
        if old_subnet.spec.ip_version is not None and new_subnet.spec.ip_version != old_subnet.spec.ip_version:
            errs.append(field_forbidden("spec.ipVersion", "field is immutable"))
        if new_subnet.spec.subnet != old_subnet.spec.subnet:
            errs.append(field_forbidden("spec.subnet", "field is immutable"))

        spec_errs = self.validate_subnet_spec(new_subnet)
        errs.extend(spec_errs)
        if not spec_errs:
            errs.extend(self.validate_subnet_in_use(old_subnet, new_subnet))

        if errs:
            error = AdmissionInvalidError(SPIDER_SUBNET_KIND, new_subnet.name, errs)
            log.error(f"Failed to update Subnet: {error.message}")
            raise error

    def validate_delete(self, subnet: SpiderSubnet, log: LoggerLike) -> None:
        """Always allowed, the finalizer holds deletion until pools are reclaimed"""
        return None

    # === Structural checks ===

    def validate_subnet_spec(self, subnet: SpiderSubnet) -> List[FieldError]:
        spec = subnet.spec
        version = spec.ip_version

        if version is None:
            return [field_required("spec.ipVersion", "IP version is required")]
        if version not in (IPV4, IPV6):
            return [field_invalid("spec.ipVersion", version, "supported values: 4, 6")]
        if version == IPV4 and not self.enable_ipv4:
            return [field_forbidden("spec.ipVersion", "IPv4 is disabled")]
        if version == IPV6 and not self.enable_ipv6:
            return [field_forbidden("spec.ipVersion", "IPv6 is disabled")]

        try:
            network = parse_cidr(version, spec.subnet)
        except IPRangeError as e:
            return [field_invalid("spec.subnet", spec.subnet, e.message)]

        errs: List[FieldError] = []
        if not spec.ips:
            errs.append(field_required("spec.ips", "at least one IP range is required"))
        errs.extend(_validate_ranges("spec.ips", version, spec.subnet, spec.ips))
        errs.extend(_validate_ranges("spec.excludeIPs", version, spec.subnet, spec.exclude_ips))

        if spec.gateway is not None:
            errs.extend(_validate_gateway(version, network, spec.gateway, spec.ips, spec.exclude_ips, not errs))

        errs.extend(_validate_routes(version, network, spec.routes))

        if spec.vlan is not None and not 0 <= spec.vlan <= MAX_VLAN_ID:
            errs.append(field_invalid("spec.vlan", spec.vlan, f"must be in range [0, {MAX_VLAN_ID}]"))

        return errs

    def validate_subnet_cidr_overlap(self, subnet: SpiderSubnet, log: LoggerLike) -> List[FieldError]:
        """A new subnet must not overlap any existing subnet of its IP version"""
        if self.store is None:
            return []

        try:
            existing = self.store.list_subnets()
        except ApiException as e:
            log.error(f"Failed to list Subnets: {e}")
            return [field_internal("spec.subnet", f"failed to list Subnets: {e.reason}")]

        network = parse_cidr(subnet.spec.ip_version, subnet.spec.subnet)
        errs: List[FieldError] = []
        for other in existing:
            if other.name == subnet.name or other.spec.ip_version != subnet.spec.ip_version:
                continue
            try:
                other_network = parse_cidr(other.spec.ip_version, other.spec.subnet)
            except IPRangeError:
                log.warning(f"Skip Subnet '{other.name}' with invalid spec.subnet '{other.spec.subnet}'")
                continue
            if network.overlaps(other_network):
                errs.append(field_invalid(
                    "spec.subnet",
                    subnet.spec.subnet,
                    f"overlaps with Subnet '{other.name}' which subnet is '{other.spec.subnet}'",
                ))
        return errs

    def validate_subnet_in_use(self, old_subnet: SpiderSubnet, new_subnet: SpiderSubnet) -> List[FieldError]:
        """Addresses already delegated to IPPools must stay inside the subnet"""
        version = new_subnet.spec.ip_version
        pools = old_subnet.status.controlled_ip_pools
        if not pools:
            return []

        usable = usable_intervals(version, new_subnet.spec.ips, new_subnet.spec.exclude_ips)

        orphaned_by_pool: Dict[str, List[str]] = {}
        for pool_name, allocation in sorted(pools.items()):
            try:
                orphaned = uncovered_ip_ranges(version, allocation.ips, usable)
            except IPRangeError as e:
                return [field_internal("status.controlledIPPools", f"IPPool '{pool_name}': {e.message}")]
            if orphaned:
                orphaned_by_pool[pool_name] = orphaned

        if not orphaned_by_pool:
            return []

        detail = "; ".join(
            f"IPs {ranges} are still in use by IPPool '{pool_name}'"
            for pool_name, ranges in orphaned_by_pool.items()
        )
        return [field_forbidden("spec.ips", detail)]


def _validate_ranges(path: str, version: int, cidr: str, ranges: List[str]) -> List[FieldError]:
    errs: List[FieldError] = []
    for i, ip_range in enumerate(ranges):
        field = f"{path}[{i}]"
        if not is_ip_range(version, ip_range):
            errs.append(field_invalid(field, ip_range, f"not a valid IPv{version} range"))
        elif not contains_ip_range(version, cidr, ip_range):
            errs.append(field_invalid(field, ip_range, f"does not pertain to subnet '{cidr}'"))
    return errs


def _validate_gateway(version, network, gateway, ips, exclude_ips, ranges_valid: bool) -> List[FieldError]:
    try:
        address = ipaddress.ip_address(gateway)
    except ValueError:
        return [field_invalid("spec.gateway", gateway, "not a valid IP address")]

    if address.version != version:
        return [field_invalid("spec.gateway", gateway, f"not an IPv{version} address")]
    if address not in network:
        return [field_invalid("spec.gateway", gateway, f"does not pertain to subnet '{network}'")]

    if ranges_valid and intervals_contain(usable_intervals(version, ips, exclude_ips), address):
        return [field_invalid("spec.gateway", gateway, "conflicts with 'spec.ips'")]
    return []


def _validate_routes(version, network, routes) -> List[FieldError]:
    errs: List[FieldError] = []
    seen_dst = set()
    for i, route in enumerate(routes):
        try:
            dst = parse_cidr(version, route.dst)
        except IPRangeError as e:
            errs.append(field_invalid(f"spec.routes[{i}].dst", route.dst, e.message))
        else:
            if dst in seen_dst:
                errs.append(field_invalid(f"spec.routes[{i}].dst", route.dst, "duplicate route destination"))
            seen_dst.add(dst)

        try:
            gw = ipaddress.ip_address(route.gw)
        except ValueError:
            errs.append(field_invalid(f"spec.routes[{i}].gw", route.gw, "not a valid IP address"))
            continue
        if gw.version != version or gw not in network:
            errs.append(field_invalid(f"spec.routes[{i}].gw", route.gw, f"does not pertain to subnet '{network}'"))
    return errs
