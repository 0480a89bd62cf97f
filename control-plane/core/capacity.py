# control-plane/core/capacity.py
"""
Free-Capacity Calculator
"""

from typing import List

from schemas.subnet import SpiderSubnet
from .exceptions import IPRangeError
from .iprange import IPAddress, parse_ip_ranges, assemble_total_ips, ips_diff_set


def gen_subnet_free_ips(subnet: SpiderSubnet) -> List[IPAddress]:
    """
    Addresses of the subnet not yet delegated to any controlled IPPool

    free = (spec.ips - spec.excludeIPs) - union(status.controlledIPPools[*].ips)

    Recomputed on every call from the given snapshot; nothing is cached or
    written back to the subnet.

    Raises:
        IPRangeError: ipVersion is unset or a range string is malformed
    """
    ip_version = subnet.spec.ip_version
    if ip_version is None:
        raise IPRangeError(f"Subnet '{subnet.name}' has no spec.ipVersion")

    used: List[str] = []
    for pool in subnet.status.controlled_ip_pools.values():
        used.extend(pool.ips)

    used_ips = parse_ip_ranges(ip_version, used)
    total_ips = assemble_total_ips(ip_version, subnet.spec.ips, subnet.spec.exclude_ips)

    return ips_diff_set(total_ips, used_ips, True)
