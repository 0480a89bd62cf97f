# control-plane/core/iprange.py
"""
IP range arithmetic

Range strings are either a single address ("10.0.0.1") or an inclusive
range ("10.0.0.1-10.0.0.10") of one IP version. Everything here is a pure
function over those strings and ipaddress objects.
"""

import bisect
import ipaddress
from typing import Iterable, List, Sequence, Tuple, Union

from .constants import IPV4, IPV6
from .exceptions import IPRangeError

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

# upper bound of any IPv4 or IPv6 address as an integer
_MAX_ADDRESS_VALUE = 2 ** 128

_ADDRESS_CLASSES = {
    IPV4: ipaddress.IPv4Address,
    IPV6: ipaddress.IPv6Address,
}


def check_ip_version(version: int) -> None:
    if version not in (IPV4, IPV6):
        raise IPRangeError(f"invalid IP version '{version}'")


def _parse_address(version: int, value: str) -> IPAddress:
    try:
        return _ADDRESS_CLASSES[version](value.strip())
    except ipaddress.AddressValueError as e:
        raise IPRangeError(f"invalid IPv{version} address '{value}': {e}")


def parse_ip_range(version: int, ip_range: str) -> Tuple[IPAddress, IPAddress]:
    """
    Parse one range string into its (first, last) addresses

    Raises:
        IPRangeError: on bad syntax, wrong version or a reversed range
    """
    check_ip_version(version)
    if not ip_range or ip_range.count("-") > 1:
        raise IPRangeError(f"invalid IP range '{ip_range}'")

    first_str, sep, last_str = ip_range.partition("-")
    first = _parse_address(version, first_str)
    last = _parse_address(version, last_str) if sep else first

    if first > last:
        raise IPRangeError(f"invalid IP range '{ip_range}': start is greater than end")
    return first, last


def is_ip_range(version: int, ip_range: str) -> bool:
    try:
        parse_ip_range(version, ip_range)
    except IPRangeError:
        return False
    return True


def _merged_intervals(version: int, ip_ranges: Iterable[str]) -> List[Tuple[int, int]]:
    intervals = sorted(
        (int(first), int(last))
        for first, last in (parse_ip_range(version, r) for r in ip_ranges)
    )
    merged: List[Tuple[int, int]] = []
    for start, end in intervals:
        if merged and start <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def _format_intervals(version: int, intervals: Iterable[Tuple[int, int]]) -> List[str]:
    address_class = _ADDRESS_CLASSES[version]
    ranges: List[str] = []
    for start, end in intervals:
        if start == end:
            ranges.append(str(address_class(start)))
        else:
            ranges.append(f"{address_class(start)}-{address_class(end)}")
    return ranges


def _subtract_intervals(intervals: Sequence[Tuple[int, int]],
                        holes: Sequence[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Both inputs sorted and merged; so is the result"""
    result: List[Tuple[int, int]] = []
    i = 0
    for start, end in intervals:
        while i < len(holes) and holes[i][1] < start:
            i += 1
        j = i
        while j < len(holes) and holes[j][0] <= end:
            if holes[j][0] > start:
                result.append((start, holes[j][0] - 1))
            start = max(start, holes[j][1] + 1)
            j += 1
        if start <= end:
            result.append((start, end))
    return result


def usable_intervals(version: int, ip_ranges: Sequence[str], exclude_ranges: Sequence[str]) -> List[Tuple[int, int]]:
    """
    Declared ranges minus the excluded ones, as sorted disjoint integer intervals

    Same addresses as assemble_total_ips without expanding them, so it is
    safe on IPv6 ranges of any size.
    """
    check_ip_version(version)
    return _subtract_intervals(
        _merged_intervals(version, ip_ranges),
        _merged_intervals(version, exclude_ranges)
    )


def intervals_contain(intervals: Sequence[Tuple[int, int]], ip: IPAddress) -> bool:
    value = int(ip)
    index = bisect.bisect_right(intervals, (value, _MAX_ADDRESS_VALUE)) - 1
    return index >= 0 and intervals[index][0] <= value <= intervals[index][1]


def uncovered_ip_ranges(version: int, ip_ranges: Sequence[str],
                        intervals: Sequence[Tuple[int, int]]) -> List[str]:
    """Parts of ip_ranges that fall outside intervals, as merged range strings"""
    check_ip_version(version)
    return _format_intervals(version, _subtract_intervals(_merged_intervals(version, ip_ranges), intervals))


def parse_ip_ranges(version: int, ip_ranges: Sequence[str]) -> List[IPAddress]:
    """Expand range strings into a sorted list of distinct addresses"""
    check_ip_version(version)
    address_class = _ADDRESS_CLASSES[version]
    ips: List[IPAddress] = []
    for start, end in _merged_intervals(version, ip_ranges):
        ips.extend(address_class(value) for value in range(start, end + 1))
    return ips


def ips_diff_set(ips1: Iterable[IPAddress], ips2: Iterable[IPAddress], dedup: bool = True) -> List[IPAddress]:
    """Addresses of ips1 that are not in ips2, keeping ips1's order"""
    excluded = set(ips2)
    result: List[IPAddress] = []
    seen = set()
    for ip in ips1:
        if ip in excluded:
            continue
        if dedup:
            if ip in seen:
                continue
            seen.add(ip)
        result.append(ip)
    return result


def assemble_total_ips(version: int, ip_ranges: Sequence[str], exclude_ranges: Sequence[str]) -> List[IPAddress]:
    """Usable addresses: the declared ranges minus the excluded ones"""
    check_ip_version(version)
    address_class = _ADDRESS_CLASSES[version]
    return [
        address_class(value)
        for start, end in usable_intervals(version, ip_ranges, exclude_ranges)
        for value in range(start, end + 1)
    ]


def convert_ips_to_ip_ranges(version: int, ips: Iterable[IPAddress]) -> List[str]:
    """Compact addresses into the shortest list of range strings"""
    check_ip_version(version)
    values = sorted({int(ip) for ip in ips})
    address_class = _ADDRESS_CLASSES[version]

    ranges: List[str] = []
    i = 0
    while i < len(values):
        j = i
        while j + 1 < len(values) and values[j + 1] == values[j] + 1:
            j += 1
        if i == j:
            ranges.append(str(address_class(values[i])))
        else:
            ranges.append(f"{address_class(values[i])}-{address_class(values[j])}")
        i = j + 1
    return ranges


def merge_ip_ranges(version: int, ip_ranges: Sequence[str]) -> List[str]:
    """Sort, de-duplicate and join adjacent or overlapping range strings"""
    check_ip_version(version)
    return _format_intervals(version, _merged_intervals(version, ip_ranges))


def parse_cidr(version: int, cidr: str) -> IPNetwork:
    """Parse a CIDR of the given version, host bits allowed"""
    check_ip_version(version)
    try:
        network = ipaddress.ip_network(cidr, strict=False)
    except ValueError as e:
        raise IPRangeError(f"invalid subnet '{cidr}': {e}")
    if network.version != version:
        raise IPRangeError(f"subnet '{cidr}' is not an IPv{version} CIDR")
    return network


def ip_version_of_cidr(cidr: str) -> int:
    try:
        return ipaddress.ip_network(cidr, strict=False).version
    except ValueError as e:
        raise IPRangeError(f"invalid subnet '{cidr}': {e}")


def contains_ip_range(version: int, cidr: str, ip_range: str) -> bool:
    """Whether every address of ip_range sits inside cidr"""
    network = parse_cidr(version, cidr)
    first, last = parse_ip_range(version, ip_range)
    return first in network and last in network
