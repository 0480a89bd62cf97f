"""Tests for IP range arithmetic."""

import ipaddress

import pytest

from core.exceptions import IPRangeError
from core.iprange import (
    assemble_total_ips,
    contains_ip_range,
    convert_ips_to_ip_ranges,
    intervals_contain,
    ip_version_of_cidr,
    ips_diff_set,
    is_ip_range,
    merge_ip_ranges,
    parse_cidr,
    parse_ip_range,
    parse_ip_ranges,
    uncovered_ip_ranges,
    usable_intervals,
)


def ip(value):
    return ipaddress.ip_address(value)


class TestParseIPRange:
    """Tests for parse_ip_range and is_ip_range."""

    def test_single_address(self) -> None:
        assert parse_ip_range(4, "10.0.0.1") == (ip("10.0.0.1"), ip("10.0.0.1"))

    def test_range(self) -> None:
        assert parse_ip_range(6, "fd00::1-fd00::a") == (ip("fd00::1"), ip("fd00::a"))

    @pytest.mark.parametrize(
        ("version", "value"),
        [
            (4, "10.0.0.10-10.0.0.1"),
            (4, "10.0.0.1-10.0.0.2-10.0.0.3"),
            (4, "fd00::1"),
            (6, "10.0.0.1"),
            (4, "10.0.0.256"),
            (4, ""),
        ],
    )
    def test_invalid(self, version, value) -> None:
        """Test reversed, mixed-version and malformed ranges are rejected."""
        assert is_ip_range(version, value) is False
        with pytest.raises(IPRangeError):
            parse_ip_range(version, value)

    def test_invalid_version(self) -> None:
        with pytest.raises(IPRangeError):
            parse_ip_range(5, "10.0.0.1")


class TestParseIPRanges:
    """Tests for parse_ip_ranges."""

    def test_expands_sorted_unique(self) -> None:
        """Test overlapping ranges expand to sorted distinct addresses."""
        ips = parse_ip_ranges(4, ["10.0.0.3-10.0.0.4", "10.0.0.1-10.0.0.3"])
        assert ips == [ip("10.0.0.1"), ip("10.0.0.2"), ip("10.0.0.3"), ip("10.0.0.4")]

    def test_empty(self) -> None:
        assert parse_ip_ranges(4, []) == []

    def test_malformed(self) -> None:
        with pytest.raises(IPRangeError):
            parse_ip_ranges(4, ["10.0.0.1", "bogus"])


class TestSetOperations:
    """Tests for ips_diff_set and assemble_total_ips."""

    def test_diff_keeps_order(self) -> None:
        """Test the difference keeps the first list's order."""
        result = ips_diff_set([ip("10.0.0.3"), ip("10.0.0.1"), ip("10.0.0.2")], [ip("10.0.0.1")])
        assert result == [ip("10.0.0.3"), ip("10.0.0.2")]

    def test_diff_dedup(self) -> None:
        """Test duplicates are dropped only when asked."""
        ips = [ip("10.0.0.1"), ip("10.0.0.1")]
        assert ips_diff_set(ips, [], True) == [ip("10.0.0.1")]
        assert ips_diff_set(ips, [], False) == ips

    def test_assemble_total_ips(self) -> None:
        """Test excluded addresses are removed from the declared ranges."""
        total = assemble_total_ips(4, ["10.0.0.1-10.0.0.5"], ["10.0.0.2-10.0.0.3"])
        assert total == [ip("10.0.0.1"), ip("10.0.0.4"), ip("10.0.0.5")]


class TestIntervals:
    """Tests for usable_intervals, intervals_contain and uncovered_ip_ranges."""

    def test_usable_splits_on_excludes(self) -> None:
        """Test excluded ranges punch holes, including at the edges."""
        usable = usable_intervals(4, ["10.0.0.1-10.0.0.10", "10.0.0.20"], ["10.0.0.1", "10.0.0.4-10.0.0.5", "10.0.0.10-10.0.0.30"])
        assert usable == [(int(ip("10.0.0.2")), int(ip("10.0.0.3"))), (int(ip("10.0.0.6")), int(ip("10.0.0.9")))]

    def test_usable_matches_assembled_addresses(self) -> None:
        ips, exclude = ["10.0.0.1-10.0.0.40", "10.0.0.50-10.0.0.60"], ["10.0.0.5-10.0.0.55", "10.0.0.58"]
        expanded = [ipaddress.IPv4Address(v) for start, end in usable_intervals(4, ips, exclude)
                    for v in range(start, end + 1)]
        assert expanded == assemble_total_ips(4, ips, exclude)

    def test_contains(self) -> None:
        usable = usable_intervals(6, ["fd00::10-fd00::ffff:ffff:ffff"], ["fd00::100-fd00::1ff"])
        assert intervals_contain(usable, ip("fd00::10"))
        assert intervals_contain(usable, ip("fd00::ffff:ffff:ffff"))
        assert intervals_contain(usable, ip("fd00::200"))
        assert not intervals_contain(usable, ip("fd00::1"))
        assert not intervals_contain(usable, ip("fd00::150"))
        assert not intervals_contain(usable, ip("fd00::1:0:0:0"))
        assert not intervals_contain([], ip("fd00::10"))

    def test_uncovered(self) -> None:
        """Test only the parts outside the intervals are reported, merged."""
        usable = usable_intervals(6, ["fd00::10-fd00::ff:ffff:ffff"], ["fd00::20"])
        assert uncovered_ip_ranges(6, ["fd00::10-fd00::1f"], usable) == []
        assert uncovered_ip_ranges(6, ["fd00::1f-fd00::21", "fd00::1-fd00::10"], usable) == ["fd00::1-fd00::f", "fd00::20"]
        assert uncovered_ip_ranges(6, ["fd00::ff:ffff:fffe-fd00::100:0:1"], usable) == ["fd00::100:0:0-fd00::100:0:1"]


class TestRangeStrings:
    """Tests for convert_ips_to_ip_ranges and merge_ip_ranges."""

    def test_convert_compacts(self) -> None:
        """Test consecutive addresses collapse into ranges."""
        ips = [ip("10.0.0.5"), ip("10.0.0.1"), ip("10.0.0.2"), ip("10.0.0.3")]
        assert convert_ips_to_ip_ranges(4, ips) == ["10.0.0.1-10.0.0.3", "10.0.0.5"]

    def test_convert_ipv6(self) -> None:
        ips = [ip("fd00::1"), ip("fd00::2")]
        assert convert_ips_to_ip_ranges(6, ips) == ["fd00::1-fd00::2"]

    def test_merge(self) -> None:
        """Test unsorted, overlapping and adjacent ranges are merged."""
        ranges = ["10.0.0.20", "10.0.0.1-10.0.0.5", "10.0.0.4-10.0.0.10", "10.0.0.11", "10.0.0.20"]
        assert merge_ip_ranges(4, ranges) == ["10.0.0.1-10.0.0.11", "10.0.0.20"]

    def test_merge_rejects_malformed(self) -> None:
        with pytest.raises(IPRangeError):
            merge_ip_ranges(4, ["10.0.0.5-10.0.0.1"])


class TestCIDR:
    """Tests for parse_cidr, ip_version_of_cidr and contains_ip_range."""

    def test_parse_cidr_allows_host_bits(self) -> None:
        assert parse_cidr(4, "10.6.0.1/16") == ipaddress.ip_network("10.6.0.0/16")

    def test_parse_cidr_wrong_version(self) -> None:
        with pytest.raises(IPRangeError):
            parse_cidr(6, "10.6.0.0/16")

    def test_parse_cidr_malformed(self) -> None:
        with pytest.raises(IPRangeError):
            parse_cidr(4, "10.6.0.0/33")

    @pytest.mark.parametrize(("cidr", "version"), [("10.6.0.0/16", 4), ("fd00:6::/64", 6)])
    def test_ip_version_of_cidr(self, cidr, version) -> None:
        assert ip_version_of_cidr(cidr) == version

    def test_ip_version_of_cidr_malformed(self) -> None:
        with pytest.raises(IPRangeError):
            ip_version_of_cidr("not-a-cidr")

    def test_contains_ip_range(self) -> None:
        assert contains_ip_range(4, "10.6.0.0/16", "10.6.0.10-10.6.255.255") is True
        assert contains_ip_range(4, "10.6.0.0/16", "10.6.0.10-10.7.0.1") is False
