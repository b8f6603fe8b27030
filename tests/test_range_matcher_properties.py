"""
Property-based tests for the range matcher module.

Covers CIDR containment on both families, the prefix-0 wildcard, and the
IPv4-mapped IPv6 unwrapping rules.
"""

import ipaddress

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from ip_filter.address_normalizer import AddressNormalizer
from ip_filter.enums import AddressFamily
from ip_filter.models import Address, Range
from ip_filter.range_matcher import (
    RangeMatcher,
    extract_mapped_ipv4,
    is_ipv4_mapped,
    matches,
    prefix_bits_equal,
)


normalizer = AddressNormalizer()


def _address(family: AddressFamily, value: int) -> Address:
    return Address(family=family, packed=value.to_bytes(family.byte_length, "big"))


def _mapped(ipv4: Address) -> Address:
    return Address(family=AddressFamily.V6, packed=bytes(10) + b"\xff\xff" + ipv4.packed)


@st.composite
def range_and_inside_address(draw):
    """Generate a range plus an address sharing its top prefix bits."""
    family = draw(st.sampled_from(list(AddressFamily)))
    width = family.bit_width
    prefix = draw(st.integers(min_value=0, max_value=width))
    base = draw(st.integers(min_value=0, max_value=(1 << width) - 1))
    noise = draw(st.integers(min_value=0, max_value=(1 << width) - 1))

    host_mask = (1 << (width - prefix)) - 1
    inside = (base & ~host_mask) | (noise & host_mask)

    return Range(address=_address(family, base), prefix_length=prefix), _address(family, inside)


@st.composite
def range_and_outside_address(draw):
    """Generate a range (prefix >= 1) plus an address differing in one of its top prefix bits."""
    family = draw(st.sampled_from(list(AddressFamily)))
    width = family.bit_width
    prefix = draw(st.integers(min_value=1, max_value=width))
    base = draw(st.integers(min_value=0, max_value=(1 << width) - 1))
    noise = draw(st.integers(min_value=0, max_value=(1 << width) - 1))
    flipped_bit = draw(st.integers(min_value=0, max_value=prefix - 1))

    host_mask = (1 << (width - prefix)) - 1
    inside = (base & ~host_mask) | (noise & host_mask)
    outside = inside ^ (1 << (width - 1 - flipped_bit))

    return Range(address=_address(family, base), prefix_length=prefix), _address(family, outside)


class TestCidrContainmentProperty:
    """Same-family containment compares the top prefix bits."""

    @given(case=range_and_inside_address())
    @settings(max_examples=200)
    def test_address_sharing_prefix_bits_matches(self, case) -> None:
        """*For any* range R and address A equal to R in the top prefix bits, matches(A, R) SHALL be true."""
        cidr, address = case
        assert matches(address, cidr)

    @given(case=range_and_outside_address())
    @settings(max_examples=200)
    def test_address_differing_in_prefix_bits_does_not_match(self, case) -> None:
        """*For any* address differing from R in any top prefix bit, matches(A, R) SHALL be false."""
        cidr, address = case
        assert not matches(address, cidr)

    @given(
        candidate=st.ip_addresses(v=4),
        base=st.ip_addresses(v=4),
        prefix=st.integers(min_value=0, max_value=32),
    )
    @settings(max_examples=200)
    def test_agrees_with_stdlib_network_membership(self, candidate, base, prefix: int) -> None:
        network = ipaddress.ip_network(f"{base}/{prefix}", strict=False)
        cidr = normalizer.parse_range_literal(f"{base}/{prefix}")

        assert matches(normalizer.parse(str(candidate)), cidr) == (candidate in network)

    @given(candidate=st.ip_addresses(), base=st.ip_addresses())
    @settings(max_examples=100)
    def test_prefix_zero_matches_every_same_family_address(self, candidate, base) -> None:
        """*For any* same-family pair, a prefix-0 range SHALL match."""
        assume(candidate.version == base.version)
        cidr = normalizer.parse_range_literal(f"{base}/0")
        assert matches(normalizer.parse(str(candidate)), cidr)

    @given(ip=st.ip_addresses())
    @settings(max_examples=100)
    def test_single_host_range_matches_only_itself(self, ip) -> None:
        address = normalizer.parse(str(ip))
        cidr = normalizer.to_single_host_range(address)

        assert matches(address, cidr)

        last_byte_flipped = address.packed[:-1] + bytes([address.packed[-1] ^ 0x01])
        neighbour = Address(family=address.family, packed=last_byte_flipped)
        assert not matches(neighbour, cidr)

    def test_partial_byte_prefix(self) -> None:
        cidr = normalizer.parse_range_literal("10.0.0.0/13")
        assert matches(normalizer.parse("10.7.255.255"), cidr)
        assert not matches(normalizer.parse("10.8.0.0"), cidr)

    def test_prefix_bits_equal_masks_trailing_bits(self) -> None:
        assert prefix_bits_equal(b"\xf0", b"\xff", 4)
        assert not prefix_bits_equal(b"\xf0", b"\xff", 5)
        assert prefix_bits_equal(b"\x00", b"\xff", 0)


class TestMappedAddressProperty:
    """IPv4-mapped IPv6 candidates against IPv4 ranges."""

    @given(
        candidate=st.ip_addresses(v=4),
        base=st.ip_addresses(v=4),
        prefix=st.integers(min_value=0, max_value=32),
    )
    @settings(max_examples=200)
    def test_mapped_form_matches_iff_plain_form_matches(self, candidate, base, prefix: int) -> None:
        """*For any* IPv4 X and IPv4 range R, matches(::ffff:X, R) SHALL equal matches(X, R)."""
        plain = normalizer.parse(str(candidate))
        cidr = normalizer.parse_range_literal(f"{base}/{prefix}")

        assert matches(_mapped(plain), cidr) == matches(plain, cidr)

    @given(candidate=st.ip_addresses(v=6))
    @settings(max_examples=100)
    def test_unmapped_ipv6_never_matches_ipv4_range(self, candidate) -> None:
        address = normalizer.parse(str(candidate))
        assume(not is_ipv4_mapped(address))

        assert not matches(address, normalizer.parse_range_literal("0.0.0.0/0"))

    @given(candidate=st.ip_addresses(v=4))
    @settings(max_examples=100)
    def test_ipv4_candidate_never_matches_ipv6_range(self, candidate) -> None:
        """Unwrapping only applies to the candidate, so v4 vs ::/0 SHALL not match."""
        address = normalizer.parse(str(candidate))

        assert not matches(address, normalizer.parse_range_literal("::/0"))
        assert not matches(address, normalizer.parse_range_literal(f"::ffff:{candidate}/128"))

    def test_mapped_literal_matches_ipv4_range(self) -> None:
        address = normalizer.parse("::ffff:192.168.1.1")
        assert matches(address, normalizer.parse_range_literal("192.168.0.0/16"))
        assert not matches(address, normalizer.parse_range_literal("10.0.0.0/8"))

    def test_mapped_candidate_still_matches_ipv6_range(self) -> None:
        address = normalizer.parse("::ffff:192.168.1.1")
        assert matches(address, normalizer.parse_range_literal("::ffff:0:0/96"))

    def test_ipv4_compatible_form_is_not_mapped(self) -> None:
        address = normalizer.parse("::192.168.1.1")
        assert not is_ipv4_mapped(address)
        assert extract_mapped_ipv4(address) is None
        assert not matches(address, normalizer.parse_range_literal("192.168.0.0/16"))

    def test_extract_mapped_ipv4(self) -> None:
        embedded = extract_mapped_ipv4(normalizer.parse("::ffff:203.0.113.9"))
        assert embedded == normalizer.parse("203.0.113.9")


class TestFirstMatch:
    """Ordered matching over a range list."""

    def test_returns_first_matching_range_in_order(self) -> None:
        ranges = [
            normalizer.parse_range_literal("10.0.0.0/8"),
            normalizer.parse_range_literal("192.168.0.0/16"),
            normalizer.parse_range_literal("192.168.1.0/24"),
        ]
        matched = RangeMatcher().first_match(normalizer.parse("192.168.1.1"), ranges)
        assert matched == ranges[1]

    def test_returns_none_without_match(self) -> None:
        ranges = [normalizer.parse_range_literal("10.0.0.0/8")]
        assert RangeMatcher().first_match(normalizer.parse("8.8.8.8"), ranges) is None

    def test_empty_range_list_has_no_match(self) -> None:
        assert RangeMatcher().first_match(normalizer.parse("8.8.8.8"), []) is None
