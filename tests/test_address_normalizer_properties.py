"""
Property-based tests for the address normalizer module.

Uses Hypothesis for property-based testing of address parsing, single-host
widening, and CIDR literal parsing.
"""

import ipaddress

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ip_filter.address_normalizer import AddressNormalizer
from ip_filter.enums import AddressFamily, ParseErrorCode
from ip_filter.exceptions import AddressParseError, ParseError, RangeParseError
from ip_filter.models import Address


normalizer = AddressNormalizer()


class TestAddressParsingProperty:
    """Parsing textual addresses into family-tagged byte sequences."""

    @given(ip=st.ip_addresses(v=4))
    @settings(max_examples=100)
    def test_dotted_quad_round_trips(self, ip: ipaddress.IPv4Address) -> None:
        """
        *For any* valid dotted quad, the parsed address's canonical text
        SHALL equal the input and carry 4 bytes tagged V4.
        """
        address = normalizer.parse(str(ip))

        assert address.family is AddressFamily.V4
        assert address.packed == ip.packed
        assert len(address.packed) == 4
        assert address.text == str(ip)

    @given(ip=st.ip_addresses(v=6))
    @settings(max_examples=100)
    def test_ipv6_parses_to_sixteen_bytes(self, ip: ipaddress.IPv6Address) -> None:
        """*For any* IPv6 address, both exploded and compressed text parse to the same bytes."""
        compressed = normalizer.parse(ip.compressed)
        exploded = normalizer.parse(ip.exploded)

        assert compressed.family is AddressFamily.V6
        assert compressed.packed == ip.packed
        assert exploded == compressed
        assert compressed.text == str(ip)

    def test_uppercase_ipv6_is_normalized(self) -> None:
        address = normalizer.parse("2001:DB8:0:0:0:0:0:1")
        assert address.text == "2001:db8::1"

    def test_embedded_ipv4_tail_is_accepted(self) -> None:
        address = normalizer.parse("::ffff:192.0.2.1")
        assert address.family is AddressFamily.V6
        assert address.packed[-4:] == bytes([192, 0, 2, 1])

    @pytest.mark.parametrize(
        "text",
        [
            "not-an-ip",
            "256.1.1.1",
            "1.2.3",
            "1.2.3.4.5",
            " 1.2.3.4",
            "1.2.3.4 ",
            "01.2.3.4",
            "2001:db8::1::2",
            "gggg::1",
            "10.0.0.0/8",
        ],
    )
    def test_malformed_addresses_raise(self, text: str) -> None:
        with pytest.raises(AddressParseError) as exc_info:
            normalizer.parse(text)
        assert exc_info.value.code == ParseErrorCode.INVALID_ADDRESS.value
        assert exc_info.value.details["raw_input"] == text

    def test_empty_address_raises_empty_input(self) -> None:
        with pytest.raises(AddressParseError) as exc_info:
            normalizer.parse("")
        assert exc_info.value.code == ParseErrorCode.EMPTY_INPUT.value

    def test_address_rejects_wrong_byte_length(self) -> None:
        with pytest.raises(AddressParseError) as exc_info:
            Address(family=AddressFamily.V4, packed=bytes(16))
        assert exc_info.value.code == ParseErrorCode.LENGTH_MISMATCH.value


class TestSingleHostRangeProperty:
    """Bare addresses widen to full-width prefixes."""

    @given(ip=st.ip_addresses())
    @settings(max_examples=100)
    def test_single_host_prefix_is_full_width(self, ip) -> None:
        """*For any* address, the single-host range prefix SHALL be 32 (v4) or 128 (v6)."""
        address = normalizer.parse(str(ip))
        cidr = normalizer.to_single_host_range(address)

        assert cidr.address == address
        assert cidr.prefix_length == (32 if ip.version == 4 else 128)

    @given(ip=st.ip_addresses())
    @settings(max_examples=100)
    def test_bare_literal_equals_single_host_range(self, ip) -> None:
        """*For any* bare address literal, parse_range_literal SHALL widen it like to_single_host_range."""
        expected = normalizer.to_single_host_range(normalizer.parse(str(ip)))
        assert normalizer.parse_range_literal(str(ip)) == expected


class TestRangeLiteralProperty:
    """Parsing CIDR literals."""

    @given(ip=st.ip_addresses(v=4), prefix=st.integers(min_value=0, max_value=32))
    @settings(max_examples=100)
    def test_ipv4_cidr_keeps_address_and_prefix(self, ip, prefix: int) -> None:
        cidr = normalizer.parse_range_literal(f"{ip}/{prefix}")

        assert cidr.family is AddressFamily.V4
        assert cidr.prefix_length == prefix
        assert cidr.address.text == str(ip)

    @given(ip=st.ip_addresses(v=6), prefix=st.integers(min_value=0, max_value=128))
    @settings(max_examples=100)
    def test_ipv6_cidr_keeps_address_and_prefix(self, ip, prefix: int) -> None:
        cidr = normalizer.parse_range_literal(f"{ip}/{prefix}")

        assert cidr.family is AddressFamily.V6
        assert cidr.prefix_length == prefix
        assert cidr.text == f"{ip}/{prefix}"

    @given(ip=st.ip_addresses(v=4), prefix=st.integers(min_value=33, max_value=500))
    @settings(max_examples=100)
    def test_ipv4_prefix_beyond_width_is_rejected(self, ip, prefix: int) -> None:
        """*For any* IPv4 prefix above 32, the literal SHALL be rejected."""
        with pytest.raises(RangeParseError) as exc_info:
            normalizer.parse_range_literal(f"{ip}/{prefix}")
        assert exc_info.value.code == ParseErrorCode.PREFIX_OUT_OF_RANGE.value

    def test_ipv6_prefix_129_is_rejected(self) -> None:
        with pytest.raises(RangeParseError):
            normalizer.parse_range_literal("2001:db8::/129")

    @given(
        ip=st.ip_addresses(),
        prefix=st.text(alphabet="0123456789", min_size=4, max_size=40),
    )
    @settings(max_examples=100)
    def test_prefix_longer_than_three_digits_is_rejected(self, ip, prefix: str) -> None:
        """*For any* prefix text of four or more digits, the literal SHALL be rejected as INVALID_PREFIX."""
        with pytest.raises(RangeParseError) as exc_info:
            normalizer.parse_range_literal(f"{ip}/{prefix}")
        assert exc_info.value.code == ParseErrorCode.INVALID_PREFIX.value

    def test_huge_prefix_is_a_parse_error(self) -> None:
        with pytest.raises(RangeParseError) as exc_info:
            normalizer.parse_range_literal("10.0.0.0/" + "1" * 5000)
        assert exc_info.value.code == ParseErrorCode.INVALID_PREFIX.value

    def test_host_bits_are_allowed(self) -> None:
        cidr = normalizer.parse_range_literal("192.168.1.77/24")
        assert cidr.address.text == "192.168.1.77"
        assert cidr.prefix_length == 24

    @pytest.mark.parametrize(
        "literal",
        [
            "",
            "   ",
            "not-a-cidr",
            "10.0.0.0/",
            "/8",
            "10.0.0.0/8/8",
            "10.0.0.0/-1",
            "10.0.0.0/+8",
            "10.0.0.0/ 8",
            "10.0.0.0/8.0",
            "10.0.0.0/255.0.0.0",
            "10.0.0.0/٨",
            "300.0.0.0/8",
        ],
    )
    def test_malformed_literals_raise(self, literal: str) -> None:
        with pytest.raises(RangeParseError):
            normalizer.parse_range_literal(literal)

    def test_range_parse_error_is_a_parse_error(self) -> None:
        with pytest.raises(ParseError):
            normalizer.parse_range_literal("nope")

    def test_try_parse_returns_none_on_failure(self) -> None:
        assert normalizer.try_parse_range_literal("nope") is None
        assert normalizer.try_parse_range_literal("10.0.0.0/8") is not None
