"""
Address parsing and normalization module.

Turns textual IPv4/IPv6 addresses and CIDR range literals into the
family-tagged Address and Range models. Bare addresses given as ranges
are widened to single-host ranges (/32 or /128).
"""

import ipaddress
from typing import Optional

from .enums import AddressFamily, ParseErrorCode
from .exceptions import AddressParseError, RangeParseError
from .models import Address, Range


# Separator between address and prefix length in a CIDR literal
PREFIX_SEPARATOR = "/"

# Longest prefix text accepted (128 has three digits)
MAX_PREFIX_DIGITS = 3


class AddressNormalizer:
    """
    Parses addresses and range literals.

    Handles:
    - IPv4 dotted-quad and standard/compressed IPv6 text
    - CIDR literals with an explicit decimal prefix length
    - Bare addresses used as ranges (single-host range)

    The normalizer is stateless; every method is a pure function of its input.
    """

    def parse(self, text: str) -> Address:
        """
        Parse a textual address into an Address.

        Args:
            text: IPv4 or IPv6 address text (no surrounding whitespace)

        Returns:
            Parsed Address

        Raises:
            AddressParseError: If the text is not a valid address
        """
        if not text:
            raise AddressParseError(
                code=ParseErrorCode.EMPTY_INPUT.value,
                message="Address input is empty",
                details={"raw_input": text},
            )

        try:
            parsed = ipaddress.ip_address(text)
        except ValueError as e:
            raise AddressParseError(
                code=ParseErrorCode.INVALID_ADDRESS.value,
                message=f"Invalid IP address: {text}",
                details={"raw_input": text, "reason": str(e)},
            ) from e

        family = AddressFamily.V4 if parsed.version == 4 else AddressFamily.V6
        return Address(family=family, packed=parsed.packed)

    def to_single_host_range(self, address: Address) -> Range:
        """Widen an address to a range covering exactly that address."""
        return Range(address=address, prefix_length=address.bit_width)

    def parse_range_literal(self, text: str) -> Range:
        """
        Parse a CIDR literal or a bare address into a Range.

        Args:
            text: Literal such as '10.0.0.0/8', '2001:db8::/32' or '192.0.2.7'

        Returns:
            Parsed Range

        Raises:
            RangeParseError: If the literal is empty, malformed, or its
                prefix exceeds the family bit width
        """
        if not text or not text.strip():
            raise RangeParseError(
                code=ParseErrorCode.EMPTY_INPUT.value,
                message="Range literal is empty",
                details={"raw_input": text},
            )

        if PREFIX_SEPARATOR not in text:
            return self.to_single_host_range(self._parse_range_address(text, text))

        address_part, _, prefix_part = text.partition(PREFIX_SEPARATOR)
        address = self._parse_range_address(address_part, text)

        # isdecimal() alone would accept non-ASCII digits
        if (
            not (prefix_part.isascii() and prefix_part.isdecimal())
            or len(prefix_part) > MAX_PREFIX_DIGITS
        ):
            raise RangeParseError(
                code=ParseErrorCode.INVALID_PREFIX.value,
                message=f"Invalid prefix length in range: {text}",
                details={"raw_input": text, "prefix": prefix_part},
            )

        prefix_length = int(prefix_part)
        if prefix_length > address.bit_width:
            raise RangeParseError(
                code=ParseErrorCode.PREFIX_OUT_OF_RANGE.value,
                message=(
                    f"Prefix length {prefix_length} exceeds {address.bit_width} "
                    f"bits in range: {text}"
                ),
                details={
                    "raw_input": text,
                    "prefix": prefix_length,
                    "bit_width": address.bit_width,
                },
            )

        return Range(address=address, prefix_length=prefix_length)

    def try_parse_range_literal(self, text: str) -> Optional[Range]:
        """Parse a range literal, returning None instead of raising."""
        try:
            return self.parse_range_literal(text)
        except RangeParseError:
            return None

    def _parse_range_address(self, address_text: str, literal: str) -> Address:
        """Parse the address part of a range literal, re-raising as RangeParseError."""
        try:
            return self.parse(address_text)
        except AddressParseError as e:
            raise RangeParseError(
                code=e.code,
                message=f"Invalid address in range: {literal}",
                details={"raw_input": literal, **e.details},
            ) from e
