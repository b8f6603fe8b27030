"""
Range membership matching.

Decides whether an address lies inside a CIDR range by comparing the top
prefix bits of the packed byte sequences. IPv4-mapped IPv6 candidates
(::ffff:0:0/96) are unwrapped before being matched against IPv4 ranges;
the reverse direction (IPv4 candidate, IPv6 range) never matches.
"""

from typing import Iterable, Optional

from .enums import AddressFamily
from .models import Address, Range


# High-order 96 bits of an IPv4-mapped IPv6 address
IPV4_MAPPED_PREFIX = bytes(10) + b"\xff\xff"


def is_ipv4_mapped(address: Address) -> bool:
    """Check whether an IPv6 address is in ::ffff:0:0/96."""
    return (
        address.family is AddressFamily.V6
        and address.packed[: len(IPV4_MAPPED_PREFIX)] == IPV4_MAPPED_PREFIX
    )


def extract_mapped_ipv4(address: Address) -> Optional[Address]:
    """Return the embedded IPv4 address of a mapped IPv6 address, else None."""
    if not is_ipv4_mapped(address):
        return None
    return Address(family=AddressFamily.V4, packed=address.packed[-4:])


def prefix_bits_equal(left: bytes, right: bytes, prefix_length: int) -> bool:
    """
    Compare the leading ``prefix_length`` bits of two byte strings.

    Both inputs must be at least ``ceil(prefix_length / 8)`` bytes long.
    """
    full_bytes, remaining_bits = divmod(prefix_length, 8)

    if left[:full_bytes] != right[:full_bytes]:
        return False

    if remaining_bits == 0:
        return True

    mask = (0xFF << (8 - remaining_bits)) & 0xFF
    return (left[full_bytes] & mask) == (right[full_bytes] & mask)


def matches(address: Address, cidr: Range) -> bool:
    """
    Decide whether ``address`` falls inside ``cidr``.

    Same family: standard CIDR containment, prefix 0 matches everything.
    IPv6 candidate, IPv4 range: only IPv4-mapped candidates, compared by
    their embedded IPv4 address.
    IPv4 candidate, IPv6 range: no match.
    """
    if address.family is cidr.family:
        return prefix_bits_equal(address.packed, cidr.address.packed, cidr.prefix_length)

    if address.family is AddressFamily.V6 and cidr.family is AddressFamily.V4:
        embedded = extract_mapped_ipv4(address)
        if embedded is None:
            return False
        return prefix_bits_equal(embedded.packed, cidr.address.packed, cidr.prefix_length)

    return False


class RangeMatcher:
    """Matches a candidate address against an ordered list of ranges."""

    def matches(self, address: Address, cidr: Range) -> bool:
        return matches(address, cidr)

    def first_match(self, address: Address, ranges: Iterable[Range]) -> Optional[Range]:
        """
        Return the first range containing the address, in the order given.

        Args:
            address: Candidate address
            ranges: Already validated ranges

        Returns:
            The first matching Range, or None if no range contains the address
        """
        for cidr in ranges:
            if matches(address, cidr):
                return cidr
        return None
