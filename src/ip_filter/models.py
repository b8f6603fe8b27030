"""
Data models for the IP filter system.

This module defines the parsed address and range representations, the
denylist snapshot shared between evaluations, and the request/result
values exchanged with the tool layer.
"""

import ipaddress
from dataclasses import dataclass, field
from typing import Optional

from .enums import AddressFamily, ParseErrorCode, RejectionReason
from .exceptions import AddressParseError, RangeParseError


@dataclass(frozen=True)
class Address:
    """A parsed IP address: family tag plus fixed-width packed bytes."""

    family: AddressFamily
    packed: bytes

    def __post_init__(self) -> None:
        if len(self.packed) != self.family.byte_length:
            raise AddressParseError(
                code=ParseErrorCode.LENGTH_MISMATCH.value,
                message=(
                    f"{self.family.value} address needs {self.family.byte_length} bytes, "
                    f"got {len(self.packed)}"
                ),
                details={"family": self.family.value, "length": len(self.packed)},
            )

    @property
    def bit_width(self) -> int:
        return self.family.bit_width

    @property
    def text(self) -> str:
        """Canonical textual form (dotted quad or RFC 5952 compressed IPv6)."""
        return str(ipaddress.ip_address(self.packed))

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Range:
    """A CIDR block: base address plus prefix length (host bits may be set)."""

    address: Address
    prefix_length: int

    def __post_init__(self) -> None:
        if not 0 <= self.prefix_length <= self.address.bit_width:
            raise RangeParseError(
                code=ParseErrorCode.PREFIX_OUT_OF_RANGE.value,
                message=(
                    f"Prefix length {self.prefix_length} outside "
                    f"0..{self.address.bit_width}"
                ),
                details={"prefix": self.prefix_length},
            )

    @property
    def family(self) -> AddressFamily:
        return self.address.family

    @property
    def text(self) -> str:
        return f"{self.address.text}/{self.prefix_length}"

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class DenylistSnapshot:
    """
    Entries from one successful denylist fetch.

    Snapshots are immutable and replaced as a whole, so a reader always
    sees entries and timestamp from the same fetch.
    """

    entries: tuple[str, ...]
    fetched_at: float
    _index: frozenset = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", frozenset(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def contains(self, text: str) -> bool:
        """Exact string match against the entries."""
        return text in self._index


@dataclass
class EvaluationRequest:
    """Input of a single admissibility evaluation."""

    ip_address: str
    cidr_ranges: list[str] = field(default_factory=list)
    check_tor: bool = False


@dataclass
class EvaluationResult:
    """Verdict of an evaluation; ``error`` is only set on rejection."""

    result: bool
    error: Optional[str] = None
    reason: Optional[RejectionReason] = None

    @classmethod
    def admitted(cls) -> "EvaluationResult":
        return cls(result=True)

    @classmethod
    def rejected(cls, reason: RejectionReason, error: str) -> "EvaluationResult":
        return cls(result=False, error=error, reason=reason)

    def to_dict(self) -> dict:
        """Wire form: ``{"result": bool}`` plus ``"error"`` when present."""
        payload: dict = {"result": self.result}
        if not self.result and self.error:
            payload["error"] = self.error
        return payload
