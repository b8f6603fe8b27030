"""
Enumeration types for the IP filter system.

These enums provide type-safe constants for address families, rejection
reasons, error codes, and configuration options throughout the system.
"""

from enum import Enum


class AddressFamily(Enum):
    """IP address family tag."""

    V4 = "v4"
    V6 = "v6"

    @property
    def bit_width(self) -> int:
        """Number of bits in an address of this family."""
        return 32 if self is AddressFamily.V4 else 128

    @property
    def byte_length(self) -> int:
        """Number of bytes in a packed address of this family."""
        return self.bit_width // 8


class RejectionReason(Enum):
    """Why an evaluation returned a negative verdict."""

    INVALID_ADDRESS = "invalid_address"
    NO_RANGES = "no_ranges"
    INVALID_RANGES = "invalid_ranges"
    NOT_IN_RANGE = "not_in_range"
    DENYLISTED = "denylisted"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Ordering used for minimum-level filtering."""
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}


class ParseErrorCode(Enum):
    """Error codes for address and range parsing failures."""

    EMPTY_INPUT = "empty_input"
    INVALID_ADDRESS = "invalid_address"
    INVALID_PREFIX = "invalid_prefix"
    PREFIX_OUT_OF_RANGE = "prefix_out_of_range"
    LENGTH_MISMATCH = "length_mismatch"


class DenylistErrorCode(Enum):
    """Error codes for denylist client operations."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse_error"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"


class DenylistStatus(Enum):
    """Denylist fetch result status."""

    OK = "ok"
    ERROR = "error"


class Transport(Enum):
    """MCP transports the server can listen on."""

    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"
