"""
Exception classes for the IP filter system.

All exceptions inherit from IPFilterError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class IPFilterError(Exception):
    """Base exception for all IP filter errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ParseError(IPFilterError):
    """Raised when an address or range literal is malformed."""

    pass


class AddressParseError(ParseError):
    """Raised when a candidate address cannot be parsed."""

    pass


class RangeParseError(ParseError):
    """Raised when a CIDR range literal cannot be parsed."""

    pass


class ConfigurationError(IPFilterError):
    """Raised for caller or server configuration problems (empty range list, bad settings)."""

    pass


class UpstreamUnavailableError(IPFilterError):
    """Raised when the denylist source cannot be fetched or parsed."""

    pass
