"""
IP Filter - IP admissibility checks for MCP agents.

This package decides whether an IPv4 or IPv6 address falls inside a set of
permitted CIDR ranges, optionally rejecting Tor exit nodes using a cached
copy of the Tor Project's exit-address list.
"""

__version__ = "0.1.0"

from ip_filter.exceptions import (
    IPFilterError,
    ParseError,
    AddressParseError,
    RangeParseError,
    ConfigurationError,
    UpstreamUnavailableError,
)
from ip_filter.enums import (
    AddressFamily,
    RejectionReason,
    LogLevel,
    ParseErrorCode,
    DenylistErrorCode,
    DenylistStatus,
    Transport,
)
from ip_filter.models import (
    Address,
    Range,
    DenylistSnapshot,
    EvaluationRequest,
    EvaluationResult,
)
from ip_filter.config import (
    DenylistConfig,
    RetryConfig,
    ServerConfig,
    LoggingConfig,
    SystemConfig,
    load_config_from_env,
    validate_config,
)
from ip_filter.address_normalizer import AddressNormalizer
from ip_filter.range_matcher import (
    RangeMatcher,
    matches,
    is_ipv4_mapped,
    extract_mapped_ipv4,
)
from ip_filter.denylist_client import (
    DenylistClient,
    DenylistFetchResponse,
    DenylistError,
    parse_exit_addresses,
)
from ip_filter.retry_manager import RetryManager
from ip_filter.denylist_cache import DenylistCache, DenylistSource
from ip_filter.evaluator import AdmissibilityEvaluator, RangeValidation
from ip_filter.audit_logger import AuditLogger, LogEntry, create_logger
from ip_filter.i18n import (
    get_message,
    get_all_message_keys,
    has_translation,
    get_missing_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)

__all__ = [
    # Exceptions
    "IPFilterError",
    "ParseError",
    "AddressParseError",
    "RangeParseError",
    "ConfigurationError",
    "UpstreamUnavailableError",
    # Enums
    "AddressFamily",
    "RejectionReason",
    "LogLevel",
    "ParseErrorCode",
    "DenylistErrorCode",
    "DenylistStatus",
    "Transport",
    # Models
    "Address",
    "Range",
    "DenylistSnapshot",
    "EvaluationRequest",
    "EvaluationResult",
    # Configuration
    "DenylistConfig",
    "RetryConfig",
    "ServerConfig",
    "LoggingConfig",
    "SystemConfig",
    "load_config_from_env",
    "validate_config",
    # Address Normalizer
    "AddressNormalizer",
    # Range Matcher
    "RangeMatcher",
    "matches",
    "is_ipv4_mapped",
    "extract_mapped_ipv4",
    # Denylist
    "DenylistClient",
    "DenylistFetchResponse",
    "DenylistError",
    "parse_exit_addresses",
    "RetryManager",
    "DenylistCache",
    "DenylistSource",
    # Evaluator
    "AdmissibilityEvaluator",
    "RangeValidation",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    "create_logger",
    # I18n
    "get_message",
    "get_all_message_keys",
    "has_translation",
    "get_missing_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
]
