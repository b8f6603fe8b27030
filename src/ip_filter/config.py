"""
Configuration dataclasses for the IP filter system.

This module defines all configuration structures used throughout the system,
including the denylist source, retry logic, the MCP server listener, and
logging, plus loading them from the process environment (.env supported).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .enums import LogLevel, Transport
from .exceptions import ConfigurationError
from .i18n import SUPPORTED_LANGUAGES


DEFAULT_EXIT_LIST_URL = "https://check.torproject.org/exit-addresses"
DEFAULT_TTL_SECONDS = 60 * 60
SUPPORTED_OUTPUT_FORMATS = ("json", "text", "both")


@dataclass
class DenylistConfig:
    """Configuration for the remote exit-node denylist."""

    url: str = DEFAULT_EXIT_LIST_URL
    line_token: str = "ExitAddress"
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    timeout_seconds: float = 10.0
    user_agent: str = "ip-filter-server/0.1"


@dataclass
class RetryConfig:
    """Retry behavior for denylist fetches."""

    max_retries: int = 2
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 5.0
    retryable_errors: list[str] = field(
        default_factory=lambda: ["timeout", "network_error", "server_error", "rate_limited"]
    )


@dataclass
class ServerConfig:
    """MCP server identity and listener settings."""

    name: str = "IP Filter Server"
    version: str = "0.1.0"
    transport: str = Transport.SSE.value
    host: str = "0.0.0.0"
    port: int = 3000
    sse_path: str = "/sse"


@dataclass
class LoggingConfig:
    """Logging and audit configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'
    audit_mode: bool = False
    audit_signing_key: Optional[str] = None


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    denylist: DenylistConfig = field(default_factory=DenylistConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"  # 'en' or 'de'


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _str_env(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or default


def validate_config(config: SystemConfig) -> list[str]:
    """
    Check a configuration for values the server cannot run with.

    Returns:
        List of human-readable problems; empty if the configuration is usable
    """
    errors: list[str] = []

    if config.server.transport not in {t.value for t in Transport}:
        errors.append(f"Unknown transport: {config.server.transport}")

    if not 0 < config.server.port < 65536:
        errors.append(f"Port out of range: {config.server.port}")

    if not config.server.sse_path.startswith("/"):
        errors.append(f"SSE path must start with '/': {config.server.sse_path}")

    if not config.denylist.url.lower().startswith(("http://", "https://")):
        errors.append(f"Denylist URL must be http(s): {config.denylist.url}")

    if config.denylist.ttl_seconds <= 0:
        errors.append("Denylist TTL must be positive")

    if config.denylist.timeout_seconds <= 0:
        errors.append("HTTP timeout must be positive")

    if not config.denylist.line_token:
        errors.append("Denylist line token must not be empty")

    if config.retry.max_retries < 0:
        errors.append("Retry count must not be negative")

    if config.logging.level not in {level.value for level in LogLevel}:
        errors.append(f"Unknown log level: {config.logging.level}")

    if config.logging.output_format not in SUPPORTED_OUTPUT_FORMATS:
        errors.append(f"Unknown log format: {config.logging.output_format}")

    if config.logging.audit_mode and not config.logging.audit_signing_key:
        errors.append("Audit mode requires a signing key")

    if config.language not in SUPPORTED_LANGUAGES:
        errors.append(f"Unsupported language: {config.language}")

    return errors


def load_config_from_env(env_file: Optional[Path] = None) -> SystemConfig:
    """
    Build the system configuration from environment variables.

    A .env file is loaded first (``env_file`` or the nearest one found by
    python-dotenv); variables already set in the environment win.
    Malformed numbers fall back to defaults.

    Args:
        env_file: Optional explicit path to a .env file

    Returns:
        SystemConfig built from the environment

    Raises:
        ConfigurationError: If the resulting configuration is not usable
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    signing_key = (os.getenv("AUDIT_SIGNING_KEY") or "").strip() or None

    config = SystemConfig(
        denylist=DenylistConfig(
            url=_str_env("TOR_EXIT_LIST_URL", DEFAULT_EXIT_LIST_URL),
            ttl_seconds=_float_env("TOR_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS),
            timeout_seconds=_float_env("HTTP_TIMEOUT", 10.0),
        ),
        retry=RetryConfig(
            max_retries=_int_env("RETRY_COUNT", 2),
        ),
        server=ServerConfig(
            transport=_str_env("MCP_TRANSPORT", Transport.SSE.value).lower(),
            host=_str_env("MCP_HOST", "0.0.0.0"),
            port=_int_env("PORT", 3000),
        ),
        logging=LoggingConfig(
            level=_str_env("LOG_LEVEL", "info").lower(),
            output_format=_str_env("LOG_FORMAT", "text").lower(),
            audit_mode=signing_key is not None,
            audit_signing_key=signing_key,
        ),
        language=_str_env("IP_FILTER_LANGUAGE", "en").lower(),
    )

    errors = validate_config(config)
    if errors:
        raise ConfigurationError(
            code="invalid_config",
            message="; ".join(errors),
            details={"errors": errors},
        )

    return config
