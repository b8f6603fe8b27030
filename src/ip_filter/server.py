"""
MCP server exposing the ``filter_ip`` tool.

Wires configuration, logging, the denylist client/cache, and the evaluator
into a FastMCP application and runs it on the configured transport
(stdio, SSE, or streamable HTTP).
"""

import json
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated, AsyncIterator, Callable, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from .audit_logger import AuditLogger, create_logger
from .config import SystemConfig
from .denylist_cache import DenylistCache
from .denylist_client import DenylistClient
from .evaluator import AdmissibilityEvaluator
from .i18n import get_message
from .models import EvaluationRequest
from .retry_manager import RetryManager


TOOL_NAME = "filter_ip"
TOOL_DESCRIPTION = (
    "Validates if an IPv4 or IPv6 address is within allowed ranges "
    "or is a Tor exit node"
)


def build_logger(config: SystemConfig) -> AuditLogger:
    return create_logger(
        level=config.logging.level,
        output_format=config.logging.output_format,
        signing_key=config.logging.audit_signing_key if config.logging.audit_mode else None,
    )


def build_evaluator(
    config: SystemConfig,
    logger: Optional[AuditLogger] = None,
    client: Optional[DenylistClient] = None,
) -> tuple[AdmissibilityEvaluator, DenylistClient]:
    """
    Build an evaluator with its own denylist client and cache.

    Returns:
        Tuple of (evaluator, denylist client); the caller closes the client
    """
    client = client or DenylistClient(config.denylist)
    cache = DenylistCache(
        source=client,
        ttl_seconds=config.denylist.ttl_seconds,
        retry_manager=RetryManager(config.retry),
        logger=logger,
    )
    evaluator = AdmissibilityEvaluator(
        denylist=cache,
        logger=logger,
        language=config.language,
    )
    return evaluator, client


async def handle_filter_ip(
    evaluator: AdmissibilityEvaluator,
    ip_address: str,
    cidr_ranges: list[str],
    check_tor: bool = False,
) -> str:
    """Evaluate one tool call and return the JSON text payload."""
    result = await evaluator.evaluate(
        EvaluationRequest(
            ip_address=ip_address,
            cidr_ranges=list(cidr_ranges),
            check_tor=check_tor,
        )
    )
    return json.dumps(result.to_dict())


def shared_client_lifespan(
    client: Optional[DenylistClient],
) -> Callable[[FastMCP], AbstractAsyncContextManager[None]]:
    """
    Build a session lifespan for a denylist client shared by all sessions.

    FastMCP enters the lifespan once per session (every SSE connection is
    its own session). The client is closed only when the last active session
    ends; a later fetch reopens it lazily.

    Args:
        client: Shared denylist client, or None when the caller owns it

    Returns:
        Lifespan factory suitable for ``FastMCP(lifespan=...)``
    """
    active_sessions = 0

    @asynccontextmanager
    async def lifespan(_app: FastMCP) -> AsyncIterator[None]:
        nonlocal active_sessions
        active_sessions += 1
        try:
            yield
        finally:
            active_sessions -= 1
            if active_sessions == 0 and client is not None:
                await client.close()

    return lifespan


def create_app(
    config: SystemConfig,
    evaluator: Optional[AdmissibilityEvaluator] = None,
    logger: Optional[AuditLogger] = None,
) -> FastMCP:
    """
    Create the FastMCP application.

    Args:
        config: System configuration
        evaluator: Optional prebuilt evaluator (tests inject one with a fake
            denylist); otherwise one is built with a real denylist client
        logger: Optional audit logger

    Returns:
        FastMCP app with the filter_ip tool registered
    """
    client: Optional[DenylistClient] = None
    if evaluator is None:
        evaluator, client = build_evaluator(config, logger)

    app = FastMCP(
        config.server.name,
        host=config.server.host,
        port=config.server.port,
        sse_path=config.server.sse_path,
        lifespan=shared_client_lifespan(client),
    )

    @app.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
    async def filter_ip(
        ip_address: Annotated[str, Field(description="IPv4 or IPv6 address to check")],
        cidr_ranges: Annotated[
            list[str], Field(description="Array of CIDR ranges to check against")
        ],
        check_tor: Annotated[
            bool, Field(description="Check if the IP address is a Tor exit node")
        ] = False,
    ) -> str:
        return await handle_filter_ip(evaluator, ip_address, cidr_ranges, check_tor)

    return app


def run_server(config: SystemConfig) -> None:
    """Build the app from configuration and serve until interrupted."""
    logger = build_logger(config)
    app = create_app(config, logger=logger)

    logger.info(
        "server",
        get_message(
            "server.starting", config.language,
            name=config.server.name,
            transport=config.server.transport,
        ),
        {
            "host": config.server.host,
            "port": config.server.port,
            "version": config.server.version,
        },
    )
    app.run(transport=config.server.transport)
