"""
NSF Awards MCP Server

Model Context Protocol server for the National Science Foundation Awards API.

Architecture:
- instructions.py: SERVER_INSTRUCTIONS for AI agents
- tool_registry.py: tool catalogue and registration
- tools/: tool implementations
- container: DI container (dependency-injector) owning the shared HTTP gateway
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Any, cast

from mcp.server.fastmcp import FastMCP

from nsf_awards_mcp.container import ApplicationContainer
from nsf_awards_mcp.infrastructure.nsf import DEFAULT_BASE_URL

from .instructions import SERVER_INSTRUCTIONS
from .tool_registry import register_all_mcp_tools

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from nsf_awards_mcp.application.operations import AwardOperations
    from nsf_awards_mcp.infrastructure.nsf import HttpGateway

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0


def _make_lifespan(
    container: ApplicationContainer,
) -> Callable[[FastMCP[Any]], AbstractAsyncContextManager[ApplicationContainer]]:
    """
    Create a FastMCP lifespan handler bound to *container*.

    The gateway client is closed when a session ends and reopened on the next
    request, so transports that run one lifespan per session share the gateway.
    """

    @asynccontextmanager
    async def _lifespan(server: FastMCP[Any]) -> AsyncIterator[ApplicationContainer]:
        logger.info("Lifecycle: startup, NSF gateway ready")
        try:
            yield container
        finally:
            gateway = cast("HttpGateway", container.gateway())
            await gateway.close()
            logger.info("Lifecycle: shutdown, NSF HTTP client closed")

    return _lifespan


def create_server(
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    name: str = "nsf-awards",
) -> FastMCP:
    """
    Create and configure the NSF Awards MCP server.

    Args:
        base_url: NSF Awards API root.
        timeout: Per-attempt HTTP timeout in seconds.
        max_retries: Retries after the first attempt (transport errors and 5xx).
        retry_delay: Base backoff delay in seconds (doubles per retry).
        name: Server name.

    Returns:
        Configured FastMCP server instance.
    """
    logger.info("Initializing NSF Awards MCP Server...")

    container = ApplicationContainer()
    container.config.from_dict(
        {
            "base_url": base_url,
            "timeout": timeout,
            "max_retries": max_retries,
            "retry_delay": retry_delay,
        }
    )

    operations = cast("AwardOperations", container.operations())
    logger.info(f"NSF API: {base_url} (timeout={timeout}s, retries={max_retries}, delay={retry_delay}s)")

    mcp = FastMCP(
        name,
        instructions=SERVER_INSTRUCTIONS,
        lifespan=_make_lifespan(container),
    )

    stats = register_all_mcp_tools(mcp=mcp, operations=operations)
    logger.info("Tool registration complete: %s", stats)

    logger.info("NSF Awards MCP Server initialized successfully")
    return mcp


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def main():
    """Run the MCP server over stdio."""

    # stdout carries the MCP protocol; logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    server = create_server(
        base_url=os.environ.get("NSF_API_BASE_URL", "").strip() or DEFAULT_BASE_URL,
        timeout=_env_float("NSF_API_TIMEOUT", DEFAULT_TIMEOUT),
        max_retries=_env_int("NSF_API_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        retry_delay=_env_float("NSF_API_RETRY_DELAY", DEFAULT_RETRY_DELAY),
    )

    server.run()


if __name__ == "__main__":
    main()
