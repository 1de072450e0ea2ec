"""
Application DI Container (dependency-injector).

One container per server: a single HttpGateway (and therefore a single
httpx.AsyncClient) is shared by every tool call.

Usage::

    from nsf_awards_mcp.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict({
        "base_url": "https://api.nsf.gov/services/v1",
        "timeout": 30.0,
        "max_retries": 3,
        "retry_delay": 1.0,
    })

    operations = container.operations()

    # In tests, override any provider:
    container.gateway.override(providers.Object(mock_gateway))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

logger = logging.getLogger(__name__)


def _create_gateway(
    base_url: str | None,
    timeout: float | None,
    max_retries: int | None,
    retry_delay: float | None,
) -> object:
    """Lazy factory for HttpGateway; unset options fall back to defaults."""
    from nsf_awards_mcp.infrastructure.nsf import DEFAULT_BASE_URL, HttpGateway

    return HttpGateway(
        base_url=base_url or DEFAULT_BASE_URL,
        timeout=30.0 if timeout is None else float(timeout),
        max_retries=3 if max_retries is None else int(max_retries),
        retry_delay=1.0 if retry_delay is None else float(retry_delay),
    )


def _create_orchestrator(gateway: object) -> object:
    """Lazy factory for SearchOrchestrator."""
    from nsf_awards_mcp.application.search import SearchOrchestrator

    return SearchOrchestrator(gateway)  # type: ignore[arg-type]


def _create_operations(orchestrator: object) -> object:
    """Lazy factory for AwardOperations."""
    from nsf_awards_mcp.application.operations import AwardOperations

    return AwardOperations(orchestrator)  # type: ignore[arg-type]


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the NSF Awards MCP server.

    - ``gateway``: HTTP access to the NSF Awards API
    - ``orchestrator``: award search / detail / outcomes policy
    - ``operations``: tool-facing ToolOutcome operations
    """

    config = providers.Configuration()

    gateway = providers.Singleton(
        _create_gateway,
        base_url=config.base_url,
        timeout=config.timeout,
        max_retries=config.max_retries,
        retry_delay=config.retry_delay,
    )

    orchestrator = providers.Singleton(
        _create_orchestrator,
        gateway=gateway,
    )

    operations = providers.Singleton(
        _create_operations,
        orchestrator=orchestrator,
    )


__all__ = ["ApplicationContainer"]
