"""
NSF Awards MCP - National Science Foundation Awards API for MCP clients

Search NSF funding awards, look up award details and Project Outcomes
Reports, and find awards by institution or Principal Investigator.

Usage:
    from nsf_awards_mcp import HttpGateway, SearchOrchestrator, SearchQuery

    async with HttpGateway() as gateway:
        orchestrator = SearchOrchestrator(gateway)
        result = await orchestrator.search(SearchQuery(keyword="robotics", page_size=10))

        for award in result.awards:
            print(f"{award.award_id}: {award.title}")

Run as an MCP server (stdio):
    python -m nsf_awards_mcp
"""

from .application.operations import AwardOperations
from .application.search import QueryTranslator, SearchOrchestrator
from .domain.entities import (
    AwardRecord,
    ErrorCode,
    OutcomeRecord,
    SearchQuery,
    SearchResult,
    ToolOutcome,
)
from .infrastructure.nsf import HttpGateway, ResponseParser

__version__ = "0.1.0"

__all__ = [
    # Operations
    "AwardOperations",
    "SearchOrchestrator",
    "QueryTranslator",
    # HTTP access
    "HttpGateway",
    "ResponseParser",
    # Entities
    "AwardRecord",
    "OutcomeRecord",
    "SearchQuery",
    "SearchResult",
    "ToolOutcome",
    "ErrorCode",
]
