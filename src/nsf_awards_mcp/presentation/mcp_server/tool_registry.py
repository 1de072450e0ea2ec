"""
Tool Registry - catalogue and registration of the MCP tools.

TOOL_CATEGORIES is the single list of tool names the server is expected to
expose; ``validate_tool_registry`` checks it against what FastMCP actually
registered.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from nsf_awards_mcp.application.operations import AwardOperations

logger = logging.getLogger(__name__)

TOOL_CATEGORIES: dict[str, dict[str, Any]] = {
    "search": {
        "name": "Award search",
        "description": "Keyword, institution and investigator searches",
        "tools": ["search_nsf_awards", "search_by_institution", "search_by_pi"],
    },
    "lookup": {
        "name": "Award lookup",
        "description": "Single-award detail and Project Outcomes Report",
        "tools": ["get_award_details", "get_project_outcomes"],
    },
}


def register_all_mcp_tools(mcp: FastMCP, operations: AwardOperations) -> dict[str, int]:
    """
    Register all MCP tools.

    Returns:
        Dict with category ids and tool counts
    """
    from .tools import register_all_tools

    logger.info("Registering NSF award tools...")
    register_all_tools(mcp, operations)

    stats = {cat_id: len(cat_info["tools"]) for cat_id, cat_info in TOOL_CATEGORIES.items()}
    logger.info(f"Total registered: {sum(stats.values())} tools")
    return stats


def list_registered_tools() -> dict[str, list[str]]:
    """Tool names grouped by category."""
    return {cat_id: cat_info["tools"] for cat_id, cat_info in TOOL_CATEGORIES.items()}


def validate_tool_registry(mcp: FastMCP) -> dict[str, Any]:
    """
    Compare TOOL_CATEGORIES with the tools registered on *mcp*.

    Returns:
        Dict with defined / registered / missing / extra names and ``valid``
    """
    defined = {tool for cat_info in TOOL_CATEGORIES.values() for tool in cat_info["tools"]}

    try:
        registered = set(mcp._tool_manager._tools.keys())
    except AttributeError:
        logger.warning("Cannot access registered tools from FastMCP instance")
        return {
            "defined": sorted(defined),
            "registered": [],
            "missing": [],
            "extra": [],
            "valid": False,
        }

    missing = defined - registered
    extra = registered - defined
    if missing:
        logger.warning(f"Tools defined but not registered: {missing}")
    if extra:
        logger.info(f"Tools registered but not in TOOL_CATEGORIES: {extra}")

    return {
        "defined": sorted(defined),
        "registered": sorted(registered),
        "missing": sorted(missing),
        "extra": sorted(extra),
        "valid": not missing and not extra,
    }
