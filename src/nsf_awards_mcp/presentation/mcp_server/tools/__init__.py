"""
NSF Awards MCP Tools

- search_nsf_awards: keyword / filter search
- get_award_details: one award by ID
- get_project_outcomes: Project Outcomes Report for an award
- search_by_institution: awards held by one organization
- search_by_pi: awards by Principal Investigator (optionally with Co-PI awards)

Usage:
    from .tools import register_all_tools
    register_all_tools(mcp, operations)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .awards import register_award_tools

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from nsf_awards_mcp.application.operations import AwardOperations


def register_all_tools(mcp: FastMCP, operations: AwardOperations) -> None:
    """Register every NSF award tool on *mcp*."""
    register_award_tools(mcp, operations)


__all__ = ["register_all_tools", "register_award_tools"]
