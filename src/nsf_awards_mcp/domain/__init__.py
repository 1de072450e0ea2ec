"""
Domain Layer - Core Business Objects

Contains:
- entities: Award, outcome, query and result value objects
"""

from .entities import (
    AwardRecord,
    ErrorCode,
    OutcomeRecord,
    SearchQuery,
    SearchResult,
    ToolOutcome,
)

__all__ = [
    "AwardRecord",
    "OutcomeRecord",
    "SearchQuery",
    "SearchResult",
    "ToolOutcome",
    "ErrorCode",
]
