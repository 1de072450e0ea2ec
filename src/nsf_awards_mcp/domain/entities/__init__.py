"""
Domain Entities

Core value objects for NSF award search.
"""

from __future__ import annotations

from .award import AwardRecord, Conference, OutcomeRecord, Publication
from .query import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SearchQuery, SearchResult
from .tool_outcome import ErrorCode, OutcomeMetadata, ToolOutcome

__all__ = [
    # Award entities
    "AwardRecord",
    "OutcomeRecord",
    "Publication",
    "Conference",
    # Query entities
    "SearchQuery",
    "SearchResult",
    "MAX_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE",
    # Operation results
    "ToolOutcome",
    "OutcomeMetadata",
    "ErrorCode",
]
