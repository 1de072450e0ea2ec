"""
Award search: query translation and operation orchestration.
"""

from .orchestrator import (
    SearchOrchestrator,
    exclude_subawards,
    filter_expired,
    merge_unique,
    sort_by_start_date,
)
from .query_translator import DATE_FIELD_MAP, FIELD_MAP, QueryTranslator

__all__ = [
    "DATE_FIELD_MAP",
    "FIELD_MAP",
    "QueryTranslator",
    "SearchOrchestrator",
    "exclude_subawards",
    "filter_expired",
    "merge_unique",
    "sort_by_start_date",
]
