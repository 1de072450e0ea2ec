"""
ToolOutcome - discriminated result of one MCP operation.

Either a success carrying ``data`` and execution metadata, or a failure
carrying a machine-readable ``ErrorCode`` and a human-readable message.
Created per call and discarded once serialized to the client.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Codes surfaced to MCP clients."""

    SEARCH_FAILED = "SEARCH_FAILED"
    INSTITUTION_SEARCH_FAILED = "INSTITUTION_SEARCH_FAILED"
    PI_SEARCH_FAILED = "PI_SEARCH_FAILED"
    GET_DETAILS_FAILED = "GET_DETAILS_FAILED"
    GET_OUTCOMES_FAILED = "GET_OUTCOMES_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    # Notices on successful-but-empty lookups
    AWARD_NOT_FOUND = "AWARD_NOT_FOUND"
    OUTCOMES_NOT_FOUND = "OUTCOMES_NOT_FOUND"


@dataclass(frozen=True)
class OutcomeMetadata:
    offset: int = 0
    limit: int = 0
    has_more: bool = False
    total_results: int = 0
    execution_time_ms: float = 0.0
    notice: ErrorCode | None = None
    notice_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "totalResults": self.total_results,
            "offset": self.offset,
            "limit": self.limit,
            "hasMore": self.has_more,
            "executionTime": round(self.execution_time_ms, 1),
        }
        if self.notice:
            result["notice"] = {"code": self.notice.value, "message": self.notice_message}
        return result


@dataclass(frozen=True)
class ToolOutcome(Generic[T]):
    """Result of one operation. Build with ``ok()`` or ``fail()``."""

    success: bool
    data: T | None = None
    metadata: OutcomeMetadata | None = None
    error_code: ErrorCode | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: T | None, metadata: OutcomeMetadata) -> ToolOutcome[T]:
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, code: ErrorCode, message: str) -> ToolOutcome[T]:
        return cls(success=False, error_code=code, message=message)

    def to_dict(self, data: Any = None) -> dict[str, Any]:
        """
        Serialize for the client.

        Args:
            data: Pre-serialized payload (defaults to ``self.data`` as-is)
        """
        if not self.success:
            return {
                "success": False,
                "error": {
                    "code": self.error_code.value if self.error_code else None,
                    "message": self.message,
                },
            }
        return {
            "success": True,
            "data": self.data if data is None else data,
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }
