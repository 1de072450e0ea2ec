"""
Unified Exception Hierarchy for NSF Awards MCP.

Exception Hierarchy:
    NsfAwardsError (base)
    ├── APIError
    │   └── UpstreamError
    │       ├── NetworkError
    │       └── ServiceUnavailableError
    ├── ValidationError
    │   └── InvalidParameterError
    └── DataError
        ├── NotFoundError
        └── ParseError

Upstream error bodies are decoded into a tagged union of envelopes:

    ApiErrorEnvelope      {"response": {"error": {"code", "message"}}}
    NotificationEnvelope  {"notification": {"code", "message"}}
    UnrecognizedEnvelope  anything else
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Union


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, can continue
    ERROR = auto()        # Failed but can retry
    CRITICAL = auto()     # Cannot continue
    TRANSIENT = auto()    # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""
    API = "api"
    VALIDATION = "validation"
    DATA = "data"
    NETWORK = "network"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context attached to every NSF Awards error."""
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Upstream error envelopes
# =============================================================================


@dataclass(frozen=True, slots=True)
class ApiErrorEnvelope:
    """``{"response": {"error": {...}}}`` shape."""
    code: str
    message: str
    kind: str = "response_error"


@dataclass(frozen=True, slots=True)
class NotificationEnvelope:
    """``{"notification": {...}}`` shape."""
    code: str
    message: str
    kind: str = "notification"


@dataclass(frozen=True, slots=True)
class UnrecognizedEnvelope:
    """Any error body that matches neither known shape."""
    raw: Any = None
    kind: str = "unrecognized"

    @property
    def code(self) -> str | None:
        return None

    @property
    def message(self) -> str | None:
        return None


ErrorEnvelope = Union[ApiErrorEnvelope, NotificationEnvelope, UnrecognizedEnvelope]


def _code_and_message(block: Any) -> tuple[str, str] | None:
    if not isinstance(block, dict):
        return None
    if "code" not in block and "message" not in block:
        return None
    return str(block.get("code", "")), str(block.get("message", ""))


def decode_error_envelope(payload: Any) -> ErrorEnvelope:
    """
    Classify a decoded upstream body into one of the known error envelopes.

    Args:
        payload: Decoded JSON/XML body (any shape)

    Returns:
        ApiErrorEnvelope, NotificationEnvelope, or UnrecognizedEnvelope
    """
    if isinstance(payload, dict):
        response = payload.get("response")
        if isinstance(response, dict):
            pair = _code_and_message(response.get("error"))
            if pair:
                return ApiErrorEnvelope(code=pair[0], message=pair[1])
        pair = _code_and_message(payload.get("notification"))
        if pair:
            return NotificationEnvelope(code=pair[0], message=pair[1])
    return UnrecognizedEnvelope(raw=payload)


def describe_envelope(envelope: ErrorEnvelope) -> str:
    """``code: message`` from the parts that are present; empty when neither is."""
    return ": ".join(part for part in (envelope.code, envelope.message) if part)


# =============================================================================
# Base
# =============================================================================


class NsfAwardsError(Exception):
    """
    Base exception for all NSF Awards errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    """

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.API,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.operation:
            result["operation"] = self.context.operation
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        return result


# =============================================================================
# API Errors
# =============================================================================


class APIError(NsfAwardsError):
    """Base class for API-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool = True,
        category: ErrorCategory = ErrorCategory.API,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=category,
            retryable=retryable,
        )


class UpstreamError(APIError):
    """
    Classified HTTP failure from the NSF Awards API.

    Carries the upstream status (``None`` for transport failures) and the
    decoded error envelope, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        envelope: ErrorEnvelope | None = None,
        context: ErrorContext | None = None,
        retryable: bool = False,
        category: ErrorCategory = ErrorCategory.API,
    ) -> None:
        super().__init__(message, context=context, retryable=retryable, category=category)
        self.status = status
        self.envelope = envelope or UnrecognizedEnvelope()

    @property
    def upstream_code(self) -> str | None:
        return self.envelope.code

    @property
    def upstream_message(self) -> str | None:
        return self.envelope.message

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status is not None:
            result["status"] = self.status
        if self.upstream_code:
            result["upstream_code"] = self.upstream_code
        return result


class NetworkError(UpstreamError):
    """Raised for network connectivity issues (no HTTP status)."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            retryable=True,
            category=ErrorCategory.NETWORK,
        )


class ServiceUnavailableError(UpstreamError):
    """Raised when the NSF service keeps answering 5xx."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        status: int | None = None,
        envelope: ErrorEnvelope | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"NSF API: {message}",
            status=status,
            envelope=envelope,
            context=context,
            retryable=True,
        )
        self.severity = ErrorSeverity.TRANSIENT


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(NsfAwardsError):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        expected: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = ErrorContext(
            operation=ctx.operation,
            input_value=value,
            suggestion=f"Expected {expected}",
            metadata=ctx.metadata,
        )
        super().__init__(
            f"Invalid parameter '{param_name}': {value!r} (expected {expected})",
            context=ctx,
        )
        self.param_name = param_name


# =============================================================================
# Data Errors
# =============================================================================


class DataError(NsfAwardsError):
    """Base class for data-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
            retryable=False,
        )


class NotFoundError(DataError):
    """Raised when the upstream answers 404 for a resource."""

    status = 404

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        msg = f"{resource} not found"
        if identifier:
            msg = f"{resource} not found: {identifier}"

        ctx = context or ErrorContext()
        ctx = ErrorContext(
            operation=ctx.operation,
            input_value=identifier,
            suggestion=ctx.suggestion or "Check the award ID and try again",
            metadata=ctx.metadata,
        )
        super().__init__(msg, context=ctx)


class ParseError(DataError):
    """Raised when neither JSON nor XML decoding of a body succeeds."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        full_msg = f"Parse error: {message}"
        if source:
            full_msg = f"Parse error ({source}): {message}"
        super().__init__(full_msg, context=context)


__all__ = [
    "APIError",
    "ApiErrorEnvelope",
    "DataError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorEnvelope",
    "ErrorSeverity",
    "InvalidParameterError",
    "NetworkError",
    "NotFoundError",
    "NotificationEnvelope",
    "NsfAwardsError",
    "ParseError",
    "ServiceUnavailableError",
    "UnrecognizedEnvelope",
    "UpstreamError",
    "ValidationError",
    "decode_error_envelope",
    "describe_envelope",
]
