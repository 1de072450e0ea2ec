"""
NSF HTTP Gateway - single point of contact with the NSF Awards API.

Provides:
- httpx.AsyncClient management (one client per gateway, reopened after close)
- Exponential backoff retry: ``retry_delay * 2 ** (attempt - 1)``
- Retry on transport failures and HTTP >= 500 only; 4xx is final
- 404 surfaced as NotFoundError so callers can treat it as "absent"
- Request / response / retry / failure events for diagnostics hooks
- Error classification with decoded upstream error envelopes

Configuration (base URL, timeout, retry policy) is fixed at construction and
read-only afterwards, so one gateway is safely shared by concurrent tool calls.
Each attempt gets the full timeout; there is no shared deadline.

Usage:
    async with HttpGateway(max_retries=3) as gateway:
        body = await gateway.execute(AWARDS_PATH, {"keyword": "robotics"})
"""

from __future__ import annotations

import asyncio
import logging
import urllib.parse
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
from typing_extensions import Self

from nsf_awards_mcp.shared.exceptions import (
    ErrorEnvelope,
    NetworkError,
    NotFoundError,
    ParseError,
    ServiceUnavailableError,
    UnrecognizedEnvelope,
    UpstreamError,
    decode_error_envelope,
    describe_envelope,
)

from .parser import ResponseParser

logger = logging.getLogger(__name__)

# NSF Awards API endpoints
DEFAULT_BASE_URL = "https://api.nsf.gov/services/v1"
AWARDS_PATH = "/awards.json"

USER_AGENT = "nsf-awards-mcp/1.0"


def award_path(award_id: str) -> str:
    """Detail endpoint for one award."""
    return f"/awards/{urllib.parse.quote(award_id, safe='')}.json"


def outcomes_path(award_id: str) -> str:
    """Project Outcomes Report endpoint for one award."""
    return f"/awards/{urllib.parse.quote(award_id, safe='')}/projectoutcomes.json"


EventKind = Literal["request", "response", "retry", "failure"]


@dataclass(frozen=True, slots=True)
class GatewayEvent:
    """Diagnostic record delivered to gateway hooks."""

    kind: EventKind
    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    status: int | None = None
    attempt: int | None = None
    delay: float | None = None
    error: str | None = None


GatewayHook = Callable[[GatewayEvent], None]


class HttpGateway:
    """
    Async HTTP client for the NSF Awards API.

    Hooks are called synchronously with a GatewayEvent; a hook that raises is
    logged and ignored, it can never change the outcome of a request.
    """

    _service_name: str = "NSF Awards API"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        hooks: Iterable[GatewayHook] = (),
        parser: ResponseParser | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize gateway.

        Args:
            base_url: API root (e.g. https://api.nsf.gov/services/v1)
            timeout: Per-attempt timeout in seconds
            max_retries: Retries after the first attempt
            retry_delay: Base backoff delay in seconds
            hooks: Diagnostic callbacks receiving GatewayEvent
            parser: Parser used to decode error bodies
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._retry_delay = retry_delay
        self._hooks: tuple[GatewayHook, ...] = tuple(hooks)
        self._parser = parser or ResponseParser()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client; a closed client is replaced."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={
                    "Accept": "application/json, application/xml",
                    "User-Agent": USER_AGENT,
                },
                event_hooks={
                    "request": [self._on_request],
                    "response": [self._on_response],
                },
                transport=self._transport,
            )
        return self._client

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def retry_delay(self) -> float:
        return self._retry_delay

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number *attempt* (1-based)."""
        return self._retry_delay * (2 ** (attempt - 1))

    # ------------------------------------------------------------------
    # Instrumentation
    # ------------------------------------------------------------------

    def _emit(self, event: GatewayEvent) -> None:
        for hook in self._hooks:
            try:
                hook(event)
            except Exception as e:
                logger.warning(f"{self._service_name}: diagnostics hook failed: {e}")

    async def _on_request(self, request: httpx.Request) -> None:
        params = dict(request.url.params)
        logger.debug(f"{self._service_name} request: {request.method} {request.url.path} params={params}")
        self._emit(GatewayEvent(kind="request", method=request.method, path=request.url.path, params=params))

    async def _on_response(self, response: httpx.Response) -> None:
        request = response.request
        logger.debug(f"{self._service_name} response: {response.status_code} {request.url.path}")
        self._emit(
            GatewayEvent(
                kind="response",
                method=request.method,
                path=request.url.path,
                params=dict(request.url.params),
                status=response.status_code,
            )
        )

    # ------------------------------------------------------------------
    # Request execution
    # ------------------------------------------------------------------

    async def execute(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any] | list[Any] | str:
        """
        GET *path* with retry and return the raw body.

        Args:
            path: Endpoint path relative to the base URL
            params: Query parameters; None values are dropped

        Returns:
            Decoded JSON when the server says it sent JSON, otherwise text

        Raises:
            NotFoundError: HTTP 404
            UpstreamError: Other 4xx (not retried)
            ServiceUnavailableError: 5xx after all retries
            NetworkError: Transport failure after all retries
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        total_attempts = self._max_retries + 1

        for attempt in range(1, total_attempts + 1):
            try:
                response = await self._get_client().get(path, params=query)
            except httpx.RequestError as e:
                if attempt < total_attempts:
                    await self._backoff(attempt, path, query, error=f"{type(e).__name__}: {e}")
                    continue
                self._fail(path, query, attempt, error=str(e))
                raise NetworkError(
                    f"{self._service_name} request to {path} failed after {attempt} attempts: {e}"
                ) from e

            status = response.status_code
            if status == 404:
                raise NotFoundError("NSF resource", path)

            if status >= 500:
                if attempt < total_attempts:
                    await self._backoff(attempt, path, query, status=status)
                    continue
                envelope = self._decode_error(response)
                self._fail(path, query, attempt, status=status)
                raise ServiceUnavailableError(
                    self._error_message(envelope, f"HTTP {status} from {path} after {attempt} attempts"),
                    status=status,
                    envelope=envelope,
                )

            if status >= 400:
                envelope = self._decode_error(response)
                self._fail(path, query, attempt, status=status)
                raise UpstreamError(
                    self._error_message(envelope, f"{self._service_name} HTTP {status} from {path}"),
                    status=status,
                    envelope=envelope,
                )

            return self._body(response)

        # Loop always returns or raises
        raise RuntimeError("Unexpected retry loop exit")

    async def _backoff(
        self,
        attempt: int,
        path: str,
        params: dict[str, Any],
        *,
        status: int | None = None,
        error: str | None = None,
    ) -> None:
        delay = self.backoff_delay(attempt)
        reason = f"HTTP {status}" if status is not None else error
        logger.warning(
            f"{self._service_name}: {reason} on {path}, "
            f"retry {attempt}/{self._max_retries} in {delay:.1f}s"
        )
        self._emit(
            GatewayEvent(
                kind="retry",
                method="GET",
                path=path,
                params=params,
                status=status,
                attempt=attempt,
                delay=delay,
                error=error,
            )
        )
        await asyncio.sleep(delay)

    def _fail(
        self,
        path: str,
        params: dict[str, Any],
        attempt: int,
        *,
        status: int | None = None,
        error: str | None = None,
    ) -> None:
        logger.error(f"{self._service_name} request failed: path={path} status={status} attempts={attempt} error={error}")
        self._emit(
            GatewayEvent(
                kind="failure",
                method="GET",
                path=path,
                params=params,
                status=status,
                attempt=attempt,
                error=error,
            )
        )

    @staticmethod
    def _body(response: httpx.Response) -> dict[str, Any] | list[Any] | str:
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError:
                # Mislabelled body; let the parser sort it out
                return response.text
        return response.text

    def _decode_error(self, response: httpx.Response) -> ErrorEnvelope:
        try:
            payload = self._parser.parse(self._body(response))
        except ParseError:
            return UnrecognizedEnvelope(raw=response.text[:500])
        return decode_error_envelope(payload)

    @staticmethod
    def _error_message(envelope: ErrorEnvelope, fallback: str) -> str:
        return describe_envelope(envelope) or fallback

    async def close(self) -> None:
        """Close the HTTP client; the next request opens a new one."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
