"""Tests for HttpGateway: retry/backoff, error classification, hooks."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from nsf_awards_mcp.infrastructure.nsf import (
    AWARDS_PATH,
    DEFAULT_BASE_URL,
    HttpGateway,
    award_path,
    outcomes_path,
)
from nsf_awards_mcp.shared.exceptions import (
    ApiErrorEnvelope,
    NetworkError,
    NotFoundError,
    ServiceUnavailableError,
    UpstreamError,
)


class Recorder:
    """MockTransport handler that replays scripted responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_gateway(handler, **kwargs) -> HttpGateway:
    kwargs.setdefault("retry_delay", 0)
    return HttpGateway(transport=httpx.MockTransport(handler), **kwargs)


# ============================================================
# Paths & configuration
# ============================================================


class TestConfiguration:
    def test_defaults(self):
        gateway = HttpGateway()
        assert gateway.base_url == DEFAULT_BASE_URL
        assert gateway.timeout == 30.0
        assert gateway.max_retries == 3
        assert gateway.retry_delay == 1.0

    def test_trailing_slash_removed(self):
        assert HttpGateway(base_url="https://example.test/v1/").base_url == "https://example.test/v1"

    def test_backoff_doubles(self):
        gateway = HttpGateway(retry_delay=0.5)
        assert [gateway.backoff_delay(n) for n in (1, 2, 3)] == [0.5, 1.0, 2.0]

    def test_paths(self):
        assert award_path("2112345") == "/awards/2112345.json"
        assert outcomes_path("2112345") == "/awards/2112345/projectoutcomes.json"
        assert award_path("a/b") == "/awards/a%2Fb.json"

    async def test_context_manager_closes(self):
        handler = Recorder(httpx.Response(200, json={}))
        async with make_gateway(handler) as gateway:
            await gateway.execute(AWARDS_PATH)
            client = gateway._client
        assert client.is_closed
        assert gateway._client is None

    async def test_close_without_requests(self):
        gateway = HttpGateway()
        await gateway.close()
        assert gateway._client is None

    async def test_usable_after_close(self):
        handler = Recorder(httpx.Response(200, json={"n": 1}), httpx.Response(200, json={"n": 2}))
        gateway = make_gateway(handler)
        assert await gateway.execute(AWARDS_PATH) == {"n": 1}
        await gateway.close()
        assert await gateway.execute(AWARDS_PATH) == {"n": 2}
        await gateway.close()
        assert len(handler.requests) == 2


# ============================================================
# Successful requests
# ============================================================


class TestExecute:
    async def test_json_body(self):
        handler = Recorder(httpx.Response(200, json={"response": {"award": []}}))
        gateway = make_gateway(handler)
        body = await gateway.execute(AWARDS_PATH, {"keyword": "robotics", "rpp": 5})
        assert body == {"response": {"award": []}}
        request = handler.requests[0]
        assert request.url.path == "/services/v1/awards.json"
        assert request.url.params["keyword"] == "robotics"
        assert request.url.params["rpp"] == "5"

    async def test_none_params_dropped(self):
        handler = Recorder(httpx.Response(200, json={}))
        gateway = make_gateway(handler)
        await gateway.execute(AWARDS_PATH, {"keyword": "x", "awardeeName": None})
        assert "awardeeName" not in handler.requests[0].url.params

    async def test_xml_body_returned_as_text(self):
        xml = "<response><award><id>1</id></award></response>"
        handler = Recorder(httpx.Response(200, text=xml, headers={"content-type": "application/xml"}))
        gateway = make_gateway(handler)
        assert await gateway.execute(AWARDS_PATH) == xml

    async def test_mislabelled_json_returned_as_text(self):
        handler = Recorder(httpx.Response(200, text="<response/>", headers={"content-type": "application/json"}))
        gateway = make_gateway(handler)
        assert await gateway.execute(AWARDS_PATH) == "<response/>"


# ============================================================
# Retry
# ============================================================


class TestRetry:
    async def test_retries_5xx_then_succeeds(self):
        handler = Recorder(
            httpx.Response(503),
            httpx.Response(502),
            httpx.Response(200, json={"response": {}}),
        )
        gateway = make_gateway(handler, max_retries=3)
        assert await gateway.execute(AWARDS_PATH) == {"response": {}}
        assert len(handler.requests) == 3

    async def test_backoff_delays(self):
        handler = Recorder(httpx.Response(500), httpx.Response(500), httpx.Response(200, json={}))
        gateway = make_gateway(handler, max_retries=2, retry_delay=1.0)
        with patch("nsf_awards_mcp.infrastructure.nsf.gateway.asyncio.sleep", new=AsyncMock()) as sleep:
            await gateway.execute(AWARDS_PATH)
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    async def test_5xx_exhausted(self):
        handler = Recorder(*[httpx.Response(500) for _ in range(3)])
        gateway = make_gateway(handler, max_retries=2)
        with pytest.raises(ServiceUnavailableError) as exc_info:
            await gateway.execute(AWARDS_PATH)
        assert exc_info.value.status == 500
        assert len(handler.requests) == 3

    async def test_5xx_exhausted_carries_envelope(self):
        body = {"response": {"error": {"code": "E500", "message": "Backend down"}}}
        handler = Recorder(httpx.Response(500, json=body))
        gateway = make_gateway(handler, max_retries=0)
        with pytest.raises(ServiceUnavailableError) as exc_info:
            await gateway.execute(AWARDS_PATH)
        assert exc_info.value.upstream_code == "E500"
        assert "Backend down" in str(exc_info.value)

    async def test_network_error_retried(self):
        handler = Recorder(
            httpx.ConnectError("connection refused"),
            httpx.Response(200, json={"ok": True}),
        )
        gateway = make_gateway(handler, max_retries=1)
        assert await gateway.execute(AWARDS_PATH) == {"ok": True}

    async def test_network_error_exhausted(self):
        handler = Recorder(*[httpx.ConnectError("connection refused") for _ in range(2)])
        gateway = make_gateway(handler, max_retries=1)
        with pytest.raises(NetworkError) as exc_info:
            await gateway.execute(AWARDS_PATH)
        assert exc_info.value.status is None
        assert "after 2 attempts" in str(exc_info.value)

    async def test_4xx_not_retried(self):
        body = {"response": {"error": {"code": "E400", "message": "Invalid rpp"}}}
        handler = Recorder(httpx.Response(400, json=body))
        gateway = make_gateway(handler, max_retries=3)
        with pytest.raises(UpstreamError) as exc_info:
            await gateway.execute(AWARDS_PATH)
        assert len(handler.requests) == 1
        assert exc_info.value.status == 400
        assert exc_info.value.envelope == ApiErrorEnvelope(code="E400", message="Invalid rpp")
        assert str(exc_info.value) == "E400: Invalid rpp"

    async def test_4xx_message_without_code(self):
        handler = Recorder(httpx.Response(400, json={"notification": {"message": "Invalid rpp"}}))
        gateway = make_gateway(handler, max_retries=0)
        with pytest.raises(UpstreamError) as exc_info:
            await gateway.execute(AWARDS_PATH)
        assert str(exc_info.value) == "Invalid rpp"

    async def test_429_not_retried(self):
        handler = Recorder(httpx.Response(429, text="slow down"))
        gateway = make_gateway(handler, max_retries=3)
        with pytest.raises(UpstreamError):
            await gateway.execute(AWARDS_PATH)
        assert len(handler.requests) == 1

    async def test_404_is_not_found(self):
        handler = Recorder(httpx.Response(404))
        gateway = make_gateway(handler, max_retries=3)
        with pytest.raises(NotFoundError):
            await gateway.execute(award_path("0000000"))
        assert len(handler.requests) == 1


# ============================================================
# Hooks
# ============================================================


class TestHooks:
    async def test_events_for_retry(self):
        events = []
        handler = Recorder(httpx.Response(503), httpx.Response(200, json={}))
        gateway = make_gateway(handler, max_retries=1, hooks=[events.append])
        await gateway.execute(AWARDS_PATH, {"keyword": "ai"})

        kinds = [e.kind for e in events]
        assert kinds == ["request", "response", "retry", "request", "response"]
        retry = events[2]
        assert retry.status == 503
        assert retry.attempt == 1
        assert retry.params == {"keyword": "ai"}

    async def test_failure_event(self):
        events = []
        handler = Recorder(httpx.Response(400))
        gateway = make_gateway(handler, hooks=[events.append])
        with pytest.raises(UpstreamError):
            await gateway.execute(AWARDS_PATH)
        assert events[-1].kind == "failure"
        assert events[-1].status == 400

    async def test_failing_hook_is_ignored(self):
        def broken(event):
            raise RuntimeError("hook exploded")

        handler = Recorder(httpx.Response(200, json={"response": {}}))
        gateway = make_gateway(handler, hooks=[broken])
        assert await gateway.execute(AWARDS_PATH) == {"response": {}}
