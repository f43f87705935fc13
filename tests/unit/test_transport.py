"""Tests for the retrying HTTP transport."""

from __future__ import annotations

import asyncio
import json
from collections import Counter
from typing import TYPE_CHECKING

import httpx
import pytest

from gemini_gen.core.exceptions import NetworkError
from gemini_gen.core.settings import TransportSettings
from gemini_gen.transport import TransportClient, TransportResponse, encode_json_body
from gemini_gen.wire import GenerationConfig, ImageConfig, RequestContent, RequestPart, WireRequest

pytestmark = pytest.mark.unit

if TYPE_CHECKING:
    from collections.abc import Callable

URL = "https://api.example.test/v1/resource"


class TestTransportResponse:
    """Tests for TransportResponse."""

    def test_unpacks_as_body_and_status(self) -> None:
        """Test that the response unpacks like a tuple."""
        body, status, _ = TransportResponse(b"{}", 200)

        assert body == b"{}"
        assert status == 200

    def test_is_success(self) -> None:
        """Test 2xx detection."""
        assert TransportResponse(b"", 204).is_success is True
        assert TransportResponse(b"", 404).is_success is False
        assert TransportResponse(b"", 503).is_success is False

    def test_json(self) -> None:
        """Test JSON decoding of the body."""
        assert TransportResponse(b'{"a": 1}', 200).json() == {"a": 1}


class TestRequests:
    """Tests for get, post and post_json."""

    @pytest.mark.asyncio
    async def test_get_returns_body_and_status(self, make_transport: Callable) -> None:
        """Test a successful GET."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"ok")

        transport = make_transport(handler)
        body, status, _ = await transport.get(URL, headers={"X-Test": "1"})

        assert (body, status) == (b"ok", 200)
        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert seen[0].headers["x-test"] == "1"

    @pytest.mark.asyncio
    async def test_post_sets_json_content_type(self, make_transport: Callable) -> None:
        """Test that post defaults Content-Type to application/json."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        await make_transport(handler).post(URL, body=b"{}")

        assert seen[0].method == "POST"
        assert seen[0].headers["content-type"] == "application/json"
        assert seen[0].content == b"{}"

    @pytest.mark.asyncio
    async def test_post_keeps_caller_content_type(self, make_transport: Callable) -> None:
        """Test that a caller-supplied content type is not overridden."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        await make_transport(handler).post(
            URL, headers={"content-type": "text/plain"}, body=b"hello"
        )

        assert seen[0].headers.get_list("content-type") == ["text/plain"]

    @pytest.mark.asyncio
    async def test_post_json_dict(self, make_transport: Callable) -> None:
        """Test that post_json serializes dicts and sends headers."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        response = await make_transport(handler).post_json(
            URL, {"prompt": "draw a cat"}, headers={"x-goog-api-key": "k"}
        )

        assert response.json() == {"ok": True}
        assert json.loads(seen[0].content) == {"prompt": "draw a cat"}
        assert seen[0].headers["content-type"] == "application/json"
        assert seen[0].headers["x-goog-api-key"] == "k"

    def test_encode_json_body_pydantic_model(self) -> None:
        """Test that pydantic models are dumped by alias without nulls."""
        request = WireRequest(
            contents=[RequestContent(parts=[RequestPart(text="hi")])],
            generation_config=GenerationConfig(image_config=ImageConfig(aspect_ratio="1:1")),
        )

        payload = json.loads(encode_json_body(request))

        assert payload == {
            "contents": [{"parts": [{"text": "hi"}]}],
            "generationConfig": {
                "response_modalities": ["TEXT", "IMAGE"],
                "image_config": {"aspect_ratio": "1:1"},
            },
        }


class TestRetries:
    """Tests for retry behaviour."""

    @pytest.mark.asyncio
    async def test_client_error_not_retried(
        self, make_transport: Callable, sleeps: list[float]
    ) -> None:
        """Test that a 4xx response is returned after exactly one attempt."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(400, json={"error": {"message": "bad"}})

        response = await make_transport(handler).post(URL, body=b"{}")

        assert response.status == 400
        assert b"bad" in response.body
        assert calls == 1
        assert sleeps == []

    @pytest.mark.parametrize("failures", [1, 2, 3])
    @pytest.mark.asyncio
    async def test_server_errors_then_success(
        self, make_transport: Callable, sleeps: list[float], failures: int
    ) -> None:
        """Test that N <= max_retries 5xx responses lead to N+1 attempts."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls <= failures:
                return httpx.Response(503)
            return httpx.Response(200, content=b"done")

        response = await make_transport(handler).get(URL)

        assert response.status == 200
        assert calls == failures + 1
        assert len(sleeps) == failures

    @pytest.mark.asyncio
    async def test_exhausted_server_errors_returned(self, make_transport: Callable) -> None:
        """Test that the last 5xx response is returned, not raised."""
        calls = 0
        envelope = {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}}

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503, json=envelope)

        response = await make_transport(handler).post_json(URL, {})

        assert response.status == 503
        assert response.json() == envelope
        assert calls == 4

    @pytest.mark.asyncio
    async def test_uses_fixed_delay(self, sleeps: list[float], make_transport: Callable) -> None:
        """Test that every retry waits the configured delay."""
        settings = TransportSettings(max_retries=2, retry_delay=0.5)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        await make_transport(handler, settings=settings).get(URL)

        assert sleeps == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_retryable_network_error_then_success(self, make_transport: Callable) -> None:
        """Test recovery from a transient connection failure."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise httpx.ConnectError("[Errno 111] Connection refused", request=request)
            return httpx.Response(200)

        response = await make_transport(handler).get(URL)

        assert response.status == 200
        assert calls == 2

    @pytest.mark.asyncio
    async def test_exhausted_network_error_raised(self, make_transport: Callable) -> None:
        """Test that a retryable network error is raised once the budget is spent."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError) as exc_info:
            await make_transport(handler).get(URL)

        assert calls == 4
        assert exc_info.value.kind == "timeout"
        assert exc_info.value.attempts == 4
        assert isinstance(exc_info.value.underlying, httpx.ReadTimeout)
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_non_retryable_network_error_raised_immediately(
        self, make_transport: Callable
    ) -> None:
        """Test that an unsupported URL fails on the first attempt."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.UnsupportedProtocol("unsupported protocol", request=request)

        with pytest.raises(NetworkError) as exc_info:
            await make_transport(handler).get(URL)

        assert calls == 1
        assert exc_info.value.kind == "unsupported_url"

    @pytest.mark.asyncio
    async def test_concurrent_calls_have_independent_budgets(
        self, make_transport: Callable
    ) -> None:
        """Test that each call keeps its own attempt counter."""
        counts: Counter[str] = Counter()

        def handler(request: httpx.Request) -> httpx.Response:
            counts[request.url.path] += 1
            if counts[request.url.path] == 1:
                return httpx.Response(500)
            return httpx.Response(200)

        transport = make_transport(handler)
        first, second = await asyncio.gather(
            transport.get("https://api.example.test/a"),
            transport.get("https://api.example.test/b"),
        )

        assert first.status == second.status == 200
        assert counts == {"/a": 2, "/b": 2}


class TestTimeoutsAndCancellation:
    """Tests for resource timeout and cancellation."""

    @pytest.mark.asyncio
    async def test_resource_timeout_raises_network_error(self, make_transport: Callable) -> None:
        """Test that a call exceeding resource_timeout fails as a timeout."""
        settings = TransportSettings(resource_timeout=0.05, max_retries=0)

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200)

        with pytest.raises(NetworkError) as exc_info:
            await make_transport(handler, settings=settings).get(URL)

        assert exc_info.value.kind == "timeout"

    @pytest.mark.asyncio
    async def test_cancellation_during_retry_delay(self, fast_settings: TransportSettings) -> None:
        """Test that cancelling mid-retry propagates and stops further attempts."""
        calls = 0
        sleeping = asyncio.Event()

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503)

        async def blocking_sleep(delay: float) -> None:
            sleeping.set()
            await asyncio.sleep(3600)

        transport = TransportClient(
            fast_settings,
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            sleep=blocking_sleep,
        )
        task = asyncio.create_task(transport.get(URL))
        await sleeping.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls == 1

    @pytest.mark.asyncio
    async def test_cancellation_during_attempt(self, make_transport: Callable) -> None:
        """Test that cancelling an in-flight attempt is not reported as a network error."""
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(3600)
            return httpx.Response(200)

        task = asyncio.create_task(make_transport(handler).get(URL))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestClientLifecycle:
    """Tests for client ownership."""

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self, fast_settings: TransportSettings) -> None:
        """Test that aclose leaves an injected client open."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        async with TransportClient(fast_settings, client=client):
            pass

        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self, fast_settings: TransportSettings) -> None:
        """Test that aclose closes a client the transport created."""
        transport = TransportClient(fast_settings)

        await transport.aclose()

        assert transport._client.is_closed is True

    @pytest.mark.asyncio
    async def test_timeout_from_settings(self) -> None:
        """Test per-attempt timeout and connectivity wait."""
        waiting = TransportClient(
            TransportSettings(request_timeout=10, resource_timeout=100, wait_for_connectivity=True)
        )
        eager = TransportClient(
            TransportSettings(request_timeout=10, resource_timeout=100, wait_for_connectivity=False)
        )

        async with waiting, eager:
            assert waiting.timeout.read == 10
            assert waiting.timeout.connect == 100
            assert eager.timeout.connect == 10

        assert waiting._client.is_closed is True
        assert eager._client.is_closed is True
