"""Retrying async HTTP transport.

Wraps an ``httpx.AsyncClient`` and applies a RetryPolicy around every
attempt. Every call either returns the final response (any status code,
including 4xx and exhausted 5xx) or raises NetworkError; cancellation
propagates untouched.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, NamedTuple

import httpx
from pydantic import BaseModel

from gemini_gen.core.exceptions import NetworkError
from gemini_gen.core.settings import TransportSettings, get_transport_settings
from gemini_gen.retry import (
    HTTPStatus,
    NetworkErrorKind,
    NetworkFailure,
    RetryPolicy,
    classify_network_error,
)

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class TransportResponse(NamedTuple):
    """Body and status of the final attempt of a call."""

    body: bytes
    status: int
    headers: Mapping[str, str] | None = None

    @property
    def is_success(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body)


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(key.lower() == lowered for key in headers)


def encode_json_body(body: Any) -> bytes:
    """Serialize a dict, list or pydantic model to JSON bytes.

    Pydantic models are dumped by alias with unset optional fields omitted,
    so the wire field names are those declared on the model.
    """
    if isinstance(body, BaseModel):
        body = body.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


class TransportClient:
    """HTTP client with bounded, fixed-delay retries.

    Example:
        ```python
        async with TransportClient() as transport:
            body, status, _ = await transport.get("https://example.com")
        ```
    """

    def __init__(
        self,
        settings: TransportSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            settings: Optional settings. If not provided, reads from environment.
            client: Optional pre-built httpx client (e.g. with a MockTransport).
                An injected client is not closed by ``aclose``.
            policy: Optional retry policy. Defaults to one built from settings.
            sleep: Optional coroutine used for retry delays.
        """
        self.settings = settings or get_transport_settings()
        self.policy = policy or RetryPolicy.from_settings(self.settings)
        self._timeout = self._build_timeout(self.settings)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._timeout)
        self._sleep = sleep or asyncio.sleep

    @staticmethod
    def _build_timeout(settings: TransportSettings) -> httpx.Timeout:
        connect = (
            settings.resource_timeout
            if settings.wait_for_connectivity
            else settings.request_timeout
        )
        return httpx.Timeout(settings.request_timeout, connect=connect)

    @property
    def timeout(self) -> httpx.Timeout:
        """Per-attempt timeout applied to every request."""
        return self._timeout

    async def __aenter__(self) -> TransportClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Send a GET request.

        Args:
            url: Target URL.
            headers: Optional request headers.

        Returns:
            Response of the final attempt.

        Raises:
            NetworkError: If the transport failed (after retries if retryable).
        """
        return await self._send("GET", url, dict(headers or {}), None)

    async def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> TransportResponse:
        """Send a POST request.

        ``Content-Type: application/json`` is set unless the caller supplies
        a content type of its own.

        Args:
            url: Target URL.
            headers: Optional request headers.
            body: Raw request body.

        Returns:
            Response of the final attempt.

        Raises:
            NetworkError: If the transport failed (after retries if retryable).
        """
        request_headers = dict(headers or {})
        if not _has_header(request_headers, "Content-Type"):
            request_headers["Content-Type"] = JSON_CONTENT_TYPE
        return await self._send("POST", url, request_headers, body)

    async def post_json(
        self,
        url: str,
        body: Any,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Serialize ``body`` to JSON and POST it.

        Args:
            url: Target URL.
            body: Dict, list or pydantic model.
            headers: Optional request headers; may override the content type.

        Returns:
            Response of the final attempt.

        Raises:
            NetworkError: If the transport failed (after retries if retryable).
            TypeError: If ``body`` is not JSON serializable.
        """
        return await self.post(url, headers=headers, body=encode_json_body(body))

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: bytes | None,
    ) -> TransportResponse:
        try:
            async with asyncio.timeout(self.settings.resource_timeout):
                return await self._send_with_retry(method, url, headers, content)
        except TimeoutError as e:
            logger.error(
                "%s %s exceeded resource timeout of %.1fs",
                method,
                url,
                self.settings.resource_timeout,
            )
            msg = f"request exceeded {self.settings.resource_timeout}s"
            raise NetworkError(
                msg, kind=NetworkErrorKind.TIMEOUT.value, underlying=e
            ) from e

    async def _send_with_retry(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: bytes | None,
    ) -> TransportResponse:
        attempt = 0
        while True:
            started = time.monotonic()
            try:
                response = await self._client.request(
                    method,
                    url,
                    headers=headers,
                    content=content,
                    timeout=self._timeout,
                )
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                kind = classify_network_error(e)
                decision = self.policy.should_retry(attempt, NetworkFailure(kind))
                if not decision.retry:
                    logger.error(
                        "%s %s failed after %d attempt(s): %s",
                        method,
                        url,
                        attempt + 1,
                        kind.value,
                    )
                    raise NetworkError(
                        str(e) or kind.value,
                        kind=kind.value,
                        underlying=e,
                        attempts=attempt + 1,
                    ) from e
                logger.warning(
                    "%s %s: %s, retrying in %.2fs (retry %d/%d)",
                    method,
                    url,
                    kind.value,
                    decision.delay or 0.0,
                    attempt + 1,
                    self.policy.max_retries,
                )
                await self._sleep(decision.delay or 0.0)
                attempt += 1
                continue

            logger.debug(
                "%s %s -> %d in %.3fs (attempt %d)",
                method,
                url,
                response.status_code,
                time.monotonic() - started,
                attempt + 1,
            )
            decision = self.policy.should_retry(attempt, HTTPStatus(response.status_code))
            if decision.retry:
                logger.warning(
                    "%s %s: HTTP %d, retrying in %.2fs (retry %d/%d)",
                    method,
                    url,
                    response.status_code,
                    decision.delay or 0.0,
                    attempt + 1,
                    self.policy.max_retries,
                )
                await self._sleep(decision.delay or 0.0)
                attempt += 1
                continue

            return TransportResponse(
                body=response.content,
                status=response.status_code,
                headers=response.headers,
            )
