"""Retry policy for the HTTP transport.

Classifies transport outcomes (network errors and HTTP statuses) and decides
whether another attempt is warranted. The policy is a pure function of the
attempt number and the outcome, so it can be shared across concurrent calls.
"""

from __future__ import annotations

import socket
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from gemini_gen.core.settings import TransportSettings


class NetworkErrorKind(str, Enum):
    """Classified transport failure kinds."""

    TIMEOUT = "timeout"
    CONNECTION_LOST = "connection_lost"
    CANNOT_CONNECT_TO_HOST = "cannot_connect_to_host"
    DNS_LOOKUP_FAILED = "dns_lookup_failed"
    NETWORK_CONNECTION_LOST = "network_connection_lost"
    CANCELLED = "cancelled"
    BAD_URL = "bad_url"
    UNSUPPORTED_URL = "unsupported_url"
    OTHER = "other"


RETRYABLE_NETWORK_ERRORS = frozenset({
    NetworkErrorKind.TIMEOUT,
    NetworkErrorKind.CONNECTION_LOST,
    NetworkErrorKind.CANNOT_CONNECT_TO_HOST,
    NetworkErrorKind.DNS_LOOKUP_FAILED,
    NetworkErrorKind.NETWORK_CONNECTION_LOST,
})

# Resolver failure messages as reported by getaddrinfo on Linux, macOS and Windows
_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated with hostname",
)


@dataclass(frozen=True)
class NetworkFailure:
    """Outcome of an attempt that failed before a response arrived."""

    kind: NetworkErrorKind


@dataclass(frozen=True)
class HTTPStatus:
    """Outcome of an attempt that produced an HTTP response."""

    code: int


Outcome = NetworkFailure | HTTPStatus


@dataclass(frozen=True)
class RetryDecision:
    """Whether to retry, and the delay before the next attempt."""

    retry: bool
    delay: float | None = None


def _is_dns_failure(error: BaseException) -> bool:
    cause: BaseException | None = error
    while cause is not None:
        if isinstance(cause, socket.gaierror):
            return True
        if any(marker in str(cause).lower() for marker in _DNS_FAILURE_MARKERS):
            return True
        cause = cause.__cause__ or cause.__context__
    return False


def classify_network_error(error: BaseException) -> NetworkErrorKind:
    """Map an exception raised by httpx to a NetworkErrorKind.

    Args:
        error: Exception raised while sending a request.

    Returns:
        The classified kind; unknown errors map to ``OTHER``.
    """
    if isinstance(error, httpx.TimeoutException):
        return NetworkErrorKind.TIMEOUT
    if isinstance(error, httpx.ConnectError):
        if _is_dns_failure(error):
            return NetworkErrorKind.DNS_LOOKUP_FAILED
        return NetworkErrorKind.CANNOT_CONNECT_TO_HOST
    if isinstance(error, httpx.RemoteProtocolError):
        return NetworkErrorKind.CONNECTION_LOST
    if isinstance(error, (httpx.ReadError, httpx.WriteError)):
        return NetworkErrorKind.NETWORK_CONNECTION_LOST
    if isinstance(error, httpx.UnsupportedProtocol):
        return NetworkErrorKind.UNSUPPORTED_URL
    if isinstance(error, httpx.InvalidURL):
        return NetworkErrorKind.BAD_URL
    return NetworkErrorKind.OTHER


def is_retryable_status(status_code: int) -> bool:
    """Only server errors (5xx) are transient; 4xx is left to the caller."""
    return 500 <= status_code < 600


class RetryPolicy:
    """Bounded retry with a fixed delay.

    Example:
        ```python
        policy = RetryPolicy(max_retries=3, retry_delay=1.0)
        decision = policy.should_retry(0, HTTPStatus(503))
        assert decision.retry and decision.delay == 1.0
        ```
    """

    def __init__(self, max_retries: int = 3, retry_delay: float = 1.0) -> None:
        """Initialize the policy.

        Args:
            max_retries: Retries allowed after the first attempt.
            retry_delay: Seconds to wait before each retry.

        Raises:
            ValueError: If either argument is negative.
        """
        if max_retries < 0:
            msg = f"max_retries must be >= 0, got {max_retries}"
            raise ValueError(msg)
        if retry_delay < 0:
            msg = f"retry_delay must be >= 0, got {retry_delay}"
            raise ValueError(msg)
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @classmethod
    def from_settings(cls, settings: TransportSettings) -> RetryPolicy:
        """Build a policy from transport settings."""
        return cls(max_retries=settings.max_retries, retry_delay=settings.retry_delay)

    def is_retryable(self, outcome: Outcome) -> bool:
        """Whether the outcome is transient, ignoring the attempt budget."""
        if isinstance(outcome, NetworkFailure):
            return outcome.kind in RETRYABLE_NETWORK_ERRORS
        return is_retryable_status(outcome.code)

    def should_retry(self, attempt: int, outcome: Outcome) -> RetryDecision:
        """Decide whether to make another attempt.

        Args:
            attempt: Zero-based index of the attempt that just finished.
            outcome: What that attempt produced.

        Returns:
            RetryDecision with the delay to wait when retrying.
        """
        if attempt >= self.max_retries or not self.is_retryable(outcome):
            return RetryDecision(retry=False)
        return RetryDecision(retry=True, delay=self.retry_delay)

    def __repr__(self) -> str:
        return f"RetryPolicy(max_retries={self.max_retries}, retry_delay={self.retry_delay})"
