"""
HTTP client abstraction for jxauth.

The token exchanger and the game session client talk to the network only
through ``HttpClient``, so tests can swap in ``MockHttpClient`` and the
CLI can give each endpoint its own retry policy. Retries with exponential
backoff apply to idempotent requests only: token endpoint POSTs are always
a single round-trip so a rotated refresh token is never replayed.
"""

from __future__ import annotations

import abc
import json
import logging
import random
import time
import typing
from collections import deque
from dataclasses import dataclass

import httpx

from .constants import OAuthDefaults, OAuthProtocol
from .exceptions import JxAuthError

_logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
_BODY_PREVIEW_CHARS = 200


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class HttpClientConfig:
    """
    Attributes:
        timeout: Request timeout in seconds
        max_retries: Attempts for idempotent requests; 0 disables the retry transport
        retry_jitter: Add up to one second of random jitter to each backoff
    """

    timeout: float = OAuthDefaults.HTTP_REQUEST_TIMEOUT
    max_retries: int = OAuthDefaults.GAME_API_MAX_RETRIES
    retry_jitter: bool = True


# =============================================================================
# Response and Errors
# =============================================================================


@dataclass(frozen=True)
class HttpResponse:
    """A successful (2xx) response."""

    status_code: int
    content: bytes

    def json(self) -> typing.Any:
        """Decode the body.

        Raises:
            ValueError: If the body is not valid UTF-8 JSON
        """
        return json.loads(self.content)


class HttpError(JxAuthError):
    """Transport failure or non-2xx response.

    Attributes:
        status_code: HTTP status code, 0 when no response was received
        reason: Reason phrase or the transport error text
        body: Response body (empty for transport failures)
        url: Request URL
    """

    hint = "Check your internet connection and try again in a few moments"

    def __init__(self, status_code: int, reason: str, body: str, url: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.url = url

        preview = body[:_BODY_PREVIEW_CHARS] + ("..." if len(body) > _BODY_PREVIEW_CHARS else "")
        super().__init__(f"HTTP {status_code} - {reason} for {url}\nResponse: {preview or '(empty)'}")

    @property
    def is_transient(self) -> bool:
        """True for network failures, rate limiting and server errors."""
        return (
            self.status_code in (0, OAuthProtocol.HTTP_TOO_MANY_REQUESTS)
            or self.status_code >= OAuthProtocol.HTTP_SERVER_ERROR
        )

    def error_payload(self) -> dict[str, typing.Any]:
        """Best-effort parse of an OAuth-style JSON error body."""
        try:
            payload = json.loads(self.body) if self.body else {}
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}


# =============================================================================
# Abstract Client
# =============================================================================


class HttpClient(abc.ABC):
    """Minimal HTTP interface used by jxauth.

    Implementations raise HttpError for transport failures and for any
    4xx/5xx response, so callers only ever see 2xx responses.
    """

    @abc.abstractmethod
    def post(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        """Send ``data`` as the request body.

        Raises:
            HttpError: If the request fails
        """

    @abc.abstractmethod
    def get(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        """
        Raises:
            HttpError: If the request fails
        """


# =============================================================================
# httpx Implementation with Retry
# =============================================================================


class _RetryTransport(httpx.HTTPTransport):
    """Transport that retries idempotent requests with exponential backoff.

    Retries network errors and 429/5xx responses; any other method is
    passed straight through.
    """

    def __init__(self, max_retries: int = 3, retry_jitter: bool = True, **kwargs: typing.Any) -> None:
        super().__init__(**kwargs)
        self.max_retries = max_retries
        self.retry_jitter = retry_jitter

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if request.method not in _IDEMPOTENT_METHODS:
            return super().handle_request(request)

        attempt = 1
        while True:
            last_attempt = attempt >= self.max_retries
            try:
                response = super().handle_request(request)
            except httpx.TransportError as e:
                if last_attempt:
                    raise
                self._backoff(request, attempt, f"network error: {e}")
            else:
                if response.status_code not in _RETRYABLE_STATUS or last_attempt:
                    return response
                response.close()
                self._backoff(request, attempt, f"HTTP {response.status_code}")
            attempt += 1

    def _backoff(self, request: httpx.Request, attempt: int, reason: str) -> None:
        delay = 2.0 ** (attempt - 1)
        if self.retry_jitter:
            delay += random.uniform(0, 1)
        _logger.warning(
            "%s for %s %s, retrying in %.1fs (attempt %d/%d)",
            reason,
            request.method,
            request.url,
            delay,
            attempt,
            self.max_retries,
        )
        time.sleep(delay)


class HttpxHttpClient(HttpClient):
    """httpx-backed client with a pooled connection and optional retries.

    Request and response bodies are never logged; they carry tokens.
    """

    def __init__(self, config: HttpClientConfig | None = None) -> None:
        self.config = config or HttpClientConfig()
        transport = (
            _RetryTransport(max_retries=self.config.max_retries, retry_jitter=self.config.retry_jitter)
            if self.config.max_retries > 0
            else None
        )
        self._client = httpx.Client(transport=transport, timeout=httpx.Timeout(self.config.timeout))

    def post(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        return self._send("POST", url, headers, timeout, content=data)

    def get(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        return self._send("GET", url, headers, timeout)

    def close(self) -> None:
        self._client.close()

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        timeout: float | None,
        content: bytes | None = None,
    ) -> HttpResponse:
        effective_timeout = timeout or self.config.timeout
        _logger.debug("HTTP %s %s (timeout=%ss)", method, url, effective_timeout)

        try:
            response = self._client.request(
                method,
                url,
                content=content,
                headers=headers,
                timeout=httpx.Timeout(effective_timeout),
            )
        except httpx.TransportError as e:
            raise HttpError(status_code=0, reason=str(e) or type(e).__name__, body="", url=url) from e

        _logger.debug("HTTP %s from %s (%d bytes)", response.status_code, url, len(response.content))

        if response.is_error:
            raise HttpError(
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=response.text,
                url=url,
            )
        return HttpResponse(status_code=response.status_code, content=response.content)


# =============================================================================
# Mock Client for Testing
# =============================================================================

MockReply = typing.Union[tuple[int, typing.Any], Exception]


class MockHttpClient(HttpClient):
    """In-memory HttpClient for tests.

    Replies come from the ``replies`` queue first, one per request; each
    queued reply is a ``(status_code, json_body)`` tuple or an exception to
    raise. Once the queue is empty every request gets the default reply
    (``status_code`` with ``json_response``, or ``raise_error``). Every
    request is recorded in ``requests``.

    Example:
        >>> mock = MockHttpClient(json_response={"sessionId": "S1"})
        >>> mock.post("https://auth.jagex.com/game-session/v1/sessions", b"{}", {}).json()
        {'sessionId': 'S1'}
        >>> mock.requests[0]["method"]
        'POST'
    """

    def __init__(
        self,
        status_code: int = 200,
        json_response: typing.Any = None,
        raise_error: Exception | None = None,
        replies: list[MockReply] | None = None,
    ) -> None:
        self.status_code = status_code
        self.json_response = json_response
        self.raise_error = raise_error
        self.replies: deque[MockReply] = deque(replies or [])
        self.requests: list[dict[str, typing.Any]] = []

    def post(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        return self._reply("POST", url, headers, timeout, data)

    def get(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        return self._reply("GET", url, headers, timeout, b"")

    def _next_reply(self) -> MockReply:
        if self.replies:
            return self.replies.popleft()
        if self.raise_error is not None:
            return self.raise_error
        return (self.status_code, self.json_response)

    def _reply(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        timeout: float | None,
        data: bytes,
    ) -> HttpResponse:
        self.requests.append({"method": method, "url": url, "data": data, "headers": headers, "timeout": timeout})

        reply = self._next_reply()
        if isinstance(reply, Exception):
            raise reply

        status_code, json_body = reply
        content = b"" if json_body is None else json.dumps(json_body).encode()
        if status_code >= 400:
            raise HttpError(
                status_code=status_code,
                reason=httpx.codes.get_reason_phrase(status_code),
                body=content.decode(),
                url=url,
            )
        return HttpResponse(status_code=status_code, content=content)


__all__ = [
    "HttpClient",
    "HttpClientConfig",
    "HttpResponse",
    "HttpError",
    "HttpxHttpClient",
    "MockHttpClient",
]
