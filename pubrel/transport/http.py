"""HTTP transport for the hosting service.

This module provides:
- HttpClient: Protocol for sending one request (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Scripted implementation for testing

Non-2xx responses are *responses*, not errors: callers decide what a 422
means. Only transport-level failures (DNS, refused connection, timeout,
TLS) come back as ``Err(HttpError)``.
"""

from __future__ import annotations

import json
import logging
import ssl
import urllib.error
import urllib.request
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from pubrel.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpRequest",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    "RecordedRequest",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """One request to send.

    Attributes:
        method: HTTP verb
        url: Absolute URL
        headers: Request headers (credentials included)
        json_body: Optional object serialized as the JSON body
        body: Optional streamed body; requires a Content-Length header
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    json_body: object | None = None
    body: Iterable[bytes] | None = None


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Response status plus the body, parsed as JSON when possible."""

    status: int
    body: object = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True, slots=True)
class HttpError:
    """Transport-level failure (no HTTP status was received)."""

    method: str
    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.method} {self.url}: {self.message}"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for sending a request to the hosting service."""

    def send(self, request: HttpRequest) -> Result[HttpResponse, HttpError]:
        """Send the request and return the response, whatever its status."""
        ...


def _parse_body(raw: bytes) -> tuple[object, str]:
    text = raw.decode("utf-8", errors="replace")
    if not text.strip():
        return None, text
    try:
        return json.loads(text), text
    except json.JSONDecodeError:
        return None, text


class RealHttpClient:
    """HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - JSON request bodies and JSON response parsing
    - Streamed request bodies (iterables of bytes) for uploads
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.timeout = timeout
        self._ssl_context = ssl.create_default_context()

    def send(self, request: HttpRequest) -> Result[HttpResponse, HttpError]:
        headers = dict(request.headers)
        data: bytes | Iterable[bytes] | None = None
        if request.json_body is not None:
            data = json.dumps(request.json_body).encode("utf-8")
            headers.setdefault("Content-Type", "application/json")
        elif request.body is not None:
            data = request.body

        logger.debug("%s %s", request.method, request.url)

        def fail(message: str) -> Err[HttpError]:
            logger.debug("%s %s failed: %s", request.method, request.url, message)
            return Err(HttpError(method=request.method, url=request.url, message=message))

        try:
            req = urllib.request.Request(
                request.url,
                data=data,
                headers=headers,
                method=request.method,
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                status = int(response.status)
                raw = response.read()
        except urllib.error.HTTPError as e:
            # The service answered; hand the status and body to the caller.
            status = e.code
            try:
                raw = e.read()
            finally:
                e.close()
        except urllib.error.URLError as e:
            return fail(str(e.reason))
        except TimeoutError:
            return fail("Request timed out")
        except ValueError as e:
            return fail(str(e))
        except OSError as e:
            return fail(str(e))

        body, text = _parse_body(raw)
        logger.debug("%s %s -> %d", request.method, request.url, status)
        return Ok(HttpResponse(status=status, body=body, text=text))


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    """What MockHttpClient saw for one request."""

    method: str
    url: str
    headers: dict[str, str]
    json_body: object | None
    body: bytes | None


class MockHttpClient:
    """Scripted HTTP client for testing.

    Responses are queued per (method, url) and consumed in order; the last
    queued response for a key is reused once the queue runs dry. Streamed
    bodies are consumed so progress tracking runs as with a real upload.

    Usage:
        client = MockHttpClient()
        client.add("GET", "https://api.example.com/x", json={"ok": True})
        result = client.send(HttpRequest("GET", "https://api.example.com/x"))
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], deque[HttpResponse | HttpError]] = {}
        self.requests: list[RecordedRequest] = []

    def add(
        self,
        method: str,
        url: str,
        *,
        status: int = 200,
        json: object = None,
    ) -> None:
        """Queue a response for (method, url)."""
        text = "" if json is None else _dumps(json)
        self._queue(method, url).append(HttpResponse(status=status, body=json, text=text))

    def add_error(self, method: str, url: str, message: str) -> None:
        """Queue a transport failure for (method, url)."""
        self._queue(method, url).append(HttpError(method=method, url=url, message=message))

    def _queue(self, method: str, url: str) -> deque[HttpResponse | HttpError]:
        return self._responses.setdefault((method.upper(), url), deque())

    def send(self, request: HttpRequest) -> Result[HttpResponse, HttpError]:
        body: bytes | None = None
        if request.body is not None:
            body = b"".join(request.body)
        self.requests.append(
            RecordedRequest(
                method=request.method,
                url=request.url,
                headers=dict(request.headers),
                json_body=request.json_body,
                body=body,
            )
        )

        queue = self._responses.get((request.method.upper(), request.url))
        if not queue:
            return Ok(HttpResponse(status=404, body={"message": "Not Found (mock)"}))

        response = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    # Test helper methods

    def calls(self, method: str | None = None) -> list[tuple[str, str]]:
        """(method, url) pairs in send order, optionally filtered by method."""
        return [
            (r.method, r.url)
            for r in self.requests
            if method is None or r.method.upper() == method.upper()
        ]


def _dumps(obj: object) -> str:
    return json.dumps(obj)
