"""HTTP client abstraction for the GitHub API.

This module provides:
- HttpClient: Protocol for JSON-over-HTTP requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import re
import ssl
import urllib.error
import urllib.request
from collections import deque
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from sbot import __version__
from sbot.core.result import Err, Ok, Result
from sbot.core.structured import as_str_dict, get_str

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "decode_json",
]

# Raw control characters (0x00-0x19) occasionally leak into PR bodies and
# break strict JSON parsing.
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x19]")


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network and decoding errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def decode_json(url: str, raw: bytes) -> Result[object, HttpError]:
    """Decode a response body; an empty body decodes to None."""
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        return Err(HttpError(url=url, status=0, message=f"Decode error: {e}"))

    text = _CONTROL_CHARS_RE.sub("", text)
    if not text.strip():
        return Ok(None)
    try:
        return Ok(json.loads(text))
    except json.JSONDecodeError as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON HTTP requests."""

    def request(
        self,
        method: str,
        url: str,
        *,
        body: object | None = None,
        headers: dict[str, str] | None = None,
    ) -> Result[object, HttpError]:
        """Send a request with an optional JSON body.

        Args:
            method: HTTP method ("GET", "POST", "DELETE", ...)
            url: Absolute URL
            body: JSON-serializable payload
            headers: Extra request headers

        Returns:
            Ok with the decoded JSON response (None for empty bodies),
            or Err with HttpError for non-2xx responses and network errors
        """
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = f"sbot/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        body: object | None = None,
        headers: dict[str, str] | None = None,
    ) -> Result[object, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        data: bytes | None = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            all_headers.setdefault("Content-Type", "application/json")

        req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return decode_json(url, response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=_error_message(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


def _error_message(error: urllib.error.HTTPError) -> str:
    """Prefer GitHub's `message` field over the bare reason phrase."""
    try:
        raw = error.read()
    except OSError:
        raw = b""
    decoded = decode_json(error.geturl() or "", raw)
    if isinstance(decoded, Ok):
        data = as_str_dict(decoded.value)
        if data is not None:
            message = get_str(data, "message")
            if message:
                return message
    return str(error.reason)


_Response = object | HttpError


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are registered per (method, url) and consumed in order; the
    last registered response repeats.

    Usage:
        client = MockHttpClient()
        client.set("GET", "https://api.github.com/user", {"login": "octocat"})
        result = client.request("GET", "https://api.github.com/user")
        assert result == Ok({"login": "octocat"})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], deque[_Response]] = {}
        self.calls: list[tuple[str, str, object | None]] = []
        self.headers: list[dict[str, str]] = []

    def set(self, method: str, url: str, *responses: _Response) -> None:
        """Register one or more responses for method + url."""
        self._responses.setdefault((method.upper(), url), deque()).extend(responses)

    def request(
        self,
        method: str,
        url: str,
        *,
        body: object | None = None,
        headers: dict[str, str] | None = None,
    ) -> Result[object, HttpError]:
        method = method.upper()
        self.calls.append((method, url, body))
        self.headers.append(dict(headers or {}))

        queue = self._responses.get((method, url))
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def calls_to(self, method: str) -> list[tuple[str, str, object | None]]:
        """Recorded calls using the given method."""
        return [c for c in self.calls if c[0] == method.upper()]
