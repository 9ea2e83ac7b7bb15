"""HTTP client abstraction for registry access.

This module provides:
- HttpClient: Protocol for HTTP GETs (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pubgate.core.result import Err, Ok, Result
from pubgate.core.structured import StrDict, as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """GET-only HTTP access, enough to read packuments and tarballs."""

    def get_json(self, url: str, headers: Mapping[str, str] | None = None) -> Result[StrDict, HttpError]:
        """Fetch URL and parse the body as a JSON object."""
        ...

    def get_bytes(self, url: str, headers: Mapping[str, str] | None = None) -> Result[bytes, HttpError]:
        """Fetch URL and return the raw body."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = "pubgate") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(self, url: str, headers: Mapping[str, str] | None) -> Result[bytes, HttpError]:
        try:
            req = urllib.request.Request(
                url,
                headers={"User-Agent": self.user_agent, **(headers or {})},
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_json(self, url: str, headers: Mapping[str, str] | None = None) -> Result[StrDict, HttpError]:
        result = self._request(url, headers)
        if isinstance(result, Err):
            return result

        try:
            data = as_str_dict(json.loads(result.value.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
        if data is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object"))
        return Ok(data)

    def get_bytes(self, url: str, headers: Mapping[str, str] | None = None) -> Result[bytes, HttpError]:
        return self._request(url, headers)


class MockHttpClient:
    """Mock HTTP client for testing.

    Unknown URLs answer 404, like a registry asked for a package it has
    never seen.

    Usage:
        client = MockHttpClient()
        client.set_json("https://registry.npmjs.org/left-pad", {"name": "left-pad"})
    """

    def __init__(self) -> None:
        self._json_responses: dict[str, StrDict | HttpError] = {}
        self._bytes_responses: dict[str, bytes | HttpError] = {}
        self.calls: list[tuple[str, str, dict[str, str]]] = []

    def set_json(self, url: str, response: StrDict | HttpError) -> None:
        self._json_responses[url] = response

    def set_bytes(self, url: str, response: bytes | HttpError) -> None:
        self._bytes_responses[url] = response

    def get_json(self, url: str, headers: Mapping[str, str] | None = None) -> Result[StrDict, HttpError]:
        self.calls.append(("get_json", url, dict(headers or {})))
        response = self._json_responses.get(url)
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not Found"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_bytes(self, url: str, headers: Mapping[str, str] | None = None) -> Result[bytes, HttpError]:
        self.calls.append(("get_bytes", url, dict(headers or {})))
        response = self._bytes_responses.get(url)
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not Found"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
