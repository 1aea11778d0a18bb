"""
sarvam_tools/transport.py
==========================
HTTP Transport — Sarvam Tools

Responsibility:
    - Issue HTTP requests through one shared requests.Session
    - Attach the shared ``api-subscription-key`` credential and JSON
      content type to Sarvam API calls
    - Send one-time (pre-authorized) upload/download URLs WITHOUT the
      credential header
    - Return status code + raw body bytes; non-2xx is NOT an exception

This module does NOT:
    - Classify responses as success/failure for any workflow step
    - Retry anything
    - Parse JSON on behalf of callers (TransportResponse.json() is a helper)
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger("sarvam_tools.transport")

API_KEY_HEADER = "api-subscription-key"
JSON_CONTENT_TYPE = "application/json"


class TransportError(RuntimeError):
    """Raised when a request could not be completed at all (no HTTP status)."""

    def __init__(self, method: str, url: str, cause: Exception):
        self.method = method
        self.url = url
        self.cause = cause
        super().__init__(f"{method} request failed: {cause}")


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of one HTTP exchange."""

    status_code: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON. Raises ValueError on malformed bodies."""
        if not self.body:
            return {}
        return json.loads(self.body)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class Transport:
    """
    Thin wrapper around ``requests.Session``.

    One instance is shared by every tool of a toolset so the underlying
    connection pool is reused; it holds no per-invocation state.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = 120.0,
        session: requests.Session | None = None,
    ):
        self._api_key = api_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def default_headers(self) -> dict[str, str]:
        return {
            API_KEY_HEADER: self._api_key,
            "Content-Type": JSON_CONTENT_TYPE,
        }

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        *,
        authenticated: bool = True,
    ) -> TransportResponse:
        """
        Send one request and return its status and body.

        Args:
            method:        HTTP method ("GET", "POST", "PUT").
            url:           Absolute URL.
            headers:       Extra headers; they override the defaults.
            body:          Raw request body (None → no body).
            authenticated: False for one-time URLs issued by the provider.

        Raises:
            TransportError: On connection-level failures (DNS, reset, timeout).
        """
        merged: dict[str, str] = self.default_headers() if authenticated else {}
        if headers:
            merged.update(headers)

        logger.debug("%s %s (%d body bytes)", method, _redact(url), len(body or b""))
        try:
            resp = self._session.request(
                method,
                url,
                headers=merged,
                data=body,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(method, url, exc) from exc

        logger.debug("%s %s -> HTTP %d", method, _redact(url), resp.status_code)
        return TransportResponse(status_code=resp.status_code, body=resp.content or b"")

    def send_json(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
    ) -> TransportResponse:
        """Authenticated JSON call; ``payload=None`` sends an empty body."""
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
        return self.send(method, url, body=body)

    def send_multipart(
        self,
        url: str,
        files: dict[str, tuple],
        data: dict[str, str],
    ) -> TransportResponse:
        """
        Authenticated multipart/form-data POST.

        The Content-Type (with boundary) is left to requests.
        """
        try:
            resp = self._session.post(
                url,
                headers={API_KEY_HEADER: self._api_key},
                files=files,
                data=data,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError("POST", url, exc) from exc

        return TransportResponse(status_code=resp.status_code, body=resp.content or b"")


def _redact(url: str) -> str:
    # One-time URLs carry their signature in the query string
    return url.split("?", 1)[0]
