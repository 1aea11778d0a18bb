"""
tests/fakes.py
===============
Offline test doubles shared by the Sarvam Tools tests.

ScriptedTransport replaces the network: each (method, url) route holds a
queue of canned TransportResponses (or exceptions to raise). The last
entry of a queue repeats, so a single "Running" status can answer every
poll of a timeout test.
"""

import json
import os
import sys
from typing import Any

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sarvam_tools.config import SarvamSettings
from sarvam_tools.transport import Transport, TransportResponse

BASE_URL = "https://api.test.sarvam"
JOB_URL = f"{BASE_URL}/doc-digitization/job/v1"
API_KEY = "test-key"


def json_response(status: int, body: Any) -> TransportResponse:
    return TransportResponse(status_code=status, body=json.dumps(body).encode("utf-8"))


def text_response(status: int, text: str) -> TransportResponse:
    return TransportResponse(status_code=status, body=text.encode("utf-8"))


def make_settings(**overrides) -> SarvamSettings:
    values = {
        "api_key": API_KEY,
        "api_base_url": BASE_URL,
        "poll_max_attempts": 3,
        "poll_interval": 0.0,
    }
    values.update(overrides)
    return SarvamSettings(**values)


class ScriptedTransport(Transport):
    """Transport that answers from scripted routes and records every call."""

    def __init__(self):
        super().__init__(API_KEY, timeout=1.0)
        self.calls: list[dict[str, Any]] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def add(self, method: str, url: str, *responses: Any) -> "ScriptedTransport":
        self._routes.setdefault((method, url), []).extend(responses)
        return self

    def send(self, method, url, headers=None, body=None, *, authenticated=True):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": dict(headers or {}),
            "body": body,
            "authenticated": authenticated,
        })
        return self._next(method, url)

    def send_multipart(self, url, files, data):
        self.calls.append({
            "method": "POST",
            "url": url,
            "files": files,
            "data": data,
            "authenticated": True,
        })
        return self._next("POST", url)

    def _next(self, method: str, url: str) -> TransportResponse:
        queue = self._routes.get((method, url))
        if not queue:
            raise AssertionError(f"Unexpected call: {method} {url}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def urls(self) -> list[str]:
        return [f"{c['method']} {c['url']}" for c in self.calls]

    def json_body(self, index: int) -> Any:
        return json.loads(self.calls[index]["body"])


def script_happy_path(
    transport: ScriptedTransport,
    job_id: str = "job-1",
    statuses: tuple = ("Completed",),
    assets: dict[str, str] | None = None,
) -> ScriptedTransport:
    """Script create → assign → upload → start → poll(s) → downloads."""
    assets = assets if assets is not None else {"page1": "Hello"}
    upload_url = f"https://blob.test/{job_id}/upload?sig=abc"

    transport.add("POST", JOB_URL, json_response(202, {"job_id": job_id}))
    transport.add(
        "POST",
        f"{JOB_URL}/upload-files",
        json_response(200, {"job_id": job_id, "upload_urls": {"document.pdf": upload_url}}),
    )
    transport.add("PUT", upload_url, TransportResponse(201))
    transport.add("POST", f"{JOB_URL}/{job_id}/start", json_response(200, {"job_state": "Pending"}))
    transport.add(
        "GET",
        f"{JOB_URL}/{job_id}/status",
        *[json_response(200, {"job_id": job_id, "job_state": s}) for s in statuses],
    )

    download_urls = {key: f"https://blob.test/{job_id}/{key}?sig=xyz" for key in assets}
    transport.add(
        "POST",
        f"{JOB_URL}/{job_id}/download-files",
        json_response(200, {"download_urls": download_urls}),
    )
    for key, content in assets.items():
        transport.add("GET", download_urls[key], text_response(200, content))
    return transport
