"""
tests/test_api.py
==================
HTTP Tool Surface Tests

Tests verify:
    1. GET  /api/v1/tools lists all four declarations
    2. POST /api/v1/tools/{name} runs the tool; unknown names are 404
    3. POST /api/v1/digitize accepts a multipart upload
    4. Webhook forwarding only when WEBHOOK_URL is configured; a failing
       webhook is logged and never fails the request

All tests are OFFLINE — the toolset runs on a scripted transport.
"""

import asyncio
import os
import sys
import unittest
from unittest.mock import AsyncMock, patch

import aiohttp
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fakes import BASE_URL, ScriptedTransport, json_response, make_settings, script_happy_path
from sarvam_tools.api import routes
from sarvam_tools.tools.toolset import SarvamToolset


class _ApiTestCase(unittest.TestCase):

    def _client(self, transport, **settings):
        toolset = SarvamToolset(make_settings(**settings), transport=transport)
        routes.app.dependency_overrides[routes.get_toolset] = lambda: toolset
        self.addCleanup(routes.app.dependency_overrides.clear)
        return TestClient(routes.app)


class TestToolEndpoints(_ApiTestCase):

    def test_list_tools(self):
        resp = self._client(ScriptedTransport()).get("/api/v1/tools")

        self.assertEqual(resp.status_code, 200)
        tools = resp.json()["tools"]
        self.assertEqual(len(tools), 4)
        digitize = [t for t in tools if t["name"] == "sarvam_digitize_document"][0]
        self.assertTrue(digitize["long_running"])

    def test_unknown_tool_is_404(self):
        resp = self._client(ScriptedTransport()).post("/api/v1/tools/sarvam_nope", json={})
        self.assertEqual(resp.status_code, 404)

    def test_invoke_translate(self):
        transport = ScriptedTransport().add(
            "POST", f"{BASE_URL}/translate", json_response(200, {"translated_text": "Hello"}),
        )
        resp = self._client(transport).post(
            "/api/v1/tools/sarvam_translate",
            json={"input": "Namaste", "target_language_code": "en-IN"},
        )

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["translated_text"], "Hello")

    def test_tool_error_payload_is_http_200(self):
        resp = self._client(ScriptedTransport()).post("/api/v1/tools/sarvam_speech_to_text", json={})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["http_status"], 400)


class TestDigitizeUpload(_ApiTestCase):

    def test_upload_is_digitized(self):
        transport = script_happy_path(ScriptedTransport(), assets={"page1": "# Title"})
        client = self._client(transport)

        resp = client.post(
            "/api/v1/digitize",
            files={"document": ("scan.pdf", b"%PDF-1.4", "application/pdf")},
            data={"output_format": "markdown", "language": "hi-IN"},
        )

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "success")
        self.assertEqual(body["content"], "# Title")
        self.assertEqual(body["output_format"], "md")
        self.assertEqual(
            transport.json_body(0),
            {"job_parameters": {"language": "hi-IN", "output_format": "md"}},
        )
        self.assertEqual(transport.json_body(1)["files"], ["scan.pdf"])

    def test_webhook_receives_result(self):
        transport = script_happy_path(ScriptedTransport())
        client = self._client(transport, webhook_url="https://hook.test/sarvam")

        with patch.object(routes, "_post_webhook", new=AsyncMock()) as hook:
            resp = client.post(
                "/api/v1/digitize",
                files={"document": ("scan.pdf", b"%PDF", "application/pdf")},
            )

        self.assertEqual(resp.status_code, 200)
        hook.assert_awaited_once()
        url, payload = hook.await_args.args
        self.assertEqual(url, "https://hook.test/sarvam")
        self.assertEqual(payload["job_id"], "job-1")

    def test_webhook_failure_does_not_fail_request(self):
        for failure in (aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()):
            transport = script_happy_path(ScriptedTransport(), assets={"page1": "Body"})
            client = self._client(transport, webhook_url="https://hook.test/sarvam")

            with patch.object(aiohttp.ClientSession, "post", side_effect=failure) as post, \
                    self.assertLogs("sarvam_tools.api", level="ERROR") as logs:
                resp = client.post(
                    "/api/v1/digitize",
                    files={"document": ("scan.pdf", b"%PDF", "application/pdf")},
                )

            self.assertEqual(resp.status_code, 200)
            body = resp.json()
            self.assertEqual(body["status"], "success")
            self.assertEqual(body["content"], "Body")
            post.assert_called_once()
            self.assertEqual(post.call_args.args[0], "https://hook.test/sarvam")
            self.assertIn("Webhook POST failed", logs.output[0])

    def test_no_webhook_without_url(self):
        transport = script_happy_path(ScriptedTransport())
        client = self._client(transport)

        with patch.object(routes, "_post_webhook", new=AsyncMock()) as hook:
            client.post(
                "/api/v1/digitize",
                files={"document": ("scan.pdf", b"%PDF", "application/pdf")},
            )
        hook.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
