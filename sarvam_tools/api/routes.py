"""
sarvam_tools/api/routes.py
===========================
HTTP Tool Surface — Sarvam Tools

Responsibility:
    - GET  /api/v1/tools               list tool declarations
    - POST /api/v1/tools/{tool_name}   invoke a tool with JSON arguments
    - POST /api/v1/digitize            multipart document upload → digitized text
    - Run blocking tool calls in a worker thread
    - Optionally forward digitization results to WEBHOOK_URL

Tool payloads (success or error) are returned with HTTP 200; only an
unknown tool name or a malformed request body is an HTTP error.

This module does NOT:
    - Implement any Sarvam call itself (see sarvam_tools.tools)
    - Hold job state between requests
"""

import asyncio
import logging
import threading
from functools import lru_cache
from typing import Any

import aiohttp
from fastapi import Body, Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sarvam_tools.binary import UploadedBinary, guess_file_name
from sarvam_tools.tools.toolset import SarvamToolset

logger = logging.getLogger("sarvam_tools.api")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Sarvam Tools",
    description="Sarvam AI speech, translation and document digitization tools for agents.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_toolset() -> SarvamToolset:
    """Process-wide toolset built from the environment on first use."""
    return SarvamToolset.from_env()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/api/v1/tools")
def list_tools(toolset: SarvamToolset = Depends(get_toolset)):
    return {"tools": [tool.declaration() for tool in toolset.all_tools()]}


@app.post("/api/v1/tools/{tool_name}")
async def invoke_tool(
    tool_name: str,
    arguments: dict[str, Any] | None = Body(default=None),
    toolset: SarvamToolset = Depends(get_toolset),
):
    try:
        toolset.get_tool(tool_name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")

    result = await asyncio.to_thread(toolset.invoke, tool_name, arguments or {})
    return JSONResponse(status_code=200, content=result)


@app.post("/api/v1/digitize")
async def digitize_upload(
    document: UploadFile = File(...),
    language: str | None = Form(default=None),
    output_format: str | None = Form(default=None),
    toolset: SarvamToolset = Depends(get_toolset),
):
    """
    Accept a PDF/image upload and return its digitized text.

    If the client goes away while the job is being polled, the poll
    loop is cancelled; the remote job itself keeps running.
    """
    try:
        data = await document.read()
    except Exception:
        raise HTTPException(status_code=400, detail="Failed to read uploaded file.")

    mime_type = document.content_type or None
    payload = UploadedBinary(
        data=data,
        file_name=document.filename or guess_file_name(mime_type),
        mime_type=mime_type,
    )
    logger.info("Document received: %s (%.2f KB)", payload.file_name, len(data) / 1024)

    cancel_event = threading.Event()
    try:
        result = await asyncio.to_thread(
            toolset.digitize_payload, payload, language, output_format, cancel_event,
        )
    except asyncio.CancelledError:
        cancel_event.set()
        raise

    if toolset.settings.webhook_url:
        await _post_webhook(toolset.settings.webhook_url, result)
    else:
        logger.debug("WEBHOOK_URL not configured — skipping POST.")

    return JSONResponse(status_code=200, content=result)


async def _post_webhook(url: str, payload: dict[str, Any]) -> None:
    """Forward a result to the webhook; failures are logged only."""
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=30),
            ) as resp:
                logger.info("Webhook POST to %s — status %d", url, resp.status)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.error("Webhook POST failed: %s", exc)
