"""
sarvam_tools/tools/translate.py
================================
Translation Tool — Sarvam Tools

Translates text through POST /translate. The source language defaults
to "auto" (service-side detection).
"""

import logging
from typing import Any

from sarvam_tools.responses import describe_exception, error, success
from sarvam_tools.transport import Transport

logger = logging.getLogger("sarvam_tools.tools.translate")

AUTO_SOURCE = "auto"
TRANSLATE_ERROR_CODE = "translate_failed"


def translate_text(
    transport: Transport,
    api_base_url: str,
    input_text: str,
    target_language_code: str,
    source_language_code: str | None = None,
) -> dict[str, Any]:
    """
    Translate ``input_text`` into ``target_language_code``.

    Returns:
        Success payload with request_id, translated_text,
        source_language_code (as detected when available) and
        target_language_code; or an error payload.
    """
    try:
        resolved_source = (
            source_language_code.strip()
            if source_language_code and source_language_code.strip()
            else AUTO_SOURCE
        )
        resp = transport.send_json(
            "POST",
            f"{api_base_url}/translate",
            {
                "input": input_text,
                "source_language_code": resolved_source,
                "target_language_code": target_language_code,
            },
        )
        if not resp.ok:
            return error(TRANSLATE_ERROR_CODE, resp.status_code, resp.text)

        body = resp.json()
        if not isinstance(body, dict):
            body = {}
        return success(
            request_id=body.get("request_id") or "unknown",
            translated_text=body.get("translated_text") or "",
            source_language_code=body.get("source_language_code") or resolved_source,
            target_language_code=target_language_code,
        )
    except Exception as exc:
        logger.error("Translation failed: %s", exc)
        return error(TRANSLATE_ERROR_CODE, 500, describe_exception(exc))
