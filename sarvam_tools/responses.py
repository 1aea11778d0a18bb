"""
sarvam_tools/responses.py
==========================
Uniform Tool Responses — Sarvam Tools

Every tool returns one of two dict shapes:

    {"status": "success", ...tool fields}
    {"status": "error", "error_code": str, "http_status": int, "message": str}

``message`` is always human-readable text (never an exception repr) and
defaults to "" when the cause carried none.

Digitized content longer than MAX_CONTENT_CHARS is cut to exactly that
many characters followed by TRUNCATION_MARKER; ``content_length`` always
reports the untruncated length.
"""

from typing import Any

from sarvam_tools.digitization.errors import DigitizationError
from sarvam_tools.digitization.models import DigitizationResult

MAX_CONTENT_CHARS = 5000
TRUNCATION_MARKER = "\n\n... [truncated]"

DIGITIZE_ERROR_CODE = "digitize_document_failed"


def success(**fields: Any) -> dict[str, Any]:
    result: dict[str, Any] = {"status": "success"}
    result.update(fields)
    return result


def error(
    error_code: str,
    http_status: int,
    message: str | None,
    **extra: Any,
) -> dict[str, Any]:
    result: dict[str, Any] = {
        "status": "error",
        "error_code": error_code,
        "http_status": http_status,
        "message": message if isinstance(message, str) else "",
    }
    result.update(extra)
    return result


def describe_exception(exc: BaseException | None) -> str:
    """Readable text for ``exc``: its message, or "" when it has none."""
    if exc is None:
        return ""
    if isinstance(exc, DigitizationError):
        return exc.message
    text = str(exc)
    return text if text else ""


def truncate_content(content: str, limit: int = MAX_CONTENT_CHARS) -> str:
    if len(content) > limit:
        return content[:limit] + TRUNCATION_MARKER
    return content


def format_digitization(result: DigitizationResult) -> dict[str, Any]:
    """Turn a DigitizationResult into the tool-facing payload."""
    if result.succeeded:
        return success(
            job_id=result.job_id,
            job_state=result.job_state,
            content=truncate_content(result.content),
            content_length=len(result.content),
            output_format=result.output_format,
        )

    exc = result.error
    extra: dict[str, Any] = {}
    if isinstance(exc, DigitizationError):
        http_status = exc.http_status
        extra["error_kind"] = exc.kind
    else:
        http_status = 500
    if result.job_id:
        extra["job_id"] = result.job_id

    return error(DIGITIZE_ERROR_CODE, http_status, describe_exception(exc), **extra)
