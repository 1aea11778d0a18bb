"""
sarvam_tools/tools/speech.py
=============================
Speech Tools — Sarvam Tools

Responsibility:
    - Text-to-speech via POST /text-to-speech (base64 WAV back)
    - Speech-to-text via multipart POST /speech-to-text
    - Report every failure as a uniform error payload, never raise

This module does NOT:
    - Decode, resample, or store audio
    - Retry failed calls
"""

import logging
from typing import Any

from sarvam_tools.binary import ToolContext, resolve_audio_input
from sarvam_tools.responses import describe_exception, error, success
from sarvam_tools.transport import Transport

logger = logging.getLogger("sarvam_tools.tools.speech")

DEFAULT_SPEAKER = "manisha"
UNKNOWN_LANGUAGE = "unknown"

TTS_ERROR_CODE = "text_to_speech_failed"
STT_ERROR_CODE = "speech_to_text_failed"


def text_to_speech(
    transport: Transport,
    api_base_url: str,
    text: str,
    target_language_code: str,
    speaker: str | None = None,
) -> dict[str, Any]:
    """
    Synthesize ``text`` in ``target_language_code`` (e.g. "hi-IN").

    Returns:
        Success payload with request_id, audio_base64 (first clip),
        target_language_code and speaker; or an error payload.
    """
    try:
        resolved_speaker = speaker.strip() if speaker and speaker.strip() else DEFAULT_SPEAKER
        resp = transport.send_json(
            "POST",
            f"{api_base_url}/text-to-speech",
            {
                "text": text,
                "target_language_code": target_language_code,
                "speaker": resolved_speaker,
            },
        )
        if not resp.ok:
            return error(TTS_ERROR_CODE, resp.status_code, resp.text)

        body = resp.json()
        audios = body.get("audios") if isinstance(body, dict) else None
        if not isinstance(audios, list) or not audios:
            return error(TTS_ERROR_CODE, resp.status_code, "No audio returned by Sarvam API")

        return success(
            request_id=body.get("request_id") or "unknown",
            audio_base64=audios[0] or "",
            target_language_code=target_language_code,
            speaker=resolved_speaker,
        )
    except Exception as exc:
        logger.error("Text-to-speech failed: %s", exc)
        return error(TTS_ERROR_CODE, 500, describe_exception(exc))


def speech_to_text(
    transport: Transport,
    api_base_url: str,
    audio_data_base64: str | None = None,
    language_code: str | None = None,
    context: ToolContext | None = None,
) -> dict[str, Any]:
    """
    Transcribe inline base64 audio, or the first audio attachment.

    Returns:
        Success payload with request_id, transcript and language_code;
        or an error payload (400 when no audio was supplied).
    """
    try:
        audio = resolve_audio_input(audio_data_base64, context)
        if audio is None or not audio.data:
            return error(
                STT_ERROR_CODE,
                400,
                "No audio input provided. Upload audio or pass audio_data_base64.",
            )

        resolved_language = (
            language_code.strip() if language_code and language_code.strip() else UNKNOWN_LANGUAGE
        )
        resp = transport.send_multipart(
            f"{api_base_url}/speech-to-text",
            files={"file": (audio.file_name, audio.data, audio.mime_type)},
            data={"language_code": resolved_language},
        )
        if not resp.ok:
            return error(STT_ERROR_CODE, resp.status_code, resp.text)

        body = resp.json()
        if not isinstance(body, dict):
            body = {}
        return success(
            request_id=body.get("request_id") or "unknown",
            transcript=body.get("transcript") or "",
            language_code=body.get("language_code") or resolved_language,
        )
    except Exception as exc:
        logger.error("Speech-to-text failed: %s", exc)
        return error(STT_ERROR_CODE, 500, describe_exception(exc))
