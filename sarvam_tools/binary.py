"""
sarvam_tools/binary.py
=======================
Binary Input Resolver — Sarvam Tools

Responsibility:
    - Hold an uploaded payload as an immutable (bytes, file name, MIME type)
    - Resolve a tool's input from either an inline base64 argument or a
      binary attached to the user's message by the host agent
    - Guess a sensible upload file name from a MIME type

This module does NOT:
    - Perform any network call
    - Stream payloads; everything is held in memory for one call
"""

import base64
import binascii
from dataclasses import dataclass, field


DEFAULT_DOCUMENT_MIME = "application/pdf"
DEFAULT_AUDIO_NAME = "uploaded_audio.wav"
DEFAULT_AUDIO_MIME = "audio/wav"

# Checked in order: first substring hit wins
_FILE_NAME_BY_MIME: list[tuple[tuple[str, ...], str]] = [
    (("pdf",), "document.pdf"),
    (("png",), "document.png"),
    (("jpeg", "jpg"), "document.jpg"),
    (("tiff",), "document.tiff"),
    (("bmp",), "document.bmp"),
    (("webm",), "audio.webm"),
    (("ogg",), "audio.ogg"),
    (("mp3", "mpeg"), "audio.mp3"),
]
_FALLBACK_FILE_NAME = "document.bin"


class InvalidPayloadError(ValueError):
    """Raised when an inline payload argument is not a string or not valid base64."""
    pass


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UploadedBinary:
    """A fully in-memory payload ready to upload."""

    data: bytes
    file_name: str
    mime_type: str | None = None

    def __repr__(self) -> str:
        return (
            f"UploadedBinary(file_name={self.file_name!r}, "
            f"mime_type={self.mime_type!r}, size={len(self.data)})"
        )


@dataclass(frozen=True)
class Attachment:
    """One inline binary part of the user's message."""

    mime_type: str
    data: bytes


@dataclass
class ToolContext:
    """What the host agent hands a tool besides its arguments."""

    attachments: list[Attachment] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def guess_file_name(mime_type: str | None) -> str:
    if not mime_type:
        return _FALLBACK_FILE_NAME
    lowered = mime_type.lower()
    for needles, name in _FILE_NAME_BY_MIME:
        if any(n in lowered for n in needles):
            return name
    return _FALLBACK_FILE_NAME


def resolve_document_input(
    file_data_base64: str | None,
    file_name: str | None = None,
    mime_type: str | None = None,
    context: ToolContext | None = None,
) -> UploadedBinary | None:
    """
    Resolve the document to digitize.

    Priority:
        1. Inline base64 (MIME defaults to application/pdf)
        2. First attached PDF
        3. First attached image

    Returns:
        UploadedBinary, or None when nothing usable was provided.

    Raises:
        InvalidPayloadError: If an argument is not a string or the inline
            base64 is malformed.
    """
    ensure_text("file_data_base64", file_data_base64)
    ensure_text("file_name", file_name)
    ensure_text("mime_type", mime_type)

    if not _is_blank(file_data_base64):
        resolved_mime = DEFAULT_DOCUMENT_MIME if _is_blank(mime_type) else mime_type.strip()
        resolved_name = guess_file_name(resolved_mime) if _is_blank(file_name) else file_name.strip()
        return UploadedBinary(
            data=decode_base64(file_data_base64),
            file_name=resolved_name,
            mime_type=resolved_mime,
        )

    return (
        extract_attachment(context, "application/pdf")
        or extract_attachment(context, "image/")
    )


def resolve_audio_input(
    audio_base64: str | None,
    context: ToolContext | None = None,
) -> UploadedBinary | None:
    """Inline base64 audio (treated as WAV) or the first attached audio part."""
    ensure_text("audio_data_base64", audio_base64)
    if not _is_blank(audio_base64):
        return UploadedBinary(
            data=decode_base64(audio_base64),
            file_name=DEFAULT_AUDIO_NAME,
            mime_type=DEFAULT_AUDIO_MIME,
        )
    return extract_attachment(context, "audio/")


def extract_attachment(
    context: ToolContext | None,
    mime_prefix: str,
) -> UploadedBinary | None:
    """First non-empty attachment whose MIME type starts with ``mime_prefix``."""
    if context is None:
        return None

    for attachment in context.attachments:
        mime = attachment.mime_type or ""
        if not mime.startswith(mime_prefix) or not attachment.data:
            continue
        return UploadedBinary(
            data=attachment.data,
            file_name=guess_file_name(mime),
            mime_type=mime,
        )
    return None


def ensure_text(name: str, value: object) -> None:
    """Reject a non-string argument; None means 'not given'."""
    if value is not None and not isinstance(value, str):
        raise InvalidPayloadError(
            f"Argument {name} must be a string, got {type(value).__name__}."
        )


def decode_base64(value: str) -> bytes:
    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPayloadError(f"Invalid base64 payload: {exc}") from exc


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
