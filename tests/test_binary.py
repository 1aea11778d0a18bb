"""
tests/test_binary.py
=====================
Binary Input Resolver Tests

Tests verify:
    1. Inline base64 wins over attachments; defaults for name / MIME
    2. Attachment priority: PDF first, then images; empty parts skipped
    3. Audio resolution
    4. File-name guessing from MIME types
    5. Malformed base64 raises InvalidPayloadError
"""

import base64
import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sarvam_tools.binary import (
    Attachment,
    InvalidPayloadError,
    ToolContext,
    guess_file_name,
    resolve_audio_input,
    resolve_document_input,
)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class TestResolveDocumentInput(unittest.TestCase):

    def test_inline_defaults_to_pdf(self):
        payload = resolve_document_input(_b64(b"%PDF"))
        self.assertEqual(payload.data, b"%PDF")
        self.assertEqual(payload.mime_type, "application/pdf")
        self.assertEqual(payload.file_name, "document.pdf")

    def test_inline_name_guessed_from_mime(self):
        payload = resolve_document_input(_b64(b"\x89PNG"), mime_type="image/png")
        self.assertEqual(payload.file_name, "document.png")

    def test_inline_explicit_name_kept(self):
        payload = resolve_document_input(_b64(b"x"), file_name="scan.jpg", mime_type="image/jpeg")
        self.assertEqual(payload.file_name, "scan.jpg")
        self.assertEqual(payload.mime_type, "image/jpeg")

    def test_inline_wins_over_attachment(self):
        context = ToolContext([Attachment("application/pdf", b"attached")])
        payload = resolve_document_input(_b64(b"inline"), context=context)
        self.assertEqual(payload.data, b"inline")

    def test_pdf_attachment_preferred_over_image(self):
        context = ToolContext([
            Attachment("image/png", b"img"),
            Attachment("application/pdf", b"pdf"),
        ])
        payload = resolve_document_input(None, context=context)
        self.assertEqual(payload.data, b"pdf")
        self.assertEqual(payload.file_name, "document.pdf")

    def test_image_attachment_fallback(self):
        context = ToolContext([
            Attachment("text/plain", b"notes"),
            Attachment("image/jpeg", b""),
            Attachment("image/tiff", b"tif"),
        ])
        payload = resolve_document_input("  ", context=context)
        self.assertEqual(payload.data, b"tif")
        self.assertEqual(payload.file_name, "document.tiff")

    def test_nothing_usable(self):
        self.assertIsNone(resolve_document_input(None))
        self.assertIsNone(resolve_document_input(None, context=ToolContext([Attachment("audio/wav", b"a")])))

    def test_malformed_base64(self):
        with self.assertRaises(InvalidPayloadError):
            resolve_document_input("not base64 !!")

    def test_non_string_arguments_rejected(self):
        with self.assertRaises(InvalidPayloadError):
            resolve_document_input(_b64(b"%PDF"), file_name=7)
        with self.assertRaises(InvalidPayloadError):
            resolve_document_input(123)
        with self.assertRaises(InvalidPayloadError):
            resolve_audio_input(b"RIFF")


class TestResolveAudioInput(unittest.TestCase):

    def test_inline_audio_is_wav(self):
        payload = resolve_audio_input(_b64(b"RIFF"))
        self.assertEqual(payload.file_name, "uploaded_audio.wav")
        self.assertEqual(payload.mime_type, "audio/wav")

    def test_attached_audio(self):
        payload = resolve_audio_input(None, ToolContext([Attachment("audio/ogg", b"OggS")]))
        self.assertEqual(payload.file_name, "audio.ogg")

    def test_no_audio(self):
        self.assertIsNone(resolve_audio_input(None, ToolContext([Attachment("image/png", b"x")])))


class TestGuessFileName(unittest.TestCase):

    def test_known_types(self):
        cases = {
            "application/pdf": "document.pdf",
            "image/png": "document.png",
            "image/jpeg": "document.jpg",
            "image/jpg": "document.jpg",
            "image/tiff": "document.tiff",
            "image/bmp": "document.bmp",
            "audio/webm": "audio.webm",
            "audio/ogg": "audio.ogg",
            "audio/mpeg": "audio.mp3",
            "audio/mp3": "audio.mp3",
        }
        for mime, expected in cases.items():
            self.assertEqual(guess_file_name(mime), expected, mime)

    def test_unknown_and_missing(self):
        self.assertEqual(guess_file_name("application/zip"), "document.bin")
        self.assertEqual(guess_file_name(None), "document.bin")


if __name__ == "__main__":
    unittest.main()
