# sarvam_tools/__init__.py
# =========================
# Sarvam Tools — Sarvam AI capabilities as agent tools
#
# Tools:
#   sarvam_text_to_speech     POST /text-to-speech
#   sarvam_speech_to_text     POST /speech-to-text
#   sarvam_translate          POST /translate
#   sarvam_digitize_document  doc-digitization job (create → upload → start
#                             → poll → download + merge)
#
# Public API:
#   SarvamToolset(settings).invoke(name, arguments, context) → dict

from sarvam_tools.binary import Attachment, ToolContext, UploadedBinary  # noqa: F401
from sarvam_tools.config import SarvamSettings, load_settings  # noqa: F401
from sarvam_tools.tools.toolset import SarvamToolset, ToolSpec  # noqa: F401

__all__ = [
    "Attachment",
    "SarvamSettings",
    "SarvamToolset",
    "ToolContext",
    "ToolSpec",
    "UploadedBinary",
    "load_settings",
]
