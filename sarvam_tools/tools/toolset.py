"""
sarvam_tools/tools/toolset.py
==============================
Sarvam Toolset — agent-facing tool registry

Responsibility:
    - Share ONE api key and ONE Transport across every Sarvam tool
    - Declare each tool (name, description, JSON-schema parameters,
      long-running flag) for the host agent framework
    - Dispatch an invocation (tool name + JSON arguments + ToolContext)
      to the matching handler and always return a uniform payload

Tools:
    sarvam_text_to_speech     single call
    sarvam_speech_to_text     single call
    sarvam_translate          single call
    sarvam_digitize_document  multi-step job, long running (polls)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from sarvam_tools.binary import (
    InvalidPayloadError,
    ToolContext,
    UploadedBinary,
    ensure_text,
    resolve_document_input,
)
from sarvam_tools.config import SarvamSettings, load_settings
from sarvam_tools.digitization.errors import ValidationError
from sarvam_tools.digitization.models import DigitizationResult, canonical_output_format
from sarvam_tools.digitization.orchestrator import DigitizationOrchestrator
from sarvam_tools.digitization.poller import WaitPolicy
from sarvam_tools.responses import (
    DIGITIZE_ERROR_CODE,
    describe_exception,
    error,
    format_digitization,
)
from sarvam_tools.tools.speech import (
    STT_ERROR_CODE,
    TTS_ERROR_CODE,
    speech_to_text,
    text_to_speech,
)
from sarvam_tools.tools.translate import TRANSLATE_ERROR_CODE, translate_text
from sarvam_tools.transport import Transport

logger = logging.getLogger("sarvam_tools.tools.toolset")

Handler = Callable[[dict[str, Any], ToolContext | None], dict[str, Any]]


class MissingArgumentError(ValueError):
    """A required tool argument was absent or blank."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required argument: {name}")


@dataclass(frozen=True)
class ToolSpec:
    """One callable tool as seen by the agent."""

    name: str
    description: str
    parameters: dict[str, Any]
    handler: Handler
    error_code: str
    long_running: bool = False

    def declaration(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
            "long_running": self.long_running,
        }


def _schema(properties: dict[str, dict[str, str]], required: list[str]) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


def _string(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


def _require(arguments: dict[str, Any], name: str) -> str:
    value = arguments.get(name)
    if not isinstance(value, str) or not value.strip():
        raise MissingArgumentError(name)
    return value


# ---------------------------------------------------------------------------
# Toolset
# ---------------------------------------------------------------------------


class SarvamToolset:
    """Sarvam API-backed tools sharing one key and one HTTP session."""

    def __init__(
        self,
        settings: SarvamSettings,
        transport: Transport | None = None,
    ):
        self._settings = settings
        self._base = settings.api_base_url.rstrip("/")
        self._transport = transport or Transport(settings.api_key, timeout=settings.request_timeout)
        self._orchestrator = DigitizationOrchestrator(
            self._transport,
            self._base,
            WaitPolicy(
                max_attempts=settings.poll_max_attempts,
                interval=settings.poll_interval,
            ),
        )
        self._tools = {tool.name: tool for tool in self._build_tools()}

    @classmethod
    def from_env(cls) -> "SarvamToolset":
        return cls(load_settings())

    @property
    def settings(self) -> SarvamSettings:
        return self._settings

    @property
    def orchestrator(self) -> DigitizationOrchestrator:
        return self._orchestrator

    def close(self) -> None:
        self._transport.close()

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def all_tools(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def get_tool(self, name: str) -> ToolSpec:
        """Raises KeyError for unknown tool names."""
        return self._tools[name]

    def text_to_speech_tool(self) -> ToolSpec:
        return self._tools["sarvam_text_to_speech"]

    def speech_to_text_tool(self) -> ToolSpec:
        return self._tools["sarvam_speech_to_text"]

    def translate_tool(self) -> ToolSpec:
        return self._tools["sarvam_translate"]

    def document_digitization_tool(self) -> ToolSpec:
        return self._tools["sarvam_digitize_document"]

    def invoke(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        context: ToolContext | None = None,
    ) -> dict[str, Any]:
        """
        Run tool ``name`` with JSON ``arguments``.

        Raises:
            KeyError: If no tool is registered under ``name``.
        """
        tool = self.get_tool(name)
        logger.info("Invoking tool %s", name)
        try:
            return tool.handler(arguments or {}, context)
        except MissingArgumentError as exc:
            return error(tool.error_code, 400, str(exc))

    # ------------------------------------------------------------------
    # Document digitization entry point
    # ------------------------------------------------------------------

    def digitize_document(
        self,
        language: str | None = None,
        output_format: str | None = None,
        file_data_base64: str | None = None,
        file_name: str | None = None,
        mime_type: str | None = None,
        context: ToolContext | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        """Resolve the document, run the job pipeline, format the outcome."""
        try:
            ensure_text("language", language)
            ensure_text("output_format", output_format)
            payload = resolve_document_input(file_data_base64, file_name, mime_type, context)
        except InvalidPayloadError as exc:
            logger.warning("Digitization input rejected: %s", exc)
            result = DigitizationResult(
                output_format=canonical_output_format(
                    output_format if isinstance(output_format, str) else None
                ),
            )
            result.error = ValidationError(str(exc))
            return format_digitization(result)

        return self.digitize_payload(payload, language, output_format, cancel_event)

    def digitize_payload(
        self,
        payload: UploadedBinary | None,
        language: str | None = None,
        output_format: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        """Digitize an already-resolved payload; never raises."""
        try:
            result = self._orchestrator.digitize(payload, language, output_format, cancel_event)
        except Exception as exc:
            logger.error("Digitization tool unexpected error: %s", exc, exc_info=True)
            return error(DIGITIZE_ERROR_CODE, 500, describe_exception(exc))
        return format_digitization(result)

    # ------------------------------------------------------------------
    # Tool declarations
    # ------------------------------------------------------------------

    def _build_tools(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                name="sarvam_text_to_speech",
                description=(
                    "Converts text to speech using Sarvam API. "
                    "Returns base64 WAV audio in the response."
                ),
                parameters=_schema(
                    {
                        "text": _string("Text to synthesize"),
                        "target_language_code": _string(
                            "Target language code, e.g. hi-IN, en-IN, ta-IN"
                        ),
                        "speaker": _string("Voice name to use for synthesis. Default: manisha"),
                    },
                    ["text", "target_language_code"],
                ),
                handler=self._handle_text_to_speech,
                error_code=TTS_ERROR_CODE,
            ),
            ToolSpec(
                name="sarvam_speech_to_text",
                description=(
                    "Converts speech to text using Sarvam API. Uses uploaded audio if "
                    "present, otherwise reads base64 audio input."
                ),
                parameters=_schema(
                    {
                        "audio_data_base64": _string(
                            "Optional base64-encoded audio data (wav/mp3/ogg/webm/flac)."
                        ),
                        "language_code": _string("Optional language code. Default: unknown"),
                    },
                    [],
                ),
                handler=self._handle_speech_to_text,
                error_code=STT_ERROR_CODE,
            ),
            ToolSpec(
                name="sarvam_translate",
                description="Translates text using Sarvam API. Source language defaults to auto.",
                parameters=_schema(
                    {
                        "input": _string("Text to translate"),
                        "target_language_code": _string("Target language code"),
                        "source_language_code": _string("Source language code. Default: auto"),
                    },
                    ["input", "target_language_code"],
                ),
                handler=self._handle_translate,
                error_code=TRANSLATE_ERROR_CODE,
            ),
            ToolSpec(
                name="sarvam_digitize_document",
                description=(
                    "Digitizes an uploaded document (PDF/image) using Sarvam API "
                    "and returns extracted text."
                ),
                parameters=_schema(
                    {
                        "language": _string("Document language code. Default: auto"),
                        "output_format": _string("Output format: md or html. Default: md"),
                        "file_data_base64": _string(
                            "Optional base64-encoded file bytes (PDF/image)."
                        ),
                        "file_name": _string("Optional filename to use for upload."),
                        "mime_type": _string("Optional MIME type."),
                    },
                    [],
                ),
                handler=self._handle_digitize,
                error_code=DIGITIZE_ERROR_CODE,
                long_running=True,
            ),
        ]

    def _handle_text_to_speech(self, arguments, context):
        return text_to_speech(
            self._transport,
            self._base,
            _require(arguments, "text"),
            _require(arguments, "target_language_code"),
            arguments.get("speaker"),
        )

    def _handle_speech_to_text(self, arguments, context):
        return speech_to_text(
            self._transport,
            self._base,
            arguments.get("audio_data_base64"),
            arguments.get("language_code"),
            context,
        )

    def _handle_translate(self, arguments, context):
        return translate_text(
            self._transport,
            self._base,
            _require(arguments, "input"),
            _require(arguments, "target_language_code"),
            arguments.get("source_language_code"),
        )

    def _handle_digitize(self, arguments, context):
        return self.digitize_document(
            language=arguments.get("language"),
            output_format=arguments.get("output_format"),
            # "file_data" is accepted as an alias of the documented name
            file_data_base64=arguments.get("file_data_base64") or arguments.get("file_data"),
            file_name=arguments.get("file_name"),
            mime_type=arguments.get("mime_type"),
            context=context,
        )
