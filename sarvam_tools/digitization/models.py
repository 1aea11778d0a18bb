"""
sarvam_tools/digitization/models.py
====================================
Digitization Data Model — Sarvam Tools

Responsibility:
    - JobState enum and the forward-only DigitizationJob state machine
    - Output-format / language canonicalization
    - Typed views of the upstream JSON payloads, raising ProtocolError
      when a required field is missing
    - DigitizationResult, the orchestrator's terminal outcome

This module does NOT:
    - Perform any network call
    - Build the user-facing response dict (see sarvam_tools.responses)
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from sarvam_tools.digitization.errors import InvalidTransition, ProtocolError


AUTO_LANGUAGE = "auto"
DEFAULT_OUTPUT_FORMAT = "md"

# Synonyms folded into the two canonical encodings
_OUTPUT_FORMAT_SYNONYMS: dict[str, str] = {
    "markdown": "md",
    "md": "md",
    "html": "html",
}


# ---------------------------------------------------------------------------
# Job state machine
# ---------------------------------------------------------------------------


class JobState(str, Enum):
    """Lifecycle states of one digitization job."""

    CREATED = "Created"
    FILE_TARGETS_ASSIGNED = "FileTargetsAssigned"
    UPLOADED = "Uploaded"
    STARTED = "Started"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    TIMED_OUT = "TimedOut"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.FAILED, JobState.TIMED_OUT})

_STATE_RANK: dict[JobState, int] = {
    JobState.CREATED: 0,
    JobState.FILE_TARGETS_ASSIGNED: 1,
    JobState.UPLOADED: 2,
    JobState.STARTED: 3,
    JobState.RUNNING: 4,
    JobState.COMPLETED: 5,
    JobState.FAILED: 5,
    JobState.TIMED_OUT: 5,
}


def is_remote_terminal(job_state: str) -> bool:
    """True for the remote states that end polling (case-insensitive)."""
    return job_state.strip().lower() in ("completed", "failed")


def canonical_output_format(hint: str | None) -> str:
    """
    Fold an output format hint into its canonical form.

    Blank → "md"; "markdown"/"MD" → "md"; unknown values pass through
    lower-cased. Idempotent.
    """
    if hint is None or not hint.strip():
        return DEFAULT_OUTPUT_FORMAT
    lowered = hint.strip().lower()
    return _OUTPUT_FORMAT_SYNONYMS.get(lowered, lowered)


def resolve_language(hint: str | None) -> str:
    """Blank → the ``auto`` sentinel; otherwise the trimmed code."""
    if hint is None or not hint.strip():
        return AUTO_LANGUAGE
    return hint.strip()


class DigitizationJob:
    """
    In-memory record of one remote digitization job.

    Owned exclusively by the invocation that created it. ``state`` only
    moves forward; upload targets and download assets are written once
    and exposed as read-only mappings.
    """

    def __init__(self, job_id: str, language_hint: str, output_format: str):
        if not job_id:
            raise ValueError("job_id must not be empty.")
        self._job_id = job_id
        self._language_hint = language_hint
        self._output_format = output_format
        self._state = JobState.CREATED
        self._upload_targets: Mapping[str, str] | None = None
        self._download_assets: Mapping[str, str] | None = None
        self.error_message: str | None = None
        self.last_remote_state: str | None = None

    def __repr__(self) -> str:
        return f"DigitizationJob(job_id={self._job_id!r}, state={self._state.value})"

    @property
    def job_id(self) -> str:
        return self._job_id

    @property
    def language_hint(self) -> str:
        return self._language_hint

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def upload_targets(self) -> Mapping[str, str] | None:
        return self._upload_targets

    @property
    def download_assets(self) -> Mapping[str, str] | None:
        return self._download_assets

    def advance(self, new_state: JobState) -> None:
        """
        Move to ``new_state``. Staying in a non-terminal state is a no-op;
        any backwards move, or leaving a terminal state, raises.
        """
        if new_state == self._state and not new_state.is_terminal:
            return
        if self._state.is_terminal or _STATE_RANK[new_state] <= _STATE_RANK[self._state]:
            raise InvalidTransition(self._state.value, new_state.value)
        self._state = new_state

    def assign_upload_targets(self, targets: Mapping[str, str]) -> None:
        if self._upload_targets is not None:
            raise InvalidTransition(self._state.value, "upload targets reassigned")
        self._upload_targets = MappingProxyType(dict(targets))
        self.advance(JobState.FILE_TARGETS_ASSIGNED)

    def record_download_assets(self, assets: Mapping[str, str]) -> None:
        if self._state != JobState.COMPLETED:
            raise InvalidTransition(self._state.value, "download assets before Completed")
        if self._download_assets is not None:
            raise InvalidTransition(self._state.value, "download assets reassigned")
        self._download_assets = MappingProxyType(dict(assets))

    def mark_failed(self, message: str) -> None:
        self.error_message = message
        self.advance(JobState.FAILED)


# ---------------------------------------------------------------------------
# Typed upstream payloads
# ---------------------------------------------------------------------------


def _as_object(body: Any, what: str) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ProtocolError(f"Expected a JSON object in the {what} response.")
    return body


def _url_mapping(raw: Any) -> dict[str, str]:
    """
    Normalize ``{name: url}`` or ``{name: {"file_url": url}}`` into
    ``{name: url}``, preserving the service's order and dropping blanks.
    """
    if not isinstance(raw, dict):
        return {}
    urls: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(value, dict):
            value = value.get("file_url", "")
        if isinstance(value, str) and value.strip():
            urls[str(key)] = value
    return urls


@dataclass(frozen=True)
class CreateJobResponse:
    job_id: str

    @classmethod
    def from_json(cls, body: Any) -> "CreateJobResponse":
        job_id = _as_object(body, "create job").get("job_id")
        if not isinstance(job_id, str) or not job_id.strip():
            raise ProtocolError("Digitization job_id missing in response.")
        return cls(job_id=job_id.strip())


@dataclass(frozen=True)
class UploadUrlsResponse:
    upload_urls: dict[str, str]

    @classmethod
    def from_json(cls, body: Any, job_id: str | None = None) -> "UploadUrlsResponse":
        urls = _url_mapping(_as_object(body, "upload-files").get("upload_urls"))
        if not urls:
            raise ProtocolError(
                "No upload_urls present in digitization response.", job_id=job_id,
            )
        return cls(upload_urls=urls)

    def first(self) -> tuple[str, str]:
        return next(iter(self.upload_urls.items()))


@dataclass(frozen=True)
class JobStatusResponse:
    job_state: str = "Unknown"
    error_message: str = ""

    @classmethod
    def from_json(cls, body: Any) -> "JobStatusResponse":
        data = _as_object(body, "job status")
        state = data.get("job_state")
        message = data.get("error_message")
        return cls(
            job_state=state if isinstance(state, str) and state else "Unknown",
            error_message=message if isinstance(message, str) else "",
        )

    @property
    def is_terminal(self) -> bool:
        return is_remote_terminal(self.job_state)

    @property
    def is_completed(self) -> bool:
        return self.job_state.strip().lower() == "completed"


@dataclass(frozen=True)
class DownloadUrlsResponse:
    download_urls: dict[str, str]

    @classmethod
    def from_json(cls, body: Any, job_id: str | None = None) -> "DownloadUrlsResponse":
        urls = _url_mapping(_as_object(body, "download-files").get("download_urls"))
        if not urls:
            raise ProtocolError(
                "No download URLs returned by digitization API.", job_id=job_id,
            )
        return cls(download_urls=urls)


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------


@dataclass
class DigitizationResult:
    """Terminal outcome of one ``digitize`` call."""

    output_format: str
    job: DigitizationJob | None = None
    content: str = ""
    error: Exception | None = None
    asset_keys: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.job is not None and self.job.state == JobState.COMPLETED

    @property
    def job_id(self) -> str | None:
        if self.job is not None:
            return self.job.job_id
        return getattr(self.error, "job_id", None)

    @property
    def job_state(self) -> str | None:
        if self.job is None:
            return None
        if self.job.state == JobState.COMPLETED:
            return self.job.last_remote_state or JobState.COMPLETED.value
        return self.job.state.value
