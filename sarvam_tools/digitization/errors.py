"""
sarvam_tools/digitization/errors.py
====================================
Digitization Error Taxonomy — Sarvam Tools

Every failure of the digitization pipeline is one of the kinds below.
Each carries:
    - kind:        stable snake_case name surfaced as ``error_kind``
    - http_status: upstream status for non-2xx outcomes, 400 for local
                   validation, 500 otherwise
    - message:     best available human-readable text (upstream body when
                   present, never an exception repr)
    - job_id:      the remote job id if one had been obtained

No kind is retried; the orchestrator catches all of them at its outer
boundary and turns them into a failed DigitizationResult.
"""

GENERIC_FAILURE_STATUS = 500


class DigitizationError(Exception):
    """Base class for every digitization pipeline failure."""

    kind = "digitization_error"
    default_status = GENERIC_FAILURE_STATUS

    def __init__(
        self,
        message: str = "",
        http_status: int | None = None,
        job_id: str | None = None,
    ):
        self.message = message or ""
        self.http_status = http_status if http_status is not None else self.default_status
        self.job_id = job_id
        super().__init__(self.message)


class ValidationError(DigitizationError):
    """No usable input payload. Raised before any network call."""

    kind = "validation_error"
    default_status = 400


class ProtocolError(DigitizationError):
    """2xx response whose body lacks or malforms an expected field."""

    kind = "protocol_error"


class CreateJobError(DigitizationError):
    """Non-2xx from the create-job endpoint."""

    kind = "create_job_error"


class UploadTargetsError(DigitizationError):
    """Non-2xx from the upload-files (assign targets) endpoint."""

    kind = "upload_targets_error"


class UploadError(DigitizationError):
    """Non-2xx from the one-time upload URL. Never retried."""

    kind = "upload_error"


class StartError(DigitizationError):
    """Non-2xx from the job start endpoint."""

    kind = "start_error"


class PollError(DigitizationError):
    """Non-2xx (or unreadable body) from the status endpoint; aborts polling."""

    kind = "poll_error"


class JobFailedError(DigitizationError):
    """The remote service reported ``job_state: Failed``."""

    kind = "job_failed"


class TimedOutError(DigitizationError):
    """Poll ceiling exhausted without a terminal remote state."""

    kind = "timed_out"


class CancelledError(DigitizationError):
    """The caller cancelled the wait before a terminal state was observed."""

    kind = "cancelled"


class DownloadError(DigitizationError):
    """Non-2xx fetching the download list or an asset body."""

    kind = "download_error"


class InvalidTransition(RuntimeError):
    """A DigitizationJob was asked to move backwards or mutate frozen data."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move digitization job from {current} to {requested}.")
