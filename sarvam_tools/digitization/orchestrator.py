"""
sarvam_tools/digitization/orchestrator.py
==========================================
Document Digitization Orchestrator — Sarvam Tools

Responsibility:
    Drive one document through the Sarvam doc-digitization job API:
        1. Create job              POST /doc-digitization/job/v1
        2. Assign upload target    POST /doc-digitization/job/v1/upload-files
        3. Upload bytes            PUT  <one-time URL>
        4. Start processing        POST /doc-digitization/job/v1/{id}/start
        5. Poll for completion     GET  /doc-digitization/job/v1/{id}/status
        6. Fetch + merge results   POST /doc-digitization/job/v1/{id}/download-files
                                   GET  <one-time URL> per asset

    Steps run strictly in order; step n+1 never starts before step n has
    been classified as successful. No step is retried: upload/download
    URLs are single-use and "start" is side-effecting.

This module does NOT:
    - Resolve inputs from base64 or agent attachments (sarvam_tools.binary)
    - Build the user-facing response dict (sarvam_tools.responses)
    - Persist job state; the job lives for one invocation only
"""

import asyncio
import logging
import threading
from typing import Callable

from sarvam_tools.binary import UploadedBinary
from sarvam_tools.digitization.errors import (
    CreateJobError,
    DigitizationError,
    DownloadError,
    JobFailedError,
    PollError,
    ProtocolError,
    StartError,
    TimedOutError,
    UploadError,
    UploadTargetsError,
    ValidationError,
)
from sarvam_tools.digitization.models import (
    AUTO_LANGUAGE,
    CreateJobResponse,
    DigitizationJob,
    DigitizationResult,
    DownloadUrlsResponse,
    JobState,
    JobStatusResponse,
    UploadUrlsResponse,
    canonical_output_format,
    resolve_language,
)
from sarvam_tools.digitization.poller import WaitPolicy, wait_for_terminal_state
from sarvam_tools.transport import Transport, TransportError, TransportResponse

logger = logging.getLogger("sarvam_tools.digitization.orchestrator")

JOB_PATH = "/doc-digitization/job/v1"
ASSET_DELIMITER = "\n\n---\n\n"
OCTET_STREAM = "application/octet-stream"
BLOB_TYPE_HEADERS = {"x-ms-blob-type": "BlockBlob"}

NO_INPUT_MESSAGE = "No document input provided. Upload a PDF/image or pass file_data_base64."


class DigitizationOrchestrator:
    """
    Runs the six-step digitization pipeline for one document per call.

    The instance itself is stateless between calls: every ``digitize``
    builds its own DigitizationJob, so one orchestrator can serve
    concurrent invocations from different threads.
    """

    def __init__(
        self,
        transport: Transport,
        api_base_url: str,
        policy: WaitPolicy | None = None,
    ):
        self._transport = transport
        self._base = api_base_url.rstrip("/")
        self._policy = policy or WaitPolicy()

    @property
    def policy(self) -> WaitPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def digitize(
        self,
        payload: UploadedBinary | None,
        language_hint: str | None = None,
        output_format_hint: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> DigitizationResult:
        """
        Digitize one document and return its terminal outcome.

        Args:
            payload:            Document bytes, file name and MIME type.
            language_hint:      Language code, or blank / "auto" to auto-detect.
            output_format_hint: "md", "markdown", "html" ... (default "md").
            cancel_event:       Optional; setting it stops the poll wait.

        Returns:
            DigitizationResult. Never raises for pipeline failures; the
            failure is carried in ``result.error`` together with the job
            (and its id) if one was created.
        """
        output_format = canonical_output_format(output_format_hint)
        language = resolve_language(language_hint)
        result = DigitizationResult(output_format=output_format)

        try:
            self._run(payload, language, output_format, result, cancel_event)
        except DigitizationError as exc:
            if exc.job_id is None and result.job is not None:
                exc.job_id = result.job.job_id
            logger.warning(
                "Digitization failed (%s, job %s): %s", exc.kind, exc.job_id, exc.message,
            )
            result.error = exc

        return result

    async def adigitize(
        self,
        payload: UploadedBinary | None,
        language_hint: str | None = None,
        output_format_hint: str | None = None,
    ) -> DigitizationResult:
        """
        Awaitable ``digitize``: runs the blocking pipeline in a worker thread.

        Cancelling the awaiting task stops the poll loop at its next delay.
        A remote job that was already started keeps running server-side.
        """
        cancel_event = threading.Event()
        try:
            return await asyncio.to_thread(
                self.digitize, payload, language_hint, output_format_hint, cancel_event,
            )
        except asyncio.CancelledError:
            cancel_event.set()
            raise

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(
        self,
        payload: UploadedBinary | None,
        language: str,
        output_format: str,
        result: DigitizationResult,
        cancel_event: threading.Event | None,
    ) -> None:
        if payload is None or not payload.data:
            raise ValidationError(NO_INPUT_MESSAGE)

        # Step 1: create job
        job_id = self._create_job(language, output_format)
        job = DigitizationJob(job_id, language, output_format)
        result.job = job
        logger.info("Digitization job %s created (language=%s, format=%s).", job_id, language, output_format)

        # Step 2: assign upload target
        targets = self._request_upload_targets(job, payload.file_name)
        job.assign_upload_targets(targets.upload_urls)
        file_name, upload_url = targets.first()

        # Step 3: upload bytes
        self._upload(job, upload_url, payload)
        job.advance(JobState.UPLOADED)
        logger.info("Job %s: uploaded %s (%d bytes).", job_id, file_name, len(payload.data))

        # Step 4: start
        self._start(job)
        job.advance(JobState.STARTED)
        logger.info("Job %s started; waiting up to %.0fs.", job_id, self._policy.deadline)

        # Step 5: poll
        outcome = wait_for_terminal_state(
            lambda: self._fetch_status(job),
            self._policy,
            cancel_event=cancel_event,
            job_id=job_id,
        )
        status = outcome.status
        job.last_remote_state = status.job_state

        if outcome.timed_out:
            job.error_message = status.error_message or None
            job.advance(JobState.TIMED_OUT)
            raise TimedOutError(_did_not_complete(status), job_id=job_id)

        if not status.is_completed:
            job.mark_failed(status.error_message)
            raise JobFailedError(_did_not_complete(status), job_id=job_id)

        job.advance(JobState.COMPLETED)
        logger.info("Job %s completed after %d polls.", job_id, outcome.attempts)

        # Step 6: fetch and merge
        downloads = self._fetch_download_urls(job)
        job.record_download_assets(downloads.download_urls)

        parts: list[str] = []
        for key, url in job.download_assets.items():
            content = self._download(job, key, url)
            if ASSET_DELIMITER in content:
                logger.warning("Job %s: asset %s contains the asset delimiter.", job_id, key)
            parts.append(content)

        result.content = ASSET_DELIMITER.join(parts)
        result.asset_keys = list(job.download_assets.keys())
        logger.info(
            "Job %s: merged %d assets (%d chars).", job_id, len(parts), len(result.content),
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _create_job(self, language: str, output_format: str) -> str:
        job_parameters: dict[str, str] = {"output_format": output_format}
        # Omitting "language" tells the service to auto-detect
        if language != AUTO_LANGUAGE:
            job_parameters["language"] = language

        resp = self._call(
            CreateJobError,
            None,
            lambda: self._transport.send_json(
                "POST", f"{self._base}{JOB_PATH}", {"job_parameters": job_parameters},
            ),
        )
        if not resp.ok:
            raise CreateJobError(
                f"Failed to create digitization job. HTTP {resp.status_code}: {resp.text}",
                http_status=resp.status_code,
            )
        return CreateJobResponse.from_json(_json_body(resp, None)).job_id

    def _request_upload_targets(self, job: DigitizationJob, file_name: str) -> UploadUrlsResponse:
        resp = self._call(
            UploadTargetsError,
            job.job_id,
            lambda: self._transport.send_json(
                "POST",
                f"{self._base}{JOB_PATH}/upload-files",
                {"job_id": job.job_id, "files": [file_name]},
            ),
        )
        if not resp.ok:
            raise UploadTargetsError(
                f"Failed to get upload URL. HTTP {resp.status_code}: {resp.text}",
                http_status=resp.status_code,
                job_id=job.job_id,
            )
        return UploadUrlsResponse.from_json(_json_body(resp, job.job_id), job_id=job.job_id)

    def _upload(self, job: DigitizationJob, upload_url: str, payload: UploadedBinary) -> None:
        headers = dict(BLOB_TYPE_HEADERS)
        headers["Content-Type"] = payload.mime_type or OCTET_STREAM

        resp = self._call(
            UploadError,
            job.job_id,
            lambda: self._transport.send(
                "PUT", upload_url, headers=headers, body=payload.data, authenticated=False,
            ),
        )
        if not resp.ok:
            raise UploadError(
                f"Failed to upload document bytes. HTTP {resp.status_code}",
                http_status=resp.status_code,
                job_id=job.job_id,
            )

    def _start(self, job: DigitizationJob) -> None:
        resp = self._call(
            StartError,
            job.job_id,
            lambda: self._transport.send_json(
                "POST", f"{self._base}{JOB_PATH}/{job.job_id}/start",
            ),
        )
        if not resp.ok:
            raise StartError(
                f"Failed to start digitization job. HTTP {resp.status_code}: {resp.text}",
                http_status=resp.status_code,
                job_id=job.job_id,
            )

    def _fetch_status(self, job: DigitizationJob) -> JobStatusResponse:
        resp = self._call(
            PollError,
            job.job_id,
            lambda: self._transport.send(
                "GET", f"{self._base}{JOB_PATH}/{job.job_id}/status",
            ),
        )
        if not resp.ok:
            raise PollError(
                f"Failed polling digitization status. HTTP {resp.status_code}: {resp.text}",
                http_status=resp.status_code,
                job_id=job.job_id,
            )
        try:
            status = JobStatusResponse.from_json(_json_body(resp, job.job_id))
        except ProtocolError as exc:
            exc.job_id = job.job_id
            raise

        job.last_remote_state = status.job_state
        if not status.is_terminal:
            job.advance(JobState.RUNNING)
        return status

    def _fetch_download_urls(self, job: DigitizationJob) -> DownloadUrlsResponse:
        resp = self._call(
            DownloadError,
            job.job_id,
            lambda: self._transport.send_json(
                "POST", f"{self._base}{JOB_PATH}/{job.job_id}/download-files",
            ),
        )
        if not resp.ok:
            raise DownloadError(
                "Failed to fetch digitization download URLs. "
                f"HTTP {resp.status_code}: {resp.text}",
                http_status=resp.status_code,
                job_id=job.job_id,
            )
        return DownloadUrlsResponse.from_json(_json_body(resp, job.job_id), job_id=job.job_id)

    def _download(self, job: DigitizationJob, key: str, url: str) -> str:
        resp = self._call(
            DownloadError,
            job.job_id,
            lambda: self._transport.send("GET", url, authenticated=False),
        )
        if not resp.ok:
            raise DownloadError(
                f"Failed to download digitized content ({key}). HTTP {resp.status_code}",
                http_status=resp.status_code,
                job_id=job.job_id,
            )
        return resp.text

    @staticmethod
    def _call(
        error_cls: type[DigitizationError],
        job_id: str | None,
        send: Callable[[], TransportResponse],
    ) -> TransportResponse:
        """Run one transport call, classifying connection failures by step."""
        try:
            return send()
        except TransportError as exc:
            raise error_cls(str(exc.cause), job_id=job_id) from exc


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _json_body(resp: TransportResponse, job_id: str | None):
    try:
        return resp.json()
    except ValueError as exc:
        raise ProtocolError(f"Malformed JSON from digitization API: {exc}", job_id=job_id) from exc


def _did_not_complete(status: JobStatusResponse) -> str:
    return f"Job did not complete. State: {status.job_state}, error: {status.error_message}"
