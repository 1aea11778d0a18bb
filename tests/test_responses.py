"""
tests/test_responses.py
========================
Uniform Response Tests

Tests verify:
    1. Truncation at exactly 5000 characters with the marker appended
    2. content_length reports the untruncated length
    3. Error payloads always carry a readable string message
    4. DigitizationResult → tool payload mapping
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sarvam_tools.digitization.errors import (
    TimedOutError,
    UploadTargetsError,
    ValidationError,
)
from sarvam_tools.digitization.models import DigitizationJob, DigitizationResult, JobState
from sarvam_tools.responses import (
    MAX_CONTENT_CHARS,
    TRUNCATION_MARKER,
    describe_exception,
    error,
    format_digitization,
    success,
    truncate_content,
)


def _completed_result(content: str) -> DigitizationResult:
    job = DigitizationJob("job-7", "auto", "md")
    job.advance(JobState.COMPLETED)
    job.last_remote_state = "Completed"
    return DigitizationResult(output_format="md", job=job, content=content)


class TestTruncation(unittest.TestCase):

    def test_at_limit_is_unchanged(self):
        content = "a" * MAX_CONTENT_CHARS
        self.assertEqual(truncate_content(content), content)

    def test_over_limit_is_cut_and_marked(self):
        content = "b" * (MAX_CONTENT_CHARS + 1)
        self.assertEqual(truncate_content(content), "b" * 5000 + "\n\n... [truncated]")

    def test_marker_literal(self):
        self.assertEqual(TRUNCATION_MARKER, "\n\n... [truncated]")


class TestErrorPayload(unittest.TestCase):

    def test_shape(self):
        self.assertEqual(
            error("translate_failed", 502, "bad gateway"),
            {
                "status": "error",
                "error_code": "translate_failed",
                "http_status": 502,
                "message": "bad gateway",
            },
        )

    def test_missing_message_becomes_empty_string(self):
        self.assertEqual(error("x", 500, None)["message"], "")

    def test_describe_exception_is_not_a_repr(self):
        self.assertEqual(describe_exception(ValueError("bad input")), "bad input")
        self.assertEqual(describe_exception(RuntimeError()), "")
        self.assertEqual(describe_exception(None), "")

    def test_success_shape(self):
        self.assertEqual(success(a=1), {"status": "success", "a": 1})


class TestFormatDigitization(unittest.TestCase):

    def test_success_fields(self):
        payload = format_digitization(_completed_result("Hello\n\n---\n\nWorld"))
        self.assertEqual(
            payload,
            {
                "status": "success",
                "job_id": "job-7",
                "job_state": "Completed",
                "content": "Hello\n\n---\n\nWorld",
                "content_length": 12,
                "output_format": "md",
            },
        )

    def test_long_content_reports_untruncated_length(self):
        content = "x" * 12000
        payload = format_digitization(_completed_result(content))

        self.assertEqual(payload["content"], "x" * 5000 + TRUNCATION_MARKER)
        self.assertEqual(payload["content_length"], 12000)

    def test_validation_failure(self):
        result = DigitizationResult(output_format="md", error=ValidationError("No document input provided."))
        payload = format_digitization(result)

        self.assertEqual(payload["status"], "error")
        self.assertEqual(payload["error_code"], "digitize_document_failed")
        self.assertEqual(payload["http_status"], 400)
        self.assertEqual(payload["error_kind"], "validation_error")
        self.assertNotIn("job_id", payload)

    def test_step_failure_keeps_job_id_and_status(self):
        job = DigitizationJob("job-b", "auto", "md")
        result = DigitizationResult(
            output_format="md",
            job=job,
            error=UploadTargetsError("Failed to get upload URL. HTTP 500: boom", http_status=500, job_id="job-b"),
        )
        payload = format_digitization(result)

        self.assertEqual(payload["http_status"], 500)
        self.assertEqual(payload["job_id"], "job-b")
        self.assertEqual(payload["error_kind"], "upload_targets_error")
        self.assertIn("boom", payload["message"])

    def test_timeout_message(self):
        job = DigitizationJob("job-t", "auto", "md")
        job.advance(JobState.TIMED_OUT)
        result = DigitizationResult(
            output_format="html",
            job=job,
            error=TimedOutError("Job did not complete. State: Running, error: "),
        )
        payload = format_digitization(result)

        self.assertEqual(payload["error_kind"], "timed_out")
        self.assertIn("Running", payload["message"])
        self.assertEqual(payload["job_id"], "job-t")


if __name__ == "__main__":
    unittest.main()
