# sarvam_tools/digitization/__init__.py
# ======================================
# Document Digitization — job lifecycle orchestration
#
# Pipeline (strictly sequential, nothing retried):
#   1. Create job             → job_id
#   2. Assign upload target   → one-time upload URL
#   3. Upload bytes           (PUT, BlockBlob)
#   4. Start processing
#   5. Poll status            (bounded: attempts × interval, cancellable)
#   6. Download assets        → merged with "\n\n---\n\n"
#
# Public API:
#   DigitizationOrchestrator(transport, base_url, policy).digitize(payload, ...)

from sarvam_tools.digitization.errors import DigitizationError  # noqa: F401
from sarvam_tools.digitization.models import (  # noqa: F401
    DigitizationJob,
    DigitizationResult,
    JobState,
)
from sarvam_tools.digitization.orchestrator import (  # noqa: F401
    ASSET_DELIMITER,
    DigitizationOrchestrator,
)
from sarvam_tools.digitization.poller import WaitPolicy  # noqa: F401

__all__ = [
    "ASSET_DELIMITER",
    "DigitizationError",
    "DigitizationJob",
    "DigitizationOrchestrator",
    "DigitizationResult",
    "JobState",
    "WaitPolicy",
]
