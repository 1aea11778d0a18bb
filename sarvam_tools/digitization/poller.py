"""
sarvam_tools/digitization/poller.py
====================================
Bounded Status Polling — Sarvam Tools

Responsibility:
    - Wait for a remote job to reach a terminal state (Completed / Failed)
    - Bound the wait by a fixed attempt ceiling × fixed inter-poll delay
    - Let the caller cancel the wait through a threading.Event

The delay precedes each poll, so the default policy (60 × 5 s) waits at
most five minutes before declaring a timeout.

This module does NOT:
    - Retry a failed poll call (fetch errors propagate and end the loop)
    - Decide what a Failed or timed-out job means for the caller
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from sarvam_tools.digitization.errors import CancelledError
from sarvam_tools.digitization.models import JobStatusResponse

logger = logging.getLogger("sarvam_tools.digitization.poller")


@dataclass(frozen=True)
class WaitPolicy:
    """How long to wait for a job: ``max_attempts`` polls, ``interval`` apart."""

    max_attempts: int = 60
    interval: float = 5.0

    @property
    def deadline(self) -> float:
        """Upper bound on time spent sleeping, in seconds."""
        return self.max_attempts * self.interval


@dataclass(frozen=True)
class PollOutcome:
    """Last status seen, and whether the ceiling was hit first."""

    status: JobStatusResponse
    attempts: int
    timed_out: bool


def wait_for_terminal_state(
    fetch_status: Callable[[], JobStatusResponse],
    policy: WaitPolicy,
    cancel_event: threading.Event | None = None,
    job_id: str | None = None,
) -> PollOutcome:
    """
    Poll ``fetch_status`` until it reports a terminal state.

    Args:
        fetch_status: Performs one status call; raises on failure.
        policy:       Attempt ceiling and delay.
        cancel_event: Optional event; setting it interrupts the delay.
        job_id:       Only used for log lines and the cancellation error.

    Returns:
        PollOutcome with the last observed status. ``timed_out`` is True
        when the ceiling was exhausted without a terminal state.

    Raises:
        CancelledError: If ``cancel_event`` was set during the wait.
        Anything raised by ``fetch_status``.
    """
    event = cancel_event or threading.Event()
    latest = JobStatusResponse()

    for attempt in range(1, policy.max_attempts + 1):
        if event.wait(policy.interval):
            logger.info("Polling cancelled for job %s after %d attempts.", job_id, attempt - 1)
            raise CancelledError(
                f"Polling cancelled. Last state: {latest.job_state}", job_id=job_id,
            )

        latest = fetch_status()
        logger.debug(
            "Job %s poll %d/%d: %s", job_id, attempt, policy.max_attempts, latest.job_state,
        )
        if latest.is_terminal:
            return PollOutcome(status=latest, attempts=attempt, timed_out=False)

    logger.warning(
        "Job %s not terminal after %d polls (last state: %s).",
        job_id, policy.max_attempts, latest.job_state,
    )
    return PollOutcome(status=latest, attempts=policy.max_attempts, timed_out=True)
