"""
Processing Poller — wait for the platform to finish processing an upload.

Queries status once per attempt, one query at a time:

- succeeded → return the media id
- failed → raise ``ProcessingFailed`` with the platform's detail, stop
- in_progress → wait (platform hint, else the fixed interval), try again

After ``max_attempts`` queries that all came back in_progress, raise
``ProcessingTimeout``. There is never a query beyond the budget.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..observability.metrics import metrics
from ..providers.base import PlatformMediaClient
from .errors import MediaErrorKind, ProcessingFailed, ProcessingTimeout, translate_errors
from .models import ProcessingState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_MAX_POLL_ATTEMPTS = 5


class ProcessingPoller:
    """Bounded status poller. Holds configuration only."""

    def __init__(
        self,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")

        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self._sleep = sleep or time.sleep

    def wait_until_processed(self, media_id: str, client: PlatformMediaClient) -> str:
        """
        Poll until ``media_id`` reaches a terminal state.

        Returns:
            The same media id, once processing succeeded.

        Raises:
            ProcessingFailed: platform reported failure, or a status
                query itself failed.
            ProcessingTimeout: still in progress after ``max_attempts``.
        """
        for attempt in range(1, self.max_attempts + 1):
            with translate_errors(MediaErrorKind.PROCESSING, "Processing status query failed"):
                status = client.get_processing_status(media_id)
            metrics.increment("status_polls_total")

            if status.state == ProcessingState.SUCCEEDED:
                logger.debug(
                    f"Media processing completed after {attempt} check(s)",
                    extra={"media_id": media_id},
                )
                return media_id

            if status.state == ProcessingState.FAILED:
                logger.error(
                    f"Media processing failed: {status.error or 'no detail'}",
                    extra={"media_id": media_id},
                )
                raise ProcessingFailed(
                    "Media processing failed",
                    detail=status.error or "platform reported failure without detail",
                )

            if attempt == self.max_attempts:
                break

            wait = self._wait_for(status.check_after_secs)
            logger.debug(
                f"Media still processing (check {attempt}/{self.max_attempts}), "
                f"next check in {wait:g}s",
                extra={"media_id": media_id},
            )
            self._sleep(wait)

        logger.warning(
            f"Media processing timed out after {self.max_attempts} checks",
            extra={"media_id": media_id},
        )
        raise ProcessingTimeout(
            "Media processing timed out",
            detail=f"still in progress after {self.max_attempts} status checks",
        )

    def _wait_for(self, hint: Optional[float]) -> float:
        if hint is not None and hint >= 0:
            return float(hint)
        return self.interval_seconds
