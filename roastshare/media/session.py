"""
Upload Session — State machine for one platform upload.

## Phases

- NOT_STARTED: nothing sent yet
- INITIALIZED: INIT returned a media id (chunked only)
- APPENDING: at least one APPEND sent, payload not yet covered
- CHUNKS_SENT: APPEND calls cover the whole payload
- FINALIZED: FINALIZE sent (chunked terminal)
- UPLOADED: single-shot upload done (simple terminal)
- ABORTED: a call failed; the session is dead

A session passes through its phases once. It is local to one invocation
and never resumed: a retry starts a new session with a new media id.

## Usage

    session = UploadSession(total_bytes=len(data), strategy=UploadStrategy.CHUNKED)
    session.initialize(client.init_upload(len(data), "image/jpeg", "tweet_image"))
    for index, start, end in session.segments():
        session.append(index, end - start)
        client.append_chunk(session.media_id, index, data[start:end])
    session.finalize()
    client.finalize_upload(session.media_id)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterator, Optional, Set, Tuple

from .errors import InvalidTransition
from .models import UploadStrategy

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB


class UploadPhase(str, Enum):
    """Upload session phases."""
    NOT_STARTED = "not_started"
    INITIALIZED = "initialized"
    APPENDING = "appending"
    CHUNKS_SENT = "chunks_sent"
    FINALIZED = "finalized"
    UPLOADED = "uploaded"
    ABORTED = "aborted"


_ALLOWED: Dict[UploadPhase, Set[UploadPhase]] = {
    UploadPhase.NOT_STARTED: {UploadPhase.INITIALIZED, UploadPhase.UPLOADED, UploadPhase.ABORTED},
    UploadPhase.INITIALIZED: {UploadPhase.APPENDING, UploadPhase.CHUNKS_SENT, UploadPhase.ABORTED},
    UploadPhase.APPENDING: {UploadPhase.APPENDING, UploadPhase.CHUNKS_SENT, UploadPhase.ABORTED},
    UploadPhase.CHUNKS_SENT: {UploadPhase.FINALIZED, UploadPhase.ABORTED},
    UploadPhase.FINALIZED: set(),
    UploadPhase.UPLOADED: set(),
    UploadPhase.ABORTED: set(),
}


class UploadSession:
    """
    One upload of one payload.

    ``append`` and ``finalize`` are recorded before the platform call is
    made, so an out-of-order call is rejected without reaching the
    platform. ``initialize`` and ``complete_simple`` are recorded after,
    since they carry the media id the platform assigns.
    """

    def __init__(
        self,
        total_bytes: int,
        strategy: UploadStrategy,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if total_bytes <= 0:
            raise ValueError("total_bytes must be positive")
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        self.total_bytes = total_bytes
        self.strategy = strategy
        self.chunk_size = chunk_size

        self._phase = UploadPhase.NOT_STARTED
        self._media_id: Optional[str] = None
        self._next_segment = 0
        self._bytes_sent = 0

    @property
    def phase(self) -> UploadPhase:
        return self._phase

    @property
    def media_id(self) -> Optional[str]:
        return self._media_id

    @property
    def next_segment(self) -> int:
        return self._next_segment

    @property
    def bytes_sent(self) -> int:
        return self._bytes_sent

    @property
    def segment_count(self) -> int:
        return -(-self.total_bytes // self.chunk_size)

    @property
    def is_complete(self) -> bool:
        return self._phase in (UploadPhase.FINALIZED, UploadPhase.UPLOADED)

    def segments(self) -> Iterator[Tuple[int, int, int]]:
        """Yield ``(segment_index, start, end)`` covering the payload."""
        for index in range(self.segment_count):
            start = index * self.chunk_size
            yield index, start, min(start + self.chunk_size, self.total_bytes)

    # ── Transitions ──────────────────────────────────────────

    def initialize(self, media_id: str) -> None:
        """Record the media id returned by INIT."""
        self._require_strategy(UploadStrategy.CHUNKED, "INIT")
        self._ensure_can(UploadPhase.INITIALIZED)
        self._assign_media_id(media_id)
        self._transition_to(UploadPhase.INITIALIZED)

    def append(self, segment_index: int, length: int) -> None:
        """Record that segment ``segment_index`` of ``length`` bytes is being sent."""
        self._require_strategy(UploadStrategy.CHUNKED, "APPEND")

        if segment_index != self._next_segment:
            raise InvalidTransition(
                "Out-of-order APPEND",
                detail=f"expected segment {self._next_segment}, got {segment_index}",
            )

        expected = min(self.chunk_size, self.total_bytes - self._bytes_sent)
        if length != expected:
            raise InvalidTransition(
                "APPEND length does not match segment boundary",
                detail=f"segment {segment_index}: expected {expected} bytes, got {length}",
            )

        done = self._bytes_sent + length == self.total_bytes
        self._transition_to(UploadPhase.CHUNKS_SENT if done else UploadPhase.APPENDING)
        self._next_segment += 1
        self._bytes_sent += length

    def finalize(self) -> None:
        """Record that FINALIZE is being sent."""
        self._require_strategy(UploadStrategy.CHUNKED, "FINALIZE")
        self._transition_to(UploadPhase.FINALIZED)

    def complete_simple(self, media_id: str) -> None:
        """Record the media id returned by a single-shot upload."""
        self._require_strategy(UploadStrategy.SIMPLE, "simple upload")
        self._ensure_can(UploadPhase.UPLOADED)
        self._assign_media_id(media_id)
        self._bytes_sent = self.total_bytes
        self._transition_to(UploadPhase.UPLOADED)

    def abort(self) -> None:
        """Mark the session dead after a failed call."""
        if self._phase in (UploadPhase.FINALIZED, UploadPhase.UPLOADED, UploadPhase.ABORTED):
            return
        self._transition_to(UploadPhase.ABORTED)

    def require_pollable(self) -> str:
        """Return the media id, refusing if the upload never completed."""
        if not self.is_complete or self._media_id is None:
            raise InvalidTransition(
                "Processing status requested before upload completed",
                detail=f"session phase is {self._phase.value}",
            )
        return self._media_id

    # ── Internals ────────────────────────────────────────────

    def _require_strategy(self, strategy: UploadStrategy, step: str) -> None:
        if self.strategy != strategy:
            raise InvalidTransition(
                f"{step} not valid for a {self.strategy.value} upload",
            )

    def _assign_media_id(self, media_id: str) -> None:
        if self._media_id is not None:
            raise InvalidTransition(
                "Media id already assigned",
                detail=f"session already holds {self._media_id}",
            )
        if not media_id:
            raise InvalidTransition("Platform returned an empty media id")
        self._media_id = str(media_id)

    def _ensure_can(self, new_phase: UploadPhase) -> None:
        if new_phase not in _ALLOWED[self._phase]:
            raise InvalidTransition(
                "Invalid upload session transition",
                detail=f"{self._phase.value} → {new_phase.value}",
            )

    def _transition_to(self, new_phase: UploadPhase) -> None:
        old_phase = self._phase
        self._ensure_can(new_phase)
        self._phase = new_phase
        logger.debug(
            f"Upload session {self._media_id or '-'}: {old_phase.value} → {new_phase.value}"
        )

    def __repr__(self) -> str:
        return (
            f"UploadSession(media_id={self._media_id!r}, strategy={self.strategy.value}, "
            f"phase={self._phase.value}, sent={self._bytes_sent}/{self.total_bytes})"
        )
