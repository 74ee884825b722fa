"""
Upload Executor — push optimized bytes to the platform.

Picks the upload protocol by payload size, then drives it:

- simple: one ``simple_upload`` call with the whole payload
- chunked: INIT → APPEND (segment 0..n-1, in order) → FINALIZE

The choice is a strict size rule: ``size >= threshold`` is chunked.
Any failed call aborts the session and raises ``UploadFailed``; the
session is never resumed.
"""

from __future__ import annotations

import logging

from ..observability.metrics import metrics
from ..providers.base import PlatformMediaClient
from .errors import MediaErrorKind, translate_errors
from .models import OptimizedAsset, UploadStrategy
from .session import DEFAULT_CHUNK_SIZE, UploadSession

logger = logging.getLogger(__name__)

LARGE_FILE_THRESHOLD = 5 * 1024 * 1024  # 5 MiB; at or above this → chunked
DEFAULT_MEDIA_CATEGORY = "tweet_image"


def select_strategy(size_bytes: int, threshold: int = LARGE_FILE_THRESHOLD) -> UploadStrategy:
    """Chunked when ``size_bytes >= threshold``, simple otherwise."""
    if size_bytes >= threshold:
        return UploadStrategy.CHUNKED
    return UploadStrategy.SIMPLE


class UploadExecutor:
    """Runs one upload per call; holds no per-upload state itself."""

    def __init__(
        self,
        threshold: int = LARGE_FILE_THRESHOLD,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        media_category: str = DEFAULT_MEDIA_CATEGORY,
    ):
        self.threshold = threshold
        self.chunk_size = chunk_size
        self.media_category = media_category

    def upload(self, asset: OptimizedAsset, client: PlatformMediaClient) -> UploadSession:
        """
        Upload ``asset`` and return the completed session.

        Raises:
            UploadFailed: any platform call failed, or the session
                rejected an out-of-order step.
        """
        data = asset.data
        strategy = select_strategy(len(data), self.threshold)
        session = UploadSession(
            total_bytes=len(data),
            strategy=strategy,
            chunk_size=self.chunk_size,
        )

        logger.debug(
            f"Uploading {len(data):,} bytes via {strategy.value} path",
            extra={"strategy": strategy.value},
        )

        try:
            if strategy == UploadStrategy.CHUNKED:
                self._upload_chunked(data, asset.mime_type, session, client)
            else:
                self._upload_simple(data, session, client)
        except Exception:
            session.abort()
            raise

        metrics.increment("uploads_total", labels={"strategy": strategy.value})
        logger.info(
            f"Upload complete: media_id={session.media_id} "
            f"({strategy.value}, {session.segment_count if strategy == UploadStrategy.CHUNKED else 1} call(s))",
            extra={"media_id": session.media_id, "strategy": strategy.value},
        )
        return session

    def _upload_simple(
        self,
        data: bytes,
        session: UploadSession,
        client: PlatformMediaClient,
    ) -> None:
        with translate_errors(MediaErrorKind.UPLOAD, "Media upload failed"):
            media_id = client.simple_upload(data)
        session.complete_simple(media_id)

    def _upload_chunked(
        self,
        data: bytes,
        mime_type: str,
        session: UploadSession,
        client: PlatformMediaClient,
    ) -> None:
        with translate_errors(MediaErrorKind.UPLOAD, "Chunked upload INIT failed"):
            media_id = client.init_upload(session.total_bytes, mime_type, self.media_category)
        session.initialize(media_id)

        for index, start, end in session.segments():
            session.append(index, end - start)
            with translate_errors(MediaErrorKind.UPLOAD, f"Chunked upload APPEND failed at segment {index}"):
                client.append_chunk(session.media_id, index, data[start:end])
            logger.debug(
                f"Appended segment {index + 1}/{session.segment_count}",
                extra={"media_id": session.media_id, "segment_index": index},
            )

        session.finalize()
        with translate_errors(MediaErrorKind.UPLOAD, "Chunked upload FINALIZE failed"):
            client.finalize_upload(session.media_id)
