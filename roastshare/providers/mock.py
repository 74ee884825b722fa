"""
Mock Providers — In-memory stand-ins for Cloudinary and X.

They record every call in order and never touch the network. Used by
``--dry-run`` and by the test suite.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from PIL import Image

from ..media.models import ProcessingStatus
from .base import ImageOptimizationProvider, PlatformMediaClient, TweetPublisher

logger = logging.getLogger(__name__)


def make_jpeg_payload(size_bytes: int) -> bytes:
    """
    A decodable JPEG padded to exactly ``size_bytes``.

    Padding goes after the end-of-image marker, which decoders ignore.
    """
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (255, 94, 0)).save(buf, format="JPEG")
    data = buf.getvalue()
    if size_bytes < len(data):
        raise ValueError(f"size_bytes must be at least {len(data)}")
    return data + b"\x00" * (size_bytes - len(data))


class MockOptimizationProvider(ImageOptimizationProvider):
    """
    Optimizer that "optimizes" to a fixed payload.

    Set ``fail_optimize`` / ``fail_fetch`` to an exception to script a
    failure, or ``result_url`` to None to simulate a missing result.
    """

    def __init__(
        self,
        payload: Optional[bytes] = None,
        result_url: Optional[str] = "https://res.cloudinary.com/mock/image/upload/optimized.jpg",
    ):
        self.payload = payload if payload is not None else make_jpeg_payload(1024)
        self.result_url = result_url
        self.fail_optimize: Optional[Exception] = None
        self.fail_fetch: Optional[Exception] = None
        self.calls: List[Tuple[str, Any]] = []

    @property
    def name(self) -> str:
        return "mock"

    def optimize(self, url: str, options: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("optimize", url))
        if self.fail_optimize:
            raise self.fail_optimize
        logger.info(f"[MOCK:optimizer] Would optimize {url}")
        return {"result_url": self.result_url}

    def fetch_bytes(self, url: str) -> bytes:
        self.calls.append(("fetch_bytes", url))
        if self.fail_fetch:
            raise self.fail_fetch
        return self.payload


class MockPlatformClient(PlatformMediaClient, TweetPublisher):
    """
    Platform client that accepts uploads and reports scripted statuses.

    ``statuses`` is consumed one per status query; once exhausted the last
    one repeats. ``fail_on`` maps a call name (``init_upload``,
    ``append_chunk``, ``finalize_upload``, ``simple_upload``,
    ``get_processing_status``) to the exception it should raise.
    ``fail_on_segment`` limits an ``append_chunk`` failure to one index.
    """

    def __init__(self, statuses: Optional[Sequence[ProcessingStatus]] = None):
        self.statuses = list(statuses or [ProcessingStatus.succeeded()])
        self.fail_on: Dict[str, Exception] = {}
        self.fail_on_segment: Optional[int] = None
        self.calls: List[Tuple[Any, ...]] = []
        self.tweets: List[Dict[str, Any]] = []
        self._status_index = 0

    @property
    def name(self) -> str:
        return "mock"

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def _maybe_fail(self, call: str, segment_index: Optional[int] = None) -> None:
        exc = self.fail_on.get(call)
        if exc is None:
            return
        if call == "append_chunk" and self.fail_on_segment is not None:
            if segment_index != self.fail_on_segment:
                return
        raise exc

    def _new_media_id(self) -> str:
        return str(uuid4().int)[:19]

    def init_upload(self, total_bytes: int, media_type: str, media_category: str) -> str:
        self.calls.append(("init_upload", total_bytes, media_type, media_category))
        self._maybe_fail("init_upload")
        return self._new_media_id()

    def append_chunk(self, media_id: str, segment_index: int, chunk: bytes) -> None:
        self.calls.append(("append_chunk", media_id, segment_index, len(chunk)))
        self._maybe_fail("append_chunk", segment_index)

    def finalize_upload(self, media_id: str) -> None:
        self.calls.append(("finalize_upload", media_id))
        self._maybe_fail("finalize_upload")

    def simple_upload(self, data: bytes) -> str:
        self.calls.append(("simple_upload", len(data)))
        self._maybe_fail("simple_upload")
        return self._new_media_id()

    def get_processing_status(self, media_id: str) -> ProcessingStatus:
        self.calls.append(("get_processing_status", media_id))
        self._maybe_fail("get_processing_status")
        status = self.statuses[min(self._status_index, len(self.statuses) - 1)]
        self._status_index += 1
        return status

    def create_tweet(self, text: str, media_ids: Optional[List[str]] = None) -> Dict[str, Any]:
        self.calls.append(("create_tweet", text, tuple(media_ids or ())))
        self._maybe_fail("create_tweet")
        tweet_id = str(uuid4().int)[:19]
        self.tweets.append({"id": tweet_id, "text": text, "media_ids": list(media_ids or [])})
        logger.info(f"[MOCK:x] Would post tweet with {len(media_ids or [])} media")
        return {"id": tweet_id}
