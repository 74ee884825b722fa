"""
Provider Base Classes — Interfaces for the pipeline's external collaborators.

The pipeline never talks to Cloudinary or X directly; it is handed an
``ImageOptimizationProvider`` and a ``PlatformMediaClient``. Tests and
dry runs hand it the in-memory fakes from ``providers.mock`` instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..media.models import ProcessingStatus


class ImageOptimizationProvider(ABC):
    """
    External image-optimization service.

    Accepts a public URL and returns a public URL to the optimized asset.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The provider identifier (e.g., 'cloudinary')."""
        pass

    @abstractmethod
    def optimize(self, url: str, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Optimize the image at ``url``.

        ``options`` are provider-specific and passed through unchanged.
        Returns a dict with at least ``result_url``.
        """
        pass

    @abstractmethod
    def fetch_bytes(self, url: str) -> bytes:
        """Download the raw bytes at ``url``."""
        pass


class PlatformMediaClient(ABC):
    """
    Media-upload capability of the target social platform.

    Covers both the single-shot upload and the chunked
    INIT / APPEND / FINALIZE protocol, plus processing status.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The platform identifier (e.g., 'x')."""
        pass

    @abstractmethod
    def init_upload(self, total_bytes: int, media_type: str, media_category: str) -> str:
        """Open a chunked upload session for ``media_type`` content. Returns the media id."""
        pass

    @abstractmethod
    def append_chunk(self, media_id: str, segment_index: int, chunk: bytes) -> None:
        """Send one segment of a chunked upload."""
        pass

    @abstractmethod
    def finalize_upload(self, media_id: str) -> None:
        """Close a chunked upload; the platform starts processing."""
        pass

    @abstractmethod
    def simple_upload(self, data: bytes) -> str:
        """Upload a whole payload in one call. Returns the media id."""
        pass

    @abstractmethod
    def get_processing_status(self, media_id: str) -> ProcessingStatus:
        """Query server-side processing of an uploaded asset."""
        pass


class TweetPublisher(ABC):
    """Posting capability of the target platform."""

    @abstractmethod
    def create_tweet(self, text: str, media_ids: Optional[List[str]] = None) -> Dict[str, Any]:
        """Post a tweet, optionally with media attached. Returns at least ``{"id"}``."""
        pass
