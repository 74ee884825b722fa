"""
Media Models — Pydantic schemas for one pipeline invocation.

None of these are persisted. An invocation creates its own request and
asset, and discards both once the media id is returned.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadStrategy(str, Enum):
    """Which upload protocol a payload goes through."""
    SIMPLE = "simple"
    CHUNKED = "chunked"


class ProcessingState(str, Enum):
    """Server-side processing state of an uploaded asset."""
    SUCCEEDED = "succeeded"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


class MediaUploadRequest(BaseModel):
    """A single process-and-upload invocation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source_url: str
    client: Any = Field(exclude=True)


class OptimizedAsset(BaseModel):
    """Optimized image, ready to be re-uploaded to the platform."""

    optimized_url: str
    data: bytes = Field(repr=False)
    mime_type: str = "image/jpeg"
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.data)


class ProcessingStatus(BaseModel):
    """Platform report on asynchronous processing of an upload."""

    state: ProcessingState
    error: Optional[str] = None
    check_after_secs: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.state != ProcessingState.IN_PROGRESS

    @classmethod
    def succeeded(cls) -> "ProcessingStatus":
        return cls(state=ProcessingState.SUCCEEDED)

    @classmethod
    def in_progress(cls, check_after_secs: Optional[float] = None) -> "ProcessingStatus":
        return cls(state=ProcessingState.IN_PROGRESS, check_after_secs=check_after_secs)

    @classmethod
    def failed(cls, error: Optional[str] = None) -> "ProcessingStatus":
        return cls(state=ProcessingState.FAILED, error=error)
