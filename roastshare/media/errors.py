"""
Media Pipeline Errors — one error domain for every pipeline failure.

Each failure carries a discriminant (``kind``) naming the stage it came
from, a human-readable message, and the upstream detail when there is one.
Callers branch on ``kind``, never on message text.

## Kinds

- optimization: image provider or optimized-asset fetch failed
- upload: any INIT / APPEND / FINALIZE / simple upload call failed
- processing: the platform reported processing as failed
- timeout: processing never reached a terminal state within the budget

## Usage

    from roastshare.media.errors import translate_errors, MediaErrorKind

    with translate_errors(MediaErrorKind.UPLOAD, "Chunk upload failed"):
        client.append_chunk(media_id, 0, chunk)
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Optional


class MediaErrorKind(str, Enum):
    """Origin of a pipeline failure."""
    OPTIMIZATION = "optimization"
    UPLOAD = "upload"
    PROCESSING = "processing"
    TIMEOUT = "timeout"


class ProviderError(Exception):
    """
    Raised by provider / platform HTTP clients on a non-success response.

    Not part of the pipeline error domain; the pipeline wraps it.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MediaPipelineError(Exception):
    """Base class for all media pipeline failures."""

    kind: MediaErrorKind = MediaErrorKind.UPLOAD

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    @property
    def retryable(self) -> bool:
        """Timeouts may clear on their own; everything else is permanent."""
        return self.kind == MediaErrorKind.TIMEOUT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "detail": self.detail,
            "retryable": self.retryable,
        }

    def __str__(self) -> str:
        if self.detail and self.detail != self.message:
            return f"{self.message}: {self.detail}"
        return self.message


class OptimizationFailed(MediaPipelineError):
    kind = MediaErrorKind.OPTIMIZATION


class UploadFailed(MediaPipelineError):
    kind = MediaErrorKind.UPLOAD


class InvalidTransition(UploadFailed):
    """An upload session call was made out of order."""


class ProcessingFailed(MediaPipelineError):
    kind = MediaErrorKind.PROCESSING


class ProcessingTimeout(MediaPipelineError):
    kind = MediaErrorKind.TIMEOUT


_ERROR_CLASSES = {
    MediaErrorKind.OPTIMIZATION: OptimizationFailed,
    MediaErrorKind.UPLOAD: UploadFailed,
    MediaErrorKind.PROCESSING: ProcessingFailed,
    MediaErrorKind.TIMEOUT: ProcessingTimeout,
}


def error_for(
    kind: MediaErrorKind,
    message: str,
    detail: Optional[str] = None,
) -> MediaPipelineError:
    """Build the domain error for a kind."""
    return _ERROR_CLASSES[kind](message, detail=detail)


def describe_exception(exc: BaseException) -> str:
    """Extract the upstream message from an arbitrary exception."""
    if isinstance(exc, ProviderError):
        if exc.status_code is not None:
            return f"HTTP {exc.status_code}: {exc.message}"
        return exc.message
    text = str(exc)
    return text or exc.__class__.__name__


@contextmanager
def translate_errors(kind: MediaErrorKind, message: str) -> Iterator[None]:
    """
    Convert any foreign exception raised in the block into a domain error.

    Domain errors pass through unchanged so an inner stage keeps its own
    discriminant.
    """
    try:
        yield
    except MediaPipelineError:
        raise
    except Exception as e:
        raise error_for(kind, message, detail=describe_exception(e)) from e
