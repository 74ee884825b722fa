"""
Media Module — Image optimization, upload and processing for X.

The pipeline itself lives in ``roastshare.media.pipeline``; import it
from there.
"""

from .errors import (
    InvalidTransition,
    MediaErrorKind,
    MediaPipelineError,
    OptimizationFailed,
    ProcessingFailed,
    ProcessingTimeout,
    UploadFailed,
)

__all__ = [
    "MediaErrorKind",
    "MediaPipelineError",
    "OptimizationFailed",
    "UploadFailed",
    "InvalidTransition",
    "ProcessingFailed",
    "ProcessingTimeout",
]
