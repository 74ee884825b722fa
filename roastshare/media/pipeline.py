"""
Media Pipeline — source image URL in, platform media id out.

    optimize → upload (simple or chunked) → poll processing → media id

Strictly sequential per call. Each call owns its own asset and upload
session, so concurrent calls from different requests never share state.
Build one ``MediaPipeline`` per process and pass it to whoever needs it.

## Usage

    from roastshare.media.pipeline import MediaPipeline

    pipeline = MediaPipeline(provider=CloudinaryProvider.from_credentials(creds))
    try:
        media_id = pipeline.process_and_upload(image_url, x_client)
    except MediaPipelineError as e:
        if e.kind == MediaErrorKind.TIMEOUT:
            ...  # still processing, check back later
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional
from uuid import uuid4

from ..config.loader import PipelineSettings
from ..observability.metrics import metrics
from ..providers.base import ImageOptimizationProvider, PlatformMediaClient
from .errors import MediaPipelineError
from .models import MediaUploadRequest
from .optimizer import AssetOptimizer
from .poller import ProcessingPoller
from .uploader import UploadExecutor

logger = logging.getLogger(__name__)


class MediaPipeline:
    """Optimizer → upload executor → processing poller."""

    def __init__(
        self,
        provider: ImageOptimizationProvider,
        settings: Optional[PipelineSettings] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.settings = settings or PipelineSettings()
        self.optimizer = AssetOptimizer(provider, options=self.settings.optimization_options)
        self.executor = UploadExecutor(
            threshold=self.settings.large_file_threshold,
            chunk_size=self.settings.chunk_size,
            media_category=self.settings.media_category,
        )
        self.poller = ProcessingPoller(
            interval_seconds=self.settings.poll_interval_seconds,
            max_attempts=self.settings.max_poll_attempts,
            sleep=sleep,
        )

    def process_and_upload(self, source_image_url: str, platform_client: PlatformMediaClient) -> str:
        """
        Optimize, upload and wait for processing of one image.

        Returns:
            The platform media id assigned at upload.

        Raises:
            MediaPipelineError: one of OptimizationFailed, UploadFailed,
                ProcessingFailed, ProcessingTimeout. A failed call leaves
                nothing resumable; retry the whole call.
        """
        request = MediaUploadRequest(source_url=source_image_url, client=platform_client)
        invocation_id = uuid4().hex[:12]
        started = time.monotonic()

        logger.info(
            f"Processing media for upload: {request.source_url}",
            extra={"invocation_id": invocation_id},
        )

        try:
            asset = self.optimizer.optimize(request.source_url)
            session = self.executor.upload(asset, request.client)
            media_id = self.poller.wait_until_processed(session.require_pollable(), request.client)
        except MediaPipelineError as e:
            metrics.increment("pipeline_errors_total", labels={"kind": e.kind.value})
            logger.error(
                f"Media pipeline failed [{e.kind.value}]: {e}",
                extra={"invocation_id": invocation_id},
            )
            raise

        metrics.timing("pipeline_duration_seconds", time.monotonic() - started)
        logger.info(
            f"Media ready: {media_id}",
            extra={"invocation_id": invocation_id, "media_id": media_id},
        )
        return media_id
