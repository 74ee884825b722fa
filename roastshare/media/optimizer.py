"""
Asset Optimizer — turn a meme image URL into platform-ready bytes.

1. Ask the optimization provider to re-encode the source URL
2. Download the optimized asset
3. Check the bytes decode as an image (Pillow) and record format/size

Any failure raises ``OptimizationFailed``. Nothing is retried here.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Dict, Optional

from PIL import Image, UnidentifiedImageError

from ..providers.base import ImageOptimizationProvider
from .errors import MediaErrorKind, OptimizationFailed, translate_errors
from .models import OptimizedAsset

logger = logging.getLogger(__name__)

# ── Defaults ─────────────────────────────────────────────────

# Social-card friendly re-encode; passed to the provider as-is.
DEFAULT_OPTIMIZATION_OPTIONS: Dict[str, Any] = {
    "folder": "twitter",
    "transformation": [
        {"width": 1200},
        {"height": 675},
        {"crop": "fill"},
        {"quality": "auto:good"},
    ],
}

PIL_FORMAT_MIMES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


class AssetOptimizer:
    """Produces an ``OptimizedAsset`` from a source image URL."""

    def __init__(
        self,
        provider: ImageOptimizationProvider,
        options: Optional[Dict[str, Any]] = None,
    ):
        self.provider = provider
        self.options = options if options is not None else DEFAULT_OPTIMIZATION_OPTIONS

    def optimize(self, source_url: str) -> OptimizedAsset:
        """
        Optimize ``source_url`` and fetch the result.

        Raises:
            OptimizationFailed: provider error, missing result URL,
                fetch error, or bytes that are empty or not an image.
        """
        with translate_errors(MediaErrorKind.OPTIMIZATION, "Image optimization failed"):
            result = self.provider.optimize(source_url, self.options)

        result_url = (result or {}).get("result_url")
        if not result_url:
            raise OptimizationFailed(
                "Image optimization failed",
                detail=f"{self.provider.name} returned no result URL",
            )
        logger.debug(f"Optimized via {self.provider.name}: {result_url}")

        with translate_errors(MediaErrorKind.OPTIMIZATION, "Failed to fetch optimized image"):
            data = self.provider.fetch_bytes(result_url)

        if not data:
            raise OptimizationFailed(
                "Failed to fetch optimized image",
                detail=f"empty body from {result_url}",
            )

        mime_type, width, height = self._inspect(data, result_url)

        logger.info(
            f"Optimized asset ready: {len(data):,} bytes ({mime_type}, {width}x{height})"
        )
        return OptimizedAsset(
            optimized_url=result_url,
            data=data,
            mime_type=mime_type,
            width=width,
            height=height,
        )

    def _inspect(self, data: bytes, url: str):
        """Return ``(mime_type, width, height)`` or raise if not an image."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                fmt = img.format or ""
                width, height = img.size
                img.verify()
        except Image.DecompressionBombError as e:
            raise OptimizationFailed(
                "Optimized asset is too large to decode",
                detail=f"{url}: {e}",
            ) from e
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise OptimizationFailed(
                "Optimized asset is not a valid image",
                detail=f"{url}: {e}",
            ) from e

        return PIL_FORMAT_MIMES.get(fmt.upper(), "image/jpeg"), width, height
