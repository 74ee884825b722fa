"""
Share Service — Post a roast meme to X with the image attached.

Runs the media pipeline to get a media id, then posts the tweet.
``share_with_media`` never raises for remote failures; the outcome is
always a ``Receipt``.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .media.errors import MediaPipelineError, ProviderError
from .media.pipeline import MediaPipeline
from .models.receipt import Receipt
from .providers.x_media import XMediaClient

logger = logging.getLogger(__name__)

MAX_TWEET_LENGTH = XMediaClient.MAX_TWEET_LENGTH
DEFAULT_TEXT = "🔥"


def build_tweet_text(text: Optional[str], share_url: Optional[str] = None) -> str:
    """
    Compose the tweet body, keeping the share link intact.

    The roast text is truncated (with "...") so the body plus the
    "Roast your wallet at" footer fits in one tweet. A footer that
    would leave no room for the body is dropped.
    """
    body = (text or "").strip() or DEFAULT_TEXT
    footer = f"\n\nRoast your wallet at {share_url} 🔥" if share_url else ""
    if len(footer) > MAX_TWEET_LENGTH - 4:
        logger.warning(f"Share link too long for a tweet, omitting it ({len(share_url)} chars)")
        footer = ""

    room = MAX_TWEET_LENGTH - len(footer)
    if len(body) > room:
        body = body[: max(room - 3, 0)] + "..."
        logger.warning(f"Tweet text truncated to {MAX_TWEET_LENGTH} chars")

    return f"{body}{footer}"


class ShareService:
    """
    Media pipeline + tweet posting for one platform account.

    ``client`` must implement both the media upload and tweet posting
    capabilities (``XMediaClient`` or ``MockPlatformClient``).
    """

    def __init__(self, pipeline: MediaPipeline, client):
        self.pipeline = pipeline
        self.client = client

    @property
    def platform(self) -> str:
        return self.client.name

    def is_configured(self) -> bool:
        check = getattr(self.client, "is_configured", None)
        return check() if check else True

    def close(self) -> None:
        """Close the HTTP clients behind the pipeline and the platform."""
        for resource in (self.pipeline.optimizer.provider, self.client):
            close = getattr(resource, "close", None)
            if close:
                close()

    def upload(self, image_url: str) -> str:
        """Run the media pipeline only. Raises ``MediaPipelineError``."""
        return self.pipeline.process_and_upload(image_url, self.client)

    def share_with_media(
        self,
        text: Optional[str],
        image_url: str,
        share_url: Optional[str] = None,
    ) -> Receipt:
        """Upload ``image_url`` and tweet it with ``text``."""
        try:
            media_id = self.upload(image_url)
        except MediaPipelineError as e:
            return Receipt.failed(
                platform=self.platform,
                error_code=e.kind.value,
                error_message=e.message,
                detail=e.detail,
                retryable=e.retryable,
            )

        tweet_text = build_tweet_text(text, share_url)

        try:
            tweet = self.client.create_tweet(tweet_text, [media_id])
        except ProviderError as e:
            logger.error(f"Tweet post failed: {e}")
            return Receipt.failed(
                platform=self.platform,
                error_code=f"tweet_{e.status_code or 'error'}",
                error_message=e.message,
                retryable=XMediaClient.is_retryable_status(e.status_code),
                media_id=media_id,
            )
        except httpx.TimeoutException as e:
            logger.exception(f"Tweet post timed out: {e}")
            return Receipt.failed(
                platform=self.platform,
                error_code="tweet_timeout",
                error_message=str(e) or "timeout",
                retryable=True,
                media_id=media_id,
            )
        except httpx.HTTPError as e:
            logger.exception(f"Tweet post failed: {e}")
            return Receipt.failed(
                platform=self.platform,
                error_code="tweet_error",
                error_message=str(e) or e.__class__.__name__,
                retryable=True,
                media_id=media_id,
            )

        tweet_id = str(tweet.get("id", "unknown"))
        return Receipt.succeeded(
            platform=self.platform,
            media_id=media_id,
            tweet_id=tweet_id,
            details={"text_length": len(tweet_text), "image_url": image_url},
        )
