"""
Receipt Model — Result of a roast share attempt.

Every share produces a receipt, whether it succeeded or failed.
A failed receipt's error code is the pipeline error kind (``optimization``,
``upload``, ``processing``, ``timeout``) or ``tweet_<status>`` when the
media was ready but posting the tweet failed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


class ErrorDetails(BaseModel):
    """Details about a share error."""

    code: str
    message: str
    detail: Optional[str] = None
    retryable: bool = False


class Receipt(BaseModel):
    """
    Result of a share.
    """

    status: Literal["ok", "failed"]
    platform: str
    media_id: Optional[str] = None
    tweet_id: Optional[str] = None
    tweet_url: Optional[str] = None
    ts_iso: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    details: Optional[Dict[str, Any]] = None
    error: Optional[ErrorDetails] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def succeeded(
        cls,
        platform: str,
        media_id: str,
        tweet_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> "Receipt":
        """Create a successful receipt."""
        return cls(
            status="ok",
            platform=platform,
            media_id=media_id,
            tweet_id=tweet_id,
            tweet_url=f"https://x.com/i/status/{tweet_id}",
            details=details,
        )

    @classmethod
    def failed(
        cls,
        platform: str,
        error_code: str,
        error_message: str,
        detail: Optional[str] = None,
        retryable: bool = False,
        media_id: Optional[str] = None,
    ) -> "Receipt":
        """Create a failed receipt."""
        return cls(
            status="failed",
            platform=platform,
            media_id=media_id,
            error=ErrorDetails(
                code=error_code,
                message=error_message,
                detail=detail,
                retryable=retryable,
            ),
        )
