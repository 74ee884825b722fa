"""
X Media Client — Upload media and post tweets via the X (Twitter) API.

Media goes through the v1.1 upload endpoint, either in one multipart
request or through the chunked INIT / APPEND / FINALIZE commands.
Tweets are posted through API v2.

## Configuration

- X_API_KEY: Twitter API Key (Consumer Key)
- X_API_SECRET: Twitter API Secret (Consumer Secret)
- X_ACCESS_TOKEN: OAuth Access Token
- X_ACCESS_SECRET: OAuth Access Token Secret

## Constraints

- Images up to 5 MB; larger payloads must use the chunked commands
- Max 280 characters per tweet
- Rate limiting applies (429)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import time
import urllib.parse
from typing import Any, Dict, List, Optional
from uuid import uuid4

import httpx

from ..media.errors import ProviderError
from ..media.models import ProcessingState, ProcessingStatus
from .base import PlatformMediaClient, TweetPublisher

logger = logging.getLogger(__name__)


class XMediaClient(PlatformMediaClient, TweetPublisher):
    """
    X platform client using OAuth 1.0a user credentials.
    """

    MAX_TWEET_LENGTH = 280
    UPLOAD_URL = "https://upload.twitter.com/1.1/media/upload.json"
    API_BASE = "https://api.twitter.com"
    TWEET_ENDPOINT = "/2/tweets"

    def __init__(
        self,
        api_key: Optional[str],
        api_secret: Optional[str],
        access_token: Optional[str],
        access_secret: Optional[str],
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.access_token = access_token
        self.access_secret = access_secret
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_credentials(cls, creds, **kwargs) -> "XMediaClient":
        return cls(
            api_key=creds.x_api_key,
            api_secret=creds.x_api_secret,
            access_token=creds.x_access_token,
            access_secret=creds.x_access_secret,
            **kwargs,
        )

    @property
    def name(self) -> str:
        return "x"

    def is_configured(self) -> bool:
        """Check if all required credentials are present."""
        return all([
            self.api_key,
            self.api_secret,
            self.access_token,
            self.access_secret,
        ])

    # ── Media upload ─────────────────────────────────────────

    def init_upload(self, total_bytes: int, media_type: str, media_category: str) -> str:
        params = {
            "command": "INIT",
            "total_bytes": str(total_bytes),
            "media_type": media_type,
            "media_category": media_category,
        }
        data = self._post_form(params)
        return self._media_id_from(data, "INIT")

    def append_chunk(self, media_id: str, segment_index: int, chunk: bytes) -> None:
        fields = {
            "command": "APPEND",
            "media_id": media_id,
            "segment_index": str(segment_index),
        }
        self._post_multipart(fields, chunk)

    def finalize_upload(self, media_id: str) -> None:
        data = self._post_form({"command": "FINALIZE", "media_id": media_id})
        info = data.get("processing_info")
        if info:
            logger.debug(f"FINALIZE {media_id}: processing {info.get('state')}")

    def simple_upload(self, data: bytes) -> str:
        body = self._post_multipart({}, data)
        return self._media_id_from(body, "upload")

    def get_processing_status(self, media_id: str) -> ProcessingStatus:
        params = {"command": "STATUS", "media_id": media_id}
        auth_header = self._build_oauth_header("GET", self.UPLOAD_URL, params)
        response = self._client.get(
            self.UPLOAD_URL,
            params=params,
            headers={"Authorization": auth_header},
        )
        data = self._check(response, "STATUS")
        return self._parse_processing_info(data.get("processing_info"))

    # ── Tweets ───────────────────────────────────────────────

    def create_tweet(self, text: str, media_ids: Optional[List[str]] = None) -> Dict[str, Any]:
        """Post a tweet, optionally with media attached. Returns ``{"id", "text"}``."""
        url = f"{self.API_BASE}{self.TWEET_ENDPOINT}"
        payload: Dict[str, Any] = {"text": text}
        if media_ids:
            payload["media"] = {"media_ids": list(media_ids)}

        response = self._client.post(
            url,
            json=payload,
            headers={
                "Authorization": self._build_oauth_header("POST", url),
                "Content-Type": "application/json",
            },
        )
        if response.status_code != 201:
            self._raise_for(response, "tweet")

        tweet = self._json_or_empty(response).get("data") or {}
        if not isinstance(tweet, dict) or not tweet.get("id"):
            raise ProviderError("tweet: response carried no tweet id")
        logger.info(f"Tweet posted: {tweet['id']}")
        return tweet

    # ── HTTP helpers ─────────────────────────────────────────

    def _post_form(self, params: Dict[str, str]) -> Dict[str, Any]:
        # Form-encoded params are part of the OAuth signature base.
        auth_header = self._build_oauth_header("POST", self.UPLOAD_URL, params)
        response = self._client.post(
            self.UPLOAD_URL,
            data=params,
            headers={"Authorization": auth_header},
        )
        return self._check(response, params.get("command", "upload"))

    def _post_multipart(self, fields: Dict[str, str], media: bytes) -> Dict[str, Any]:
        # Multipart bodies are excluded from the OAuth signature base.
        auth_header = self._build_oauth_header("POST", self.UPLOAD_URL)
        response = self._client.post(
            self.UPLOAD_URL,
            data=fields,
            files={"media": ("media", media, "application/octet-stream")},
            headers={"Authorization": auth_header},
        )
        return self._check(response, fields.get("command", "upload"))

    def _check(self, response: httpx.Response, step: str) -> Dict[str, Any]:
        if not response.is_success:
            self._raise_for(response, step)
        if not response.content:
            return {}
        return response.json()

    def _raise_for(self, response: httpx.Response, step: str) -> None:
        error_data = self._json_or_empty(response)
        message = self._extract_error_message(error_data, response.status_code)
        logger.error(f"X API error on {step} ({response.status_code}): {message}")
        raise ProviderError(f"{step}: {message}", status_code=response.status_code)

    def _media_id_from(self, data: Dict[str, Any], step: str) -> str:
        media_id = data.get("media_id_string") or data.get("media_id")
        if not media_id:
            raise ProviderError(f"{step}: response carried no media id")
        return str(media_id)

    def _parse_processing_info(self, info: Optional[Dict[str, Any]]) -> ProcessingStatus:
        """Map X ``processing_info`` onto ``ProcessingStatus``."""
        # Media without async processing (most images) has no processing_info.
        if not info:
            return ProcessingStatus.succeeded()

        state = info.get("state")
        if state == "succeeded":
            return ProcessingStatus.succeeded()
        if state == "failed":
            error = info.get("error") or {}
            return ProcessingStatus.failed(
                error.get("message") or error.get("name") or "processing failed"
            )
        # "pending" and "in_progress" are both non-terminal
        return ProcessingStatus(
            state=ProcessingState.IN_PROGRESS,
            check_after_secs=info.get("check_after_secs"),
        )

    def _json_or_empty(self, response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _build_oauth_header(self, method: str, url: str, body_params: Optional[Dict] = None) -> str:
        """
        Build OAuth 1.0a Authorization header.

        ``body_params`` must hold query params and form-encoded body params,
        which are part of the signature; multipart fields are not.
        """
        oauth_params = {
            "oauth_consumer_key": self.api_key,
            "oauth_nonce": uuid4().hex,
            "oauth_signature_method": "HMAC-SHA1",
            "oauth_timestamp": str(int(time.time())),
            "oauth_token": self.access_token,
            "oauth_version": "1.0",
        }

        all_params = {**oauth_params}
        if body_params:
            all_params.update(body_params)

        param_string = "&".join(
            f"{urllib.parse.quote(k, safe='')}={urllib.parse.quote(str(v), safe='')}"
            for k, v in sorted(all_params.items())
        )

        signature_base = "&".join([
            method.upper(),
            urllib.parse.quote(url, safe=""),
            urllib.parse.quote(param_string, safe=""),
        ])

        signing_key = (
            f"{urllib.parse.quote(self.api_secret or '', safe='')}&"
            f"{urllib.parse.quote(self.access_secret or '', safe='')}"
        )

        signature = base64.b64encode(
            hmac.new(
                signing_key.encode(),
                signature_base.encode(),
                hashlib.sha1,
            ).digest()
        ).decode()

        oauth_params["oauth_signature"] = signature

        return "OAuth " + ", ".join(
            f'{urllib.parse.quote(k, safe="")}="{urllib.parse.quote(str(v), safe="")}"'
            for k, v in sorted(oauth_params.items())
        )

    def _extract_error_message(self, error_data: Dict[str, Any], status_code: int) -> str:
        """Extract a human-readable message from an X API error body."""
        if "detail" in error_data:
            return error_data["detail"]

        if error_data.get("errors"):
            return error_data["errors"][0].get("message", "Unknown error")

        if "error" in error_data and isinstance(error_data["error"], str):
            return error_data["error"]

        if "title" in error_data:
            return error_data["title"]

        status_messages = {
            400: "Bad request",
            401: "Authentication failed",
            403: "Forbidden - check app permissions",
            404: "Endpoint not found",
            413: "Media too large",
            429: "Rate limit exceeded",
            500: "Twitter server error",
            503: "Twitter service unavailable",
        }
        return status_messages.get(status_code, f"HTTP {status_code}")

    @staticmethod
    def is_retryable_status(status_code: Optional[int]) -> bool:
        """Rate limits and server errors may clear on retry."""
        return status_code in {429, 500, 502, 503, 504}

    def close(self) -> None:
        self._client.close()
