"""
Cloudinary Provider — Optimize images via Cloudinary's upload API.

Cloudinary fetches the source URL itself, applies the requested
transformation and returns a CDN URL to the result.

## Configuration

- CLOUDINARY_CLOUD_NAME: Cloud name (account identifier)
- CLOUDINARY_API_KEY: API key
- CLOUDINARY_API_SECRET: API secret (used to sign uploads)

## Request signing

Signed uploads carry a SHA-1 signature over the sorted upload
parameters (excluding ``file``, ``api_key`` and ``resource_type``)
followed by the API secret.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Dict, List, Optional, Union

import httpx

from ..media.errors import ProviderError
from .base import ImageOptimizationProvider

logger = logging.getLogger(__name__)

# Transformation keys → Cloudinary URL-style abbreviations
_TRANSFORM_KEYS = {
    "width": "w",
    "height": "h",
    "crop": "c",
    "quality": "q",
    "gravity": "g",
    "fetch_format": "f",
    "format": "f",
    "background": "b",
    "flags": "fl",
    "dpr": "dpr",
}

_UNSIGNED_PARAMS = {"file", "api_key", "resource_type", "cloud_name"}


def serialize_transformation(transformation: Union[str, Dict[str, Any], List[Any]]) -> str:
    """
    Turn a transformation description into Cloudinary's string form.

    A list of dicts becomes chained components separated by ``/``:
    ``[{"width": 1200}, {"crop": "fill"}]`` → ``w_1200/c_fill``.
    """
    if isinstance(transformation, str):
        return transformation
    if isinstance(transformation, dict):
        parts = []
        for key, value in sorted(transformation.items()):
            abbrev = _TRANSFORM_KEYS.get(key, key)
            parts.append(f"{abbrev}_{value}")
        return ",".join(parts)
    return "/".join(serialize_transformation(t) for t in transformation)


class CloudinaryProvider(ImageOptimizationProvider):
    """
    Image optimization through Cloudinary.

    Requires cloud name, API key and API secret.
    """

    API_BASE = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    @classmethod
    def from_credentials(cls, creds, **kwargs) -> "CloudinaryProvider":
        return cls(
            cloud_name=creds.cloudinary_cloud_name,
            api_key=creds.cloudinary_api_key,
            api_secret=creds.cloudinary_api_secret,
            **kwargs,
        )

    @property
    def name(self) -> str:
        return "cloudinary"

    def is_configured(self) -> bool:
        """Check if all required credentials are present."""
        return all([self.cloud_name, self.api_key, self.api_secret])

    @property
    def upload_url(self) -> str:
        return f"{self.API_BASE}/{self.cloud_name}/image/upload"

    def optimize(self, url: str, options: Dict[str, Any]) -> Dict[str, Any]:
        """Upload ``url`` to Cloudinary with ``options`` and return the CDN URL."""
        if not self.is_configured():
            raise ProviderError("Cloudinary credentials not configured")

        params: Dict[str, Any] = {}
        for key, value in options.items():
            if key == "transformation":
                value = serialize_transformation(value)
            params[key] = value
        params["timestamp"] = str(int(time.time()))
        params["signature"] = self._sign(params)
        params["api_key"] = self.api_key
        params["file"] = url

        response = self._client.post(self.upload_url, data=params)

        if response.status_code != 200:
            error_data = self._json_or_empty(response)
            message = self._extract_error_message(error_data, response.status_code)
            logger.error(f"Cloudinary upload error {response.status_code}: {message}")
            raise ProviderError(message, status_code=response.status_code)

        data = response.json()
        secure_url = data.get("secure_url")
        logger.debug(
            f"Cloudinary optimized {url} → {secure_url} "
            f"({data.get('bytes', '?')} bytes, {data.get('format', '?')})"
        )
        return {
            "result_url": secure_url,
            "public_id": data.get("public_id"),
            "bytes": data.get("bytes"),
            "format": data.get("format"),
        }

    def fetch_bytes(self, url: str) -> bytes:
        """Download ``url``; any non-2xx response raises ``ProviderError``."""
        response = self._client.get(url)
        if not response.is_success:
            raise ProviderError(
                f"Failed to fetch image: {response.reason_phrase or 'error'}",
                status_code=response.status_code,
            )
        return response.content

    def _sign(self, params: Dict[str, Any]) -> str:
        """SHA-1 signature over sorted params + API secret."""
        to_sign = "&".join(
            f"{k}={v}"
            for k, v in sorted(params.items())
            if k not in _UNSIGNED_PARAMS and v not in (None, "")
        )
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    def _json_or_empty(self, response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _extract_error_message(self, error_data: Dict[str, Any], status_code: int) -> str:
        """Extract a human-readable message from a Cloudinary error body."""
        error = error_data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str):
            return error

        status_messages = {
            400: "Bad request",
            401: "Authentication failed - check Cloudinary API key/secret",
            403: "Forbidden",
            404: "Resource not found",
            420: "Rate limit exceeded",
            429: "Rate limit exceeded",
            500: "Cloudinary server error",
        }
        return status_messages.get(status_code, f"HTTP {status_code}")

    def close(self) -> None:
        self._client.close()
