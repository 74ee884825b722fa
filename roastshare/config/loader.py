"""
Config Loader — Load credentials and pipeline settings.

Credentials come from one of two places:
1. Master JSON key: single ROASTSHARE_CONFIG env var with all credentials
2. Individual keys: separate env vars per provider (fallback)

## Usage

    # Option 1: Master config (one deployment secret)
    export ROASTSHARE_CONFIG='{"cloudinary_cloud_name": "demo", "x_api_key": "xxx", ...}'

    # Option 2: Individual keys
    export CLOUDINARY_CLOUD_NAME="demo"
    export X_API_KEY="xxx"

The loader tries master config first, then fills gaps from individual keys.
``TWITTER_*`` names are accepted as aliases for ``X_*``.

Pipeline tuning (thresholds, chunk size, polling) lives in
``PipelineSettings`` and is read from ``MEDIA_*`` env vars.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..media.optimizer import DEFAULT_OPTIMIZATION_OPTIONS
from ..media.poller import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL_SECONDS
from ..media.session import DEFAULT_CHUNK_SIZE
from ..media.uploader import DEFAULT_MEDIA_CATEGORY, LARGE_FILE_THRESHOLD

logger = logging.getLogger(__name__)

MASTER_CONFIG_VAR = "ROASTSHARE_CONFIG"

# field name → (primary env var, legacy alias)
_ENV_NAMES = {
    "cloudinary_cloud_name": ("CLOUDINARY_CLOUD_NAME", None),
    "cloudinary_api_key": ("CLOUDINARY_API_KEY", None),
    "cloudinary_api_secret": ("CLOUDINARY_API_SECRET", None),
    "x_api_key": ("X_API_KEY", "TWITTER_API_KEY"),
    "x_api_secret": ("X_API_SECRET", "TWITTER_API_SECRET"),
    "x_access_token": ("X_ACCESS_TOKEN", "TWITTER_ACCESS_TOKEN"),
    "x_access_secret": ("X_ACCESS_SECRET", "TWITTER_ACCESS_SECRET"),
}


@dataclass
class Credentials:
    """All provider credentials in one place."""

    # Cloudinary
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None

    # X (Twitter)
    x_api_key: Optional[str] = None
    x_api_secret: Optional[str] = None
    x_access_token: Optional[str] = None
    x_access_secret: Optional[str] = None

    def has_cloudinary(self) -> bool:
        return all([
            self.cloudinary_cloud_name,
            self.cloudinary_api_key,
            self.cloudinary_api_secret,
        ])

    def has_x(self) -> bool:
        return all([
            self.x_api_key,
            self.x_api_secret,
            self.x_access_token,
            self.x_access_secret,
        ])


def load_config() -> Credentials:
    """
    Load credentials from master key or individual env vars.

    Priority:
    1. ROASTSHARE_CONFIG (master JSON)
    2. Individual environment variables
    """
    creds = Credentials()

    master_config = os.environ.get(MASTER_CONFIG_VAR)
    if master_config:
        try:
            data = json.loads(master_config)
            creds = _parse_master_config(data)
            logger.info(f"Loaded configuration from {MASTER_CONFIG_VAR}")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid {MASTER_CONFIG_VAR} JSON: {e}")
        except (AttributeError, TypeError) as e:
            logger.error(f"Failed to parse {MASTER_CONFIG_VAR}: {e}")

    return _load_individual_vars(creds)


def _parse_master_config(data: Dict[str, Any]) -> Credentials:
    """Parse master config JSON into credentials (lower or upper case keys)."""
    values = {}
    for name, (env, _) in _ENV_NAMES.items():
        values[name] = data.get(name) or data.get(env)
    return Credentials(**values)


def _load_individual_vars(existing: Credentials) -> Credentials:
    """Fill missing values from individual env vars."""
    values = {}
    for name, (env, alias) in _ENV_NAMES.items():
        value = getattr(existing, name) or os.environ.get(env)
        if not value and alias:
            value = os.environ.get(alias)
        values[name] = value
    return Credentials(**values)


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class PipelineSettings:
    """
    Tuning for the media pipeline.

    Every field has a default suited to X image uploads; callers may
    override any of them per process.
    """

    large_file_threshold: int = LARGE_FILE_THRESHOLD
    chunk_size: int = DEFAULT_CHUNK_SIZE
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    media_category: str = DEFAULT_MEDIA_CATEGORY
    optimization_options: Dict[str, Any] = field(
        default_factory=lambda: copy.deepcopy(DEFAULT_OPTIMIZATION_OPTIONS)
    )

    def __post_init__(self) -> None:
        if self.large_file_threshold <= 0:
            raise ValueError("large_file_threshold must be positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must not be negative")
        if self.max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        """Read MEDIA_* env vars, falling back to defaults."""
        return cls(
            large_file_threshold=_env_number("MEDIA_LARGE_FILE_THRESHOLD", LARGE_FILE_THRESHOLD, int),
            chunk_size=_env_number("MEDIA_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, int),
            poll_interval_seconds=_env_number(
                "MEDIA_POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS, float
            ),
            max_poll_attempts=_env_number("MEDIA_MAX_POLL_ATTEMPTS", DEFAULT_MAX_POLL_ATTEMPTS, int),
            media_category=os.environ.get("MEDIA_CATEGORY") or DEFAULT_MEDIA_CATEGORY,
        )


def generate_master_config_template() -> str:
    """Generate a template for ROASTSHARE_CONFIG."""
    template = {
        "cloudinary_cloud_name": "your-cloud",
        "cloudinary_api_key": "xxxxx",
        "cloudinary_api_secret": "xxxxx",
        "x_api_key": "xxxxx",
        "x_api_secret": "xxxxx",
        "x_access_token": "xxxxx",
        "x_access_secret": "xxxxx",
    }
    return json.dumps(template, indent=2)
