"""
Configuration Validator — Check provider credentials before use.

Validates the loaded ``Credentials`` (master JSON or individual env vars)
and reports what is missing, with setup guidance.

## Usage

    from roastshare.config.validator import ConfigValidator

    validator = ConfigValidator()
    for provider, result in validator.validate_all().items():
        if not result.configured:
            print(f"{provider}: Missing {result.missing}")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .loader import Credentials, load_config

logger = logging.getLogger(__name__)


@dataclass
class ConfigStatus:
    """Status of a configuration check."""

    provider: str
    configured: bool
    missing: List[str] = field(default_factory=list)
    present: List[str] = field(default_factory=list)
    guidance: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "provider": self.provider,
            "configured": self.configured,
            "missing": self.missing,
            "present": self.present,
            "guidance": self.guidance,
        }


# provider → (env var, Credentials attribute) pairs + guidance
PROVIDER_REQUIREMENTS = {
    "cloudinary": {
        "required": [
            ("CLOUDINARY_CLOUD_NAME", "cloudinary_cloud_name"),
            ("CLOUDINARY_API_KEY", "cloudinary_api_key"),
            ("CLOUDINARY_API_SECRET", "cloudinary_api_secret"),
        ],
        "guidance": "Get API credentials from https://console.cloudinary.com/settings/api-keys",
    },
    "x": {
        "required": [
            ("X_API_KEY", "x_api_key"),
            ("X_API_SECRET", "x_api_secret"),
            ("X_ACCESS_TOKEN", "x_access_token"),
            ("X_ACCESS_SECRET", "x_access_secret"),
        ],
        "guidance": (
            "Create an app at https://developer.twitter.com/en/portal with "
            "Read and write permissions, then regenerate access tokens"
        ),
    },
}


class ConfigValidator:
    """Validate provider credentials and explain what is missing."""

    def __init__(self, credentials: Optional[Credentials] = None):
        self.credentials = credentials or load_config()
        self.requirements = PROVIDER_REQUIREMENTS

    def validate_provider(self, provider: str) -> ConfigStatus:
        if provider not in self.requirements:
            return ConfigStatus(
                provider=provider,
                configured=False,
                guidance=f"Unknown provider: {provider}",
            )

        reqs = self.requirements[provider]
        missing = []
        present = []
        for env_var, attr in reqs["required"]:
            if getattr(self.credentials, attr):
                present.append(env_var)
            else:
                missing.append(env_var)

        return ConfigStatus(
            provider=provider,
            configured=not missing,
            missing=missing,
            present=present,
            guidance=reqs["guidance"] if missing else None,
        )

    def validate_all(self) -> Dict[str, ConfigStatus]:
        return {name: self.validate_provider(name) for name in self.requirements}

    def log_status(self) -> None:
        """Log configuration status for all providers."""
        for name, status in self.validate_all().items():
            if status.configured:
                logger.info(f"✓ {name}: configured")
            else:
                logger.warning(
                    f"✗ {name}: not configured (missing: {', '.join(status.missing)})"
                )


def check_config_on_startup() -> None:
    """Log provider configuration status before serving."""
    ConfigValidator().log_status()
