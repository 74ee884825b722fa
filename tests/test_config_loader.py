"""
Tests for credential loading and pipeline settings.
"""

import json
import os
from unittest.mock import patch

import pytest

from roastshare.config.loader import (
    MASTER_CONFIG_VAR,
    PipelineSettings,
    generate_master_config_template,
    load_config,
)


X_ENV = {
    "X_API_KEY": "key",
    "X_API_SECRET": "secret",
    "X_ACCESS_TOKEN": "token",
    "X_ACCESS_SECRET": "token_secret",
}


class TestLoadConfig:

    def test_empty_environment(self):
        with patch.dict(os.environ, {}, clear=True):
            creds = load_config()

        assert creds.has_cloudinary() is False
        assert creds.has_x() is False

    def test_individual_vars(self):
        env = {
            "CLOUDINARY_CLOUD_NAME": "demo",
            "CLOUDINARY_API_KEY": "123",
            "CLOUDINARY_API_SECRET": "abc",
            **X_ENV,
        }
        with patch.dict(os.environ, env, clear=True):
            creds = load_config()

        assert creds.has_cloudinary()
        assert creds.has_x()
        assert creds.cloudinary_cloud_name == "demo"

    def test_twitter_aliases(self):
        env = {
            "TWITTER_API_KEY": "k",
            "TWITTER_API_SECRET": "s",
            "TWITTER_ACCESS_TOKEN": "t",
            "TWITTER_ACCESS_SECRET": "ts",
        }
        with patch.dict(os.environ, env, clear=True):
            creds = load_config()

        assert creds.has_x()
        assert creds.x_api_key == "k"

    def test_x_name_wins_over_alias(self):
        with patch.dict(os.environ, {"X_API_KEY": "new", "TWITTER_API_KEY": "old"}, clear=True):
            creds = load_config()

        assert creds.x_api_key == "new"

    def test_master_config_first_then_individual(self):
        master = {"cloudinary_cloud_name": "from-master", "X_API_KEY": "master-key"}
        env = {
            MASTER_CONFIG_VAR: json.dumps(master),
            "CLOUDINARY_CLOUD_NAME": "from-env",
            "CLOUDINARY_API_KEY": "from-env-key",
        }
        with patch.dict(os.environ, env, clear=True):
            creds = load_config()

        assert creds.cloudinary_cloud_name == "from-master"
        assert creds.cloudinary_api_key == "from-env-key"
        assert creds.x_api_key == "master-key"

    def test_invalid_master_json_falls_back(self):
        env = {MASTER_CONFIG_VAR: "{not json", "X_API_KEY": "env-key"}
        with patch.dict(os.environ, env, clear=True):
            creds = load_config()

        assert creds.x_api_key == "env-key"

    def test_template_is_valid_json(self):
        data = json.loads(generate_master_config_template())

        assert "cloudinary_cloud_name" in data
        assert "x_access_secret" in data


class TestPipelineSettings:

    def test_defaults(self):
        settings = PipelineSettings()

        assert settings.large_file_threshold == 5 * 1024 * 1024
        assert settings.chunk_size == 1024 * 1024
        assert settings.poll_interval_seconds == 1.0
        assert settings.max_poll_attempts == 5
        assert settings.media_category == "tweet_image"
        assert settings.optimization_options["folder"] == "twitter"

    def test_default_options_not_shared(self):
        a = PipelineSettings()
        b = PipelineSettings()

        a.optimization_options["folder"] = "changed"

        assert b.optimization_options["folder"] == "twitter"

    def test_from_env(self):
        env = {
            "MEDIA_LARGE_FILE_THRESHOLD": "1000",
            "MEDIA_CHUNK_SIZE": "250",
            "MEDIA_POLL_INTERVAL_SECONDS": "0.5",
            "MEDIA_MAX_POLL_ATTEMPTS": "3",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = PipelineSettings.from_env()

        assert settings.large_file_threshold == 1000
        assert settings.chunk_size == 250
        assert settings.poll_interval_seconds == 0.5
        assert settings.max_poll_attempts == 3

    def test_from_env_defaults_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = PipelineSettings.from_env()

        assert settings == PipelineSettings()

    def test_from_env_rejects_garbage(self):
        with patch.dict(os.environ, {"MEDIA_MAX_POLL_ATTEMPTS": "lots"}, clear=True):
            with pytest.raises(ValueError):
                PipelineSettings.from_env()

    @pytest.mark.parametrize("kwargs", [
        {"large_file_threshold": 0},
        {"chunk_size": -1},
        {"poll_interval_seconds": -0.5},
        {"max_poll_attempts": 0},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            PipelineSettings(**kwargs)
