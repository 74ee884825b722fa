"""
Tests for the click CLI.
"""

import json
import os
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from roastshare.main import cli
from roastshare.media.models import ProcessingStatus
from roastshare.media.pipeline import MediaPipeline
from roastshare.providers.mock import MockOptimizationProvider, MockPlatformClient
from roastshare.share import ShareService

IMAGE_URL = "https://roast.example/memes/abc.png"


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from replacing pytest's log handlers."""
    with patch("roastshare.main.setup_logging"):
        yield


@pytest.fixture
def runner():
    return CliRunner()


def mock_service(statuses=None):
    pipeline = MediaPipeline(provider=MockOptimizationProvider(), sleep=lambda s: None)
    return ShareService(pipeline, MockPlatformClient(statuses))


class TestUpload:

    def test_dry_run(self, runner):
        result = runner.invoke(cli, ["upload", IMAGE_URL, "--dry-run"])

        assert result.exit_code == 0
        assert "Media ready:" in result.output

    def test_json_output(self, runner):
        result = runner.invoke(cli, ["upload", IMAGE_URL, "--dry-run", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["media_id"]

    def test_processing_failure_exits_1(self, runner):
        service = mock_service([ProcessingStatus.failed("InvalidMedia")])

        with patch("roastshare.cli.media.build_share_service", return_value=service):
            result = runner.invoke(cli, ["upload", IMAGE_URL])

        assert result.exit_code == 1
        assert "[processing]" in result.output

    def test_timeout_exits_2(self, runner):
        service = mock_service([ProcessingStatus.in_progress()])

        with patch("roastshare.cli.media.build_share_service", return_value=service):
            result = runner.invoke(cli, ["upload", IMAGE_URL, "--json"])

        assert result.exit_code == 2
        data = json.loads(result.stdout)
        assert data["kind"] == "timeout"
        assert data["retryable"] is True

    def test_service_closed_after_success(self, runner):
        service = mock_service()

        with patch("roastshare.cli.media.build_share_service", return_value=service), \
                patch.object(service, "close") as close:
            result = runner.invoke(cli, ["upload", IMAGE_URL])

        assert result.exit_code == 0
        close.assert_called_once_with()

    def test_service_closed_after_failure(self, runner):
        service = mock_service([ProcessingStatus.failed("InvalidMedia")])

        with patch("roastshare.cli.media.build_share_service", return_value=service), \
                patch.object(service, "close") as close:
            result = runner.invoke(cli, ["upload", IMAGE_URL])

        assert result.exit_code == 1
        close.assert_called_once_with()


class TestShare:

    def test_dry_run(self, runner):
        result = runner.invoke(cli, ["share", IMAGE_URL, "--text", "Rekt", "--dry-run"])

        assert result.exit_code == 0
        assert "Tweet posted" in result.output
        assert "https://x.com/i/status/" in result.output

    def test_requires_text(self, runner):
        result = runner.invoke(cli, ["share", IMAGE_URL, "--dry-run"])

        assert result.exit_code != 0

    def test_unconfigured_credentials(self, runner):
        with patch.dict(os.environ, {}, clear=True):
            result = runner.invoke(cli, ["share", IMAGE_URL, "--text", "Rekt"])

        assert result.exit_code == 1
        assert "not configured" in result.output

    def test_service_closed(self, runner):
        service = mock_service()

        with patch("roastshare.cli.media.build_share_service", return_value=service), \
                patch.object(service, "close") as close:
            result = runner.invoke(cli, ["share", IMAGE_URL, "--text", "Rekt"])

        assert result.exit_code == 0
        close.assert_called_once_with()


class TestServe:

    def test_logs_config_and_closes_service(self, runner):
        service = mock_service()

        with patch("roastshare.cli.media.build_share_service", return_value=service), \
                patch("roastshare.config.validator.check_config_on_startup") as check, \
                patch("roastshare.api.server.run_server") as run_server, \
                patch.object(service, "close") as close:
            result = runner.invoke(cli, ["serve", "--port", "5099"])

        assert result.exit_code == 0
        check.assert_called_once_with()
        run_server.assert_called_once_with(service, host="127.0.0.1", port=5099, debug=False)
        close.assert_called_once_with()

    def test_dry_run_skips_config_check(self, runner):
        with patch("roastshare.config.validator.check_config_on_startup") as check, \
                patch("roastshare.api.server.run_server"):
            result = runner.invoke(cli, ["serve", "--dry-run"])

        assert result.exit_code == 0
        check.assert_not_called()


class TestCheckConfig:

    def test_json(self, runner):
        with patch.dict(os.environ, {"X_API_KEY": "k"}, clear=True):
            result = runner.invoke(cli, ["check-config", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["x"]["present"] == ["X_API_KEY"]
        assert data["cloudinary"]["configured"] is False

    def test_human_output(self, runner):
        with patch.dict(os.environ, {}, clear=True):
            result = runner.invoke(cli, ["check-config"])

        assert result.exit_code == 0
        assert "✗ cloudinary" in result.output
        assert "Setup Guide" in result.output


def test_generate_config(runner):
    result = runner.invoke(cli, ["generate-config"])

    assert result.exit_code == 0
    assert "cloudinary_cloud_name" in json.loads(result.stdout)
