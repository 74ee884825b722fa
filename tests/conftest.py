"""
Shared fixtures.

Provides mock providers, a pipeline that never really sleeps, and a Flask
test app around a share service wired to the mocks.
"""

from __future__ import annotations

import pytest

from roastshare.media.pipeline import MediaPipeline
from roastshare.observability.metrics import metrics
from roastshare.providers.mock import MockOptimizationProvider, MockPlatformClient
from roastshare.share import ShareService


@pytest.fixture(autouse=True)
def reset_metrics():
    """Metrics are process-global; start every test from zero."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def provider():
    """Mock optimizer returning a 1024-byte JPEG."""
    return MockOptimizationProvider()


@pytest.fixture
def platform_client():
    """Mock X client; processing succeeds on the first check."""
    return MockPlatformClient()


@pytest.fixture
def sleeps():
    """Records every wait the poller asks for."""
    return []


@pytest.fixture
def pipeline(provider, sleeps):
    return MediaPipeline(provider=provider, sleep=sleeps.append)


@pytest.fixture
def share_service(pipeline, platform_client):
    return ShareService(pipeline, platform_client)


@pytest.fixture
def app(share_service):
    """Flask test app around the mock-backed share service."""
    pytest.importorskip("flask")
    from roastshare.api.server import create_app

    app = create_app(share_service)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
