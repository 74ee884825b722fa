"""
Tests for the Cloudinary optimization provider.
"""

import hashlib
import urllib.parse

import httpx
import pytest

from roastshare.config.loader import Credentials
from roastshare.media.errors import ProviderError
from roastshare.media.optimizer import DEFAULT_OPTIMIZATION_OPTIONS
from roastshare.providers.cloudinary import CloudinaryProvider, serialize_transformation

SOURCE_URL = "https://roast.example/memes/abc.png"
SECURE_URL = "https://res.cloudinary.com/demo/image/upload/v1/twitter/abc.jpg"


def make_provider(handler, **kwargs):
    return CloudinaryProvider(
        cloud_name="demo",
        api_key="123456",
        api_secret="shh",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        **kwargs,
    )


def form_of(request):
    return {k: v[0] for k, v in urllib.parse.parse_qs(request.read().decode()).items()}


class TestSerializeTransformation:

    def test_chain(self):
        assert serialize_transformation(DEFAULT_OPTIMIZATION_OPTIONS["transformation"]) == (
            "w_1200/h_675/c_fill/q_auto:good"
        )

    def test_single_component(self):
        assert serialize_transformation({"width": 1200, "crop": "fill"}) == "c_fill,w_1200"

    def test_string_passthrough(self):
        assert serialize_transformation("w_100") == "w_100"


class TestOptimize:

    def test_signed_upload(self):
        seen = []

        def handler(request):
            seen.append(form_of(request))
            return httpx.Response(200, json={
                "secure_url": SECURE_URL,
                "public_id": "twitter/abc",
                "bytes": 84321,
                "format": "jpg",
            })

        result = make_provider(handler).optimize(SOURCE_URL, DEFAULT_OPTIMIZATION_OPTIONS)

        assert result["result_url"] == SECURE_URL
        form = seen[0]
        assert form["file"] == SOURCE_URL
        assert form["api_key"] == "123456"
        assert form["folder"] == "twitter"
        assert form["transformation"] == "w_1200/h_675/c_fill/q_auto:good"

        to_sign = (
            f"folder=twitter&timestamp={form['timestamp']}"
            f"&transformation=w_1200/h_675/c_fill/q_auto:good"
        )
        assert form["signature"] == hashlib.sha1(f"{to_sign}shh".encode()).hexdigest()

    def test_posts_to_cloud_upload_url(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"secure_url": SECURE_URL})

        make_provider(handler).optimize(SOURCE_URL, {})

        assert seen == ["https://api.cloudinary.com/v1_1/demo/image/upload"]

    def test_error_response(self):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "Invalid Signature abc"}})

        with pytest.raises(ProviderError) as exc_info:
            make_provider(handler).optimize(SOURCE_URL, DEFAULT_OPTIMIZATION_OPTIONS)

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid Signature abc"

    def test_missing_secure_url_returns_empty_result(self):
        provider = make_provider(lambda r: httpx.Response(200, json={"public_id": "x"}))

        assert provider.optimize(SOURCE_URL, {})["result_url"] is None

    def test_not_configured(self):
        provider = CloudinaryProvider(None, None, None)

        assert provider.is_configured() is False
        with pytest.raises(ProviderError):
            provider.optimize(SOURCE_URL, {})


class TestFetchBytes:

    def test_returns_body(self):
        provider = make_provider(lambda r: httpx.Response(200, content=b"\xff\xd8jpeg"))

        assert provider.fetch_bytes(SECURE_URL) == b"\xff\xd8jpeg"

    def test_not_found(self):
        provider = make_provider(lambda r: httpx.Response(404))

        with pytest.raises(ProviderError) as exc_info:
            provider.fetch_bytes(SECURE_URL)

        assert exc_info.value.status_code == 404


def test_from_credentials():
    creds = Credentials(
        cloudinary_cloud_name="demo",
        cloudinary_api_key="1",
        cloudinary_api_secret="2",
    )

    provider = CloudinaryProvider.from_credentials(creds)

    assert provider.is_configured()
    assert provider.upload_url.endswith("/demo/image/upload")
