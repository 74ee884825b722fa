"""
API — X (Twitter) media endpoints.

Blueprint: twitter_bp
Prefix: /api/twitter
Routes:
    /api/twitter/upload   (POST — image URL → media id)
    /api/twitter/tweet    (POST — image URL + text → posted tweet)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from ..media.errors import MediaErrorKind, MediaPipelineError

logger = logging.getLogger(__name__)

twitter_bp = Blueprint("twitter", __name__)

# Upstream failures are gateway errors; a processing timeout is a gateway timeout.
ERROR_STATUS = {
    MediaErrorKind.OPTIMIZATION: 502,
    MediaErrorKind.UPLOAD: 502,
    MediaErrorKind.PROCESSING: 502,
    MediaErrorKind.TIMEOUT: 504,
}


def _service():
    return current_app.config["SHARE_SERVICE"]


def _error_response(kind: str, details: str, status: int):
    return jsonify({"success": False, "error": kind, "details": details}), status


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _invalid_field(data: Dict[str, Any], required: str, optional=()) -> Optional[str]:
    """Return an error message for a missing or non-string field, else None."""
    value = data.get(required)
    if not isinstance(value, str) or not value.strip():
        return f"{required} is required"
    for key in optional:
        if data.get(key) is not None and not isinstance(data[key], str):
            return f"{key} must be a string"
    return None


@twitter_bp.route("/upload", methods=["POST"])
def api_upload():
    """Optimize and upload one image; respond with the platform media id."""
    data = _json_body()
    problem = _invalid_field(data, "imageUrl")
    if problem:
        return _error_response("invalid_request", problem, 400)
    image_url = data["imageUrl"].strip()

    try:
        media_id = _service().upload(image_url)
    except MediaPipelineError as e:
        return _error_response(e.kind.value, str(e), ERROR_STATUS[e.kind])

    return jsonify({"success": True, "mediaId": media_id})


@twitter_bp.route("/tweet", methods=["POST"])
def api_tweet():
    """Upload an image and post it with the roast text."""
    service = _service()
    if not service.is_configured():
        return _error_response(
            "not_configured", f"{service.platform} credentials are not configured", 503,
        )

    data = _json_body()
    problem = _invalid_field(data, "imageUrl", optional=("text", "url"))
    if problem:
        return _error_response("invalid_request", problem, 400)
    image_url = data["imageUrl"].strip()

    receipt = service.share_with_media(
        text=data.get("text"),
        image_url=image_url,
        share_url=data.get("url"),
    )

    if not receipt.ok:
        error = receipt.error
        try:
            status = ERROR_STATUS[MediaErrorKind(error.code)]
        except ValueError:
            # tweet_* failures come from the post itself
            status = 502
        details = f"{error.message}: {error.detail}" if error.detail else error.message
        return _error_response(error.code, details, status)

    return jsonify({
        "success": True,
        "tweetUrl": receipt.tweet_url,
        "mediaId": receipt.media_id,
    })
