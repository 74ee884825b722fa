"""
API Server — Flask app exposing the roast share pipeline.

The app holds one ``ShareService`` (and through it one ``MediaPipeline``)
built at startup and shared by every request.
"""

from __future__ import annotations

import logging
import time
import traceback

from flask import Flask, jsonify, request

from ..share import ShareService
from .routes_ops import ops_bp
from .routes_twitter import twitter_bp

logger = logging.getLogger(__name__)

# Request bodies carry image URLs only
MAX_CONTENT_LENGTH = 64 * 1024


def create_app(share_service: ShareService) -> Flask:
    """Create the Flask application around an already-built share service."""
    app = Flask(__name__)

    app.config["SHARE_SERVICE"] = share_service
    app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH

    # ── Register Blueprints ───────────────────────────────────────
    app.register_blueprint(twitter_bp, url_prefix="/api/twitter")    # /api/twitter/*
    app.register_blueprint(ops_bp, url_prefix="/api")               # /api/metrics

    # ── Error Handlers ────────────────────────────────────────────

    @app.errorhandler(413)
    def request_entity_too_large(e):
        max_kb = app.config.get("MAX_CONTENT_LENGTH", 0) / 1024
        return jsonify({
            "success": False,
            "error": f"Request too large (max {max_kb:.0f} KB)",
        }), 413

    @app.errorhandler(500)
    def internal_server_error(e):
        """Catch-all: return JSON for any unhandled 500 so clients never see raw HTML."""
        tb = traceback.format_exc()
        logger.error(f"Unhandled 500 on {request.method} {request.path}: {e}\n{tb}")
        return jsonify({
            "success": False,
            "error": f"Internal server error: {str(e)}",
        }), 500

    # ── Request Logging ───────────────────────────────────────────

    @app.before_request
    def log_request_start():
        request._start_time = time.time()

    @app.after_request
    def log_request_end(response):
        duration_ms = 0
        if hasattr(request, "_start_time"):
            duration_ms = int((time.time() - request._start_time) * 1000)

        if request.path.startswith("/api/"):
            logger.info(
                f"{request.method} {request.path} → {response.status_code} ({duration_ms}ms)"
            )
        return response

    logger.info(f"API server initialized (platform={share_service.platform})")

    return app


def run_server(
    share_service: ShareService,
    host: str = "127.0.0.1",
    port: int = 5060,
    debug: bool = False,
) -> None:
    """Run the API server with Flask's built-in server."""
    # Our after_request logger already shows each request with its duration
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    app = create_app(share_service)
    logger.info(f"Serving on http://{host}:{port}")
    app.run(host=host, port=port, debug=debug, use_reloader=False)
