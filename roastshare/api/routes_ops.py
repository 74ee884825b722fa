"""
API — Operational endpoints.

Blueprint: ops_bp
Prefix: /api
Routes:
    /api/metrics   (GET — pipeline counters and timers; ?format=prometheus|json)
"""

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request

from ..observability.metrics import metrics

ops_bp = Blueprint("ops", __name__)

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@ops_bp.route("/metrics", methods=["GET"])
def api_metrics():
    """Export metrics for monitoring. JSON by default."""
    output_format = request.args.get("format", "json")
    if output_format == "prometheus":
        return Response(metrics.export_prometheus() + "\n", content_type=PROMETHEUS_CONTENT_TYPE)
    if output_format != "json":
        return jsonify({
            "success": False,
            "error": "invalid_request",
            "details": "format must be prometheus or json",
        }), 400
    return jsonify(metrics.export_json())
