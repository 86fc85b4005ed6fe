# routine_bot/routes/health.py
"""
Simple readiness/liveness probe.

Returns HTTP 200 if:
• Flask is running
• Redis is reachable

Otherwise 500 (so the orchestrator can restart the pod).
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, jsonify

log = logging.getLogger(__name__)
bp = Blueprint("health", __name__)


@bp.get("/health")
def health_check() -> tuple[Response, int]:
    store = current_app.extensions.get("selection_store")
    if store is None:
        return jsonify({"status": "unhealthy", "redis": "not_initialized", "service": "routine-bot"}), 500

    health = store.health_check()
    if not health.get("ping_success"):
        log.warning("Redis ping failed: %s", health.get("error"))
        return jsonify({"status": "unhealthy", "redis": "disconnected", "service": "routine-bot"}), 500
    return jsonify({"status": "healthy", "redis": "connected", "service": "routine-bot"}), 200
