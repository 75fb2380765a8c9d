from __future__ import annotations
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from routes import get_container

bp = Blueprint("health", __name__)


@bp.get("/")
def root():
    return jsonify({"status": "Server is running"})


@bp.get("/api/health")
def health():
    # liveness + whether the completion API is wired
    c = get_container()
    return jsonify({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "aiEnabled": c.ai_enabled,
    })
