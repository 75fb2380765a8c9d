from __future__ import annotations
import logging
import math

from flask import Blueprint, request, jsonify

from routes import get_container
from service.errors import EnhanceError, ResponseTooLongError
from service.prompts import GENERIC

bp = Blueprint("enhance", __name__, url_prefix="/api")

log = logging.getLogger("Backend")


@bp.post("/enhance")
def enhance():
    """
    Contract:
    { "content": str, "tone": str, "targetWords": int, "inputType": "email"|"generic" }
    Returns:
    200 { "enhancedContent": str, "wordCount": int }
    4xx/5xx { "error": str }
    """
    c = get_container()
    if not c.ai_enabled:
        return jsonify({
            "error": "AI enhancement is currently unavailable. Please check the server configuration."
        }), 503

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid request body"}), 400

    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        return jsonify({"error": "Content is required"}), 400

    target = data.get("targetWords")
    if (isinstance(target, bool) or not isinstance(target, (int, float))
            or not math.isfinite(target) or target < 1 or int(target) != target):
        return jsonify({"error": "Invalid target word count"}), 400

    tone = str(data.get("tone") or "neutral")
    input_type = str(data.get("inputType") or GENERIC)

    try:
        enhanced, words = c.rewriter.rewrite(
            content, tone=tone, target_words=int(target), input_type=input_type
        )
    except ResponseTooLongError as e:
        log.warning("rejecting overlong response: %d words for target %d", e.word_count, int(target))
        return jsonify({"error": e.message, "enhancedContent": e.content}), e.status
    except EnhanceError as e:
        log.warning("enhance failed (%s): %s", e.status, e.message)
        return jsonify({"error": e.message}), e.status

    return jsonify({"enhancedContent": enhanced, "wordCount": words})
