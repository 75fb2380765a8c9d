"""
App factory: create_app()

- Loads config (env, limits, secrets)
- Sets up logging
- Wires DI container (rewriter)
- Registers middleware (request IDs, rate limits, CORS, timing)
- Registers blueprints from routes/*
- Installs global error handlers

Serve with: gunicorn 'app:create_app()'  (see gunicorn.conf.py)
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify

from app.config import Settings, load_settings
from app.logging_setup import configure_logging
from app.container import Container
from app import middleware
from service.rewriter import Rewriter


def _register_blueprints(app: Flask) -> None:
    # Lazy imports to avoid circulars
    from routes.health_routes import bp as health_bp
    from routes.enhance_routes import bp as enhance_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(enhance_bp)


def _install_error_handlers(app: Flask) -> None:
    @app.errorhandler(400)
    def bad_request(err):
        app.logger.warning(f"400: {err}")
        return jsonify({"error": "Invalid request body"}), 400

    @app.errorhandler(404)
    def not_found(err):
        return jsonify({"error": "not_found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(err):
        return jsonify({"error": "method_not_allowed"}), 405

    @app.errorhandler(429)
    def too_many(err):
        return jsonify({"error": "Rate limit exceeded. Please try again in a moment."}), 429

    @app.errorhandler(500)
    def server_error(err):
        app.logger.exception("Unhandled server error")
        return jsonify({"error": "Failed to enhance content. Please try again."}), 500


def create_app(config_override: Dict[str, Any] | None = None, rewriter: Optional[Rewriter] = None) -> Flask:
    # Settings & logging
    settings: Settings = load_settings(config_override)
    configure_logging(settings)

    app = Flask(__name__, static_folder=None)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["SETTINGS"] = settings

    # Dependency container
    container = Container(settings, rewriter=rewriter)
    app.container = container  # type: ignore[attr-defined]

    # Middleware
    middleware.install_request_id(app)
    middleware.install_rate_limit(app, settings)
    middleware.install_cors(app, settings)
    middleware.install_timing_log(app)

    # Blueprints
    _register_blueprints(app)

    # Error handlers
    _install_error_handlers(app)

    logging.getLogger("Runtime").info(
        "App started (aiEnabled=%s model=%s)", container.ai_enabled, settings.OPENAI_MODEL
    )
    if not container.ai_enabled:
        logging.getLogger("Runtime").warning(
            "OpenAI API key is missing. AI features will be disabled."
        )

    return app
