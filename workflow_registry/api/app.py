"""
Flask application factory.

Creates and configures the Flask application with all necessary
extensions and error handlers.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from workflow_registry.config import Config, get_config
from workflow_registry.services import WorkflowEngine, WorkflowServiceError
from workflow_registry.services.errors import (
    ConflictError, NotFoundError, InvalidOperationError
)

logger = logging.getLogger(__name__)

ERROR_NAMES = {
    ConflictError: "Conflict",
    NotFoundError: "Not Found",
    InvalidOperationError: "Invalid Operation",
}


def create_app(
    config: Optional[Config] = None,
    engine: Optional[WorkflowEngine] = None,
) -> Flask:
    """
    Application factory for creating Flask app.

    Args:
        config: Optional configuration object
        engine: Optional workflow engine; a fresh one is created if omitted

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Enable CORS for all routes
    CORS(app)

    # Load configuration
    app_config = config or get_config()
    app.config["SECRET_KEY"] = app_config.SECRET_KEY
    app.config["DEBUG"] = app_config.FLASK_DEBUG
    app.config["APP_CONFIG"] = app_config

    # The engine lives as long as the app
    app.config["ENGINE"] = engine or WorkflowEngine()

    # Register error handlers
    register_error_handlers(app)

    # Register routes
    from .routes import register_routes
    register_routes(app, url_prefix=app_config.API_PREFIX)

    # Health check endpoint
    @app.route("/health")
    def health_check():
        """Health check endpoint."""
        return jsonify({
            "status": "healthy",
            "registries": app.config["ENGINE"].get_stats(),
        }), 200

    logger.info("Flask application created")
    return app


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the application."""

    @app.errorhandler(WorkflowServiceError)
    def handle_service_error(e: WorkflowServiceError):
        """Map service error categories to status codes."""
        return jsonify({
            "error": {
                "code": e.status_code,
                "name": ERROR_NAMES.get(type(e), "Workflow Error"),
                "message": str(e),
            }
        }), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle HTTP exceptions."""
        response = {
            "error": {
                "code": e.code,
                "name": e.name,
                "message": e.description,
            }
        }
        return jsonify(response), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle unexpected errors."""
        logger.exception(f"Unhandled exception: {e}")
        return jsonify({
            "error": {
                "code": 500,
                "name": "Internal Server Error",
                "message": "An unexpected error occurred",
            }
        }), 500


def run_server() -> None:
    """Entry point for running the API server."""
    config = get_config()
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )

    app = create_app(config)
    app.run(host=config.HOST, port=config.PORT, debug=config.FLASK_DEBUG)


if __name__ == "__main__":
    run_server()
