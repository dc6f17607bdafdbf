"""Error handling for the application. Every error is answered with JSON."""

from __future__ import annotations

from flask import Blueprint, Flask, Response, current_app, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

# Initialize Blueprint
bp = Blueprint("errors", __name__)


def init_app(app: Flask) -> None:
    """Initialize error handlers with the Flask application."""
    app.register_blueprint(bp)


def create_error_response(message: str, status_code: int, error_type: str = "error") -> tuple[Response, int]:
    """Create a standardized error response.

    Args:
        message: The error message
        status_code: The HTTP status code
        error_type: The type of error (error, warning, info)
    """
    return jsonify({"status": error_type, "message": message, "code": status_code}), status_code


@bp.app_errorhandler(404)
def not_found_error(error: HTTPException) -> tuple[Response, int]:
    """Handle 404 Not Found errors."""
    return create_error_response("Resource not found", 404)


@bp.app_errorhandler(RequestEntityTooLarge)
def request_too_large(error: RequestEntityTooLarge) -> tuple[Response, int]:
    """Handle uploads over MAX_CONTENT_LENGTH."""
    limit_mb = (current_app.config.get("MAX_CONTENT_LENGTH") or 0) / (1024 * 1024)
    return create_error_response(f"Upload too large (limit {limit_mb:.0f} MB)", 413)


@bp.app_errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Handle 500 Internal Server errors."""
    return create_error_response("Internal server error", 500)


@bp.app_errorhandler(HTTPException)
def handle_http_exception(error: HTTPException) -> tuple[Response, int]:
    """Handle HTTP exceptions."""
    status_code = error.code if error.code is not None else 500
    return create_error_response(error.description or "HTTP error occurred", status_code)


@bp.app_errorhandler(Exception)
def handle_exception(error: Exception) -> tuple[Response, int]:
    """Handle all unhandled exceptions."""
    current_app.logger.error(f"Unhandled exception: {str(error)}", exc_info=True)
    return create_error_response("An unexpected error occurred", 500)
