import logging
import os

from dotenv import load_dotenv
from flask import Flask, Response
from flask_cors import CORS

from config import get_config

# Load environment variables from .env file
load_dotenv()

# Initialize logger
logger = logging.getLogger(__name__)

__all__ = ["create_app"]


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration to use ("development", "testing", "production").
                     Defaults to the FLASK_ENV environment variable.
    Returns:
        Flask: The configured Flask application instance.
    """
    config = get_config(config_name)

    app = Flask(__name__)
    app.config.from_object(config)

    _configure_response_headers(app)
    _configure_logging(app)
    _initialize_components(app)
    _initialize_cli(app)

    return app


def _configure_response_headers(app: Flask) -> None:
    """Add security headers to every response."""

    @app.after_request
    def add_security_headers(response: Response) -> Response:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Frame-Options"] = "DENY"
        return response


def _configure_logging(app: Flask) -> None:
    """Configure application logging."""
    log_level = logging.DEBUG if app.debug else logging.INFO
    logger.setLevel(log_level)

    logger.debug("Application configuration:")
    logger.debug(f"- ENV: {app.config.get('ENVIRONMENT', 'Not set')}")
    logger.debug(f"- DEBUG: {app.debug}")
    logger.debug(f"- OCR_ENABLED: {app.config.get('OCR_ENABLED')}")
    logger.debug(f"- OCR_LANGUAGE: {app.config.get('OCR_LANGUAGE')}")


def _initialize_components(app: Flask) -> None:
    """Initialize core application components."""
    from .extensions import init_app as init_extensions

    init_extensions(app)

    _register_blueprints(app)

    from .errors import init_app as init_errors

    init_errors(app)
    logger.debug("Registered error handlers")

    _configure_cors(app)

    _log_registered_routes(app)


def _initialize_cli(app: Flask) -> None:
    """Initialize CLI commands."""
    from .cli import register_commands

    register_commands(app)
    logger.debug("Initialized CLI commands")


def _register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    logger.debug("Registering blueprints...")

    from .api import bp as api_bp
    from .health import bp as health_bp

    for bp, url_prefix in ((api_bp, "/api/v1"), (health_bp, "/health")):
        app.register_blueprint(bp, url_prefix=url_prefix)
        logger.debug(f"Registered blueprint: {bp.name} at {url_prefix}")


def _configure_cors(app: Flask) -> None:
    """Configure CORS settings from the environment."""
    cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
    cors_methods = os.getenv("CORS_METHODS", "GET,POST,OPTIONS").split(",")
    cors_allow_headers = os.getenv("CORS_ALLOW_HEADERS", "Content-Type,X-Requested-With").split(",")

    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": cors_origins,
                "methods": cors_methods,
                "allow_headers": cors_allow_headers,
                "expose_headers": ["Content-Disposition", "Content-Length"],
                "supports_credentials": False,
            }
        },
    )


def _log_registered_routes(app: Flask) -> None:
    """Log all registered routes for debugging."""
    logger.debug("Registered routes:")
    for rule in app.url_map.iter_rules():
        methods = list(rule.methods - {"OPTIONS", "HEAD"})
        logger.debug(f"  {rule.endpoint}: {rule.rule} {methods}")
