"""Health check endpoints for the application."""

from datetime import UTC, datetime
import logging
from typing import cast

from flask import Response, current_app, jsonify
import pytesseract

from slipscan._version import __version__

from . import bp  # Import the blueprint from __init__.py

# Configure logger
logger = logging.getLogger(__name__)


def _ocr_status() -> str:
    if not current_app.config.get("OCR_ENABLED", True):
        return "disabled"
    try:
        return f"available ({pytesseract.get_tesseract_version()})"
    except Exception as e:
        logger.error(f"Tesseract check failed: {str(e)}")
        return f"error: {str(e)}"


@bp.route("/")
def check() -> Response:
    """Health check endpoint to verify the application and OCR engine are available.

    Returns:
        JSON: Status, version, timestamp and OCR engine status
    """
    return cast(
        Response,
        jsonify(
            {
                "status": "ok",
                "version": __version__,
                "timestamp": datetime.now(UTC).isoformat(),
                "ocr": _ocr_status(),
            }
        ),
    )
