"""Application Flask extensions.

This module initializes and configures all Flask extensions used in the application.
"""

import logging

from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

logger = logging.getLogger(__name__)

# Rate limiter for the OCR endpoints; storage comes from RATELIMIT_STORAGE_URI
limiter = Limiter(key_func=get_remote_address)


def init_app(app: Flask) -> None:
    """Initialize Flask extensions with the application."""
    limiter.init_app(app)
    logger.debug(f"Rate limiting enabled: {app.config.get('RATELIMIT_ENABLED', True)}")
