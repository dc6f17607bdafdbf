"""Application configuration.

This module provides environment-specific configuration settings for the application.
"""

import os
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Base configuration with settings common to all environments."""

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-key-change-in-production")

    # Flask settings
    DEBUG: bool = _env_flag("DEBUG", "false")
    TESTING: bool = False

    # Application settings
    APP_NAME: str = os.getenv("APP_NAME", "slipscan")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "dev")

    # Upload settings (a batch of phone screenshots)
    MAX_CONTENT_LENGTH: int = int(os.getenv("MAX_CONTENT_LENGTH", str(20 * 1024 * 1024)))

    # OCR settings
    OCR_ENABLED: bool = _env_flag("OCR_ENABLED", "true")
    TESSERACT_CMD: Optional[str] = os.getenv("TESSERACT_CMD")
    OCR_LANGUAGE: str = os.getenv("OCR_LANGUAGE", "eng+tha")
    OCR_TESSERACT_CONFIG: str = os.getenv("OCR_TESSERACT_CONFIG", "--oem 3 --psm 6")

    # Image geometry for the two OCR passes
    IMAGE_MAX_WIDTH: int = int(os.getenv("IMAGE_MAX_WIDTH", "960"))
    OCR_PRIMARY_BOTTOM_RATIO: float = float(os.getenv("OCR_PRIMARY_BOTTOM_RATIO", "0.52"))
    OCR_PRIMARY_MIN_HEIGHT: int = int(os.getenv("OCR_PRIMARY_MIN_HEIGHT", "140"))

    # Rate limiting (OCR is CPU heavy)
    RATELIMIT_ENABLED: bool = _env_flag("RATELIMIT_ENABLED", "true")
    RATELIMIT_STORAGE_URI: str = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    SCAN_RATE_LIMIT: str = os.getenv("SCAN_RATE_LIMIT", "30 per minute")

    def __init__(self) -> None:
        """Initialize configuration."""
        os.environ.setdefault("FLASK_ENV", "development")


class DevelopmentConfig(Config):
    """Development configuration."""


class UnitTestConfig(Config):  # noqa: D101
    """Testing configuration."""

    TESTING: bool = True
    DEBUG: bool = True
    OCR_ENABLED: bool = False
    RATELIMIT_ENABLED: bool = False


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG: bool = False
    TESTING: bool = False


def get_config(env: Optional[str] = None) -> Config:
    """Get the appropriate configuration based on environment.

    Args:
        env: Configuration name; defaults to the FLASK_ENV environment variable
    """
    env = (env or os.getenv("FLASK_ENV", "development")).lower()

    configs = {
        "development": DevelopmentConfig,
        "testing": UnitTestConfig,
        "production": ProductionConfig,
    }

    config_class = configs.get(env, DevelopmentConfig)
    return config_class()
