"""Pytest configuration and fixtures for the test suite."""

from io import BytesIO
import os
from typing import Callable, Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient, FlaskCliRunner
from PIL import Image

# Set test environment variables before the app is imported
os.environ.update(
    {
        "FLASK_ENV": "testing",
        "FLASK_APP": "slipscan",
        "SECRET_KEY": "test-secret-key",
    }
)

from slipscan import create_app  # noqa: E402
from slipscan.services.ocr_service import RECOGNIZING_STATUS, OCRProgress  # noqa: E402
from slipscan.services.slip_scanner import SlipScanner  # noqa: E402


class FakeOCREngine:
    """OCR engine that replays canned text, one entry per recognize() call.

    An entry that is an exception is raised instead of returned.
    """

    def __init__(self, texts, progress=(0.0, 1.0)) -> None:
        self.texts = list(texts)
        self.progress = progress
        self.sizes: list[tuple[int, int]] = []

    def recognize(self, image, on_progress=None) -> str:
        self.sizes.append(image.size)
        if on_progress:
            for value in self.progress:
                on_progress(OCRProgress(RECOGNIZING_STATUS, value))
        text = self.texts.pop(0)
        if isinstance(text, Exception):
            raise text
        return text


@pytest.fixture(scope="function")
def app() -> Generator[Flask, None, None]:
    """Create and configure a new app instance for testing."""
    app = create_app("testing")
    app.config.update(TESTING=True, SECRET_KEY="test-secret-key")

    with app.app_context():
        yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app: Flask) -> FlaskCliRunner:
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def fake_engine() -> Callable[..., FakeOCREngine]:
    """Factory for canned-text OCR engines."""
    return FakeOCREngine


@pytest.fixture
def make_scanner() -> Callable[..., SlipScanner]:
    """Factory for scanners backed by a canned-text OCR engine."""

    def _make(*texts, progress=(0.0, 1.0)) -> SlipScanner:
        return SlipScanner(FakeOCREngine(texts, progress=progress))

    return _make


@pytest.fixture
def slip_png() -> bytes:
    """A small white portrait PNG standing in for a slip screenshot."""
    buffer = BytesIO()
    Image.new("RGB", (200, 400), "white").save(buffer, format="PNG")
    return buffer.getvalue()
