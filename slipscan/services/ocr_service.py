"""OCR service for reading slip images with Tesseract OCR (FREE, open-source)."""

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Protocol, cast

from flask import current_app
from PIL import Image
import pytesseract

from .exceptions import OCRError, OCRUnavailableError
from .text_normalizer import normalize_text

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "eng+tha"
DEFAULT_TESSERACT_CONFIG = "--oem 3 --psm 6"
RECOGNIZING_STATUS = "recognizing text"

TESSERACT_INSTALL_HINT = (
    "Please install Tesseract OCR with Thai language data:\n"
    "  Linux: sudo apt-get install tesseract-ocr tesseract-ocr-tha\n"
    "  macOS: brew install tesseract tesseract-lang\n"
    "  Windows: Download from https://github.com/UB-Mannheim/tesseract/wiki"
)


@dataclass(frozen=True)
class OCRProgress:
    """A progress notification from the OCR engine."""

    status: str
    progress: float


OCRProgressCallback = Callable[[OCRProgress], None]


class OCREngine(Protocol):
    """Anything that can turn an image into text."""

    def recognize(self, image: Image.Image, on_progress: OCRProgressCallback | None = None) -> str: ...


class TesseractEngine:
    """OCR engine backed by the Tesseract binary through pytesseract."""

    def __init__(
        self,
        language: str = DEFAULT_LANGUAGE,
        config: str = DEFAULT_TESSERACT_CONFIG,
        tesseract_cmd: str | None = None,
    ) -> None:
        """Initialize the engine and verify Tesseract is installed.

        Raises:
            OCRUnavailableError: If the Tesseract binary cannot be run
        """
        self.language = language
        self.config = config

        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError:
            logger.error(f"Tesseract OCR binary not found. {TESSERACT_INSTALL_HINT}")
            raise OCRUnavailableError("Tesseract OCR not found") from None
        except Exception as e:
            logger.error(f"Tesseract OCR not available: {e}")
            raise OCRUnavailableError(f"Tesseract OCR initialization failed: {e}") from e

        logger.info(f"Tesseract OCR {version} initialized (lang={self.language})")
        self._warn_missing_languages()

    def _warn_missing_languages(self) -> None:
        try:
            installed = set(pytesseract.get_languages(config=""))
        except Exception as e:
            logger.debug(f"Could not list Tesseract languages: {e}")
            return
        missing = [lang for lang in self.language.split("+") if lang not in installed]
        if missing:
            logger.warning(f"Tesseract language data missing: {', '.join(missing)}. {TESSERACT_INSTALL_HINT}")

    def recognize(self, image: Image.Image, on_progress: OCRProgressCallback | None = None) -> str:
        """Recognize the text of one image region.

        Tesseract gives no incremental progress, so the callback receives a
        start and an end notification only.

        Raises:
            OCRError: If recognition fails
        """
        if on_progress:
            on_progress(OCRProgress(RECOGNIZING_STATUS, 0.0))

        try:
            text = cast(str, pytesseract.image_to_string(image, lang=self.language, config=self.config))
        except Exception as e:
            logger.error(f"Tesseract OCR failed: {e}")
            raise OCRError(f"Failed to extract text: {e}") from e

        if on_progress:
            on_progress(OCRProgress(RECOGNIZING_STATUS, 1.0))

        logger.debug(f"Extracted {len(text)} characters using OCR")
        return normalize_text(text)


def get_ocr_engine() -> TesseractEngine | None:
    """Get an OCR engine configured from the current application.

    Returns:
        TesseractEngine instance or None if OCR is disabled or unavailable
    """
    if not current_app.config.get("OCR_ENABLED", True):
        current_app.logger.info("OCR is disabled by configuration")
        return None

    try:
        return TesseractEngine(
            language=current_app.config.get("OCR_LANGUAGE", DEFAULT_LANGUAGE),
            config=current_app.config.get("OCR_TESSERACT_CONFIG", DEFAULT_TESSERACT_CONFIG),
            tesseract_cmd=current_app.config.get("TESSERACT_CMD"),
        )
    except OCRUnavailableError as e:
        current_app.logger.error(f"Failed to initialize OCR engine: {e}")
        return None
