"""Exceptions raised at the OCR, image and spreadsheet boundaries.

Text normalization and field extraction never raise; only the collaborators
that touch bytes or external binaries do.
"""


class SlipScanError(RuntimeError):
    """Base class for slip scanning failures."""


class OCRUnavailableError(SlipScanError):
    """Raised when OCR is disabled or the Tesseract binary cannot be found."""


class OCRError(SlipScanError):
    """Raised when a single recognition pass fails."""


class SlipImageError(SlipScanError, ValueError):
    """Raised when uploaded bytes cannot be decoded as an image."""


class SpreadsheetError(SlipScanError):
    """Raised when a workbook cannot be read or written."""
