"""Slip reading services: normalization, field extraction, OCR and spreadsheets."""

from .exceptions import OCRError, OCRUnavailableError, SlipImageError, SlipScanError, SpreadsheetError
from .slip_parser import SlipData, parse_slip_text
from .slip_scanner import ProgressEvent, ScanPass, ScanResult, ScanSettings, SlipScanner, SlipUpload

__all__ = [
    "OCRError",
    "OCRUnavailableError",
    "ProgressEvent",
    "ScanPass",
    "ScanResult",
    "ScanSettings",
    "SlipData",
    "SlipImageError",
    "SlipScanError",
    "SlipScanner",
    "SlipUpload",
    "SpreadsheetError",
    "parse_slip_text",
]
