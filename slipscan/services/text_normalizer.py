"""Text canonicalization for raw OCR output.

Two normalizers live here:

* ``normalize_text`` repairs what Tesseract gets wrong on Thai slips (Thai
  digits, a split "sara am" vowel, non-breaking spaces). Its output is what
  the extractors see and what ends up in results.
* ``normalize_for_match`` is a lossy form used only to compare text against
  label and blocklist hints. It is never displayed.

Both are idempotent.
"""

import re
import unicodedata

THAI_DIGITS = str.maketrans("๐๑๒๓๔๕๖๗๘๙", "0123456789")

# Tesseract often emits NIKHAHIT + SARA AA instead of the composed SARA AM
SPLIT_SARA_AM = "\u0e4d\u0e32"
SARA_AM = "\u0e33"
SARA_AA = "\u0e32"
NBSP = "\u00a0"

# Thai tone marks, above/below vowels and Latin combining diacritics
_COMBINING_MARKS_RE = re.compile(r"[\u0300-\u036f\u0e31\u0e34-\u0e3a\u0e47-\u0e4e]")
_NON_MATCH_CHARS_RE = re.compile(r"[^a-z0-9ก-๙:/ ]+")
_WHITESPACE_RE = re.compile(r"\s+")
_LINE_BREAK_RE = re.compile(r"\r?\n")


def normalize_text(value: str | None) -> str:
    """Canonicalize raw OCR text.

    Args:
        value: Text returned by one OCR pass

    Returns:
        Text with Arabic digits, composed SARA AM and ordinary spaces
    """
    if not value:
        return ""
    text = value.translate(THAI_DIGITS)
    text = text.replace(SPLIT_SARA_AM, SARA_AM)
    return text.replace(NBSP, " ")


def normalize_for_match(value: str | None) -> str:
    """Reduce text to a case and diacritic insensitive form for substring matching.

    Keeps Latin letters, digits, the Thai block, colons, slashes and single
    spaces. Any other run of characters becomes a space so that word
    boundaries survive.
    """
    if not value:
        return ""
    text = unicodedata.normalize("NFKD", value.lower())
    text = _COMBINING_MARKS_RE.sub("", text)
    text = text.replace(SARA_AM, SARA_AA)
    text = _NON_MATCH_CHARS_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def split_text_to_lines(text: str | None) -> list[str]:
    """Split normalized text into trimmed, non-empty lines in reading order."""
    if not text:
        return []
    lines = (line.replace(NBSP, " ").strip() for line in _LINE_BREAK_RE.split(text))
    return [line for line in lines if line]
