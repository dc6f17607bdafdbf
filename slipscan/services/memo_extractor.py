"""Memo extraction from the lines of a payment slip.

The memo is the free text the payer typed ("บันทึกช่วยจำ" in Thai banking
apps). Extraction runs in two stages:

1. Label anchored, top to bottom. A line whose match form contains a memo
   label is mined with ``MEMO_STRATEGIES`` in order: text after a colon, the
   line minus its leading label token, then the following line.
2. Fallback, bottom to top. The first line that looks like memo content wins.
   Memos are normally the last human-written line, below printed metadata.

Every candidate is cleaned (spacing repair, month token correction) and must
pass ``is_acceptable_memo`` before it is returned.
"""

from collections.abc import Callable
from dataclasses import dataclass
import logging
import re

from .text_normalizer import normalize_for_match
from .thai_calendar import correct_month_tokens

logger = logging.getLogger(__name__)

MEMO_LABEL_HINTS: tuple[str, ...] = (
    "บันทึกช่วยจำ",
    "ช่วยจำ",
    "หมายเหตุ",
    "memo",
    "note",
    # Common OCR renderings of "บันทึกช่วยจำ" with marks dropped
    "บนทกชวยจา",
    "บนทกชวยจำ",
    "บนทกชวยจํา",
)

MEMO_BLOCKLIST_HINTS: tuple[str, ...] = (
    "จำนวน",
    "ค่าธรรมเนียม",
    "เลขที่รายการ",
    "สแกนตรวจสอบสลิป",
    "โอนเงินสำเร็จ",
    "verified by",
)

# Normalized once at import and shared read-only
MEMO_LABEL_HINTS_NORMALIZED: tuple[str, ...] = tuple(
    hint for hint in (normalize_for_match(h) for h in MEMO_LABEL_HINTS) if hint
)
MEMO_BLOCKLIST_HINTS_NORMALIZED: tuple[str, ...] = tuple(
    hint for hint in (normalize_for_match(h) for h in MEMO_BLOCKLIST_HINTS) if hint
)

# Banking app chrome (K PLUS branding, "verified" badges)
UI_NOISE_TOKENS: tuple[str, ...] = ("ik+", "k+", "kplus", "verified")

_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_SEPARATORS_RE = re.compile(r"^[:：\-\s]+")
_DASHES_AND_DOTS_RE = re.compile(r"^[-.]+$")
_ZERO_WIDTH_SPACE = "\u200b"
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([,./])")
_SPACE_AFTER_SLASH_RE = re.compile(r"([/])\s+")
_THAI_GAP_RE = re.compile(r"([\u0e00-\u0e7f])\s+(?=[\u0e00-\u0e7f])")

_BARE_AMOUNT_RE = re.compile(r"^[0-9]+(?:\.[0-9]{1,2})?(?:\s*(บาท|baht))?$", re.IGNORECASE)
_CLOCK_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3])[:.][0-5][0-9](?:\s*น\.?)?$")
_MINUTES_RE = re.compile(r"^[0-5]?[0-9]\s*น\.?$")
_EMBEDDED_TIME_RE = re.compile(r"(?:^|\s)([01]?[0-9]|2[0-3])[:.][0-5][0-9](?:\s*น\.?)?(?:$|\s)")

_AFTER_COLON_RE = re.compile(r"[:：]\s*(.+)$")
_LEADING_TOKEN_RE = re.compile(r"^[^:：\s]+\s*")

_DIGIT_RE = re.compile(r"[0-9]")
_THAI_RE = re.compile(r"[ก-๙]")
_LATIN_RE = re.compile(r"[a-z]", re.IGNORECASE)
_SLASH_DATE_RE = re.compile(r"[0-9]+/[0-9]+")
MONTH_MARKERS: tuple[str, ...] = (normalize_for_match("เดือน"), "month")


def normalize_thai_memo_spacing(value: str | None) -> str:
    """Undo OCR over-spacing in Thai memo text.

    Removes zero-width spaces, spaces before ``, . /`` and after ``/``, and
    any gap between two Thai characters.
    """
    if not value:
        return ""

    output = value.replace(_ZERO_WIDTH_SPACE, "")
    output = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", output)
    output = _SPACE_AFTER_SLASH_RE.sub(r"\1", output)

    previous = None
    while output != previous:
        previous = output
        output = _THAI_GAP_RE.sub(r"\1", output)

    return output.strip()


def clean_memo(value: str | None) -> str:
    """Clean a memo candidate; empty when nothing usable remains."""
    if not value:
        return ""

    memo = _WHITESPACE_RE.sub(" ", value).strip()
    memo = _LEADING_SEPARATORS_RE.sub("", memo)
    memo = correct_month_tokens(normalize_thai_memo_spacing(memo))

    if not memo or _DASHES_AND_DOTS_RE.match(memo):
        return ""
    return memo


def is_blocked_memo_line(normalized_line: str) -> bool:
    return any(hint in normalized_line for hint in MEMO_BLOCKLIST_HINTS_NORMALIZED)


def has_memo_label(normalized_line: str) -> bool:
    return any(hint in normalized_line for hint in MEMO_LABEL_HINTS_NORMALIZED)


def looks_like_amount(text: str | None) -> bool:
    value = (text or "").replace(",", "").strip()
    return bool(_BARE_AMOUNT_RE.match(value))


def looks_like_time_fragment(text: str | None) -> bool:
    """True for ``14:32``, ``09.15 น.``, ``45 น.`` or text embedding a clock time."""
    value = normalize_thai_memo_spacing((text or "").lower())
    if not value:
        return False
    if _CLOCK_TIME_RE.match(value) or _MINUTES_RE.match(value):
        return True
    return bool(_EMBEDDED_TIME_RE.search(value))


def looks_like_ui_noise(text: str | None) -> bool:
    compact = _WHITESPACE_RE.sub("", (text or "").lower())
    if not compact:
        return False
    return any(token in compact for token in UI_NOISE_TOKENS)


def is_acceptable_memo(candidate: str) -> bool:
    """Shared filter for every memo candidate."""
    if not candidate:
        return False
    if is_blocked_memo_line(normalize_for_match(candidate)):
        return False
    return not (looks_like_amount(candidate) or looks_like_time_fragment(candidate) or looks_like_ui_noise(candidate))


def is_likely_memo_content(raw_line: str, normalized_line: str) -> bool:
    """Shape test for lines without a memo label.

    Accepts a line that mentions a month next to a digit, or carries a
    ``digit/digit`` date next to a Thai or Latin letter.
    """
    if not is_acceptable_memo(raw_line):
        return False

    has_digits = bool(_DIGIT_RE.search(raw_line))
    if not has_digits:
        return False

    if any(marker in normalized_line for marker in MONTH_MARKERS):
        return True

    has_letters = bool(_THAI_RE.search(raw_line) or _LATIN_RE.search(raw_line))
    return bool(_SLASH_DATE_RE.search(raw_line)) and has_letters


def _after_colon(line: str, next_line: str) -> str:
    match = _AFTER_COLON_RE.search(line)
    return clean_memo(match.group(1)) if match else ""


def _compact_tail(line: str, next_line: str) -> str:
    tail = clean_memo(_LEADING_TOKEN_RE.sub("", line, count=1))
    return tail if tail != line else ""


def _following_line(line: str, next_line: str) -> str:
    return clean_memo(next_line)


@dataclass(frozen=True)
class MemoStrategy:
    """One way of pulling a memo out of a labelled line and its successor."""

    name: str
    extract: Callable[[str, str], str]


MEMO_STRATEGIES: tuple[MemoStrategy, ...] = (
    MemoStrategy("after-colon", _after_colon),
    MemoStrategy("compact-tail", _compact_tail),
    MemoStrategy("next-line", _following_line),
)


def extract_memo_around_label(line: str, next_line: str = "") -> str:
    """Extract a memo from a line carrying a memo label.

    Returns:
        The first acceptable candidate, or an empty string if the line has no
        label or no strategy produced an acceptable candidate
    """
    cleaned = clean_memo(line)
    if not cleaned or not has_memo_label(normalize_for_match(cleaned)):
        return ""

    for strategy in MEMO_STRATEGIES:
        candidate = strategy.extract(cleaned, next_line)
        if candidate and is_acceptable_memo(candidate):
            logger.debug(f"Memo strategy '{strategy.name}' accepted '{candidate}'")
            return candidate

    return ""


def extract_memo(lines: list[str]) -> str:
    """Find the memo among a slip's lines.

    Args:
        lines: Trimmed, non-empty lines in OCR reading order

    Returns:
        The memo, or an empty string
    """
    for index, line in enumerate(lines):
        next_line = lines[index + 1] if index + 1 < len(lines) else ""
        memo = extract_memo_around_label(line, next_line)
        if memo:
            return memo

    for line in reversed(lines):
        candidate = clean_memo(line)
        if not candidate:
            continue
        if is_likely_memo_content(candidate, normalize_for_match(candidate)):
            logger.debug(f"Memo fallback accepted '{candidate}'")
            return candidate

    return ""
