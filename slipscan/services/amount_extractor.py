"""Transferred-amount extraction from normalized slip text."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import logging
import re

logger = logging.getLogger(__name__)

CURRENCY_SUFFIX = "บาท"

_NUMBER = r"([0-9][0-9,]*(?:\.[0-9]{1,2})?)"


@dataclass(frozen=True)
class AmountRule:
    """A keyword-anchored amount pattern. Group 1 captures the number."""

    name: str
    pattern: re.Pattern[str]


# Evaluated in order; the first rule whose match parses wins
AMOUNT_RULES: tuple[AmountRule, ...] = (
    AmountRule(
        "amount-keyword",
        re.compile(rf"(?:จำนวนเงิน|จำนวน|จํานวน|ยอดโอน|amount|total)\s*[:\-]?\s*{_NUMBER}", re.IGNORECASE),
    ),
    AmountRule("currency-word", re.compile(rf"{_NUMBER}\s*(?:บาท|baht)", re.IGNORECASE)),
    AmountRule("currency-symbol", re.compile(rf"฿\s*{_NUMBER}")),
)

# Fallback: any grouped number with exactly two decimals, ASCII word boundaries
TWO_DECIMAL_RE = re.compile(r"\b([0-9][0-9,]*\.[0-9]{2})\b", re.ASCII)


def parse_number(value: str | None) -> Decimal | None:
    """Parse a number with optional thousands separators.

    Returns:
        The finite value, or None if the text does not parse
    """
    if not isinstance(value, str):
        return None
    cleaned = value.replace(",", "").strip()
    if not cleaned:
        return None
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def format_amount(value: Decimal) -> str:
    """Format an amount the Thai way: ``1,250.00 บาท``."""
    return f"{value:,.2f} {CURRENCY_SUFFIX}"


def extract_amount(text: str | None) -> str:
    """Find the transferred amount in a slip's normalized text.

    Keyword-anchored rules are tried first in fixed priority order. When none
    of them yields a number, the largest two-decimal figure on the slip is
    used, since fees and balances are printed smaller than the transfer.

    Args:
        text: Normalized OCR text of one pass (not split into lines)

    Returns:
        Formatted amount, or an empty string when nothing was found
    """
    if not text or not text.strip():
        return ""

    for rule in AMOUNT_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue
        number = parse_number(match.group(1))
        if number is not None:
            logger.debug(f"Amount rule '{rule.name}' matched '{match.group(0)}' -> {number}")
            return format_amount(number)

    best: Decimal | None = None
    for match in TWO_DECIMAL_RE.finditer(text):
        number = parse_number(match.group(1))
        if number is None:
            continue
        if best is None or number > best:
            best = number

    if best is not None:
        logger.debug(f"No keyword amount, using largest two-decimal figure {best}")
        return format_amount(best)

    return ""
