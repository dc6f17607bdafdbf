"""Slip parser for turning one OCR pass into an amount and a memo.

This module has no Flask dependency so it can be used from the web
application, the CLI and tests alike.
"""

from dataclasses import asdict, dataclass
import logging
from typing import Any

from .amount_extractor import extract_amount
from .memo_extractor import extract_memo
from .text_normalizer import normalize_text, split_text_to_lines

logger = logging.getLogger(__name__)


@dataclass
class SlipData:
    """Fields extracted from a slip. Empty strings mean "not found"."""

    amount: str = ""
    memo: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.amount and self.memo)

    def merge_missing(self, other: "SlipData") -> None:
        """Fill fields that are still empty from another pass.

        Fields already found are never replaced.
        """
        if not self.amount:
            self.amount = other.amount
        if not self.memo:
            self.memo = other.memo

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_slip_text(raw_text: str | None) -> SlipData:
    """Extract the amount and memo from the text of one OCR pass.

    Args:
        raw_text: Text returned by the OCR engine; normalized here again,
            which is harmless because normalization is idempotent

    Returns:
        SlipData with whatever fields could be found
    """
    text = normalize_text(raw_text)
    lines = split_text_to_lines(text)

    logger.debug(f"Parsing slip text: {len(text)} chars, {len(lines)} lines")
    for i, line in enumerate(lines, 1):
        logger.debug(f"  Line {i}: {line}")

    slip_data = SlipData(amount=extract_amount(text), memo=extract_memo(lines))

    logger.debug(f"Parsed slip: amount='{slip_data.amount}' memo='{slip_data.memo}'")
    return slip_data
