"""Repair of Thai month abbreviations that OCR garbles inside memo text.

Slip memos usually carry a date such as ``15 ก.พ. 68``. Tesseract reads the
dotted abbreviations badly: dots vanish, spaces appear between the letters
and ``ก.พ.`` in particular comes back as ``ท.พ.``, ``N.พ.`` or ``N.W.``.
Each rule below matches one abbreviation loosely and rewrites it to the
canonical form. A token only matches when it stands alone, optionally glued
to a 2-4 digit day or year, so ordinary words containing the same letters
are left untouched.
"""

from dataclasses import dataclass
from functools import cached_property
import logging
import re

logger = logging.getLogger(__name__)

# Characters that count as part of a word when bounding a month token
_WORD_CHARS = "ก-๙A-Za-z0-9"


@dataclass(frozen=True)
class MonthCorrectionRule:
    """A fuzzy month token and the abbreviation it stands for."""

    name: str
    token: str
    canonical: str

    @cached_property
    def pattern(self) -> re.Pattern[str]:
        return _compile_month_pattern(self.token)

    def apply(self, value: str) -> str:
        return self.pattern.sub(lambda match: match.group(1) + self.canonical, value)


def _compile_month_pattern(token: str) -> re.Pattern[str]:
    return re.compile(
        rf"(^|[^{_WORD_CHARS}])(?:{token})(?=(?:[0-9]{{2,4}})?(?:[^{_WORD_CHARS}]|$))"
    )


def _dotted(first: str, second: str) -> str:
    """Token for a two-letter abbreviation with optional dots and stray spaces."""
    return rf"{first}\s*\.?\s*{second}\s*\.?"


# Applied before the strict rules: absorbs the look-alike consonants OCR
# substitutes for "ก" and the Latin letters it reads instead of "พ".
CONFUSABLE_FEBRUARY_RULE = MonthCorrectionRule(
    name="february-confusable",
    token=_dotted("[กทฑตดNnHhMmWw]", "[พPwW]"),
    canonical="ก.พ.",
)

MONTH_RULES: tuple[MonthCorrectionRule, ...] = (
    MonthCorrectionRule("january", _dotted("ม", "ค"), "ม.ค."),
    MonthCorrectionRule("march", _dotted("มี", "ค"), "มี.ค."),
    MonthCorrectionRule("april", _dotted("เม", "ย"), "เม.ย."),
    MonthCorrectionRule("november", _dotted("พ", "ย"), "พ.ย."),
    MonthCorrectionRule("may", _dotted("พ", "ค"), "พ.ค."),
    MonthCorrectionRule("june", _dotted("มิ", "ย"), "มิ.ย."),
    MonthCorrectionRule("july", _dotted("ก", "ค"), "ก.ค."),
    MonthCorrectionRule("august", _dotted("ส", "ค"), "ส.ค."),
    MonthCorrectionRule("september", _dotted("ก", "ย"), "ก.ย."),
    MonthCorrectionRule("october", _dotted("ต", "ค"), "ต.ค."),
    MonthCorrectionRule("december", _dotted("ธ", "ค"), "ธ.ค."),
)

CORRECTION_RULES: tuple[MonthCorrectionRule, ...] = (CONFUSABLE_FEBRUARY_RULE, *MONTH_RULES)

_MONTH_WORD_RE = re.compile(r"เดือน(?=[ก-๙])")
_COMMA_RE = re.compile(r"\s*,\s*")
_DOT_SPACE_YEAR_RE = re.compile(r"\.\s+([0-9]{4})")
_MULTI_SPACE_RE = re.compile(r"\s{2,}")


def correct_month_tokens(value: str | None) -> str:
    """Rewrite garbled month abbreviations in a memo candidate.

    Also puts a space after "เดือน" when a Thai word follows it directly,
    normalizes comma spacing and joins "dot space year" into "dot year".

    Args:
        value: Memo candidate after spacing repair

    Returns:
        The corrected candidate, trimmed
    """
    if not value:
        return ""

    out = _MONTH_WORD_RE.sub("เดือน ", value)
    out = _COMMA_RE.sub(", ", out)
    out = _DOT_SPACE_YEAR_RE.sub(r".\1", out)

    for rule in CORRECTION_RULES:
        corrected = rule.apply(out)
        if corrected != out:
            logger.debug(f"Month rule '{rule.name}' rewrote '{out}' -> '{corrected}'")
        out = corrected

    return _MULTI_SPACE_RE.sub(" ", out).strip()
