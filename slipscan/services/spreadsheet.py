"""Excel import and export of slip results."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
import logging
import re
from typing import Any
import zipfile

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter

from .exceptions import SpreadsheetError
from .text_normalizer import normalize_for_match

logger = logging.getLogger(__name__)

SHEET_NAME = "SlipResults"
EXPORT_COLUMNS: tuple[tuple[str, int], ...] = (
    ("ลำดับ", 10),
    ("จำนวนเงิน", 18),
    ("บันทึกช่วยจำ", 48),
)
EMPTY_CELL = "-"

AMOUNT_ALIASES: tuple[str, ...] = ("จำนวนเงิน", "amount")
MEMO_ALIASES: tuple[str, ...] = ("บันทึกช่วยจำ", "memo", "note")

_KEY_SEPARATORS_RE = re.compile(r"[:/ ]+")


@dataclass(frozen=True)
class SlipRow:
    """One row of the results table."""

    order: int
    amount: str
    memo: str


def normalize_import_key(value: Any) -> str:
    """Normalize a column header for alias matching."""
    return _KEY_SEPARATORS_RE.sub("", normalize_for_match("" if value is None else str(value)))


AMOUNT_ALIAS_KEYS = tuple(normalize_import_key(alias) for alias in AMOUNT_ALIASES)
MEMO_ALIAS_KEYS = tuple(normalize_import_key(alias) for alias in MEMO_ALIASES)


def find_column(headers: Sequence[Any], alias_keys: Iterable[str]) -> int | None:
    """Index of the first header that equals or contains one of the aliases."""
    keys = tuple(alias_keys)
    for index, header in enumerate(headers):
        normalized = normalize_import_key(header)
        if not normalized:
            continue
        if any(normalized == alias or alias in normalized for alias in keys):
            return index
    return None


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def import_rows(workbook_bytes: bytes) -> list[dict[str, str]]:
    """Read amount/memo pairs from the first sheet of a workbook.

    The first row holds the headers. Rows with neither an amount nor a memo
    are skipped; a missing value becomes ``-``.

    Raises:
        SpreadsheetError: If the workbook cannot be read or has no sheet
    """
    try:
        workbook = load_workbook(BytesIO(workbook_bytes), read_only=True, data_only=True)
    except (zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise SpreadsheetError(f"Cannot read Excel file: {e}") from e

    try:
        if not workbook.sheetnames:
            raise SpreadsheetError("Workbook has no sheets")
        sheet = workbook[workbook.sheetnames[0]]
        rows = sheet.iter_rows(values_only=True)
        headers = next(rows, None)
        if not headers:
            return []

        amount_index = find_column(headers, AMOUNT_ALIAS_KEYS)
        memo_index = find_column(headers, MEMO_ALIAS_KEYS)
        logger.debug(f"Import columns: amount={amount_index} memo={memo_index}")

        imported: list[dict[str, str]] = []
        for row in rows:
            amount = _cell_text(row[amount_index]) if amount_index is not None and amount_index < len(row) else ""
            memo = _cell_text(row[memo_index]) if memo_index is not None and memo_index < len(row) else ""
            if not amount and not memo:
                continue
            imported.append({"amount": amount or EMPTY_CELL, "memo": memo or EMPTY_CELL})
    finally:
        workbook.close()

    logger.info(f"Imported {len(imported)} rows from Excel")
    return imported


def export_rows(rows: Sequence[SlipRow]) -> bytes:
    """Write result rows to an xlsx workbook.

    Raises:
        SpreadsheetError: If there is nothing to export
    """
    if not rows:
        raise SpreadsheetError("No rows to export")

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME
    sheet.append([header for header, _ in EXPORT_COLUMNS])
    for row in rows:
        sheet.append([str(row.order), row.amount.strip(), row.memo.strip()])

    for index, (_, width) in enumerate(EXPORT_COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width

    buffer = BytesIO()
    workbook.save(buffer)
    logger.info(f"Exported {len(rows)} rows to Excel")
    return buffer.getvalue()


def export_filename(now: datetime | None = None) -> str:
    """File name for an export, e.g. ``slip-results-20250214-093015.xlsx``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"slip-results-{stamp}.xlsx"
