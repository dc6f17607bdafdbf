"""Tests for Excel import and export."""

from datetime import datetime
from io import BytesIO

from openpyxl import Workbook, load_workbook
import pytest

from slipscan.services.exceptions import SpreadsheetError
from slipscan.services.spreadsheet import (
    AMOUNT_ALIAS_KEYS,
    MEMO_ALIAS_KEYS,
    SHEET_NAME,
    SlipRow,
    export_filename,
    export_rows,
    find_column,
    import_rows,
    normalize_import_key,
)


def _workbook_bytes(*rows) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(list(row))
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestHeaderMatching:
    """Test header normalization and alias lookup."""

    def test_normalize_import_key(self) -> None:
        assert normalize_import_key(" Memo / Note: ") == "memonote"
        assert normalize_import_key(None) == ""

    def test_exact_and_contained_aliases(self) -> None:
        headers = ["ลำดับ", "จำนวนเงิน (บาท)", "Memo / Note"]
        assert find_column(headers, AMOUNT_ALIAS_KEYS) == 1
        assert find_column(headers, MEMO_ALIAS_KEYS) == 2

    def test_latin_aliases_ignore_case(self) -> None:
        assert find_column([None, "AMOUNT", "note"], AMOUNT_ALIAS_KEYS) == 1
        assert find_column([None, "AMOUNT", "note"], MEMO_ALIAS_KEYS) == 2

    def test_no_match(self) -> None:
        assert find_column(["foo", "", None], AMOUNT_ALIAS_KEYS) is None


class TestImportRows:
    """Test import_rows."""

    def test_imports_matching_columns(self) -> None:
        data = _workbook_bytes(
            ("ลำดับ", "จำนวนเงิน (บาท)", "Memo / Note"),
            (1, 250.5, " ค่าน้ำ "),
            (2, None, None),
            (3, "100", None),
            (4, None, "ค่าไฟ"),
        )

        assert import_rows(data) == [
            {"amount": "250.5", "memo": "ค่าน้ำ"},
            {"amount": "100", "memo": "-"},
            {"amount": "-", "memo": "ค่าไฟ"},
        ]

    def test_unknown_headers_yield_nothing(self) -> None:
        assert import_rows(_workbook_bytes(("foo", "bar"), ("1", "2"))) == []

    def test_empty_sheet(self) -> None:
        assert import_rows(_workbook_bytes()) == []

    def test_unreadable_file(self) -> None:
        with pytest.raises(SpreadsheetError):
            import_rows(b"definitely not a workbook")


class TestExportRows:
    """Test export_rows."""

    def test_writes_sheet(self) -> None:
        content = export_rows([SlipRow(1, "1,250.00 บาท ", "ค่าเช่า"), SlipRow(2, "-", "อ่านไม่สำเร็จ")])

        workbook = load_workbook(BytesIO(content))
        sheet = workbook.active
        assert sheet.title == SHEET_NAME
        assert [list(row) for row in sheet.iter_rows(values_only=True)] == [
            ["ลำดับ", "จำนวนเงิน", "บันทึกช่วยจำ"],
            ["1", "1,250.00 บาท", "ค่าเช่า"],
            ["2", "-", "อ่านไม่สำเร็จ"],
        ]
        assert [sheet.column_dimensions[col].width for col in "ABC"] == [10, 18, 48]

    def test_export_then_import(self) -> None:
        content = export_rows([SlipRow(1, "99.00 บาท", "ค่าน้ำ 3/2568")])
        assert import_rows(content) == [{"amount": "99.00 บาท", "memo": "ค่าน้ำ 3/2568"}]

    def test_nothing_to_export(self) -> None:
        with pytest.raises(SpreadsheetError):
            export_rows([])


def test_export_filename() -> None:
    assert export_filename(datetime(2025, 2, 14, 9, 30, 15)) == "slip-results-20250214-093015.xlsx"
