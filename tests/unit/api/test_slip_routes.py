"""Tests for the slip API endpoints."""

from io import BytesIO
from unittest.mock import patch

from openpyxl import Workbook, load_workbook

AMOUNT_AND_MEMO = "จำนวนเงิน 1,250.00 บาท\nบันทึกช่วยจำ: ค่าเช่า"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _workbook_bytes(*rows) -> bytes:
    workbook = Workbook()
    for row in rows:
        workbook.active.append(list(row))
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestScanSlips:
    """Test POST /api/v1/slips/scan."""

    def test_scan_success(self, client, make_scanner, slip_png) -> None:
        scanner = make_scanner(AMOUNT_AND_MEMO, OSError("boom"))
        with patch("slipscan.api.routes.get_slip_scanner", return_value=scanner):
            response = client.post(
                "/api/v1/slips/scan",
                data={
                    "slips": [(BytesIO(slip_png), "first.png"), (BytesIO(slip_png), "second.jpg")],
                    "start_order": "3",
                },
                content_type="multipart/form-data",
            )

        assert response.status_code == 200
        payload = response.get_json()
        assert payload["status"] == "success"
        assert payload["data"]["total"] == 2
        assert payload["data"]["failed"] == 1
        first, second = payload["data"]["results"]
        assert first == {
            "order": 3,
            "filename": "first.png",
            "amount": "1,250.00 บาท",
            "memo": "ค่าเช่า",
            "status": "ok",
            "error": None,
            "passes": ["primary"],
        }
        assert second["order"] == 4
        assert second["status"] == "failed"
        assert second["amount"] == "-"
        assert second["memo"] == "อ่านไม่สำเร็จ"

    def test_non_image_files_are_ignored(self, client, make_scanner) -> None:
        with patch("slipscan.api.routes.get_slip_scanner", return_value=make_scanner()):
            response = client.post(
                "/api/v1/slips/scan",
                data={"slips": [(BytesIO(b"hello"), "notes.txt")]},
                content_type="multipart/form-data",
            )

        assert response.status_code == 400
        assert response.get_json()["status"] == "error"

    def test_no_files(self, client) -> None:
        response = client.post("/api/v1/slips/scan", data={}, content_type="multipart/form-data")
        assert response.status_code == 400

    def test_invalid_start_order(self, client, slip_png) -> None:
        response = client.post(
            "/api/v1/slips/scan",
            data={"slips": [(BytesIO(slip_png), "a.png")], "start_order": "0"},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400

    def test_ocr_unavailable(self, client, slip_png) -> None:
        response = client.post(
            "/api/v1/slips/scan",
            data={"slips": [(BytesIO(slip_png), "a.png")]},
            content_type="multipart/form-data",
        )

        assert response.status_code == 503
        assert response.get_json()["message"] == "OCR engine is not available"


class TestImportSlips:
    """Test POST /api/v1/slips/import."""

    def test_import_success(self, client) -> None:
        data = _workbook_bytes(("จำนวนเงิน", "บันทึกช่วยจำ"), ("100.00 บาท", "ค่าน้ำ"))

        response = client.post(
            "/api/v1/slips/import",
            data={"workbook": (BytesIO(data), "slips.xlsx")},
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        payload = response.get_json()
        assert payload["data"]["rows"] == [{"amount": "100.00 บาท", "memo": "ค่าน้ำ"}]
        assert payload["data"]["total"] == 1

    def test_import_without_rows(self, client) -> None:
        data = _workbook_bytes(("จำนวนเงิน", "บันทึกช่วยจำ"))

        response = client.post(
            "/api/v1/slips/import",
            data={"workbook": (BytesIO(data), "slips.xlsx")},
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == "ไฟล์ Excel ไม่มีข้อมูลที่นำเข้าได้"

    def test_import_unreadable_file(self, client) -> None:
        response = client.post(
            "/api/v1/slips/import",
            data={"workbook": (BytesIO(b"garbage"), "slips.xlsx")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400

    def test_import_missing_file(self, client) -> None:
        response = client.post("/api/v1/slips/import", data={}, content_type="multipart/form-data")
        assert response.status_code == 400


class TestExportSlips:
    """Test POST /api/v1/slips/export."""

    def test_export_download(self, client) -> None:
        response = client.post(
            "/api/v1/slips/export",
            json={"rows": [{"order": 1, "amount": "1,250.00 บาท", "memo": "ค่าเช่า"}, {"order": 2}]},
        )

        assert response.status_code == 200
        assert response.mimetype == XLSX_MIMETYPE
        disposition = response.headers["Content-Disposition"]
        assert "attachment" in disposition
        assert "slip-results-" in disposition

        sheet = load_workbook(BytesIO(response.data)).active
        assert list(sheet.iter_rows(min_row=2, values_only=True)) == [
            ("1", "1,250.00 บาท", "ค่าเช่า"),
            ("2", "-", "-"),
        ]

    def test_export_requires_rows(self, client) -> None:
        response = client.post("/api/v1/slips/export", json={"rows": []})

        assert response.status_code == 400
        assert "rows" in response.get_json()["errors"]

    def test_export_validates_order(self, client) -> None:
        response = client.post("/api/v1/slips/export", json={"rows": [{"order": 0, "amount": "1"}]})
        assert response.status_code == 400

    def test_export_without_body(self, client) -> None:
        response = client.post("/api/v1/slips/export")
        assert response.status_code == 400


def test_unknown_route_returns_json(client) -> None:
    response = client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    assert response.get_json() == {"status": "error", "message": "Resource not found", "code": 404}
