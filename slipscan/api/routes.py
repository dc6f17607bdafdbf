from __future__ import annotations

from io import BytesIO
import os
from typing import Any, Tuple

from flask import Response, current_app, jsonify, request, send_file
from marshmallow import ValidationError
from werkzeug.datastructures import FileStorage

from slipscan.extensions import limiter
from slipscan.services.exceptions import SpreadsheetError
from slipscan.services.slip_scanner import ProgressEvent, SlipUpload, get_slip_scanner
from slipscan.services.spreadsheet import export_filename, export_rows, import_rows

from . import bp
from .schemas import ExportRequestSchema, ScanResultSchema

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif", ".tif", ".tiff"}

# Schema instances
scan_results_schema = ScanResultSchema(many=True)
export_request_schema = ExportRequestSchema()


def _create_api_response(
    data: Any = None, message: str = "Success", status: str = "success", code: int = 200
) -> Tuple[Response, int]:
    """Create a standardized API response."""
    response_data = {"status": status, "message": message}
    if data is not None:
        response_data["data"] = data
    return jsonify(response_data), code


def _handle_validation_error(error: ValidationError) -> Tuple[Response, int]:
    """Handle validation errors consistently."""
    return (
        jsonify({"status": "error", "message": "Validation failed", "errors": error.messages}),
        400,
    )


def _is_image_upload(file: FileStorage) -> bool:
    if not file or not file.filename:
        return False
    if (file.mimetype or "").startswith("image/"):
        return True
    return os.path.splitext(file.filename)[1].lower() in IMAGE_EXTENSIONS


def _log_progress(event: ProgressEvent) -> None:
    current_app.logger.debug(f"[{event.percent:3d}%] {event.message}")


def _scan_rate_limit() -> str:
    return str(current_app.config.get("SCAN_RATE_LIMIT", "30 per minute"))


@bp.route("/slips/scan", methods=["POST"])
@limiter.limit(_scan_rate_limit)
def scan_slips() -> Tuple[Response, int]:
    """Read amount and memo from uploaded slip images.

    Form fields:
        slips: One or more image files, processed in the order given
        start_order: Number of the first result row (default 1)
    """
    files = [file for file in request.files.getlist("slips") if _is_image_upload(file)]
    if not files:
        return _create_api_response(message="กรุณาเลือกไฟล์สลิปก่อน", status="error", code=400)

    start_order = request.form.get("start_order", default=1, type=int)
    if start_order is None or start_order < 1:
        return _create_api_response(message="start_order must be a positive integer", status="error", code=400)

    scanner = get_slip_scanner()
    if scanner is None:
        return _create_api_response(message="OCR engine is not available", status="error", code=503)

    uploads = [SlipUpload(filename=file.filename or "slip", data=file.read()) for file in files]
    current_app.logger.info(f"Scanning {len(uploads)} slips")
    results = scanner.scan_batch(uploads, on_progress=_log_progress, start_order=start_order)

    failed = sum(1 for result in results if result.failed)
    return _create_api_response(
        data={"results": scan_results_schema.dump(results), "total": len(results), "failed": failed},
        message=f"อ่านครบ {len(results)} สลิปแล้ว",
    )


@bp.route("/slips/import", methods=["POST"])
def import_slips() -> Tuple[Response, int]:
    """Import amount/memo rows from an Excel workbook (form field ``workbook``)."""
    file = request.files.get("workbook")
    if not file or not file.filename:
        return _create_api_response(message="No file provided", status="error", code=400)

    try:
        rows = import_rows(file.read())
    except SpreadsheetError as e:
        current_app.logger.warning(f"Excel import failed: {e}")
        return _create_api_response(message="นำเข้า Excel ไม่สำเร็จ", status="error", code=400)

    if not rows:
        return _create_api_response(message="ไฟล์ Excel ไม่มีข้อมูลที่นำเข้าได้", status="error", code=400)

    return _create_api_response(
        data={"rows": rows, "total": len(rows)},
        message=f"นำเข้า Excel สำเร็จ ({len(rows)} แถว)",
    )


@bp.route("/slips/export", methods=["POST"])
def export_slips() -> Response | Tuple[Response, int]:
    """Export result rows to an Excel workbook download."""
    try:
        data = export_request_schema.load(request.get_json(silent=True) or {})
    except ValidationError as e:
        return _handle_validation_error(e)

    try:
        content = export_rows(data["rows"])
    except SpreadsheetError as e:
        return _create_api_response(message=str(e), status="error", code=400)

    return send_file(
        BytesIO(content),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=export_filename(),
    )
