"""API Validation Schemas."""

from typing import Any

from marshmallow import Schema, fields, post_load, validate

from slipscan.services.slip_scanner import ScanResult
from slipscan.services.spreadsheet import EMPTY_CELL, SlipRow


class ScanResultSchema(Schema):
    order = fields.Int(dump_only=True)
    filename = fields.Str(dump_only=True)
    amount = fields.Method("get_amount", dump_only=True)
    memo = fields.Method("get_memo", dump_only=True)
    status = fields.Method("get_status", dump_only=True)
    error = fields.Str(dump_only=True, allow_none=True)
    passes = fields.List(fields.Str(), dump_only=True)

    def get_amount(self, obj: ScanResult) -> str:
        return obj.to_row()[1]

    def get_memo(self, obj: ScanResult) -> str:
        return obj.to_row()[2]

    def get_status(self, obj: ScanResult) -> str:
        return "failed" if obj.failed else "ok"


class SlipRowSchema(Schema):
    order = fields.Int(required=True, validate=validate.Range(min=1))
    amount = fields.Str(load_default=EMPTY_CELL)
    memo = fields.Str(load_default=EMPTY_CELL)

    @post_load
    def make_row(self, data: dict[str, Any], **kwargs: Any) -> SlipRow:
        return SlipRow(**data)


class ExportRequestSchema(Schema):
    rows = fields.List(fields.Nested(SlipRowSchema), required=True, validate=validate.Length(min=1))
