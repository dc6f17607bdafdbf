"""Tests for single-pass slip parsing."""

import pytest

from slipscan.services.slip_parser import SlipData, parse_slip_text

KBANK_SLIP = """โอนเงินสำเร็จ
14 ก.พ. 68 14:32 น.
จำนวนเงิน ๑,๒๕๐.๐๐ บาท
ค่าธรรมเนียม 0.00 บาท
บันทึกช่วยจำ: ค่าเช่าห้อง
"""


class TestParseSlipText:
    """Test parse_slip_text."""

    def test_full_slip(self) -> None:
        slip_data = parse_slip_text(KBANK_SLIP)
        assert slip_data.amount == "1,250.00 บาท"
        assert slip_data.memo == "ค่าเช่าห้อง"
        assert slip_data.is_complete

    def test_amount_only(self) -> None:
        slip_data = parse_slip_text("โอนเงินสำเร็จ\nจำนวน: 500.00 บาท")
        assert slip_data == SlipData(amount="500.00 บาท", memo="")
        assert not slip_data.is_complete

    @pytest.mark.parametrize("text", [None, "", "   ", "\n \n"])
    def test_empty_input(self, text) -> None:
        assert parse_slip_text(text) == SlipData()

    def test_to_dict(self) -> None:
        assert SlipData(amount="1.00 บาท", memo="x").to_dict() == {"amount": "1.00 บาท", "memo": "x"}


class TestSlipDataMerge:
    """Test SlipData.merge_missing."""

    def test_fills_only_empty_fields(self) -> None:
        slip_data = SlipData(amount="100.00 บาท")
        slip_data.merge_missing(SlipData(amount="999.00 บาท", memo="ค่าอาหาร"))
        assert slip_data == SlipData(amount="100.00 บาท", memo="ค่าอาหาร")

    def test_empty_other_changes_nothing(self) -> None:
        slip_data = SlipData(memo="ค่าอาหาร")
        slip_data.merge_missing(SlipData())
        assert slip_data == SlipData(memo="ค่าอาหาร")
