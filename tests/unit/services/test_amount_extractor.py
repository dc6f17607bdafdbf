"""Tests for amount extraction."""

from decimal import Decimal

import pytest

from slipscan.services.amount_extractor import AMOUNT_RULES, extract_amount, format_amount, parse_number


class TestParseNumber:
    """Test parse_number."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1,250.50", Decimal("1250.50")),
            ("300", Decimal("300")),
            (" 7.5 ", Decimal("7.5")),
        ],
    )
    def test_valid_numbers(self, value, expected) -> None:
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", ",,", "abc", "NaN", "Infinity", 12])
    def test_invalid_numbers(self, value) -> None:
        assert parse_number(value) is None


class TestFormatAmount:
    """Test format_amount."""

    def test_thousands_and_two_decimals(self) -> None:
        assert format_amount(Decimal("1250")) == "1,250.00 บาท"
        assert format_amount(Decimal("45.5")) == "45.50 บาท"
        assert format_amount(Decimal("1234567.891")) == "1,234,567.89 บาท"


class TestExtractAmount:
    """Test extract_amount."""

    def test_keyword_amount_beats_larger_number(self) -> None:
        text = "จำนวนเงิน 1,250.00 บาท ค่าธรรมเนียม 9,999.00"
        assert extract_amount(text) == "1,250.00 บาท"

    def test_largest_two_decimal_fallback(self) -> None:
        assert extract_amount("10.50 20.75 99.00") == "99.00 บาท"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("จำนวน: 500.00", "500.00 บาท"),
            ("ยอดโอน 2,000", "2,000.00 บาท"),
            ("Amount: 300", "300.00 บาท"),
            ("TOTAL - 12.5", "12.50 บาท"),
            ("จำนวนเงิน\n750.00 บาท", "750.00 บาท"),
        ],
    )
    def test_keyword_rule(self, text, expected) -> None:
        assert extract_amount(text) == expected

    def test_currency_word_rule(self) -> None:
        assert extract_amount("โอนให้ 1,000 บาท") == "1,000.00 บาท"
        assert extract_amount("paid 42 Baht") == "42.00 บาท"

    def test_currency_symbol_rule(self) -> None:
        assert extract_amount("฿ 45.5") == "45.50 บาท"

    def test_keyword_rule_has_priority_over_currency_word(self) -> None:
        assert extract_amount("ค่าธรรมเนียม 10 บาท\nจำนวน 600.00") == "600.00 บาท"

    def test_fallback_needs_exactly_two_decimals(self) -> None:
        assert extract_amount("ref 12.345 and 7.5") == ""

    def test_no_amount(self) -> None:
        assert extract_amount("โอนเงินสำเร็จ") == ""

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\n"])
    def test_empty_input(self, text) -> None:
        assert extract_amount(text) == ""

    def test_rule_order(self) -> None:
        assert [rule.name for rule in AMOUNT_RULES] == ["amount-keyword", "currency-word", "currency-symbol"]
