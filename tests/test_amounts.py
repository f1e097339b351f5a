from __future__ import annotations

from decimal import Decimal

from invoicepdf.core.amounts import format_amount, line_total, round_money_dec, sum_money, to_decimal
from invoicepdf.core.locale import LocaleTable


def test_format_amount_english_and_german() -> None:
	table = LocaleTable()
	assert format_amount(1234.5, table.get("en")) == "1,234.50"
	assert format_amount(1234.5, table.get("de")) == "1.234,50"


def test_format_amount_always_two_decimals() -> None:
	en = LocaleTable().get("en")
	assert format_amount(11, en) == "11.00"
	assert format_amount(Decimal("0.1"), en) == "0.10"
	assert format_amount(1234567.891, en) == "1,234,567.89"


def test_format_amount_negative_and_rounding() -> None:
	de = LocaleTable().get("de")
	assert format_amount(-1234.5, de) == "-1.234,50"
	assert format_amount(0.125, de) == "0,13"


def test_line_total_avoids_float_artifacts() -> None:
	assert line_total(3, 0.1) == Decimal("0.3")
	assert line_total(11, 8) == Decimal("88")


def test_sum_money_rounds_once() -> None:
	assert sum_money([88, 100]) == Decimal("188.00")
	assert sum_money([0.005, 0.005]) == Decimal("0.01")


def test_to_decimal_and_rounding_helpers() -> None:
	assert to_decimal("abc") == Decimal("0")
	assert round_money_dec(2.675) == Decimal("2.68")
