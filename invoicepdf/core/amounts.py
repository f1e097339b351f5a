from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Protocol


class Separators(Protocol):
	decimal_separator: str
	thousands_separator: str


def to_decimal(x: object) -> Decimal:
	"""Convert to Decimal via str to avoid binary float artifacts."""
	if isinstance(x, Decimal):
		return x
	try:
		return Decimal(str(x))
	except (InvalidOperation, ValueError, TypeError):
		return Decimal("0")


def round_money_dec(x: float | Decimal) -> Decimal:
	"""Round to 2 decimals, halves away from zero."""
	return to_decimal(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def line_total(quantity: float | Decimal, price: float | Decimal) -> Decimal:
	return to_decimal(quantity) * to_decimal(price)


def sum_money(values: Iterable[float | Decimal]) -> Decimal:
	"""Accumulate monetary values using Decimal and round once at the end."""
	total = Decimal("0")
	for v in values:
		total += to_decimal(v)
	return round_money_dec(total)


def format_amount(value: float | Decimal, locale: Separators) -> str:
	"""
	Format a number with exactly two decimals using the locale's separators.

	format_amount(1234.5, en) -> '1,234.50'
	format_amount(1234.5, de) -> '1.234,50'
	"""
	s = f"{round_money_dec(value):,.2f}"
	# Swap through a placeholder so '.' and ',' can trade places.
	return (
		s.replace(",", "\0")
		.replace(".", locale.decimal_separator)
		.replace("\0", locale.thousands_separator)
	)
