from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Union

from invoicepdf.core.amounts import line_total as _line_total
from invoicepdf.core.errors import ConfigurationError


@dataclass(frozen=True)
class Entry:
	description: str
	# Numeric quantity/price are a caller precondition; they are not validated here.
	quantity: Union[float, Decimal]
	price: Union[float, Decimal]

	@property
	def line_total(self) -> Decimal:
		# Computed on every access, never stored
		return _line_total(self.quantity, self.price)

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "Entry":
		try:
			return cls(str(data["description"]), data["quantity"], data["price"])
		except (KeyError, TypeError) as exc:
			raise ConfigurationError(f"Invalid invoice entry: {data!r}") from exc


@dataclass(frozen=True)
class InvoiceContent:
	title: str
	client_address: Sequence[str]
	entries: Sequence[Entry]
	before_info: Sequence[str] = field(default_factory=tuple)
	after_info: Sequence[str] = field(default_factory=tuple)

	def __post_init__(self) -> None:
		if not self.entries:
			raise ConfigurationError("No item entries for the invoice.")
		object.__setattr__(self, "client_address", tuple(self.client_address))
		object.__setattr__(self, "entries", tuple(self.entries))
		object.__setattr__(self, "before_info", tuple(self.before_info or ()))
		object.__setattr__(self, "after_info", tuple(self.after_info or ()))

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "InvoiceContent":
		"""Build content from the JSON shape: title, clientAddress, entries, beforeInfo?, afterInfo?"""
		entries: List[Entry] = [
			e if isinstance(e, Entry) else Entry.from_dict(e) for e in (data.get("entries") or [])
		]
		return cls(
			title=str(data.get("title", "")),
			client_address=[str(line) for line in data.get("clientAddress", []) or []],
			entries=entries,
			before_info=[str(line) for line in data.get("beforeInfo", []) or []],
			after_info=[str(line) for line in data.get("afterInfo", []) or []],
		)


def load_content(path: Union[str, Path]) -> InvoiceContent:
	p = Path(path)
	with p.open("r", encoding="utf-8") as f:
		raw = json.load(f)
	if not isinstance(raw, dict):
		raise ConfigurationError(f"Invoice file {p} must contain a JSON object")
	return InvoiceContent.from_dict(raw)
