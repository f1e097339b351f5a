from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

# Bundled strings; LocaleTable.from_json() accepts the same shape.
DEFAULT_TRANSLATIONS: Dict[str, Dict[str, str]] = {
	"en": {
		"decimalSeparator": ".",
		"item": "Item",
		"page": "Page {page} of {pages}",
		"price": "Price",
		"quantity": "Quantity",
		"thousandsSeparator": ",",
		"total": "Total",
	},
	"de": {
		"decimalSeparator": ",",
		"item": "Artikel",
		"page": "Seite {page} von {pages}",
		"price": "Preis",
		"quantity": "Menge",
		"thousandsSeparator": ".",
		"total": "Summe",
	},
}


@dataclass(frozen=True)
class Locale:
	"""Strings of one language, with the fallback language already resolved."""

	language: str
	strings: Mapping[str, str] = field(default_factory=dict)

	def t(self, key: str) -> str:
		value = self.strings.get(key)
		if value is None:
			logger.debug("No translation for %r in %r, using the key", key, self.language)
			return key
		return value

	@property
	def decimal_separator(self) -> str:
		return self.strings.get("decimalSeparator", ".")

	@property
	def thousands_separator(self) -> str:
		return self.strings.get("thousandsSeparator", ",")


class LocaleTable:
	"""Per-language string lookups.

	Built once by whoever builds the invoice and treated as read-only after that.
	A language that is missing falls back to `fallback`; a key that is missing
	from the chosen language resolves to the key itself.
	"""

	def __init__(
		self,
		translations: Optional[Mapping[str, Mapping[str, str]]] = None,
		fallback: str = DEFAULT_LANGUAGE,
	) -> None:
		source = DEFAULT_TRANSLATIONS if translations is None else translations
		self._translations: Dict[str, Dict[str, str]] = {
			str(lang): {str(k): str(v) for k, v in strings.items()} for lang, strings in source.items()
		}
		self.fallback = fallback

	@classmethod
	def from_json(cls, path: Union[str, Path], fallback: str = DEFAULT_LANGUAGE) -> "LocaleTable":
		p = Path(path)
		with p.open("r", encoding="utf-8") as f:
			raw = json.load(f)
		if not isinstance(raw, dict):
			raw = {}
		return cls(raw, fallback=fallback)

	@property
	def languages(self) -> list[str]:
		return sorted(self._translations)

	def get(self, language: Optional[str]) -> Locale:
		lang = language or self.fallback
		strings = self._translations.get(lang)
		if strings is None:
			logger.debug("Language %r not available, falling back to %r", lang, self.fallback)
			lang = self.fallback
			strings = self._translations.get(lang, {})
		return Locale(lang, dict(strings))

	def translate(self, language: Optional[str], key: str) -> str:
		return self.get(language).t(key)
