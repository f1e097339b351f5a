from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from invoicepdf.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Alignment(str, Enum):
	LEFT = "L"
	RIGHT = "R"

	@classmethod
	def coerce(cls, value: Any) -> "Alignment":
		if isinstance(value, cls):
			return value
		key = str(value).strip().upper()
		if key in ("L", "LEFT"):
			return cls.LEFT
		if key in ("R", "RIGHT"):
			return cls.RIGHT
		raise ConfigurationError(f"Unknown column alignment: {value!r}")


# All lengths in mm, font sizes in pt.
@dataclass(frozen=True)
class LayoutConfig:
	address_margin_top: float = 52.5
	address_padding_left: float = 30
	content_cell_height: float = 5
	# Body text start on the first page (below letterhead and title)
	content_margin_top_first: float = 105
	# Body text start on every following page
	content_margin_top: float = 45
	entries_column_alignment: Tuple[Alignment, ...] = (Alignment.RIGHT, Alignment.LEFT, Alignment.RIGHT, Alignment.RIGHT)
	entries_column_widths: Tuple[float, ...] = (25, 105, 20, 25)
	entries_padding_bottom: float = 15
	entries_padding_top: float = 10
	font: str = "helvetica"
	font_size: float = 12
	page_max_y: float = 260
	page_no_x: float = 15
	page_no_y: float = 277
	page_no_cell_height: float = 5
	page_padding_left: float = 15
	page_padding_top: float = 12.5
	title_cell_height: float = 6
	title_font_size: float = 15
	title_margin_top: float = 85

	def __post_init__(self) -> None:
		widths = tuple(float(w) for w in self.entries_column_widths)
		if len(widths) != 4:
			raise ConfigurationError(f"entries_column_widths needs 4 values, got {len(widths)}")
		alignment = tuple(Alignment.coerce(a) for a in self.entries_column_alignment)
		if len(alignment) != 4:
			raise ConfigurationError(f"entries_column_alignment needs 4 values, got {len(alignment)}")
		# Frozen: normalise through object.__setattr__
		object.__setattr__(self, "entries_column_widths", widths)
		object.__setattr__(self, "entries_column_alignment", alignment)

	@classmethod
	def from_dict(cls, data: Optional[Mapping[str, Any]] = None) -> "LayoutConfig":
		# Merge provided values over defaults; unknown keys are reported and dropped
		defaults = {f.name: getattr(cls(), f.name) for f in fields(cls)}
		data = dict(data or {})
		unknown = sorted(k for k in data if k not in defaults)
		if unknown:
			logger.warning("Ignoring unknown layout keys: %s", ", ".join(unknown))
		merged: Dict[str, Any] = {**defaults, **{k: v for k, v in data.items() if k in defaults}}
		return cls(**merged)

	def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "LayoutConfig":
		"""Return a copy of this config with `overrides` applied on top."""
		return LayoutConfig.from_dict({**self.to_dict(), **dict(overrides or {})})

	def to_dict(self) -> Dict[str, Any]:
		d = asdict(self)
		d["entries_column_alignment"] = [a.value for a in self.entries_column_alignment]
		d["entries_column_widths"] = list(self.entries_column_widths)
		return d


def load_layout(path: Union[str, Path]) -> LayoutConfig:
	"""Load layout overrides from a UTF-8 JSON object and merge them over the defaults."""
	p = Path(path)
	with p.open("r", encoding="utf-8") as f:
		raw = json.load(f)
	if not isinstance(raw, dict):
		raise ConfigurationError(f"Layout file {p} must contain a JSON object")
	return LayoutConfig.from_dict(raw)
