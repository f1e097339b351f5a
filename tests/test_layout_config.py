from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from invoicepdf.core.errors import ConfigurationError
from invoicepdf.core.layout import Alignment, LayoutConfig, load_layout


def test_defaults() -> None:
	layout = LayoutConfig()
	assert layout.entries_column_widths == (25, 105, 20, 25)
	assert layout.entries_column_alignment == (Alignment.RIGHT, Alignment.LEFT, Alignment.RIGHT, Alignment.RIGHT)
	assert layout.page_max_y == 260
	assert layout.content_margin_top_first == 105
	assert layout.content_margin_top == 45


def test_override_wins_and_unknown_keys_are_ignored(caplog: pytest.LogCaptureFixture) -> None:
	with caplog.at_level(logging.WARNING):
		layout = LayoutConfig.from_dict({"page_max_y": 200, "fontSize": 9})
	assert layout.page_max_y == 200
	assert layout.font_size == 12
	assert "fontSize" in caplog.text


def test_alignment_strings_are_coerced() -> None:
	layout = LayoutConfig.from_dict({"entries_column_alignment": ["left", "L", "right", "R"]})
	assert layout.entries_column_alignment == (Alignment.LEFT, Alignment.LEFT, Alignment.RIGHT, Alignment.RIGHT)


def test_bad_columns_raise() -> None:
	with pytest.raises(ConfigurationError):
		LayoutConfig.from_dict({"entries_column_widths": [10, 20, 30]})
	with pytest.raises(ConfigurationError):
		LayoutConfig.from_dict({"entries_column_alignment": ["L", "R", "C", "R"]})


def test_config_is_immutable() -> None:
	layout = LayoutConfig()
	with pytest.raises(AttributeError):
		layout.page_max_y = 100  # type: ignore[misc]


def test_merged_keeps_earlier_overrides() -> None:
	layout = LayoutConfig.from_dict({"font_size": 10}).merged({"page_max_y": 250})
	assert layout.font_size == 10
	assert layout.page_max_y == 250


def test_load_layout(tmp_path: Path) -> None:
	p = tmp_path / "layout.json"
	p.write_text(json.dumps({"entries_column_widths": [20, 110, 20, 25]}), encoding="utf-8")
	assert load_layout(p).entries_column_widths == (20, 110, 20, 25)

	p.write_text("[]", encoding="utf-8")
	with pytest.raises(ConfigurationError):
		load_layout(p)
