from __future__ import annotations

import io
from pathlib import Path
from typing import Mapping

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError

from invoicepdf.core.errors import CanvasError


def _open_template(template_path: Path | str) -> PdfReader:
	template_path = Path(template_path)
	try:
		return PdfReader(str(template_path))
	except (OSError, PdfReadError) as exc:
		raise CanvasError(f"Cannot read template {template_path}: {exc}") from exc


def count_template_pages(template_path: Path | str) -> int:
	reader = _open_template(template_path)
	count = len(reader.pages)
	if count == 0:
		raise CanvasError(f"Template {template_path} has no pages")
	return count


def apply_template(content: bytes, template_path: Path | str, page_map: Mapping[int, int]) -> bytes:
	"""Put template pages underneath the rendered pages.

	page_map maps a 1-based rendered page number to the 1-based template page
	drawn beneath it. Pages missing from the map are copied unchanged.
	"""
	tpl_reader = _open_template(template_path)
	ovl_reader = PdfReader(io.BytesIO(content))

	writer = PdfWriter()

	for number, overlay_page in enumerate(ovl_reader.pages, start=1):
		template_index = page_map.get(number)
		if template_index is None:
			writer.add_page(overlay_page)
			continue
		# Fresh blank page per rendered page so a reused template page is never merged twice
		box = overlay_page.mediabox
		page = writer.add_blank_page(width=float(box.width), height=float(box.height))
		page.merge_page(tpl_reader.pages[template_index - 1])
		page.merge_page(overlay_page)

	buf = io.BytesIO()
	writer.write(buf)
	return buf.getvalue()
