from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen.canvas import Canvas as _RLCanvas

from invoicepdf.core.errors import CanvasError
from invoicepdf.pdf.template import apply_template, count_template_pages

logger = logging.getLogger(__name__)


# ===== Page geometry (mm, top-down like the layout config) =====
PAGE_SIZE = A4
PAGE_WIDTH, PAGE_HEIGHT = PAGE_SIZE
PAGE_WIDTH_MM = PAGE_WIDTH / mm
PAGE_HEIGHT_MM = PAGE_HEIGHT / mm

# Horizontal padding inside cells
CELL_MARGIN = 1.0
LINE_WIDTH = 0.2
# Baseline offset below a cell's vertical centre, as a fraction of the font size
BASELINE_RATIO = 0.3

# (regular, bold, italic, bold-italic)
FONT_FAMILIES: Dict[str, Tuple[str, str, str, str]] = {
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "arial": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "times": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}


class Canvas(Protocol):
    """Drawing surface the layout engine writes through.

    Coordinates are millimetres from the top-left corner of the page. The
    cursor (x, y) is the top-left of the next cell.
    """

    def add_page(self) -> None: ...
    def page_no(self) -> int: ...
    def get_x(self) -> float: ...
    def get_y(self) -> float: ...
    def set_x(self, x: float) -> None: ...
    def set_y(self, y: float) -> None: ...
    def set_xy(self, x: float, y: float) -> None: ...
    def ln(self, h: Optional[float] = None) -> None: ...
    def set_margins(self, left: float, top: float, right: Optional[float] = None) -> None: ...
    def set_font(self, family: str = "", style: str = "", size: float = 0) -> None: ...

    @property
    def font_style(self) -> str: ...

    def cell(self, w: float, h: float, text: str = "", border: str = "", ln: int = 0, align: str = "L") -> None: ...
    def multi_cell(self, w: float, h: float, text: str, border: str = "", align: str = "L") -> float: ...
    def write(self, h: float, text: str) -> None: ...
    def alias_total_pages(self, alias: str = "{pages}") -> None: ...
    def set_source_file(self, path: Path | str) -> int: ...
    def use_template_page(self, index: int) -> None: ...
    def output(self, path: Path | str) -> None: ...


class _PageCountCanvas(_RLCanvas):
    """ReportLab canvas that holds finished pages until save().

    Text containing the page-count alias is queued per page and drawn once the
    final number of pages is known.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: List[dict] = []
        self.deferred_text: List[Tuple[float, float, str, str, float, bool]] = []
        self.page_count_alias = "{pages}"

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self.deferred_text = []
        self._startPage()

    def save(self):
        total = str(len(self._saved_page_states))
        for state in self._saved_page_states:
            self.__dict__.update(state)
            for x, y, text, font_name, size, underline in self.deferred_text:
                _draw_run(self, x, y, text.replace(self.page_count_alias, total), font_name, size, underline)
            super().showPage()
        super().save()


def _draw_run(c: _RLCanvas, x: float, y: float, text: str, font_name: str, size: float, underline: bool) -> None:
    # x, y in points, y is the baseline
    c.setFont(font_name, size)
    c.drawString(x, y, text)
    if underline:
        width = pdfmetrics.stringWidth(text, font_name, size)
        c.setLineWidth(size * 0.05)
        c.line(x, y - size * 0.1, x + width, y - size * 0.1)
        c.setLineWidth(LINE_WIDTH * mm)


def split_lines(text: str, max_width: float, width_fn) -> List[str]:
    """Word-wrap `text` so each line fits `max_width` as measured by `width_fn`.

    Explicit newlines start a new line. Words wider than a whole line are broken
    between characters.
    """
    lines: List[str] = []
    for paragraph in (text or "").replace("\r", "").split("\n"):
        words = paragraph.split()
        line: List[str] = []
        for w in words:
            trial = " ".join(line + [w])
            if width_fn(trial) <= max_width:
                line.append(w)
                continue
            if line:
                lines.append(" ".join(line))
                line = []
            # Hard-break words that do not fit on an empty line
            while width_fn(w) > max_width and len(w) > 1:
                cut = len(w) - 1
                while cut > 1 and width_fn(w[:cut]) > max_width:
                    cut -= 1
                lines.append(w[:cut])
                w = w[cut:]
            line = [w]
        lines.append(" ".join(line))
    return lines


class ReportLabCanvas:
    """Canvas backed by ReportLab, with an FPDF-style text cursor on A4 pages.

    One instance renders one document; output() finalizes it.
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._c = _PageCountCanvas(self._buffer, pagesize=PAGE_SIZE)
        self._c.setLineWidth(LINE_WIDTH * mm)
        self._page = 0
        self.x = 0.0
        self.y = 0.0
        self.l_margin = 10.0
        self.t_margin = 10.0
        self.r_margin = 10.0
        self.family = "helvetica"
        self.bold = False
        self.italic = False
        self.underline = False
        self.font_size = 12.0
        self._last_h = 0.0
        self._template_path: Optional[Path] = None
        self._template_pages: Dict[int, int] = {}

    # ----- pages and cursor -----
    def add_page(self) -> None:
        if self._page > 0:
            self._c.showPage()
        self._page += 1
        self.x = self.l_margin
        self.y = self.t_margin

    def page_no(self) -> int:
        return self._page

    def get_x(self) -> float:
        return self.x

    def get_y(self) -> float:
        return self.y

    def set_x(self, x: float) -> None:
        self.x = x if x >= 0 else PAGE_WIDTH_MM + x

    def set_y(self, y: float) -> None:
        self.x = self.l_margin
        self.y = y if y >= 0 else PAGE_HEIGHT_MM + y

    def set_xy(self, x: float, y: float) -> None:
        self.set_y(y)
        self.set_x(x)

    def ln(self, h: Optional[float] = None) -> None:
        self.x = self.l_margin
        self.y += self._last_h if h is None else h

    def set_margins(self, left: float, top: float, right: Optional[float] = None) -> None:
        self.l_margin = left
        self.t_margin = top
        self.r_margin = left if right is None else right

    # ----- fonts -----
    def set_font(self, family: str = "", style: str = "", size: float = 0) -> None:
        if family:
            fam = family.lower()
            if fam not in FONT_FAMILIES:
                raise CanvasError(f"Unknown font family: {family}")
            self.family = fam
        style = (style or "").upper()
        self.bold = "B" in style
        self.italic = "I" in style
        self.underline = "U" in style
        if size:
            self.font_size = float(size)

    @property
    def font_style(self) -> str:
        return ("B" if self.bold else "") + ("I" if self.italic else "") + ("U" if self.underline else "")

    @property
    def font_name(self) -> str:
        return FONT_FAMILIES[self.family][int(self.bold) + 2 * int(self.italic)]

    def string_width(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self.font_name, self.font_size) / mm

    # ----- drawing -----
    def _draw_text(self, x: float, y: float, text: str) -> None:
        """Draw `text` with its left edge at x and baseline at y (mm, top-down)."""
        px, py = x * mm, PAGE_HEIGHT - y * mm
        if self._c.page_count_alias in text:
            self._c.deferred_text.append((px, py, text, self.font_name, self.font_size, self.underline))
            return
        _draw_run(self._c, px, py, text, self.font_name, self.font_size, self.underline)

    def _draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        # Graphics state resets on every new page
        self._c.setLineWidth(LINE_WIDTH * mm)
        self._c.line(x1 * mm, PAGE_HEIGHT - y1 * mm, x2 * mm, PAGE_HEIGHT - y2 * mm)

    def _baseline(self, h: float) -> float:
        return self.y + 0.5 * h + BASELINE_RATIO * self.font_size / mm

    def cell(self, w: float, h: float, text: str = "", border: str = "", ln: int = 0, align: str = "L") -> None:
        if w == 0:
            w = PAGE_WIDTH_MM - self.r_margin - self.x
        sides = "LTRB" if str(border) == "1" else str(border or "").upper()
        x, y = self.x, self.y
        if "L" in sides:
            self._draw_line(x, y, x, y + h)
        if "T" in sides:
            self._draw_line(x, y, x + w, y)
        if "R" in sides:
            self._draw_line(x + w, y, x + w, y + h)
        if "B" in sides:
            self._draw_line(x, y + h, x + w, y + h)
        if text:
            align = (align or "L").upper()
            if align == "R":
                dx = w - CELL_MARGIN - self.string_width(text)
            elif align == "C":
                dx = (w - self.string_width(text)) / 2
            else:
                dx = CELL_MARGIN
            self._draw_text(x + dx, self._baseline(h), text)
        self._last_h = h
        if ln > 0:
            self.y += h
            if ln == 1:
                self.x = self.l_margin
        else:
            self.x += w

    def multi_cell(self, w: float, h: float, text: str, border: str = "", align: str = "L") -> float:
        if w == 0:
            w = PAGE_WIDTH_MM - self.r_margin - self.x
        lines = split_lines(text, w - 2 * CELL_MARGIN, self.string_width)
        sides = "LTRB" if str(border) == "1" else str(border or "").upper()
        x0 = self.x
        for i, line in enumerate(lines):
            b = "".join(s for s in "LR" if s in sides)
            if i == 0 and "T" in sides:
                b += "T"
            if i == len(lines) - 1 and "B" in sides:
                b += "B"
            self.x = x0
            self.cell(w, h, line, b, 2, align)
        self.x = self.l_margin
        return self.y

    def write(self, h: float, text: str) -> None:
        """Flowing text: wraps at the right margin and leaves the cursor after the last character."""
        self._last_h = h
        for i, paragraph in enumerate(text.split("\n")):
            if i:
                self.ln(h)
            self._write_run(h, paragraph)

    def _write_run(self, h: float, text: str) -> None:
        pending = text
        right = PAGE_WIDTH_MM - self.r_margin
        while pending:
            avail = right - self.x
            width = self.string_width(pending)
            if width <= avail:
                self._draw_text(self.x, self._baseline(h), pending)
                self.x += width
                return
            cut = self._fit_at_space(pending, avail)
            if cut is None:
                if self.x > self.l_margin + 1e-6:
                    # Nothing fits on the rest of this line, continue on the next
                    self.ln(h)
                    pending = pending.lstrip(" ")
                    continue
                cut = max(1, self._fit_chars(pending, avail))
            chunk = pending[:cut].rstrip(" ")
            if chunk:
                self._draw_text(self.x, self._baseline(h), chunk)
            pending = pending[cut:].lstrip(" ")
            self.ln(h)

    def _fit_at_space(self, text: str, avail: float) -> Optional[int]:
        best = None
        pos = text.find(" ")
        while pos != -1:
            if self.string_width(text[:pos]) > avail:
                break
            best = pos
            pos = text.find(" ", pos + 1)
        return best

    def _fit_chars(self, text: str, avail: float) -> int:
        n = 0
        while n < len(text) and self.string_width(text[: n + 1]) <= avail:
            n += 1
        return n

    # ----- document level -----
    def alias_total_pages(self, alias: str = "{pages}") -> None:
        self._c.page_count_alias = alias

    def set_source_file(self, path: Path | str) -> int:
        count = count_template_pages(path)
        self._template_path = Path(path)
        return count

    def use_template_page(self, index: int) -> None:
        if self._template_path is None:
            raise CanvasError("No template file set")
        self._template_pages[self._page] = index

    def output(self, path: Path | str) -> None:
        if self._page == 0:
            self.add_page()
        self._c.showPage()
        self._c.save()
        data = self._buffer.getvalue()
        if self._template_pages and self._template_path is not None:
            data = apply_template(data, self._template_path, self._template_pages)
        out = Path(path)
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            with out.open("wb") as f:
                f.write(data)
        except OSError as exc:
            raise CanvasError(f"Cannot write {out}: {exc}") from exc
        logger.debug("Wrote %d bytes to %s", len(data), out)
