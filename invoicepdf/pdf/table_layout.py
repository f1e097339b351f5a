# invoicepdf/pdf/table_layout.py
from __future__ import annotations

from functools import partial
from typing import Optional, Sequence

from invoicepdf.core.amounts import format_amount
from invoicepdf.core.layout import Alignment, LayoutConfig
from invoicepdf.core.locale import Locale
from invoicepdf.data.models import Entry
from invoicepdf.pdf.canvas import Canvas
from invoicepdf.pdf.page_flow import PageFlow

# Header labels, in column order
HEADER_KEYS = ("quantity", "item", "price", "total")


class TableLayout:
    """
    Item table: bold header (repeated on every page the table spans), one row
    per entry and a totals row.

    A row is as tall as its wrapped description; quantity, price and line total
    sit on the row's first line.
    """

    def __init__(self, canvas: Canvas, flow: PageFlow, locale: Locale, layout: LayoutConfig) -> None:
        self.canvas = canvas
        self.flow = flow
        self.locale = locale
        self.layout = layout

    def render_header(self, widths: Sequence[float], alignment: Sequence[Alignment]) -> None:
        c = self.canvas
        h = self.layout.title_cell_height
        c.set_font("", "B")
        for key, width, align in zip(HEADER_KEYS, widths, alignment):
            c.cell(width, h, self.locale.t(key), "BT", 0, align.value)
        c.set_font("", "")
        c.ln(h)

    def render_row(self, entry: Entry, widths: Sequence[float], alignment: Sequence[Alignment]) -> float:
        """Draw one entry at the cursor and return the Y just below its tallest cell."""
        c = self.canvas
        h = self.layout.content_cell_height
        current_y = self.flow.y

        c.cell(widths[0], h, format_amount(entry.quantity, self.locale), "", 0, alignment[0].value)
        next_y = max(current_y, c.multi_cell(widths[1], h, entry.description, "", alignment[1].value))

        self.flow.set_xy(self.layout.page_padding_left + widths[0] + widths[1], current_y)
        c.cell(widths[2], h, format_amount(entry.price, self.locale), "", 0, alignment[2].value)
        c.cell(widths[3], h, format_amount(entry.line_total, self.locale), "", 1, alignment[3].value)
        return next_y

    def render_totals(self, widths: Sequence[float], alignment: Sequence[Alignment]) -> None:
        c = self.canvas
        h = self.layout.content_cell_height
        c.set_font("", "B")
        for width in widths[:3]:
            c.cell(width, h, "", "BT")
        c.cell(widths[3], h, self.flow.variables.get("total", ""), "BT", 0, alignment[3].value)
        c.set_font("", "")

    def render(
        self,
        entries: Sequence[Entry],
        widths: Optional[Sequence[float]] = None,
        alignment: Optional[Sequence[Alignment]] = None,
    ) -> float:
        """Lay out the whole table starting at the cursor. Returns the Y below the last row."""
        widths = tuple(widths or self.layout.entries_column_widths)
        alignment = tuple(Alignment.coerce(a) for a in (alignment or self.layout.entries_column_alignment))

        self.render_header(widths, alignment)
        next_y = self.flow.y

        def emit(entry: Entry) -> None:
            nonlocal next_y
            next_y = self.render_row(entry, widths, alignment)

        for entry in entries:
            self.flow.set_y(next_y)
            self.flow.advance_or_break(
                partial(emit, entry),
                on_new_page=partial(self.render_header, widths, alignment),
            )

        self.flow.set_y(next_y)
        self.render_totals(widths, alignment)
        return next_y
