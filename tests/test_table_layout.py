from __future__ import annotations

import pytest

from invoicepdf.data.models import Entry, InvoiceContent
from invoicepdf.pdf.canvas import CELL_MARGIN, split_lines
from invoicepdf.pdf.invoice_generator import Invoice

from conftest import RecordingCanvas, many_entries


def render(content: InvoiceContent, **layout) -> RecordingCanvas:
    invoice = Invoice(content)
    if layout:
        invoice.set_layout(layout)
    canvas = RecordingCanvas()
    invoice.render(canvas)
    return canvas


def quantity_cells(canvas: RecordingCanvas):
    # Quantity cells: first column, no border (header and totals rows have one)
    return [c for c in canvas.cells if c.w == 25 and c.x == pytest.approx(15) and c.border == "" and c.text]


def test_header_repeats_on_every_page() -> None:
    content = InvoiceContent("Invoice", ["Jane Doe"], many_entries(100))
    canvas = render(content)
    pages = {c.page for c in quantity_cells(canvas)}
    assert pages == {1, 2, 3}
    headers = [c for c in canvas.cells if c.text == "Quantity"]
    assert [h.page for h in headers] == [1, 2, 3]
    assert all(h.style == "B" and h.border == "BT" for h in headers)


def test_rows_continue_below_header_on_new_page() -> None:
    content = InvoiceContent("Invoice", ["Jane Doe"], many_entries(40))
    canvas = render(content)
    header = [c for c in canvas.cells if c.text == "Quantity" and c.page == 2][0]
    first_row = [c for c in quantity_cells(canvas) if c.page == 2][0]
    assert header.y == pytest.approx(45)
    assert first_row.y == pytest.approx(45 + 6)


@pytest.mark.parametrize("page_max_y, rows_on_first_page", [(136, 3), (136.01, 4)])
def test_break_happens_exactly_at_threshold(page_max_y: float, rows_on_first_page: int) -> None:
    # Table header at 105 + 10, first row at 121, rows 5 mm high
    content = InvoiceContent("Invoice", ["Jane Doe"], many_entries(6))
    canvas = render(content, page_max_y=page_max_y)
    first_page_rows = [c for c in quantity_cells(canvas) if c.page == 1]
    assert len(first_page_rows) == rows_on_first_page


def test_row_height_follows_wrapped_description() -> None:
    description = " ".join(["consulting"] * 40)
    content = InvoiceContent("Invoice", ["Jane Doe"], [Entry(description, 2, 150), Entry("Short", 1, 1)])
    canvas = render(content)

    measure = RecordingCanvas()
    measure.set_font("helvetica", "", 12)
    lines = split_lines(description, 105 - 2 * CELL_MARGIN, measure.string_width)
    assert len(lines) > 1

    rows = quantity_cells(canvas)
    top = rows[0].y
    assert rows[1].y == pytest.approx(top + len(lines) * 5)

    # Price and line total sit on the row's first line, not its last
    price = [c for c in canvas.cells if c.text == "150.00"][0]
    line_total = [c for c in canvas.cells if c.text == "300.00"][0]
    assert price.y == pytest.approx(top)
    assert line_total.y == pytest.approx(top)
    assert price.x == pytest.approx(15 + 25 + 105)


def test_totals_row(sample_content) -> None:
    canvas = render(sample_content)
    totals = [c for c in canvas.cells if c.border == "BT" and c.style == "B" and c.h == 5]
    assert [c.text for c in totals] == ["", "", "", "188.00"]
    assert len({c.y for c in totals}) == 1
