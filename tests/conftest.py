from __future__ import annotations

from dataclasses import dataclass
from typing import List

import pytest

from invoicepdf.data.models import Entry, InvoiceContent
from invoicepdf.pdf.canvas import ReportLabCanvas


@dataclass
class Run:
    page: int
    x: float
    y: float
    text: str
    style: str


@dataclass
class CellCall:
    page: int
    x: float
    y: float
    w: float
    h: float
    text: str
    border: str
    style: str


class RecordingCanvas(ReportLabCanvas):
    """Real ReportLab canvas that also records every text run and cell it draws."""

    def __init__(self) -> None:
        super().__init__()
        self.runs: List[Run] = []
        self.cells: List[CellCall] = []

    def _draw_text(self, x: float, y: float, text: str) -> None:
        self.runs.append(Run(self.page_no(), x, y, text, self.font_style))
        super()._draw_text(x, y, text)

    def cell(self, w, h, text="", border="", ln=0, align="L"):
        self.cells.append(CellCall(self.page_no(), self.x, self.y, w, h, text, border, self.font_style))
        super().cell(w, h, text, border, ln, align)

    def texts(self, page: int | None = None) -> List[str]:
        return [r.text for r in self.runs if page is None or r.page == page]


@pytest.fixture
def recording_canvas() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture
def sample_content() -> InvoiceContent:
    return InvoiceContent(
        title="Invoice No. 1",
        client_address=["Jane Doe", "Example Street 42", "1337 Demo City"],
        entries=[
            Entry("Hot air", 11, 8),
            Entry("Something cool", 5, 20),
        ],
        before_info=["<b>Date:</b> June 10, 2021"],
        after_info=["All prices in EUR.", "", "This invoice is due on <b>June 20, 2021</b>."],
    )


def many_entries(n: int) -> List[Entry]:
    return [Entry(f"Item {i}", 1, 10) for i in range(1, n + 1)]
