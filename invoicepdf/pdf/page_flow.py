from __future__ import annotations

import logging
from typing import Callable, MutableMapping, Optional

from invoicepdf.core.layout import LayoutConfig
from invoicepdf.core.locale import Locale
from invoicepdf.pdf.canvas import Canvas
from invoicepdf.pdf.markup import MarkupRenderer

logger = logging.getLogger(__name__)


class PageFlow:
    """Owns the vertical cursor and decides when a new page starts.

    Every page gets the background template page (if any), the page number
    line and a cursor reset to the continuation top margin. The total page
    count in the page number line stays an alias until the canvas saves.
    """

    def __init__(
        self,
        canvas: Canvas,
        layout: LayoutConfig,
        locale: Locale,
        variables: MutableMapping[str, str],
        markup: Optional[MarkupRenderer] = None,
        template_pages: int = 0,
    ) -> None:
        self.canvas = canvas
        self.layout = layout
        self.locale = locale
        self.variables = variables
        self.markup = markup or MarkupRenderer(canvas, variables)
        self.template_pages = template_pages
        self.page = 0

    @property
    def y(self) -> float:
        return self.canvas.get_y()

    def set_y(self, y: float) -> None:
        self.canvas.set_y(y)

    def set_xy(self, x: float, y: float) -> None:
        self.canvas.set_xy(x, y)

    def ln(self, h: float) -> None:
        self.canvas.ln(h)

    def begin_page(self) -> None:
        self.canvas.add_page()
        self.page += 1
        self.variables["page"] = str(self.page)
        if self.template_pages > 0:
            # The last template page repeats for every page past the template's length
            self.canvas.use_template_page(min(self.page, self.template_pages))
        logger.debug("Started page %d", self.page)

        self.canvas.set_xy(self.layout.page_no_x, self.layout.page_no_y)
        self.markup.render(self.locale.t("page"), self.layout.page_no_cell_height)
        self.canvas.set_y(self.layout.content_margin_top)

    def needs_break(self) -> bool:
        return self.canvas.get_y() >= self.layout.page_max_y

    def break_if_needed(self, on_new_page: Optional[Callable[[], None]] = None) -> bool:
        """Start a new page if the cursor reached the break line. Returns True if it did."""
        if not self.needs_break():
            return False
        self.begin_page()
        if on_new_page is not None:
            on_new_page()
        return True

    def advance_or_break(
        self,
        render_row: Callable[[], None],
        on_new_page: Optional[Callable[[], None]] = None,
    ) -> bool:
        """Break the page first if needed, then emit the next unit."""
        broke = self.break_if_needed(on_new_page)
        render_row()
        return broke
