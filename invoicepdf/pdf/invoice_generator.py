"""
Invoice PDF generator.

Lays out letterhead, title, text before the table, the item table and the
text after it, breaking pages as the content grows.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from invoicepdf.core.amounts import format_amount, sum_money
from invoicepdf.core.layout import LayoutConfig
from invoicepdf.core.locale import DEFAULT_LANGUAGE, Locale, LocaleTable
from invoicepdf.data.models import InvoiceContent
from invoicepdf.pdf.canvas import Canvas, ReportLabCanvas
from invoicepdf.pdf.markup import MarkupRenderer
from invoicepdf.pdf.page_flow import PageFlow
from invoicepdf.pdf.table_layout import TableLayout

logger = logging.getLogger(__name__)

PAGE_COUNT_ALIAS = "{pages}"


class Invoice:
    """
    Renders one invoice.

    Template, language, layout and variables are optional and may be set in any
    order before generate(). Each render uses its own canvas, cursor and
    variables.
    """

    def __init__(
        self,
        content: Union[InvoiceContent, Mapping[str, Any]],
        locales: Optional[LocaleTable] = None,
        canvas_factory: Callable[[], Canvas] = ReportLabCanvas,
    ) -> None:
        self.content = content if isinstance(content, InvoiceContent) else InvoiceContent.from_dict(content)
        self.locales = locales if locales is not None else LocaleTable()
        self.canvas_factory = canvas_factory
        self.language = DEFAULT_LANGUAGE
        self.layout = LayoutConfig()
        self.template_path: Optional[Path] = None
        self._variable_overrides: Dict[str, str] = {}

    def set_template(self, path: Union[str, Path]) -> None:
        """Use the pages of a PDF as backgrounds; the last one repeats for longer invoices."""
        self.template_path = Path(path)

    def set_language(self, code: str) -> None:
        self.language = code

    def set_layout(self, layout: Union[LayoutConfig, Mapping[str, Any], None] = None) -> None:
        if isinstance(layout, LayoutConfig):
            self.layout = layout
        else:
            self.layout = LayoutConfig.from_dict(layout)

    def set_variables(self, variables: Optional[Mapping[str, Any]] = None) -> None:
        self._variable_overrides = {str(k): str(v) for k, v in (variables or {}).items()}

    @property
    def total(self) -> Decimal:
        return sum_money(entry.line_total for entry in self.content.entries)

    def build_variables(self, locale: Locale) -> Dict[str, str]:
        # Caller values win over the computed ones
        return {
            "total": format_amount(self.total, locale),
            "page": "0",
            **self._variable_overrides,
        }

    def render(self, canvas: Canvas) -> int:
        """Lay out the whole invoice on `canvas`. Returns the number of pages."""
        layout = self.layout
        locale = self.locales.get(self.language)
        variables = self.build_variables(locale)

        canvas.set_font(layout.font, "", layout.font_size)
        canvas.set_margins(layout.page_padding_left, layout.page_padding_top)
        canvas.alias_total_pages(PAGE_COUNT_ALIAS)
        template_pages = canvas.set_source_file(self.template_path) if self.template_path else 0

        markup = MarkupRenderer(canvas, variables)
        flow = PageFlow(canvas, layout, locale, variables, markup, template_pages)
        table = TableLayout(canvas, flow, locale, layout)

        flow.begin_page()
        self._make_letterhead(canvas, flow)
        self._make_title(canvas, markup, flow)

        flow.set_y(layout.content_margin_top_first)
        self._render_info(self.content.before_info, markup, flow)

        flow.set_y(flow.y + layout.entries_padding_top)
        table.render(self.content.entries, layout.entries_column_widths, layout.entries_column_alignment)

        flow.set_y(flow.y + layout.entries_padding_bottom)
        self._render_info(self.content.after_info, markup, flow)
        return flow.page

    def generate(self, path: Union[str, Path]) -> None:
        """Render the invoice and write the PDF to `path`."""
        out = Path(path)
        logger.info("Building invoice PDF: %s", out)
        canvas = self.canvas_factory()
        pages = self.render(canvas)
        canvas.output(out)
        logger.info("PDF built: %s (%d pages)", out, pages)

    def _make_letterhead(self, canvas: Canvas, flow: PageFlow) -> None:
        layout = self.layout
        canvas.set_margins(layout.address_padding_left, layout.page_padding_top)
        flow.set_y(layout.address_margin_top)
        for line in self.content.client_address:
            canvas.cell(0, layout.content_cell_height, line, "", 1)
        canvas.set_margins(layout.page_padding_left, layout.page_padding_top)

    def _make_title(self, canvas: Canvas, markup: MarkupRenderer, flow: PageFlow) -> None:
        layout = self.layout
        flow.set_y(layout.title_margin_top)
        canvas.set_font("", "B", layout.title_font_size)
        markup.render(self.content.title, layout.title_cell_height)
        canvas.set_font("", "", layout.font_size)

    def _render_info(self, lines: Sequence[str], markup: MarkupRenderer, flow: PageFlow) -> None:
        for line in lines:
            markup.render(line, self.layout.content_cell_height)
            flow.ln(self.layout.content_cell_height)
            flow.break_if_needed()


def build_invoice_pdf(
    out_path: Union[str, Path],
    content: Union[InvoiceContent, Mapping[str, Any]],
    language: Optional[str] = None,
    template: Union[str, Path, None] = None,
    layout: Union[LayoutConfig, Mapping[str, Any], None] = None,
    variables: Optional[Mapping[str, Any]] = None,
    locales: Optional[LocaleTable] = None,
) -> None:
    """Build an invoice PDF in one call.

    content accepts an InvoiceContent or the mapping shape
    {"title", "clientAddress", "entries": [{"description", "quantity", "price"}], "beforeInfo"?, "afterInfo"?}.
    """
    invoice = Invoice(content, locales=locales)
    if template is not None:
        invoice.set_template(template)
    if language:
        invoice.set_language(language)
    if layout is not None:
        invoice.set_layout(layout)
    if variables:
        invoice.set_variables(variables)
    invoice.generate(out_path)
