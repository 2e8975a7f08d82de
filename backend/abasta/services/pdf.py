"""Global report rendered as an A4 PDF with the reportlab canvas API."""

import logging
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from abasta.middleware.exceptions import BadRequestError
from abasta.schemas.report import GlobalReportOut

logger = logging.getLogger("abasta.pdf")

MARGIN = 20 * 2.83  # 20 mm in points
LINE = 14


class _Writer:
    """Top-down text cursor that starts a new page when it runs out of room."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.width, self.height = A4
        self.y = self.height - MARGIN

    def _room(self, needed: float = LINE) -> None:
        if self.y - needed < MARGIN:
            self.c.showPage()
            self.y = self.height - MARGIN

    def heading(self, text: str, size: int = 14) -> None:
        self._room(size + 10)
        self.c.setFont("Helvetica-Bold", size)
        self.c.drawString(MARGIN, self.y, text)
        self.y -= size + 8

    def row(self, *cells: str, bold: bool = False) -> None:
        """Left-aligned first cell, right-aligned remaining cells."""
        self._room()
        self.c.setFont("Helvetica-Bold" if bold else "Helvetica", 10)
        self.c.drawString(MARGIN, self.y, cells[0][:60])
        right_cols = cells[1:]
        if right_cols:
            step = (self.width - MARGIN * 2) * 0.5 / len(right_cols)
            x = self.width * 0.5
            for cell in right_cols:
                x += step
                self.c.drawRightString(x, self.y, cell)
        self.y -= LINE

    def gap(self) -> None:
        self.y -= LINE // 2


def render_global_report_pdf(report: GlobalReportOut) -> bytes:
    try:
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=A4)
        c.setTitle(f"Abasta global report - {report.company_name}")
        w = _Writer(c)

        w.heading("Abasta - Global report", size=18)
        w.row(report.company_name)
        w.row(
            f"Period: {report.period_start:%Y-%m-%d %H:%M} to {report.period_end:%Y-%m-%d %H:%M}"
        )
        w.gap()

        w.heading("Summary")
        w.row("Total orders", str(report.total_orders))
        w.row("Total spend", f"{report.total_spend:.2f}")
        w.row("Average order value", f"{report.average_order_value:.2f}")
        w.gap()

        w.heading("Spend by supplier")
        w.row("Supplier", "Orders", "Spend", "%", bold=True)
        for s in report.spend_by_supplier:
            w.row(s.supplier_name, str(s.order_count), f"{s.total_spend:.2f}", f"{s.percentage:.2f}")
        w.gap()

        w.heading("Top products")
        w.row("Product", "Quantity", "Spend", bold=True)
        for p in report.top_products:
            w.row(p.product_name, f"{p.total_quantity:.2f}", f"{p.total_spend:.2f}")

        c.showPage()
        c.save()
        return buffer.getvalue()
    except Exception as e:
        logger.error("PDF rendering failed: %s", e, exc_info=True)
        raise BadRequestError(f"Could not generate the report PDF: {e}") from e
