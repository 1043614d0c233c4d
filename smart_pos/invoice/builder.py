from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable

from smart_pos.core.config import Settings, get_settings
from smart_pos.domain.money import compute_totals, format_money, format_rate
from smart_pos.domain.sales.finalizer import SoldItem, SoldItemsSnapshot, invoice_id_for
from smart_pos.errors import RenderError

logger = logging.getLogger(__name__)

TABLE_HEADERS = ["Item", "Qty", "Price", "Total"]
ITEM_COLUMN_WIDTHS = [85 * mm, 20 * mm, 30 * mm, 35 * mm]


@dataclass(frozen=True)
class BusinessInfo:
    name: str
    address_lines: tuple[str, ...] = ()
    tax_id: str = ""

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BusinessInfo":
        settings = settings or get_settings()
        return cls(
            name=settings.business_name,
            address_lines=tuple(settings.business_address_lines),
            tax_id=settings.business_tax_id,
        )


@dataclass(frozen=True)
class InvoiceLayout:
    title: str = "TAX INVOICE"
    tax_label: str = "GST"
    closing_message: str = "Thank you for your business!"
    rows_per_page: int = 20
    page_compression: bool = True
    pagesize: tuple[float, float] = field(default=A4)
    margin: float = 20 * mm

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "InvoiceLayout":
        settings = settings or get_settings()
        return cls(
            title=settings.invoice_title,
            tax_label=settings.tax_label,
            closing_message=settings.closing_message,
            rows_per_page=settings.invoice_rows_per_page,
            page_compression=settings.invoice_page_compression,
        )


def _is_amount(value) -> bool:
    return isinstance(value, Decimal) and value.is_finite() and value >= 0


def validate_snapshot(snapshot: SoldItemsSnapshot, tax_rate: Decimal) -> None:
    if not _is_amount(tax_rate):
        raise RenderError(f"tax rate must be a finite non-negative Decimal, got {tax_rate!r}")
    for index, item in enumerate(snapshot.items):
        if not isinstance(item.quantity, int) or isinstance(item.quantity, bool) or item.quantity < 1:
            raise RenderError(f"line {index} ({item.sku}): quantity must be a positive integer, got {item.quantity!r}")
        if not _is_amount(item.unit_price):
            raise RenderError(f"line {index} ({item.sku}): unit price must be a finite non-negative Decimal")
        if not isinstance(item.line_total, Decimal) or item.line_total != item.unit_price * item.quantity:
            raise RenderError(f"line {index} ({item.sku}): line total does not match price x quantity")


def paginate(items: tuple[SoldItem, ...], rows_per_page: int) -> list[tuple[SoldItem, ...]]:
    """Split table rows into page-sized chunks; an empty sale still gets one (empty) page."""
    if rows_per_page < 1:
        raise RenderError("rows_per_page must be at least 1")
    if not items:
        return [()]
    return [items[start : start + rows_per_page] for start in range(0, len(items), rows_per_page)]


def suggested_filename(snapshot: SoldItemsSnapshot) -> str:
    return f"invoice-{snapshot.invoice_id}.pdf"


class InvoiceDocumentBuilder:
    def __init__(self, layout: InvoiceLayout | None = None):
        self.layout = layout or InvoiceLayout()
        self.styles = getSampleStyleSheet()
        self._create_custom_styles()

    def _create_custom_styles(self) -> None:
        self.title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=self.styles["Heading1"],
            fontSize=20,
            spaceAfter=14,
            textColor=colors.black,
            fontName="Helvetica-Bold",
        )
        self.body_style = ParagraphStyle(
            "InvoiceBody",
            parent=self.styles["Normal"],
            fontSize=10,
            spaceAfter=2,
            textColor=colors.black,
        )
        self.cell_style = ParagraphStyle(
            "InvoiceCell",
            parent=self.styles["Normal"],
            fontSize=9,
            leading=11,
            textColor=colors.black,
        )
        self.closing_style = ParagraphStyle(
            "InvoiceClosing",
            parent=self.body_style,
            alignment=1,
        )

    def render(
        self,
        snapshot: SoldItemsSnapshot,
        tax_rate: Decimal,
        business_info: BusinessInfo,
        timestamp: datetime,
    ) -> bytes:
        validate_snapshot(snapshot, tax_rate)

        invoice_id = snapshot.invoice_id or invoice_id_for(timestamp)
        digest = snapshot.digest()
        layout = self.layout

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=layout.pagesize,
            rightMargin=layout.margin,
            leftMargin=layout.margin,
            topMargin=layout.margin,
            bottomMargin=layout.margin,
            title=f"{layout.title} {invoice_id}",
            author=business_info.name,
            subject=f"sale digest {digest}",
            creator="smart-pos",
            invariant=1,
            pageCompression=1 if layout.page_compression else 0,
        )

        story = []
        story.extend(self._build_header(business_info, invoice_id, timestamp))
        chunks = paginate(snapshot.items, layout.rows_per_page)
        for page_index, chunk in enumerate(chunks):
            if page_index:
                story.append(PageBreak())
            story.append(self._build_items_table(chunk))
        story.extend(self._build_totals_section(snapshot, tax_rate))
        story.extend(self._build_closing())

        def draw_footer(canvas, _doc):
            canvas.saveState()
            canvas.setFont("Helvetica", 7)
            canvas.drawString(layout.margin, layout.margin / 2, f"{invoice_id}  sha256:{digest[:16]}")
            canvas.drawRightString(
                layout.pagesize[0] - layout.margin,
                layout.margin / 2,
                f"Page {canvas.getPageNumber()}",
            )
            canvas.restoreState()

        doc.build(story, onFirstPage=draw_footer, onLaterPages=draw_footer)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(
            "invoice rendered: invoice_id=%s lines=%d table_pages=%d bytes=%d",
            invoice_id,
            len(snapshot.items),
            len(chunks),
            len(pdf_bytes),
        )
        return pdf_bytes

    def _build_header(self, business_info: BusinessInfo, invoice_id: str, timestamp: datetime):
        elements = [Paragraph(escape(self.layout.title), self.title_style)]

        for line in (business_info.name, *business_info.address_lines, business_info.tax_id):
            if line:
                elements.append(Paragraph(escape(line), self.body_style))

        elements.append(Spacer(1, 10))
        elements.append(HRFlowable(width="100%", thickness=1, color=colors.black))
        elements.append(Spacer(1, 10))

        elements.append(Paragraph(f"Invoice #: {escape(invoice_id)}", self.body_style))
        elements.append(Paragraph(f"Date: {timestamp.strftime('%Y-%m-%d %H:%M')}", self.body_style))
        elements.append(Spacer(1, 14))
        return elements

    def _build_items_table(self, chunk: tuple[SoldItem, ...]) -> Table:
        data = [TABLE_HEADERS]
        for item in chunk:
            data.append(
                [
                    Paragraph(escape(item.product_name), self.cell_style),
                    str(item.quantity),
                    format_money(item.unit_price),
                    format_money(item.line_total),
                ]
            )

        table = Table(data, colWidths=ITEM_COLUMN_WIDTHS, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return table

    def _build_totals_section(self, snapshot: SoldItemsSnapshot, tax_rate: Decimal):
        totals = compute_totals((item.line_total for item in snapshot.items), tax_rate)
        rows = [
            ["Subtotal:", format_money(totals.subtotal)],
            [f"{self.layout.tax_label} ({format_rate(tax_rate)}%):", format_money(totals.tax)],
            ["Total:", format_money(totals.total)],
        ]
        table = Table(rows, colWidths=[40 * mm, 35 * mm], hAlign="RIGHT")
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, -2), "Helvetica"),
                    ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
                ]
            )
        )
        return [
            Spacer(1, 8),
            HRFlowable(width="100%", thickness=1, color=colors.black),
            Spacer(1, 6),
            table,
        ]

    def _build_closing(self):
        return [Spacer(1, 36), Paragraph(escape(self.layout.closing_message), self.closing_style)]


def render(
    snapshot: SoldItemsSnapshot,
    tax_rate: Decimal,
    business_info: BusinessInfo,
    timestamp: datetime,
    layout: InvoiceLayout | None = None,
) -> bytes:
    return InvoiceDocumentBuilder(layout).render(snapshot, tax_rate, business_info, timestamp)
