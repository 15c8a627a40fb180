"""Invoice PDF rendering with reportlab."""

import io
from datetime import datetime
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import StudioConfig, get_config
from ..core.logger import audit_log, get_logger
from ..models.finance import Invoice

logger = get_logger(__name__)

ACCENT = HexColor("#c67548")
MUTED = HexColor("#666666")

_base_styles = getSampleStyleSheet()

STYLE_STUDIO = ParagraphStyle(
    "Studio", parent=_base_styles["Title"], textColor=ACCENT, alignment=0, spaceAfter=2 * mm,
)
STYLE_HEADING = ParagraphStyle(
    "InvoiceHeading", parent=_base_styles["Heading3"], spaceBefore=4 * mm, spaceAfter=1 * mm,
)
STYLE_BODY = ParagraphStyle("InvoiceBody", parent=_base_styles["Normal"], fontSize=9.5, leading=13)
STYLE_SMALL = ParagraphStyle("InvoiceSmall", parent=STYLE_BODY, fontSize=8, textColor=MUTED)
STYLE_NUMBER = ParagraphStyle("InvoiceNumber", parent=STYLE_BODY, alignment=TA_RIGHT, fontSize=11)


def _date(value: Optional[datetime]) -> str:
    return value.strftime("%d/%m/%Y") if value else "-"


def _money(amount: float, currency: str) -> str:
    return f"{amount or 0:,.2f} {currency}"


def _items_table(invoice: Invoice, currency: str) -> Table:
    rows: List[list] = [["Description", "Qty", "Unit price", "Total"]]
    for item in invoice.items or []:
        rows.append([
            Paragraph(escape(str(item.get('description', ''))), STYLE_BODY),
            str(item.get('quantity', 1)),
            _money(item.get('unit_price', 0), currency),
            _money(item.get('total', 0), currency),
        ])

    table = Table(rows, colWidths=[95 * mm, 15 * mm, 32 * mm, 32 * mm], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), ACCENT),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LINEBELOW", (0, 1), (-1, -1), 0.25, colors.lightgrey),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    return table


def _totals_table(invoice: Invoice, currency: str) -> Table:
    rows = [["Subtotal", _money(invoice.subtotal, currency)]]
    if invoice.tax_rate:
        rows.append([f"Tax ({invoice.tax_rate:g}%)", _money(invoice.tax_amount, currency)])
    if invoice.discount:
        rows.append(["Discount", f"-{_money(invoice.discount, currency)}"])
    rows.append(["Total", _money(invoice.total_amount, currency)])
    rows.append(["Paid", _money(invoice.paid_amount, currency)])
    rows.append(["Balance due", _money(invoice.balance, currency)])

    total_row = len(rows) - 3
    table = Table(rows, colWidths=[40 * mm, 34 * mm], hAlign="RIGHT")
    table.setStyle(TableStyle([
        ("FONTSIZE", (0, 0), (-1, -1), 9.5),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("FONTNAME", (0, total_row), (-1, total_row), "Helvetica-Bold"),
        ("LINEABOVE", (0, total_row), (-1, total_row), 0.75, ACCENT),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("TEXTCOLOR", (0, -1), (-1, -1), ACCENT),
    ]))
    return table


def render_invoice_pdf(invoice: Invoice, studio: Optional[StudioConfig] = None) -> bytes:
    """Render an invoice as an A4 PDF and return its bytes."""
    studio = studio or get_config().studio
    currency = studio.currency
    buffer = io.BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=16 * mm,
        bottomMargin=16 * mm,
        title=f"Invoice {invoice.invoice_number}",
        author=studio.name,
    )

    contact = " | ".join(filter(None, [studio.email, studio.phone, studio.location]))
    header = Table(
        [[
            [Paragraph(escape(studio.name), STYLE_STUDIO), Paragraph(escape(contact), STYLE_SMALL)],
            [
                Paragraph(f"<b>INVOICE {invoice.invoice_number}</b>", STYLE_NUMBER),
                Paragraph(f"Issued: {_date(invoice.issue_date)}", STYLE_NUMBER),
                Paragraph(f"Due: {_date(invoice.due_date)}", STYLE_NUMBER),
            ],
        ]],
        colWidths=[100 * mm, 74 * mm],
    )
    header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))

    client_lines = "<br/>".join(filter(None, [
        f"<b>{escape(invoice.client_name)}</b>",
        escape(invoice.client_email or ""),
        escape(invoice.client_phone or ""),
        escape(invoice.client_address or ""),
    ]))
    event_lines = "<br/>".join(filter(None, [
        f"<b>{escape(invoice.event_type or '-')}</b>",
        f"Date: {_date(invoice.event_date)}",
        escape(invoice.event_location or ""),
    ]))
    parties = Table(
        [[Paragraph("Billed to", STYLE_HEADING), Paragraph("Event", STYLE_HEADING)],
         [Paragraph(client_lines, STYLE_BODY), Paragraph(event_lines, STYLE_BODY)]],
        colWidths=[87 * mm, 87 * mm],
    )
    parties.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))

    story = [
        header,
        Spacer(1, 6 * mm),
        parties,
        Spacer(1, 6 * mm),
        _items_table(invoice, currency),
        Spacer(1, 4 * mm),
        _totals_table(invoice, currency),
    ]

    if invoice.notes:
        story += [Paragraph("Notes", STYLE_HEADING), Paragraph(escape(invoice.notes), STYLE_BODY)]
    if invoice.terms_conditions:
        story += [Paragraph("Terms &amp; conditions", STYLE_HEADING), Paragraph(escape(invoice.terms_conditions), STYLE_SMALL)]

    doc.build(story)
    return buffer.getvalue()


async def generate_and_store(session: AsyncSession, invoice: Invoice, cdn) -> str:
    """Render the PDF, upload it as a raw CDN asset and keep its URL on the invoice."""
    pdf = render_invoice_pdf(invoice)
    uploaded = await cdn.upload(
        pdf,
        folder="invoices",
        public_id=f"invoice_{invoice.invoice_number}",
        resource_type="raw",
        filename=f"{invoice.invoice_number}.pdf",
    )
    invoice.pdf_url = uploaded['secure_url']
    await session.commit()

    logger.info(f"Stored PDF for invoice {invoice.invoice_number} ({len(pdf)} bytes)")
    audit_log("INVOICE_PDF_GENERATED", invoice=invoice.invoice_number)
    return invoice.pdf_url
