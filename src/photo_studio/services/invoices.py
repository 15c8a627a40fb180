"""Invoice numbering, totals and payment tracking."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_config
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.booking import Booking
from ..models.finance import PAYMENT_STATUSES, Invoice
from ..utils.date_utils import parse_datetime, utcnow

logger = get_logger(__name__)

DEFAULT_SERVICE = "Service photographique"
DEFAULT_PAYMENT_METHOD = "cash"

DATE_FIELDS = ('issue_date', 'due_date', 'payment_date', 'event_date')
UPDATABLE_FIELDS = {
    'client_name', 'client_email', 'client_phone', 'client_address',
    'event_type', 'event_date', 'event_location',
    'items', 'subtotal', 'tax_rate', 'tax_amount', 'discount', 'total_amount',
    'paid_amount', 'payment_status', 'payment_method', 'payment_date',
    'issue_date', 'due_date', 'notes', 'terms_conditions',
}


def format_invoice_number(year: int, sequence: int) -> str:
    return f"INV-{year}-{sequence:03d}"


def payment_status(paid: float, total: float) -> str:
    """``paid`` once the total is covered, ``partial`` below it, else ``unpaid``."""
    paid = paid or 0
    if paid > 0 and paid >= total:
        return 'paid'
    if paid > 0:
        return 'partial'
    return 'unpaid'


def normalize_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Fill in missing quantities and line totals."""
    normalized = []
    for item in items:
        if not item.get('description'):
            raise ValidationError("Each invoice item needs a description")
        quantity = item.get('quantity') or 1
        unit_price = float(item.get('unit_price') or 0)
        total = item.get('total')
        normalized.append({
            'description': item['description'],
            'quantity': quantity,
            'unit_price': unit_price,
            'total': round(float(total if total is not None else quantity * unit_price), 2),
        })
    return normalized


def calculate_totals(
    items: List[Dict[str, Any]],
    tax_rate: float = 0.0,
    discount: float = 0.0,
) -> Dict[str, float]:
    subtotal = round(sum(item['total'] for item in items), 2)
    tax_amount = round(subtotal * (tax_rate or 0) / 100, 2)
    total_amount = round(subtotal + tax_amount - (discount or 0), 2)
    return {'subtotal': subtotal, 'tax_amount': tax_amount, 'total_amount': total_amount}


class InvoiceService:
    """Invoices issued against bookings."""

    def __init__(self, config=None):
        self.config = config or get_config()

    async def next_invoice_number(self, session: AsyncSession, year: Optional[int] = None) -> str:
        """Next ``INV-YYYY-NNN``; numbering restarts at 001 every year."""
        year = year or utcnow().year
        prefix = f"INV-{year}-"
        result = await session.execute(
            select(Invoice.invoice_number).where(Invoice.invoice_number.startswith(prefix))
        )

        last = 0
        for number in result.scalars().all():
            suffix = number[len(prefix):]
            if suffix.isdigit():
                last = max(last, int(suffix))
        return format_invoice_number(year, last + 1)

    async def create_invoice(self, session: AsyncSession, booking_id: str, data: Dict[str, Any]) -> Invoice:
        """Issue an invoice for a booking; explicit amounts in ``data`` win."""
        booking = await session.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)

        requested_total = data.get('total_amount')
        if data.get('items'):
            items = normalize_items(data['items'])
        else:
            price = requested_total or booking.package_price or 0
            description = data.get('service_description') or (
                f"{booking.event_type} - {booking.package_name or DEFAULT_SERVICE}"
            )
            items = [{'description': description, 'quantity': 1, 'unit_price': price, 'total': price}]

        tax_rate = data.get('tax_rate') or 0
        discount = data.get('discount') or 0
        totals = calculate_totals(items, tax_rate, discount)
        subtotal = data.get('subtotal') or totals['subtotal']
        tax_amount = data.get('tax_amount') or round(subtotal * tax_rate / 100, 2)
        total_amount = requested_total or round(subtotal + tax_amount - discount, 2)
        paid_amount = data.get('paid_amount') or 0

        issue_date = parse_datetime(data.get('issue_date')) or utcnow()
        invoice = Invoice(
            invoice_number=await self.next_invoice_number(session, issue_date.year),
            booking_id=booking.id,
            client_name=booking.name,
            client_email=booking.email,
            client_phone=booking.phone,
            client_address=data.get('client_address') or booking.location,
            event_type=booking.event_type,
            event_date=booking.event_date,
            event_location=booking.location,
            items=items,
            subtotal=subtotal,
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            discount=discount,
            total_amount=total_amount,
            paid_amount=paid_amount,
            payment_status=payment_status(paid_amount, total_amount),
            payment_method=data.get('payment_method'),
            payment_date=parse_datetime(data.get('payment_date')),
            issue_date=issue_date,
            due_date=parse_datetime(data.get('due_date')),
            notes=data.get('notes'),
            terms_conditions=data.get('terms_conditions') or self.config.studio.invoice_terms,
        )
        session.add(invoice)
        await session.commit()

        audit_log("INVOICE_CREATED", invoice=invoice.invoice_number, booking_id=booking_id, total=total_amount)
        return invoice

    async def get_invoice(self, session: AsyncSession, invoice_id: str) -> Invoice:
        invoice = await session.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    async def list_invoices(self, session: AsyncSession, booking_id: Optional[str] = None) -> List[Invoice]:
        stmt = select(Invoice).order_by(Invoice.created_at.desc())
        if booking_id:
            stmt = stmt.where(Invoice.booking_id == booking_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def update_invoice(self, session: AsyncSession, invoice_id: str, data: Dict[str, Any]) -> Invoice:
        """Patch an invoice, keeping totals and payment status consistent."""
        invoice = await self.get_invoice(session, invoice_id)
        updates = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}

        if updates.get('payment_status') and updates['payment_status'] not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid payment status: {updates['payment_status']}")

        for name in DATE_FIELDS:
            if name in updates:
                updates[name] = parse_datetime(updates[name])

        if updates.get('items'):
            updates['items'] = normalize_items(updates['items'])
            tax_rate = updates.get('tax_rate', invoice.tax_rate)
            discount = updates.get('discount', invoice.discount)
            updates.update(calculate_totals(updates['items'], tax_rate, discount))
        elif updates.get('payment_status') == 'paid':
            updates['paid_amount'] = invoice.total_amount
            updates['payment_method'] = updates.get('payment_method') or DEFAULT_PAYMENT_METHOD
            updates.setdefault('payment_date', utcnow())

        if 'paid_amount' in updates or 'items' in updates:
            updates['payment_status'] = payment_status(
                updates.get('paid_amount', invoice.paid_amount),
                updates.get('total_amount', invoice.total_amount),
            )

        invoice.update_from_dict(updates)
        await session.commit()

        if 'paid_amount' in updates:
            audit_log(
                "INVOICE_PAYMENT",
                invoice=invoice.invoice_number,
                paid=invoice.paid_amount,
                status=invoice.payment_status,
            )
        return invoice

    async def delete_invoice(self, session: AsyncSession, invoice_id: str) -> None:
        invoice = await self.get_invoice(session, invoice_id)
        await session.delete(invoice)
        await session.commit()
        audit_log("INVOICE_DELETED", invoice=invoice.invoice_number)
