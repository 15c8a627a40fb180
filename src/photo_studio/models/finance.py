"""Finance models: invoices, expenses and salary payments."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photo_studio.models.base import Base

PAYMENT_STATUSES = ('unpaid', 'partial', 'paid')


class Invoice(Base):
    """An invoice issued for a booking."""

    __tablename__ = 'invoices'

    invoice_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        comment="INV-YYYY-NNN"
    )
    booking_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey('bookings.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )

    # Client and event details copied from the booking
    client_name: Mapped[str] = mapped_column(String(200), nullable=False)
    client_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    client_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    client_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    event_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    event_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    event_location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # [{"description", "quantity", "unit_price", "total"}]
    items: Mapped[List[dict]] = mapped_column(JSON, default=list, nullable=False)
    subtotal: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    tax_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    tax_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    paid_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), default='unpaid', nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    issue_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    terms_conditions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pdf_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    booking = relationship("Booking")

    __table_args__ = (
        Index('idx_invoices_issue_date', 'issue_date'),
        Index('idx_invoices_payment_status', 'payment_status'),
    )

    @property
    def balance(self) -> float:
        return round(self.total_amount - self.paid_amount, 2)


class Expense(Base):
    """A business expense."""

    __tablename__ = 'expenses'

    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class SalaryPayment(Base):
    """A salary payment to a team member."""

    __tablename__ = 'salary_payments'

    team_member_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey('team_members.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )
    gross_amount: Mapped[float] = mapped_column(Float, nullable=False)
    net_amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False, comment="pending, paid")
    period: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, comment="YYYY-MM")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    team_member = relationship("TeamMember", lazy="selectin")

    @property
    def team_member_name(self) -> Optional[str]:
        return self.team_member.name if self.team_member else None
