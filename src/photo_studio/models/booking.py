"""Booking models: service packs, booking requests and calendar events."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photo_studio.models.base import Base

BOOKING_STATUSES = ('tracking', 'pending', 'approved', 'rejected', 'cancelled')


class Pack(Base):
    """A purchasable photography or videography service bundle."""

    __tablename__ = 'packs'

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    duration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    features: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    bookings: Mapped[List["Booking"]] = relationship("Booking", back_populates="pack")


class Booking(Base):
    """A booking request, or a ``tracking`` placeholder for an unfinished form."""

    __tablename__ = 'bookings'

    name: Mapped[str] = mapped_column(String(200), nullable=False, comment="Client name")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    time_slot: Mapped[str] = mapped_column(String(50), default='pending', nullable=False)
    location: Mapped[str] = mapped_column(String(500), default='pending', nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    package_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    package_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pack_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey('packs.id', ondelete='SET NULL'),
        nullable=True
    )

    # Multi-event bookings: [{"eventType", "eventDate", "timeSlot", "location"}]
    events: Mapped[Optional[List[dict]]] = mapped_column(JSON, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default='pending',
        nullable=False,
        comment="tracking, pending, approved, rejected, cancelled"
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    calendar_event_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    pack: Mapped[Optional["Pack"]] = relationship("Pack", back_populates="bookings", lazy="selectin")

    __table_args__ = (
        Index('idx_bookings_status', 'status'),
        Index('idx_bookings_event_date', 'event_date'),
        Index('idx_bookings_contact', 'name', 'phone'),
    )


class CalendarEvent(Base):
    """A confirmed shoot on the studio calendar."""

    __tablename__ = 'calendar_events'

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    client_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    event_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default='confirmed', nullable=False)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)


class BlockedDate(Base):
    """A day the studio takes no bookings."""

    __tablename__ = 'blocked_dates'

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, unique=True, index=True)
    reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
