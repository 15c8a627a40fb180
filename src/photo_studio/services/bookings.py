"""Booking intake, tracking of unfinished forms, and admin review."""

from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_config
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.booking import BlockedDate, Booking, CalendarEvent, Pack
from ..utils.date_utils import month_range, parse_datetime, parse_month, utcnow

logger = get_logger(__name__)

TRACKING_WINDOW = timedelta(hours=24)
PLACEHOLDER_LEAD_TIME = timedelta(days=7)
TRACKING_EMAIL = "tracking@pending.com"
PENDING = "pending"

REVIEW_STATUSES = ('pending', 'approved', 'rejected', 'cancelled')
TRACK_ACTIONS = ('view-packages', 'select-package')


class BookingService:
    """Booking form intake and admin-side booking management."""

    def __init__(self, config=None):
        self.config = config or get_config()

    async def _recent_booking(
        self,
        session: AsyncSession,
        name: str,
        phone: str,
        status: Optional[str] = None,
    ) -> Optional[Booking]:
        """Most recent booking for (name, phone) created inside the tracking window."""
        conditions = [
            Booking.name == name,
            Booking.phone == phone,
            Booking.created_at >= utcnow() - TRACKING_WINDOW,
        ]
        if status:
            conditions.append(Booking.status == status)

        stmt = select(Booking).where(*conditions).order_by(Booking.created_at.desc()).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def track_interaction(
        self,
        session: AsyncSession,
        name: str,
        phone: str,
        action: str,
        package_name: Optional[str] = None,
        package_price: Optional[float] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> str:
        """Record progress through the booking form and return the tracking id."""
        if action not in TRACK_ACTIONS:
            raise ValidationError("Invalid action")
        if not name or not phone:
            raise ValidationError("Name and phone are required")

        existing = await self._recent_booking(session, name, phone)

        if action == 'view-packages':
            if existing:
                existing.ip_address = ip_address
                existing.user_agent = user_agent
                await session.commit()
                return existing.id

            tracking = Booking(
                name=name,
                email=TRACKING_EMAIL,
                phone=phone,
                event_type=PENDING,
                event_date=utcnow() + PLACEHOLDER_LEAD_TIME,
                time_slot=PENDING,
                location=PENDING,
                status='tracking',
                ip_address=ip_address,
                user_agent=user_agent,
            )
            session.add(tracking)
            await session.commit()
            logger.debug(f"Started tracking booking form for {name}")
            return tracking.id

        # select-package
        if existing is None:
            raise NotFoundError("Tracking record")
        existing.package_name = package_name
        existing.package_price = package_price
        await session.commit()
        return existing.id

    async def create_booking(
        self,
        session: AsyncSession,
        data: Dict[str, Any],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Booking:
        """Submit the booking form.

        A ``tracking`` record left by the same visitor in the last 24 hours is
        completed in place; otherwise a new ``pending`` booking is created.
        """
        name = (data.get('name') or '').strip()
        phone = (data.get('phone') or '').strip()
        event_type = data.get('event_type')
        requested = data.get('event_date')
        if not name or not phone or not event_type or not requested:
            raise ValidationError("Missing required fields")

        event_date = parse_datetime(requested)

        pack = None
        if data.get('pack_id'):
            pack = await session.get(Pack, data['pack_id'])
            if pack is None:
                raise NotFoundError("Pack", data['pack_id'])

        package_name = data.get('package_name') or (pack.name if pack else None)
        package_price = data.get('package_price')
        if package_price is None and pack is not None:
            package_price = pack.price

        fields = {
            'email': data.get('email') or None,
            'event_type': event_type,
            'event_date': event_date,
            'time_slot': data.get('time_slot') or PENDING,
            'location': data.get('location') or PENDING,
            'message': data.get('message') or None,
            'events': data.get('events') or None,
            'pack_id': pack.id if pack else None,
            'status': 'pending',
            'ip_address': ip_address,
            'user_agent': user_agent,
        }

        booking = await self._recent_booking(session, name, phone, status='tracking')
        if booking is not None:
            fields['package_name'] = package_name or booking.package_name
            if package_price is not None:
                fields['package_price'] = package_price
            booking.update_from_dict(fields)
            logger.info(f"Completed tracked booking {booking.id} for {name}")
        else:
            booking = Booking(
                name=name,
                phone=phone,
                package_name=package_name,
                package_price=package_price,
                **fields,
            )
            session.add(booking)
            logger.info(f"Created booking request for {name}")

        await session.commit()
        await session.refresh(booking, attribute_names=['pack'])
        audit_log("BOOKING_CREATED", booking_id=booking.id, event_type=event_type)
        return booking

    async def list_bookings(
        self,
        session: AsyncSession,
        status: Optional[str] = None,
        month: Optional[str] = None,
    ) -> List[Booking]:
        """Bookings newest first; ``tracking`` placeholders only on request."""
        stmt = select(Booking).order_by(Booking.created_at.desc())

        if status and status != 'all':
            stmt = stmt.where(Booking.status == status)
        else:
            stmt = stmt.where(Booking.status != 'tracking')

        if month:
            start, end = month_range(*parse_month(month))
            stmt = stmt.where(Booking.event_date >= start, Booking.event_date <= end)

        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def group_by_client(bookings: List[Booking]) -> List[Dict[str, Any]]:
        """Group a newest-first booking list by client name.

        Groups keep the contact details of their most recent booking and are
        ordered by it.
        """
        groups: Dict[str, Dict[str, Any]] = {}
        for booking in bookings:
            group = groups.get(booking.name)
            if group is None:
                group = groups[booking.name] = {
                    'clientName': booking.name,
                    'clientPhone': booking.phone,
                    'clientEmail': booking.email,
                    'bookings': [],
                    'totalBookings': 0,
                }
            group['bookings'].append(booking)
            group['totalBookings'] += 1

        return sorted(
            groups.values(),
            key=lambda g: g['bookings'][0].created_at,
            reverse=True,
        )

    async def get_booking(self, session: AsyncSession, booking_id: str) -> Booking:
        booking = await session.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        return booking

    async def delete_booking(self, session: AsyncSession, booking_id: str) -> None:
        booking = await self.get_booking(session, booking_id)
        await session.delete(booking)
        await session.commit()
        audit_log("BOOKING_DELETED", booking_id=booking_id)

    async def update_status(
        self,
        session: AsyncSession,
        booking_id: str,
        status: str,
        admin_notes: Optional[str] = None,
    ) -> Booking:
        """Review a booking; approval puts its event(s) on the calendar."""
        if status not in REVIEW_STATUSES:
            raise ValidationError("Invalid status")

        booking = await self.get_booking(session, booking_id)
        previous = booking.status
        booking.status = status
        if admin_notes is not None:
            booking.admin_notes = admin_notes
        await session.commit()

        audit_log("BOOKING_STATUS_CHANGED", booking_id=booking_id, old=previous, new=status)

        if status == 'approved':
            try:
                await self._sync_calendar(session, booking)
            except Exception as e:
                await session.rollback()
                await session.refresh(booking)
                logger.error(f"Failed to create calendar event for booking {booking_id}: {e}")

        return booking

    async def _sync_calendar(self, session: AsyncSession, booking: Booking) -> None:
        if booking.events:
            event_ids = []
            for event in booking.events:
                notes = "\n".join(filter(None, [
                    event.get('eventName'),
                    f"Time: {event['timeSlot']}" if event.get('timeSlot') else None,
                    booking.message,
                ]))
                calendar_event = CalendarEvent(
                    date=parse_datetime(event.get('eventDate')) or booking.event_date,
                    title=f"{event.get('eventType') or booking.event_type} - {booking.name}",
                    client_name=booking.name,
                    event_type=event.get('eventType') or booking.event_type,
                    location=event.get('location') or booking.location,
                    notes=notes or None,
                    status='confirmed',
                    price=booking.package_price,
                )
                session.add(calendar_event)
                await session.flush()
                event_ids.append(calendar_event.id)

            booking.calendar_event_id = event_ids[0]
            booking.admin_notes = (
                f"{booking.admin_notes or ''}\n[Calendar Events: {', '.join(event_ids)}]"
            ).strip()
            await session.commit()
            logger.info(f"Created {len(event_ids)} calendar events for booking {booking.id}")

        elif not booking.calendar_event_id:
            calendar_event = CalendarEvent(
                date=booking.event_date,
                title=f"{booking.event_type} - {booking.name}",
                client_name=booking.name,
                event_type=booking.event_type,
                location=booking.location,
                notes=booking.message,
                status='confirmed',
                price=booking.package_price,
            )
            session.add(calendar_event)
            await session.flush()
            booking.calendar_event_id = calendar_event.id
            await session.commit()
            logger.info(f"Created calendar event {calendar_event.id} for booking {booking.id}")

    async def list_calendar_events(
        self,
        session: AsyncSession,
        month: Optional[str] = None,
    ) -> List[CalendarEvent]:
        stmt = select(CalendarEvent).order_by(CalendarEvent.date)
        if month:
            start, end = month_range(*parse_month(month))
            stmt = stmt.where(CalendarEvent.date >= start, CalendarEvent.date <= end)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    # Blocked dates

    async def list_blocked_dates(
        self,
        session: AsyncSession,
        month: Optional[str] = None,
    ) -> List[BlockedDate]:
        """Blocked days in date order, optionally limited to one ``YYYY-MM`` month."""
        stmt = select(BlockedDate).order_by(BlockedDate.date)
        if month:
            start, end = month_range(*parse_month(month))
            stmt = stmt.where(BlockedDate.date >= start, BlockedDate.date <= end)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def block_date(
        self,
        session: AsyncSession,
        day: Any,
        reason: Optional[str] = None,
    ) -> BlockedDate:
        """Close a day for bookings; the time of day is dropped."""
        parsed = parse_datetime(day)
        if parsed is None:
            raise ValidationError("Date is required")
        parsed = datetime.combine(parsed.date(), time.min)

        existing = await session.execute(select(BlockedDate.id).where(BlockedDate.date == parsed))
        if existing.scalar_one_or_none():
            raise ValidationError("This date is already blocked", detail={'date': parsed.date().isoformat()})

        blocked = BlockedDate(date=parsed, reason=reason or None)
        session.add(blocked)
        await session.commit()

        audit_log("DATE_BLOCKED", date=parsed.date().isoformat(), reason=reason)
        return blocked

    async def unblock_date(self, session: AsyncSession, blocked_id: str) -> None:
        blocked = await session.get(BlockedDate, blocked_id)
        if blocked is None:
            raise NotFoundError("Blocked date", blocked_id)
        await session.delete(blocked)
        await session.commit()
        audit_log("DATE_UNBLOCKED", date=blocked.date.date().isoformat())
