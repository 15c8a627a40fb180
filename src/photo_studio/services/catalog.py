"""Site content: packs, portfolio media, team, settings and contact messages."""

import re
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_config
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.base import Base
from ..models.booking import Booking, Pack
from ..models.client import Client, Testimonial
from ..models.media import Image, Video
from ..models.site import MESSAGE_STATUSES, ContactMessage, SiteSettings, TeamMember
from ..utils.date_utils import parse_datetime

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

CONTACT_FIELDS = (
    'email', 'phone', 'whatsapp_number', 'location',
    'instagram_url', 'facebook_url', 'youtube_url',
)


DEFAULT_PACKS = [
    {
        "name": "Essentiel",
        "description": "Package parfait pour les petits événements",
        "price": 299,
        "duration": "2 heures",
        "features": ["2h de couverture", "100 photos retouchées", "1 photographe"],
        "category": "Photography",
        "order": 1,
    },
    {
        "name": "Premium",
        "description": "Notre package le plus populaire",
        "price": 499,
        "duration": "4 heures",
        "features": ["4h de couverture", "200 photos retouchées", "1 photographe", "Album digital"],
        "category": "Photography",
        "order": 2,
    },
    {
        "name": "Luxe",
        "description": "Couverture complète de votre événement",
        "price": 799,
        "duration": "Journée complète",
        "features": ["Journée complète", "400+ photos", "2 photographes", "Album premium", "Vidéo highlights"],
        "category": "Photography",
        "order": 3,
    },
    {
        "name": "Sur mesure",
        "description": "Package personnalisé selon vos besoins",
        "price": 0,
        "duration": "Flexible",
        "features": ["Package personnalisé selon vos besoins"],
        "category": "Custom",
        "order": 4,
    },
]


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ''))


class CatalogService:
    """CRUD over the public site content managed from the CMS."""

    def __init__(self, config=None):
        self.config = config or get_config()

    # Generic helpers

    async def _get(self, session: AsyncSession, model: Type[Base], record_id: str, label: str):
        record = await session.get(model, record_id)
        if record is None:
            raise NotFoundError(label, record_id)
        return record

    async def _create(self, session: AsyncSession, model: Type[Base], data: Dict[str, Any]):
        record = model()
        record.update_from_dict(data)
        session.add(record)
        await session.commit()
        logger.info(f"Created {model.__name__} {record.id}")
        return record

    async def _update(
        self,
        session: AsyncSession,
        model: Type[Base],
        record_id: str,
        data: Dict[str, Any],
        label: str,
    ):
        record = await self._get(session, model, record_id, label)
        record.update_from_dict(data)
        await session.commit()
        return record

    async def _delete(self, session: AsyncSession, model: Type[Base], record_id: str, label: str) -> None:
        record = await self._get(session, model, record_id, label)
        await session.delete(record)
        await session.commit()
        audit_log(f"{model.__tablename__.upper()}_DELETED", id=record_id)

    # Packs

    async def list_packs(self, session: AsyncSession, active_only: bool = True) -> List[Pack]:
        stmt = select(Pack).order_by(Pack.order.asc(), Pack.created_at.desc())
        if active_only:
            stmt = stmt.where(Pack.active.is_(True))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_packs_with_counts(self, session: AsyncSession) -> List[Tuple[Pack, int]]:
        """All packs with how many bookings reference each."""
        stmt = (
            select(Pack, func.count(Booking.id))
            .outerjoin(Booking, Booking.pack_id == Pack.id)
            .group_by(Pack.id)
            .order_by(Pack.order.asc(), Pack.created_at.desc())
        )
        result = await session.execute(stmt)
        return [(pack, count) for pack, count in result.all()]

    async def create_pack(self, session: AsyncSession, data: Dict[str, Any]) -> Pack:
        if not data.get('name'):
            raise ValidationError("Pack name is required")
        if (data.get('price') or 0) < 0:
            raise ValidationError("Pack price cannot be negative")
        return await self._create(session, Pack, data)

    async def seed_default_packs(self, session: AsyncSession) -> List[Pack]:
        """Create the starter packs; refused once any pack exists."""
        existing = (await session.execute(select(func.count()).select_from(Pack))).scalar_one()
        if existing:
            raise ValidationError(
                f"{existing} packages already exist. Delete them first to reseed.",
                detail={"count": existing},
            )

        packs = [Pack(active=True, **dict(data, features=list(data["features"]))) for data in DEFAULT_PACKS]
        session.add_all(packs)
        await session.commit()
        audit_log("PACKS_SEEDED", count=len(packs))
        return packs

    async def update_pack(self, session: AsyncSession, pack_id: str, data: Dict[str, Any]) -> Pack:
        return await self._update(session, Pack, pack_id, data, "Pack")

    async def delete_pack(self, session: AsyncSession, pack_id: str) -> None:
        await self._delete(session, Pack, pack_id, "Pack")

    # Images

    async def list_images(
        self,
        session: AsyncSession,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        professional_mode: Optional[bool] = None,
        gallery_only: bool = False,
    ) -> List[Image]:
        stmt = select(Image).order_by(Image.order.asc(), Image.created_at.desc())
        if category and category != 'all':
            stmt = stmt.where(Image.category == category)
        if featured is not None:
            stmt = stmt.where(Image.featured.is_(featured))
        if professional_mode is not None:
            stmt = stmt.where(Image.professional_mode.is_(professional_mode))
        if gallery_only:
            stmt = stmt.where(Image.show_in_gallery.is_(True))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_image(self, session: AsyncSession, data: Dict[str, Any]) -> Image:
        if not data.get('url') or not data.get('title'):
            raise ValidationError("Image url and title are required")
        return await self._create(session, Image, data)

    async def update_image(self, session: AsyncSession, image_id: str, data: Dict[str, Any]) -> Image:
        return await self._update(session, Image, image_id, data, "Image")

    async def delete_image(self, session: AsyncSession, image_id: str) -> None:
        await self._delete(session, Image, image_id, "Image")

    # Videos

    async def list_videos(
        self,
        session: AsyncSession,
        homepage: bool = False,
        professional_mode: Optional[bool] = None,
        public_only: bool = True,
    ) -> List[Video]:
        """Videos by ``order``; the public listing only shows gallery videos."""
        stmt = select(Video).order_by(Video.order.asc(), Video.created_at.desc())
        if public_only:
            stmt = stmt.where(Video.show_in_gallery.is_(True))
        if homepage:
            stmt = stmt.where(Video.show_on_homepage.is_(True))
        if professional_mode is not None:
            stmt = stmt.where(Video.professional_mode.is_(professional_mode))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_video(self, session: AsyncSession, data: Dict[str, Any]) -> Video:
        if not data.get('url') or not data.get('title'):
            raise ValidationError("Video url and title are required")
        return await self._create(session, Video, data)

    async def update_video(self, session: AsyncSession, video_id: str, data: Dict[str, Any]) -> Video:
        return await self._update(session, Video, video_id, data, "Video")

    async def delete_video(self, session: AsyncSession, video_id: str) -> None:
        await self._delete(session, Video, video_id, "Video")

    # Team

    async def list_team(self, session: AsyncSession, active_only: bool = True) -> List[TeamMember]:
        stmt = select(TeamMember).order_by(TeamMember.order.asc(), TeamMember.created_at.asc())
        if active_only:
            stmt = stmt.where(TeamMember.active.is_(True))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_team_member(self, session: AsyncSession, data: Dict[str, Any]) -> TeamMember:
        if not data.get('name') or not data.get('role'):
            raise ValidationError("Name and role are required")
        return await self._create(session, TeamMember, data)

    async def update_team_member(
        self, session: AsyncSession, member_id: str, data: Dict[str, Any]
    ) -> TeamMember:
        return await self._update(session, TeamMember, member_id, data, "Team member")

    async def delete_team_member(self, session: AsyncSession, member_id: str) -> None:
        await self._delete(session, TeamMember, member_id, "Team member")

    # Settings

    async def _settings_row(self, session: AsyncSession) -> Optional[SiteSettings]:
        result = await session.execute(select(SiteSettings).order_by(SiteSettings.created_at).limit(1))
        return result.scalar_one_or_none()

    async def get_settings(self, session: AsyncSession) -> SiteSettings:
        """The settings singleton, created from the studio defaults on first use."""
        settings = await self._settings_row(session)
        if settings is None:
            studio = self.config.studio
            settings = SiteSettings(**{field: getattr(studio, field) for field in CONTACT_FIELDS})
            session.add(settings)
            await session.commit()
            logger.info("Created site settings")
        return settings

    async def update_settings(self, session: AsyncSession, data: Dict[str, Any]) -> SiteSettings:
        settings = await self.get_settings(session)
        settings.update_from_dict(data)
        await session.commit()
        audit_log("SETTINGS_UPDATED", fields=",".join(sorted(data)))
        return settings

    async def get_contact_settings(self, session: AsyncSession) -> Dict[str, Any]:
        """Public contact block; falls back to the configured defaults."""
        settings = await self._settings_row(session)
        studio = self.config.studio
        return {
            field: (getattr(settings, field, None) if settings else None) or getattr(studio, field)
            for field in CONTACT_FIELDS
        }

    # Contact messages

    async def create_message(
        self,
        session: AsyncSession,
        name: str,
        email: str,
        message: str,
        phone: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> ContactMessage:
        if not name or not email or not message:
            raise ValidationError("All fields are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")

        record = ContactMessage(name=name, email=email, phone=phone, subject=subject, message=message)
        session.add(record)
        await session.commit()
        logger.info(f"Received contact message from {email}")
        return record

    async def list_messages(self, session: AsyncSession, status: Optional[str] = None) -> List[ContactMessage]:
        stmt = select(ContactMessage).order_by(ContactMessage.created_at.desc())
        if status:
            stmt = stmt.where(ContactMessage.status == status)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def mark_message(self, session: AsyncSession, message_id: str, status: str) -> ContactMessage:
        if status not in MESSAGE_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        record = await self._get(session, ContactMessage, message_id, "Message")
        record.status = status
        await session.commit()
        return record

    async def delete_message(self, session: AsyncSession, message_id: str) -> None:
        await self._delete(session, ContactMessage, message_id, "Message")

    # Testimonials

    @staticmethod
    def _check_rating(rating: Any) -> int:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        return rating

    async def list_public_testimonials(self, session: AsyncSession) -> List[Testimonial]:
        """Approved testimonials, featured ones first, then newest."""
        stmt = (
            select(Testimonial)
            .where(Testimonial.approved.is_(True))
            .order_by(Testimonial.featured.desc(), Testimonial.created_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_testimonials(self, session: AsyncSession, status: Optional[str] = None) -> List[Testimonial]:
        """Admin listing; ``status`` is ``pending``, ``approved`` or anything else for all."""
        stmt = select(Testimonial).order_by(Testimonial.created_at.desc())
        if status == 'pending':
            stmt = stmt.where(Testimonial.approved.is_(False))
        elif status == 'approved':
            stmt = stmt.where(Testimonial.approved.is_(True))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_testimonial(self, session: AsyncSession, data: Dict[str, Any]) -> Testimonial:
        """Testimonial entered from the CMS; approved unless told otherwise."""
        if not data.get('client_name') or not data.get('comment'):
            raise ValidationError("Client name and comment are required")

        data = {key: value for key, value in data.items() if value is not None}
        data['rating'] = self._check_rating(data.get('rating', 5))
        data['event_date'] = parse_datetime(data.get('event_date'))
        if data.get('approved') is None:
            data['approved'] = True
        testimonial = await self._create(session, Testimonial, data)
        audit_log("TESTIMONIAL_CREATED", testimonial_id=testimonial.id, approved=testimonial.approved)
        return testimonial

    async def submit_testimonial(self, session: AsyncSession, client: Client, data: Dict[str, Any]) -> Testimonial:
        """Feedback from the client portal, held for review."""
        rating = self._check_rating(data.get('rating'))
        comment = (data.get('comment') or '').strip()
        if not comment:
            raise ValidationError("Comment is required")

        testimonial = Testimonial(
            client_id=client.id,
            client_name=client.name,
            client_email=client.email,
            rating=rating,
            comment=comment,
            event_type=data.get('event_type') or None,
            event_date=parse_datetime(data.get('event_date')),
            photo_url=data.get('photo_url') or None,
            approved=False,
            featured=False,
        )
        session.add(testimonial)
        await session.commit()
        logger.info(f"Client {client.id} submitted testimonial {testimonial.id}")
        return testimonial

    async def list_client_testimonials(self, session: AsyncSession, client_id: str) -> List[Testimonial]:
        result = await session.execute(
            select(Testimonial)
            .where(Testimonial.client_id == client_id)
            .order_by(Testimonial.created_at.desc())
        )
        return list(result.scalars().all())

    async def review_testimonial(
        self,
        session: AsyncSession,
        testimonial_id: str,
        approved: Optional[bool] = None,
        featured: Optional[bool] = None,
    ) -> Testimonial:
        """Approve, hide or feature a testimonial."""
        testimonial = await self._get(session, Testimonial, testimonial_id, "Testimonial")
        if approved is not None:
            testimonial.approved = approved
        if featured is not None:
            testimonial.featured = featured
        await session.commit()
        audit_log("TESTIMONIAL_REVIEWED", testimonial_id=testimonial_id,
                  approved=testimonial.approved, featured=testimonial.featured)
        return testimonial

    async def delete_testimonial(self, session: AsyncSession, testimonial_id: str) -> None:
        await self._delete(session, Testimonial, testimonial_id, "Testimonial")

    # Dashboard

    async def dashboard_stats(self, session: AsyncSession) -> Dict[str, int]:
        async def count(model, *conditions) -> int:
            stmt = select(func.count()).select_from(model)
            if conditions:
                stmt = stmt.where(*conditions)
            return (await session.execute(stmt)).scalar_one()

        return {
            'images': await count(Image),
            'videos': await count(Video),
            'featuredImages': await count(Image, Image.featured.is_(True)),
            'clients': await count(Client),
            'bookings': await count(Booking, Booking.status != 'tracking'),
            'pendingBookings': await count(Booking, Booking.status == 'pending'),
            'teamMembers': await count(TeamMember),
            'unreadMessages': await count(ContactMessage, ContactMessage.status == 'unread'),
            'pendingTestimonials': await count(Testimonial, Testimonial.approved.is_(False)),
        }
