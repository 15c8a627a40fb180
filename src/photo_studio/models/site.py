"""Site administration models: admins, team, settings and contact messages."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from photo_studio.models.base import Base

MESSAGE_STATUSES = ('unread', 'read', 'archived')


class AdminUser(Base):
    """A CMS administrator."""

    __tablename__ = 'admin_users'

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default='admin', nullable=False)


class TeamMember(Base):
    """A studio team member shown on the public site."""

    __tablename__ = 'team_members'

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class SiteSettings(Base):
    """Singleton row holding contact details and the Instagram connection."""

    __tablename__ = 'site_settings'

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    instagram_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    facebook_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    youtube_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    instagram_access_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    instagram_user_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    instagram_username: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    instagram_last_sync: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    instagram_auto_sync: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def instagram_connected(self) -> bool:
        return bool(self.instagram_access_token)


class ContactMessage(Base):
    """A message sent through the public contact form."""

    __tablename__ = 'contact_messages'

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    subject: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='unread', nullable=False, index=True)
