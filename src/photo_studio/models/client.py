"""Client portal models: clients, delivered galleries, photos and photobooks."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photo_studio.models.base import Base


class Client(Base):
    """A studio customer with access to the client portal."""

    __tablename__ = 'clients'

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login e-mail, stored lower-case"
    )
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    galleries: Mapped[List["ClientGallery"]] = relationship(
        "ClientGallery",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="ClientGallery.created_at.desc()",
    )


class ClientGallery(Base):
    """Photos delivered to one client for review and selection."""

    __tablename__ = 'client_galleries'

    client_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('clients.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        comment="Gallery hidden from the client after this instant"
    )
    allow_download: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Gallery-wide selection approved by the client
    selected_photo_ids: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    selection_approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    client: Mapped["Client"] = relationship("Client", back_populates="galleries")
    photos: Mapped[List["ClientPhoto"]] = relationship(
        "ClientPhoto",
        back_populates="gallery",
        cascade="all, delete-orphan",
        order_by="ClientPhoto.photo_number",
        lazy="selectin",
    )

    @property
    def photo_count(self) -> int:
        return len(self.photos)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class ClientPhoto(Base):
    """A single delivered photo inside a client gallery."""

    __tablename__ = 'client_photos'

    gallery_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('client_galleries.id', ondelete='CASCADE'),
        nullable=False
    )
    cdn_public_id: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    photo_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="1-based number shown to the client"
    )
    selected_for_print: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    gallery: Mapped["ClientGallery"] = relationship("ClientGallery", back_populates="photos")

    __table_args__ = (
        Index('idx_client_photos_gallery', 'gallery_id', 'photo_number'),
        Index('idx_client_photos_selected', 'selected_for_print'),
    )


class Photobook(Base):
    """A client's printable photobook built from one gallery."""

    __tablename__ = 'photobooks'

    client_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('clients.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    gallery_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('client_galleries.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(200), default="My Photobook", nullable=False)
    format: Mapped[str] = mapped_column(String(50), nullable=False, comment="Print format, e.g. 30x30")
    status: Mapped[str] = mapped_column(
        String(20),
        default='draft',
        nullable=False,
        comment="draft, submitted, approved, printed"
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_pages: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cover_photo_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    pages: Mapped[List["PhotobookPage"]] = relationship(
        "PhotobookPage",
        back_populates="photobook",
        cascade="all, delete-orphan",
        order_by="PhotobookPage.page_number",
        lazy="selectin",
    )


class PhotobookPage(Base):
    """One page of a photobook with its placed photos."""

    __tablename__ = 'photobook_pages'

    photobook_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('photobooks.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    page_number: Mapped[int] = mapped_column(Integer, nullable=False)
    layout_type: Mapped[str] = mapped_column(String(50), nullable=False)
    photos: Mapped[List[dict]] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    photobook: Mapped["Photobook"] = relationship("Photobook", back_populates="pages")


class Testimonial(Base):
    """Client feedback, published on the site once approved.

    Testimonials entered by the studio (e.g. from screenshots) have no client.
    """

    __tablename__ = 'testimonials'

    client_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey('clients.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )
    client_name: Mapped[str] = mapped_column(String(200), nullable=False)
    client_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rating: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    event_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    event_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index('idx_testimonials_public', 'approved', 'featured'),
    )
