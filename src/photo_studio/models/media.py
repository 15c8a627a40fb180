"""Media models: portfolio images, videos and mirrored Instagram content."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photo_studio.models.base import Base


class Image(Base):
    """A portfolio image hosted on the CDN."""

    __tablename__ = 'images'

    cdn_public_id: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    instagram_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    show_on_homepage: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    show_in_gallery: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    professional_mode: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Shown on the professional (corporate) site variant"
    )
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    format: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    __table_args__ = (
        Index('idx_images_category', 'category'),
        Index('idx_images_featured', 'featured'),
    )


class Video(Base):
    """A portfolio video or reel."""

    __tablename__ = 'videos'

    cdn_public_id: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    instagram_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Seconds")
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    show_on_homepage: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    show_in_gallery: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    professional_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class InstagramPost(Base):
    """A feed post mirrored from the Instagram Graph API."""

    __tablename__ = 'instagram_posts'

    instagram_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    media_type: Mapped[str] = mapped_column(String(30), nullable=False)
    media_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    permalink: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class InstagramHighlight(Base):
    """A story highlight mirrored from Instagram."""

    __tablename__ = 'instagram_highlights'

    instagram_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    cover_image: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    stories: Mapped[List["InstagramStory"]] = relationship(
        "InstagramStory",
        back_populates="highlight",
        cascade="all, delete-orphan",
        order_by="InstagramStory.order",
        lazy="selectin",
    )


class InstagramStory(Base):
    """One story item inside a highlight."""

    __tablename__ = 'instagram_stories'

    highlight_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('instagram_highlights.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    instagram_id: Mapped[str] = mapped_column(String(100), nullable=False)
    media_type: Mapped[str] = mapped_column(String(30), nullable=False)
    media_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    highlight: Mapped["InstagramHighlight"] = relationship("InstagramHighlight", back_populates="stories")
