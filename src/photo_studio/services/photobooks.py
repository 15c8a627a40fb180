"""Photobook templates, client drafts and submission for print."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_config
from ..core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.client import Client, ClientGallery, Photobook, PhotobookPage
from ..utils.date_utils import utcnow

logger = get_logger(__name__)

# 8.5" x 11" at 300 DPI
PAGE_WIDTH = 2550
PAGE_HEIGHT = 3300
MARGIN = 150

PHOTOBOOK_STATUSES = ('draft', 'submitted', 'approved', 'printed')


@dataclass
class Slot:
    """A photo placeholder rectangle on a template page, in pixels."""
    x: float
    y: float
    width: float
    height: float


@dataclass
class PhotobookTemplate:
    id: str
    name: str
    description: str
    category: str
    slots: List[Slot] = field(default_factory=list)
    page_width: int = PAGE_WIDTH
    page_height: int = PAGE_HEIGHT

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['pageSize'] = {'width': data.pop('page_width'), 'height': data.pop('page_height'), 'unit': 'px'}
        return data


def _grid(columns: int, rows: int) -> List[Slot]:
    width = (PAGE_WIDTH - (columns + 1) * MARGIN) / columns
    height = (PAGE_HEIGHT - (rows + 1) * MARGIN) / rows
    return [
        Slot(MARGIN + col * (width + MARGIN), MARGIN + row * (height + MARGIN), width, height)
        for row in range(rows)
        for col in range(columns)
    ]


def _hero_collage() -> List[Slot]:
    inner_height = PAGE_HEIGHT - 2 * MARGIN
    hero_height = inner_height * 0.65
    small_width = (PAGE_WIDTH - 3 * MARGIN) / 2
    small_y = MARGIN + hero_height + MARGIN
    small_height = inner_height * 0.35 - MARGIN
    return [
        Slot(MARGIN, MARGIN, PAGE_WIDTH - 2 * MARGIN, hero_height),
        Slot(MARGIN, small_y, small_width, small_height),
        Slot(PAGE_WIDTH / 2 + MARGIN / 2, small_y, small_width, small_height),
    ]


TEMPLATES: Dict[str, PhotobookTemplate] = {
    template.id: template for template in [
        PhotobookTemplate('grid-2x2', '2x2 Grid', 'Four equal photos in a grid layout', 'grid', _grid(2, 2)),
        PhotobookTemplate('grid-3x3', '3x3 Grid', 'Nine photos in a uniform grid', 'grid', _grid(3, 3)),
        PhotobookTemplate(
            'full-bleed', 'Full Bleed', 'A single photo covering the whole page', 'minimal',
            [Slot(0, 0, PAGE_WIDTH, PAGE_HEIGHT)],
        ),
        PhotobookTemplate('two-up', 'Side by Side', 'Two portrait photos next to each other', 'minimal', _grid(2, 1)),
        PhotobookTemplate(
            'collage-hero', 'Hero Collage', 'One large hero image with smaller supporting photos',
            'collage', _hero_collage(),
        ),
    ]
}


def get_templates(category: Optional[str] = None) -> List[PhotobookTemplate]:
    if category:
        return [t for t in TEMPLATES.values() if t.category == category]
    return list(TEMPLATES.values())


def get_template(template_id: str) -> PhotobookTemplate:
    template = TEMPLATES.get(template_id)
    if template is None:
        raise NotFoundError("Template", template_id)
    return template


def layout_slots(template_id: str) -> List[Slot]:
    return list(get_template(template_id).slots)


class PhotobookService:
    """Client photobook drafts and the admin review queue."""

    def __init__(self, config=None):
        self.config = config or get_config()

    async def _owned_gallery(self, session: AsyncSession, client_id: str, gallery_id: str) -> ClientGallery:
        gallery = await session.get(ClientGallery, gallery_id)
        if gallery is None or gallery.client_id != client_id:
            raise NotFoundError("Gallery", gallery_id)
        return gallery

    async def get_photobook(self, session: AsyncSession, client_id: str, gallery_id: str) -> Optional[Photobook]:
        stmt = select(Photobook).where(
            Photobook.client_id == client_id,
            Photobook.gallery_id == gallery_id,
        )
        return (await session.execute(stmt)).scalar_one_or_none()

    async def get_or_create_photobook(
        self,
        session: AsyncSession,
        client_id: str,
        gallery_id: str,
        format: str,
        title: Optional[str] = None,
    ) -> Photobook:
        """One photobook per (client, gallery); an existing one is returned as is."""
        if not gallery_id or not format:
            raise ValidationError("Missing required fields")
        await self._owned_gallery(session, client_id, gallery_id)

        existing = await self.get_photobook(session, client_id, gallery_id)
        if existing is not None:
            return existing

        photobook = Photobook(
            client_id=client_id,
            gallery_id=gallery_id,
            format=format,
            title=title or "My Photobook",
            status='draft',
            total_pages=0,
        )
        session.add(photobook)
        await session.commit()
        await session.refresh(photobook, attribute_names=['pages'])

        logger.info(f"Created photobook {photobook.id} for client {client_id}")
        return photobook

    async def submit_photobook(
        self,
        session: AsyncSession,
        client_id: str,
        photobook_id: str,
        pages: List[Dict[str, Any]],
        title: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Photobook:
        """Replace the photobook's pages and send it for review."""
        photobook = await session.get(Photobook, photobook_id)
        if photobook is None or photobook.client_id != client_id:
            raise PermissionDeniedError("Unauthorized")
        if not pages:
            raise ValidationError("Photobook must have at least one page")

        first_photos = pages[0].get('photos') or []
        cover_url = first_photos[0].get('url') if first_photos else None

        photobook.pages.clear()
        await session.flush()

        for index, page in enumerate(pages):
            photobook.pages.append(PhotobookPage(
                page_number=page.get('page_number') or index + 1,
                layout_type=page.get('layout_type') or 'custom',
                photos=list(page.get('photos') or []),
                notes=page.get('notes') or None,
            ))

        photobook.title = title or photobook.title
        photobook.notes = notes or photobook.notes
        photobook.total_pages = len(pages)
        photobook.status = 'submitted'
        photobook.cover_photo_url = cover_url
        photobook.submitted_at = utcnow()
        await session.commit()
        await session.refresh(photobook, attribute_names=['pages'])

        audit_log("PHOTOBOOK_SUBMITTED", photobook_id=photobook_id, pages=len(pages))
        return photobook

    async def list_photobooks(self, session: AsyncSession, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """Admin listing with client and gallery names."""
        stmt = (
            select(Photobook, Client.name, Client.email, ClientGallery.name)
            .outerjoin(Client, Photobook.client_id == Client.id)
            .outerjoin(ClientGallery, Photobook.gallery_id == ClientGallery.id)
            .order_by(Photobook.created_at.desc())
        )
        if status:
            stmt = stmt.where(Photobook.status == status)

        result = await session.execute(stmt)
        return [
            {
                'photobook': photobook,
                'client': {'name': client_name or 'Unknown', 'email': client_email or ''},
                'gallery': {'name': gallery_name or 'Unknown'},
            }
            for photobook, client_name, client_email, gallery_name in result.all()
        ]

    async def update_photobook_status(self, session: AsyncSession, photobook_id: str, status: str) -> Photobook:
        if status not in PHOTOBOOK_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        photobook = await session.get(Photobook, photobook_id)
        if photobook is None:
            raise NotFoundError("Photobook", photobook_id)

        photobook.status = status
        await session.commit()
        audit_log("PHOTOBOOK_STATUS_CHANGED", photobook_id=photobook_id, status=status)
        return photobook
