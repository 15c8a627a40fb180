"""Client accounts, delivered galleries and photo selection."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import get_config
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.client import Client, ClientGallery, ClientPhoto
from ..utils.date_utils import parse_datetime, utcnow
from ..utils.image import ImageProcessor
from .auth import hash_password
from .catalog import is_valid_email

logger = get_logger(__name__)

# Fields an admin may change on several photos at once
BULK_EDITABLE = {'selected_for_print', 'order', 'thumbnail_url'}


class GalleryService:
    """Client portal accounts, their galleries and the photos inside them."""

    def __init__(self, config=None):
        self.config = config or get_config()
        self.image_processor = ImageProcessor()

    # Clients

    async def create_client(
        self,
        session: AsyncSession,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
    ) -> Client:
        email = (email or '').strip().lower()
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")

        existing = await session.execute(select(Client.id).where(Client.email == email))
        if existing.scalar_one_or_none():
            raise ValidationError("A client with this email already exists")

        client = Client(name=name, email=email, phone=phone, password_hash=hash_password(password))
        session.add(client)
        await session.commit()

        audit_log("CLIENT_CREATED", client_id=client.id, email=email)
        return client

    async def list_clients(self, session: AsyncSession) -> List[Client]:
        result = await session.execute(select(Client).order_by(Client.created_at.desc()))
        return list(result.scalars().all())

    async def get_client(self, session: AsyncSession, client_id: str) -> Client:
        client = await session.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client", client_id)
        return client

    async def update_client(self, session: AsyncSession, client_id: str, data: Dict[str, Any]) -> Client:
        client = await self.get_client(session, client_id)
        data = dict(data)

        password = data.pop('password', None)
        if password:
            client.password_hash = hash_password(password)

        if data.get('email'):
            data['email'] = data['email'].strip().lower()
            if data['email'] != client.email:
                clash = await session.execute(select(Client.id).where(Client.email == data['email']))
                if clash.scalar_one_or_none():
                    raise ValidationError("A client with this email already exists")

        client.update_from_dict(data, exclude={'id', 'created_at', 'updated_at', 'password_hash'})
        await session.commit()
        return client

    async def delete_client(self, session: AsyncSession, client_id: str) -> None:
        """Delete a client together with its galleries and photos."""
        stmt = (
            select(Client)
            .options(selectinload(Client.galleries))
            .where(Client.id == client_id)
        )
        client = (await session.execute(stmt)).scalar_one_or_none()
        if client is None:
            raise NotFoundError("Client", client_id)

        await session.delete(client)
        await session.commit()
        audit_log("CLIENT_DELETED", client_id=client_id)

    # Galleries

    async def create_gallery(
        self,
        session: AsyncSession,
        client_id: str,
        name: str,
        description: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        allow_download: bool = True,
        password: Optional[str] = None,
    ) -> ClientGallery:
        if not name:
            raise ValidationError("Gallery name is required")
        await self.get_client(session, client_id)

        gallery = ClientGallery(
            client_id=client_id,
            name=name,
            description=description,
            expires_at=parse_datetime(expires_at),
            allow_download=allow_download,
            password_hash=hash_password(password) if password else None,
        )
        session.add(gallery)
        await session.commit()
        await session.refresh(gallery, attribute_names=['photos'])

        logger.info(f"Created gallery '{name}' for client {client_id}")
        return gallery

    async def list_galleries(self, session: AsyncSession, client_id: Optional[str] = None) -> List[ClientGallery]:
        stmt = select(ClientGallery).order_by(ClientGallery.created_at.desc())
        if client_id:
            stmt = stmt.where(ClientGallery.client_id == client_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_gallery(self, session: AsyncSession, gallery_id: str) -> ClientGallery:
        gallery = await session.get(ClientGallery, gallery_id)
        if gallery is None:
            raise NotFoundError("Gallery", gallery_id)
        return gallery

    async def update_gallery(self, session: AsyncSession, gallery_id: str, data: Dict[str, Any]) -> ClientGallery:
        gallery = await self.get_gallery(session, gallery_id)
        data = dict(data)
        if 'expires_at' in data:
            data['expires_at'] = parse_datetime(data['expires_at'])
        password = data.pop('password', None)
        if password:
            gallery.password_hash = hash_password(password)
        gallery.update_from_dict(data, exclude={'id', 'created_at', 'updated_at', 'client_id', 'password_hash'})
        await session.commit()
        return gallery

    async def delete_gallery(self, session: AsyncSession, gallery_id: str) -> None:
        gallery = await self.get_gallery(session, gallery_id)
        await session.delete(gallery)
        await session.commit()
        audit_log("GALLERY_DELETED", gallery_id=gallery_id)

    # Photos

    async def add_photos(
        self,
        session: AsyncSession,
        gallery_id: str,
        photos: List[Dict[str, Any]],
    ) -> List[ClientPhoto]:
        """Append photos after the gallery's current highest order and number."""
        if not photos:
            raise ValidationError("Gallery ID and photos array required")
        gallery = await self.get_gallery(session, gallery_id)

        max_order, max_number = (await session.execute(
            select(func.max(ClientPhoto.order), func.max(ClientPhoto.photo_number))
            .where(ClientPhoto.gallery_id == gallery_id)
        )).one()
        start_order = (max_order or 0) + 1
        start_number = (max_number or 0) + 1

        created = []
        for index, photo in enumerate(photos):
            if not photo.get('url'):
                raise ValidationError("Each photo needs a url")
            record = ClientPhoto(
                gallery_id=gallery_id,
                cdn_public_id=photo.get('cdn_public_id'),
                url=photo['url'],
                thumbnail_url=photo.get('thumbnail_url'),
                width=photo.get('width'),
                height=photo.get('height'),
                file_size=photo.get('file_size'),
                order=start_order + index,
                photo_number=start_number + index,
                selected_for_print=False,
            )
            session.add(record)
            created.append(record)

        if not gallery.cover_image:
            gallery.cover_image = photos[0].get('thumbnail_url') or photos[0]['url']

        await session.commit()
        await session.refresh(gallery, attribute_names=['photos'])

        logger.info(f"Added {len(created)} photos to gallery {gallery_id}")
        return created

    async def upload_photo(
        self,
        session: AsyncSession,
        gallery_id: str,
        filename: str,
        content: bytes,
        cdn,
    ) -> ClientPhoto:
        """Inspect an uploaded image, push it to the CDN and add it to the gallery."""
        await self.get_gallery(session, gallery_id)
        info = self.image_processor.get_image_info(content, filename)

        uploaded = await cdn.upload(content, folder=f"clients/{gallery_id}", filename=filename)
        public_id = uploaded['public_id']

        created = await self.add_photos(session, gallery_id, [{
            'cdn_public_id': public_id,
            'url': uploaded['secure_url'],
            'thumbnail_url': cdn.build_url(public_id, width=400, height=400),
            'width': uploaded.get('width') or info['width'],
            'height': uploaded.get('height') or info['height'],
            'file_size': uploaded.get('bytes') or info['file_size'],
        }])
        return created[0]

    async def bulk_delete_photos(self, session: AsyncSession, photo_ids: List[str]) -> int:
        if not photo_ids:
            raise ValidationError("Photo IDs array required")
        result = await session.execute(delete(ClientPhoto).where(ClientPhoto.id.in_(photo_ids)))
        await session.commit()
        audit_log("PHOTOS_DELETED", count=result.rowcount)
        return result.rowcount

    async def bulk_update_photos(self, session: AsyncSession, photo_ids: List[str], data: Dict[str, Any]) -> int:
        if not photo_ids:
            raise ValidationError("Photo IDs array required")
        updates = {k: v for k, v in data.items() if k in BULK_EDITABLE}
        if not updates:
            raise ValidationError("No editable fields given")

        result = await session.execute(select(ClientPhoto).where(ClientPhoto.id.in_(photo_ids)))
        photos = list(result.scalars().all())
        for photo in photos:
            photo.update_from_dict(updates)
        await session.commit()
        return len(photos)

    # Client portal

    async def list_client_galleries(
        self,
        session: AsyncSession,
        client_id: str,
        now: Optional[datetime] = None,
    ) -> List[ClientGallery]:
        """A client's galleries, newest first, without the expired ones."""
        now = now or utcnow()
        galleries = await self.list_galleries(session, client_id=client_id)
        return [gallery for gallery in galleries if not gallery.is_expired(now)]

    async def get_client_gallery(
        self,
        session: AsyncSession,
        client_id: str,
        gallery_id: str,
    ) -> ClientGallery:
        gallery = await session.get(ClientGallery, gallery_id)
        if gallery is None or gallery.client_id != client_id or gallery.is_expired(utcnow()):
            raise NotFoundError("Gallery", gallery_id)
        return gallery

    async def toggle_print_selection(
        self,
        session: AsyncSession,
        client_id: str,
        photo_id: str,
        selected: bool,
    ) -> ClientPhoto:
        """Mark a photo for print; only photos in the client's own, unexpired galleries."""
        stmt = (
            select(ClientPhoto, ClientGallery)
            .join(ClientGallery, ClientPhoto.gallery_id == ClientGallery.id)
            .where(ClientPhoto.id == photo_id, ClientGallery.client_id == client_id)
        )
        row = (await session.execute(stmt)).first()
        if row is None or row.ClientGallery.is_expired(utcnow()):
            raise NotFoundError("Photo", photo_id)
        photo = row.ClientPhoto

        photo.selected_for_print = selected
        await session.commit()
        return photo

    async def save_selection(
        self,
        session: AsyncSession,
        client_id: str,
        gallery_id: str,
        photo_ids: List[str],
    ) -> ClientGallery:
        """Store the client's approved selection for a whole gallery."""
        gallery = await self.get_client_gallery(session, client_id, gallery_id)

        known = {photo.id for photo in gallery.photos}
        unknown = [photo_id for photo_id in photo_ids if photo_id not in known]
        if unknown:
            raise ValidationError("Photos do not belong to this gallery", detail={'ids': unknown})

        gallery.selected_photo_ids = list(photo_ids)
        gallery.selection_approved_at = utcnow()
        await session.commit()

        audit_log("GALLERY_SELECTION_SAVED", gallery_id=gallery_id, count=len(photo_ids))
        return gallery

    async def selected_photos_report(self, session: AsyncSession) -> List[Dict[str, Any]]:
        """Photos marked for print, grouped by client and gallery."""
        stmt = (
            select(ClientPhoto, ClientGallery, Client)
            .join(ClientGallery, ClientPhoto.gallery_id == ClientGallery.id)
            .join(Client, ClientGallery.client_id == Client.id)
            .where(ClientPhoto.selected_for_print.is_(True))
            .order_by(Client.name, ClientGallery.name, ClientPhoto.photo_number)
        )
        result = await session.execute(stmt)

        report: Dict[str, Dict[str, Any]] = {}
        for photo, gallery, client in result.all():
            entry = report.get(gallery.id)
            if entry is None:
                entry = report[gallery.id] = {
                    'clientId': client.id,
                    'clientName': client.name,
                    'clientEmail': client.email,
                    'galleryId': gallery.id,
                    'galleryName': gallery.name,
                    'photos': [],
                }
            entry['photos'].append({
                'id': photo.id,
                'photoNumber': photo.photo_number,
                'url': photo.url,
                'thumbnailUrl': photo.thumbnail_url,
            })

        for entry in report.values():
            entry['count'] = len(entry['photos'])
        return list(report.values())
