"""CMS routes for client accounts, delivered galleries and photobooks."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import Config
from ...core.exceptions import ValidationError
from ...core.logger import audit_log, get_logger
from ...database.session import get_db_dependency
from ...services import CloudinaryClient, GalleryService, PhotobookService
from ..deps import get_app_config, get_cdn, get_gallery_service, get_photobook_service, require_admin
from ..schemas import (
    BulkPhotoEdit,
    BulkPhotoIds,
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    CountResponse,
    GalleryCreate,
    GalleryResponse,
    GalleryUpdate,
    MessageResponse,
    PhotoResponse,
    PhotobookAdminResponse,
    PhotobookResponse,
    PhotosAdd,
    StatusUpdate,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["galleries"], dependencies=[Depends(require_admin)])


# Clients

@router.get("/clients", response_model=List[ClientResponse])
async def list_clients(
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.list_clients(session)


@router.post("/clients", response_model=ClientResponse, status_code=201)
async def create_client(
    body: ClientCreate,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.create_client(
        session,
        name=body.name,
        email=body.email,
        password=body.password,
        phone=body.phone,
    )


@router.get("/clients/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.get_client(session, client_id)


@router.put("/clients/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    body: ClientUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.update_client(session, client_id, body.model_dump(exclude_unset=True))


@router.delete("/clients/{client_id}", response_model=MessageResponse)
async def delete_client(
    client_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    await galleries.delete_client(session, client_id)
    return MessageResponse(message="Client deleted")


# Galleries

@router.get("/galleries", response_model=List[GalleryResponse])
async def list_galleries(
    client_id: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.list_galleries(session, client_id=client_id)


@router.post("/galleries", response_model=GalleryResponse, status_code=201)
async def create_gallery(
    body: GalleryCreate,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.create_gallery(
        session,
        client_id=body.client_id,
        name=body.name,
        description=body.description,
        expires_at=body.expires_at,
        allow_download=body.allow_download,
        password=body.password,
    )


@router.get("/galleries/{gallery_id}", response_model=GalleryResponse)
async def get_gallery(
    gallery_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.get_gallery(session, gallery_id)


@router.put("/galleries/{gallery_id}", response_model=GalleryResponse)
async def update_gallery(
    gallery_id: str,
    body: GalleryUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.update_gallery(session, gallery_id, body.model_dump(exclude_unset=True))


@router.delete("/galleries/{gallery_id}", response_model=MessageResponse)
async def delete_gallery(
    gallery_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    await galleries.delete_gallery(session, gallery_id)
    return MessageResponse(message="Gallery deleted")


# Photos

@router.post("/photos", response_model=List[PhotoResponse], status_code=201)
async def add_photos(
    body: PhotosAdd,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    """Register photos already uploaded to the CDN."""
    return await galleries.add_photos(
        session,
        body.gallery_id,
        [photo.model_dump() for photo in body.photos],
    )


@router.post("/galleries/{gallery_id}/upload", response_model=PhotoResponse, status_code=201)
async def upload_photo(
    gallery_id: str,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
    cdn: CloudinaryClient = Depends(get_cdn),
    config: Config = Depends(get_app_config),
):
    """Upload an image file to the CDN and add it to the gallery."""
    if not file.content_type or not file.content_type.startswith('image/'):
        raise ValidationError("File must be an image")

    content = await file.read()
    if len(content) > config.web.max_upload_size:
        raise ValidationError("File too large", detail={'maxBytes': config.web.max_upload_size})

    audit_log("PHOTO_UPLOAD", gallery_id=gallery_id, filename=file.filename, size=len(content))
    return await galleries.upload_photo(session, gallery_id, file.filename, content, cdn)


@router.post("/photos/bulk-delete", response_model=CountResponse)
async def bulk_delete_photos(
    body: BulkPhotoIds,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    count = await galleries.bulk_delete_photos(session, body.photo_ids)
    return CountResponse(count=count)


@router.post("/photos/bulk-edit", response_model=CountResponse)
async def bulk_edit_photos(
    body: BulkPhotoEdit,
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    count = await galleries.bulk_update_photos(
        session,
        body.photo_ids,
        body.updates.model_dump(exclude_none=True),
    )
    return CountResponse(count=count)


@router.get("/selected-photos")
async def selected_photos(
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
) -> List[Dict[str, Any]]:
    """Photos clients marked for print, grouped by gallery."""
    return await galleries.selected_photos_report(session)


# Photobooks

@router.get("/photobooks", response_model=List[PhotobookAdminResponse])
async def list_photobooks(
    status: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    photobooks: PhotobookService = Depends(get_photobook_service),
):
    return [
        PhotobookAdminResponse.model_validate({
            **PhotobookResponse.model_validate(entry['photobook']).model_dump(),
            'client': entry['client'],
            'gallery': entry['gallery'],
        })
        for entry in await photobooks.list_photobooks(session, status=status)
    ]


@router.patch("/photobooks/{photobook_id}", response_model=PhotobookResponse)
async def update_photobook_status(
    photobook_id: str,
    body: StatusUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    photobooks: PhotobookService = Depends(get_photobook_service),
):
    return await photobooks.update_photobook_status(session, photobook_id, body.status)
