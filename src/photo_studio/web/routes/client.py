"""Client portal routes, authenticated with the session cookie."""

from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import Config
from ...core.logger import get_logger
from ...database.session import get_db_dependency
from ...models.client import Client
from ...services import CatalogService, GalleryService, PhotobookService
from ...services.auth import authenticate_client, create_client_token
from ..deps import (
    get_app_config,
    get_catalog_service,
    get_gallery_service,
    get_photobook_service,
    require_client,
)
from ..schemas import (
    ClientSession,
    GalleryResponse,
    GallerySelection,
    LoginRequest,
    MessageResponse,
    PhotoResponse,
    PhotobookCreate,
    PhotobookEnvelope,
    PhotobookResponse,
    PhotobookSubmit,
    PrintSelection,
    TestimonialResponse,
    TestimonialSubmit,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/client", tags=["client"])


# Session

@router.post("/auth/login", response_model=ClientSession)
async def client_login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db_dependency),
    config: Config = Depends(get_app_config),
):
    client = await authenticate_client(session, body.email, body.password)
    response.set_cookie(
        key=config.auth.client_cookie_name,
        value=create_client_token(client, config),
        max_age=config.auth.client_token_days * 24 * 60 * 60,
        httponly=True,
        secure=config.auth.secure_cookies,
        samesite="lax",
        path="/",
    )
    return client


@router.post("/auth/logout", response_model=MessageResponse)
async def client_logout(response: Response, config: Config = Depends(get_app_config)):
    response.delete_cookie(key=config.auth.client_cookie_name, path="/")
    return MessageResponse(message="Logged out")


@router.get("/auth/me", response_model=ClientSession)
async def client_me(client: Client = Depends(require_client)):
    return client


# Galleries

@router.get("/galleries", response_model=List[GalleryResponse])
async def my_galleries(
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    """The client's galleries that have not expired."""
    return await galleries.list_client_galleries(session, client.id)


@router.get("/galleries/{gallery_id}", response_model=GalleryResponse)
async def my_gallery(
    gallery_id: str,
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.get_client_gallery(session, client.id, gallery_id)


@router.post("/photos/print-selection", response_model=PhotoResponse)
async def toggle_print_selection(
    body: PrintSelection,
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    return await galleries.toggle_print_selection(session, client.id, body.photo_id, body.selected)


@router.post("/galleries/{gallery_id}/selection", response_model=GalleryResponse)
async def save_selection(
    gallery_id: str,
    body: GallerySelection,
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    galleries: GalleryService = Depends(get_gallery_service),
):
    """Approve the final photo selection for a gallery."""
    return await galleries.save_selection(session, client.id, gallery_id, body.photo_ids)


# Photobooks

@router.get("/photobooks", response_model=PhotobookEnvelope)
async def get_photobook(
    gallery_id: str = Query(..., alias="galleryId"),
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    photobooks: PhotobookService = Depends(get_photobook_service),
):
    """The client's photobook for a gallery, or ``null`` when none exists yet."""
    photobook = await photobooks.get_photobook(session, client.id, gallery_id)
    if photobook is None:
        return PhotobookEnvelope()
    return PhotobookEnvelope(photobook=PhotobookResponse.model_validate(photobook))


@router.post("/photobooks", response_model=PhotobookResponse)
async def create_photobook(
    body: PhotobookCreate,
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    photobooks: PhotobookService = Depends(get_photobook_service),
):
    return await photobooks.get_or_create_photobook(
        session,
        client.id,
        body.gallery_id,
        format=body.format,
        title=body.title,
    )


@router.post("/photobooks/submit", response_model=PhotobookResponse)
async def submit_photobook(
    body: PhotobookSubmit,
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    photobooks: PhotobookService = Depends(get_photobook_service),
):
    """Send the finished layout for review."""
    photobook = await photobooks.submit_photobook(
        session,
        client.id,
        body.photobook_id,
        pages=[page.model_dump() for page in body.pages],
        title=body.title,
        notes=body.notes,
    )
    logger.info(f"Client {client.id} submitted photobook {photobook.id}")
    return photobook


# Testimonials

@router.get("/testimonials", response_model=List[TestimonialResponse])
async def my_testimonials(
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_client_testimonials(session, client.id)


@router.post("/testimonials", response_model=TestimonialResponse, status_code=201)
async def submit_testimonial(
    body: TestimonialSubmit,
    client: Client = Depends(require_client),
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Leave feedback; it is published once the studio approves it."""
    return await catalog.submit_testimonial(session, client, body.model_dump())
