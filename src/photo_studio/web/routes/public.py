"""Public site routes: packs, booking form, availability, portfolio, team, testimonials, contact."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.logger import get_logger
from ...database.session import get_db_dependency
from ...services import BookingService, CatalogService
from ...services import instagram
from ...services.photobooks import get_templates
from ..deps import client_ip, get_booking_service, get_catalog_service
from ..schemas import (
    BlockedDateResponse,
    BookingCreate,
    BookingResponse,
    ContactMessageCreate,
    ContactSettingsResponse,
    ImageResponse,
    InstagramPostResponse,
    MessageResponse,
    PackResponse,
    PublicTestimonial,
    TeamMemberResponse,
    TrackRequest,
    TrackResponse,
    VideoResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["public"])


@router.get("/packs", response_model=List[PackResponse])
async def list_packs(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Active packs in display order."""
    return await catalog.list_packs(session)


@router.post("/bookings", response_model=BookingResponse, status_code=201)
async def submit_booking(
    request: Request,
    form: BookingCreate,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    """Submit the booking form."""
    data = {
        'name': form.client_name,
        'email': form.client_email,
        'phone': form.client_phone,
        'event_type': form.event_type,
        'event_date': form.requested_date,
        'time_slot': form.time_slot,
        'location': form.location,
        'message': form.message,
        'package_name': form.pack_name,
        'package_price': form.package_price,
        'pack_id': form.pack_id,
        'events': form.events,
    }
    return await bookings.create_booking(
        session,
        data,
        ip_address=client_ip(request),
        user_agent=request.headers.get('user-agent'),
    )


@router.post("/bookings/track", response_model=TrackResponse)
async def track_booking(
    request: Request,
    body: TrackRequest,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    """Record progress through the booking form."""
    tracking_id = await bookings.track_interaction(
        session,
        name=body.name,
        phone=body.phone,
        action=body.action,
        package_name=body.package_name,
        package_price=body.package_price,
        ip_address=client_ip(request),
        user_agent=request.headers.get('user-agent'),
    )
    return TrackResponse(tracking_id=tracking_id)


@router.get("/calendar/available", response_model=List[BlockedDateResponse])
async def blocked_dates(
    month: str = Query(..., description="YYYY-MM"),
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    """Days of the month the booking form should show as unavailable."""
    return await bookings.list_blocked_dates(session, month=month)


@router.get("/videos", response_model=List[VideoResponse])
async def list_videos(
    homepage: bool = False,
    professional_mode: Optional[bool] = Query(None, alias="professionalMode"),
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_videos(session, homepage=homepage, professional_mode=professional_mode)


@router.get("/public/gallery", response_model=List[ImageResponse])
async def public_gallery(
    category: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Images flagged for the public gallery."""
    return await catalog.list_images(session, category=category, gallery_only=True)


@router.get("/images", response_model=List[ImageResponse])
async def list_images(
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    professional_mode: Optional[bool] = Query(None, alias="professionalMode"),
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_images(
        session,
        category=category,
        featured=featured,
        professional_mode=professional_mode,
    )


@router.get("/team", response_model=List[TeamMemberResponse])
async def list_team(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_team(session)


@router.get("/public/testimonials", response_model=List[PublicTestimonial])
async def public_testimonials(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Approved testimonials, featured first."""
    return await catalog.list_public_testimonials(session)


@router.get("/settings/contact", response_model=ContactSettingsResponse)
async def contact_settings(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.get_contact_settings(session)


@router.post("/contact", response_model=MessageResponse, status_code=201)
async def send_contact_message(
    body: ContactMessageCreate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.create_message(
        session,
        name=body.name,
        email=body.email,
        message=body.message,
        phone=body.phone,
        subject=body.subject,
    )
    return MessageResponse(message="Message sent successfully")


@router.get("/instagram/posts", response_model=List[InstagramPostResponse])
async def instagram_posts(
    limit: int = Query(30, ge=1, le=100),
    session: AsyncSession = Depends(get_db_dependency),
):
    return await instagram.list_posts(session, limit=limit)


@router.get("/instagram/highlights")
async def instagram_highlights(session: AsyncSession = Depends(get_db_dependency)) -> List[Dict[str, Any]]:
    """Mirrored highlights with their stories, for the story viewer."""
    return await instagram.list_highlights(session)


@router.get("/photobooks/templates")
async def photobook_templates(category: Optional[str] = None) -> List[Dict[str, Any]]:
    return [template.to_dict() for template in get_templates(category)]
