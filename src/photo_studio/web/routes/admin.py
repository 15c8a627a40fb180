"""CMS routes: login, bookings, calendar, site content, testimonials and dashboard."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import Config
from ...core.logger import get_logger
from ...database.session import get_db_dependency
from ...services import BookingService, CatalogService
from ...services.auth import authenticate_admin, change_admin_password, create_admin_token
from ..deps import get_app_config, get_booking_service, get_catalog_service, require_admin
from ..schemas import (
    BlockedDateCreate,
    BlockedDateResponse,
    BookingGroup,
    BookingResponse,
    BookingStatusUpdate,
    CalendarEventResponse,
    ContactMessageResponse,
    ImageCreate,
    ImageResponse,
    ImageUpdate,
    LoginRequest,
    MessageResponse,
    PackCreate,
    PackResponse,
    PackUpdate,
    PasswordChange,
    SettingsResponse,
    SettingsUpdate,
    StatusUpdate,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamMemberUpdate,
    TestimonialCreate,
    TestimonialResponse,
    TestimonialReview,
    TokenResponse,
    VideoCreate,
    VideoResponse,
    VideoUpdate,
)

logger = get_logger(__name__)

auth_router = APIRouter(prefix="/api/admin", tags=["admin"])
router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@auth_router.post("/login", response_model=TokenResponse)
async def admin_login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_db_dependency),
    config: Config = Depends(get_app_config),
):
    admin = await authenticate_admin(session, body.email, body.password)
    return TokenResponse(
        access_token=create_admin_token(admin, config),
        expires_in=config.auth.admin_token_minutes * 60,
    )


@router.get("/me")
async def admin_me(claims: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
    return {'id': claims['sub'], 'email': claims.get('email'), 'role': claims.get('role')}


@router.put("/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    claims: Dict[str, Any] = Depends(require_admin),
    session: AsyncSession = Depends(get_db_dependency),
):
    await change_admin_password(session, claims['sub'], body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")


# Bookings

@router.get("/bookings", response_model=None)
async def list_bookings(
    status: Optional[str] = None,
    month: Optional[str] = None,
    grouped: bool = False,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    """Bookings newest first, optionally grouped by client."""
    records = await bookings.list_bookings(session, status=status, month=month)
    if not grouped:
        return [BookingResponse.model_validate(booking) for booking in records]

    return [
        BookingGroup.model_validate({
            **group,
            'bookings': [BookingResponse.model_validate(booking) for booking in group['bookings']],
        })
        for group in BookingService.group_by_client(records)
    ]


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    return await bookings.get_booking(session, booking_id)


@router.patch("/bookings/{booking_id}", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    """Approve, reject or cancel a booking."""
    return await bookings.update_status(session, booking_id, body.status, body.admin_notes)


@router.delete("/bookings/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    await bookings.delete_booking(session, booking_id)
    return MessageResponse(message="Booking deleted")


@router.get("/calendar", response_model=List[CalendarEventResponse])
async def list_calendar_events(
    month: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    return await bookings.list_calendar_events(session, month=month)


@router.get("/calendar/blocked", response_model=List[BlockedDateResponse])
async def list_blocked_dates(
    month: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    return await bookings.list_blocked_dates(session, month=month)


@router.post("/calendar/blocked", response_model=BlockedDateResponse, status_code=201)
async def block_date(
    body: BlockedDateCreate,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    """Close a day for bookings."""
    return await bookings.block_date(session, body.date, body.reason)


@router.delete("/calendar/blocked/{blocked_id}", response_model=MessageResponse)
async def unblock_date(
    blocked_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    bookings: BookingService = Depends(get_booking_service),
):
    await bookings.unblock_date(session, blocked_id)
    return MessageResponse(message="Date unblocked successfully")


# Packs

@router.get("/packs", response_model=List[PackResponse])
async def list_packs(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """All packs, including inactive ones, with their booking counts."""
    return [
        PackResponse.model_validate(pack).model_copy(update={'booking_count': count})
        for pack, count in await catalog.list_packs_with_counts(session)
    ]


@router.post("/packs", response_model=PackResponse, status_code=201)
async def create_pack(
    body: PackCreate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.create_pack(session, body.model_dump())


@router.post("/packs/seed", response_model=List[PackResponse], status_code=201)
async def seed_packs(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Create the starter packs on an empty catalogue."""
    return await catalog.seed_default_packs(session)


@router.put("/packs/{pack_id}", response_model=PackResponse)
async def update_pack(
    pack_id: str,
    body: PackUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.update_pack(session, pack_id, body.model_dump(exclude_unset=True))


@router.delete("/packs/{pack_id}", response_model=MessageResponse)
async def delete_pack(
    pack_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_pack(session, pack_id)
    return MessageResponse(message="Pack deleted")


# Images

@router.get("/images", response_model=List[ImageResponse])
async def list_images(
    category: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_images(session, category=category)


@router.post("/images", response_model=ImageResponse, status_code=201)
async def create_image(
    body: ImageCreate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.create_image(session, body.model_dump())


@router.put("/images/{image_id}", response_model=ImageResponse)
async def update_image(
    image_id: str,
    body: ImageUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.update_image(session, image_id, body.model_dump(exclude_unset=True))


@router.delete("/images/{image_id}", response_model=MessageResponse)
async def delete_image(
    image_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_image(session, image_id)
    return MessageResponse(message="Image deleted")


# Videos

@router.get("/videos", response_model=List[VideoResponse])
async def list_videos(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_videos(session, public_only=False)


@router.post("/videos", response_model=VideoResponse, status_code=201)
async def create_video(
    body: VideoCreate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.create_video(session, body.model_dump())


@router.put("/videos/{video_id}", response_model=VideoResponse)
async def update_video(
    video_id: str,
    body: VideoUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.update_video(session, video_id, body.model_dump(exclude_unset=True))


@router.delete("/videos/{video_id}", response_model=MessageResponse)
async def delete_video(
    video_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_video(session, video_id)
    return MessageResponse(message="Video deleted")


# Team

@router.get("/team", response_model=List[TeamMemberResponse])
async def list_team(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_team(session, active_only=False)


@router.post("/team", response_model=TeamMemberResponse, status_code=201)
async def create_team_member(
    body: TeamMemberCreate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.create_team_member(session, body.model_dump())


@router.put("/team/{member_id}", response_model=TeamMemberResponse)
async def update_team_member(
    member_id: str,
    body: TeamMemberUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.update_team_member(session, member_id, body.model_dump(exclude_unset=True))


@router.delete("/team/{member_id}", response_model=MessageResponse)
async def delete_team_member(
    member_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_team_member(session, member_id)
    return MessageResponse(message="Team member deleted")


# Settings and messages

@router.get("/settings", response_model=SettingsResponse)
async def get_settings(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.get_settings(session)


@router.put("/settings", response_model=SettingsResponse)
async def update_settings(
    body: SettingsUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.update_settings(session, body.model_dump(exclude_unset=True))


@router.get("/messages", response_model=List[ContactMessageResponse])
async def list_messages(
    status: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.list_messages(session, status=status)


@router.patch("/messages/{message_id}", response_model=ContactMessageResponse)
async def mark_message(
    message_id: str,
    body: StatusUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.mark_message(session, message_id, body.status)


@router.delete("/messages/{message_id}", response_model=MessageResponse)
async def delete_message(
    message_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_message(session, message_id)
    return MessageResponse(message="Message deleted")


# Testimonials

@router.get("/testimonials", response_model=List[TestimonialResponse])
async def list_testimonials(
    status: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """All testimonials newest first; ``status`` is ``pending`` or ``approved``."""
    return await catalog.list_testimonials(session, status=status)


@router.post("/testimonials", response_model=TestimonialResponse, status_code=201)
async def create_testimonial(
    body: TestimonialCreate,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.create_testimonial(session, body.model_dump())


@router.patch("/testimonials/{testimonial_id}", response_model=TestimonialResponse)
async def review_testimonial(
    testimonial_id: str,
    body: TestimonialReview,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Approve or feature a testimonial."""
    return await catalog.review_testimonial(session, testimonial_id, approved=body.approved, featured=body.featured)


@router.delete("/testimonials/{testimonial_id}", response_model=MessageResponse)
async def delete_testimonial(
    testimonial_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_testimonial(session, testimonial_id)
    return MessageResponse(message="Testimonial deleted")


@router.get("/dashboard")
async def dashboard(
    session: AsyncSession = Depends(get_db_dependency),
    catalog: CatalogService = Depends(get_catalog_service),
) -> Dict[str, int]:
    """Counters for the CMS landing page."""
    return await catalog.dashboard_stats(session)
