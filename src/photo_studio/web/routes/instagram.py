"""CMS routes driving the Instagram mirror."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import StudioError
from ...core.logger import get_logger
from ...database.session import get_db_dependency
from ...services import CloudinaryClient, InstagramSync
from ..deps import get_cdn, get_instagram_sync, require_admin
from ..schemas import InstagramImportRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin/instagram", tags=["instagram"], dependencies=[Depends(require_admin)])


@router.post("/sync")
async def sync_highlights(
    session: AsyncSession = Depends(get_db_dependency),
    sync: InstagramSync = Depends(get_instagram_sync),
) -> Dict[str, Any]:
    """Mirror highlights and their stories."""
    try:
        synced = await sync.sync_highlights(session)
    except StudioError as e:
        logger.error(f"Instagram highlight sync failed: {e.message}")
        raise

    return {
        'success': True,
        'message': f"Synced {synced['highlights']} highlights with {synced['stories']} stories",
        'highlightsCount': synced['highlights'],
        'storiesCount': synced['stories'],
    }


@router.get("/sync")
async def sync_status(
    session: AsyncSession = Depends(get_db_dependency),
    sync: InstagramSync = Depends(get_instagram_sync),
) -> Dict[str, Any]:
    return await sync.sync_status(session)


@router.post("/posts/sync")
async def sync_posts(
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db_dependency),
    sync: InstagramSync = Depends(get_instagram_sync),
) -> Dict[str, Any]:
    """Mirror recent feed posts."""
    try:
        result = await sync.sync_posts(session, limit=limit)
    except StudioError as e:
        logger.error(f"Instagram post sync failed: {e.message}")
        raise

    return {'success': True, **result}


@router.post("/import-to-photos")
async def import_to_photos(
    body: InstagramImportRequest,
    session: AsyncSession = Depends(get_db_dependency),
    sync: InstagramSync = Depends(get_instagram_sync),
    cdn: CloudinaryClient = Depends(get_cdn),
) -> Dict[str, Any]:
    """Copy selected Instagram media into the portfolio."""
    result = await sync.import_to_images(session, body.media, cdn)
    return {
        'success': True,
        'message': f"Imported {result['imported']} photos, skipped {result['skipped']}",
        **result,
    }
