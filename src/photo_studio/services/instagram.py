"""Instagram Graph API client and mirroring of posts, highlights and stories."""

from typing import Any, Dict, List, Optional, Tuple

import httpx
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import InstagramConfig, get_config
from ..core.exceptions import IntegrationError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.media import Image, InstagramHighlight, InstagramPost, InstagramStory, Video
from ..models.site import SiteSettings
from ..utils.date_utils import parse_datetime, utcnow
from .cdn import video_thumbnail_url

logger = get_logger(__name__)

MEDIA_FIELDS = "id,caption,media_type,media_url,thumbnail_url,permalink,timestamp"
HIGHLIGHT_FIELDS = "id,name,cover_media{thumbnail_url}"
STORY_FIELDS = "id,media_type,media_url,thumbnail_url,timestamp"
PROFILE_FIELDS = "id,username,account_type,media_count"

IMPORTABLE_TYPES = ('IMAGE', 'VIDEO')
IMPORT_TITLE_LENGTH = 100
IMPORT_CATEGORY = "instagram"


class InstagramClient:
    """Thin async wrapper over the Instagram Graph API."""

    def __init__(
        self,
        config: Optional[InstagramConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_config().instagram
        self.base_url = self.config.graph_url.rstrip('/')
        self.timeout = httpx.Timeout(self.config.timeout)
        self._transport = transport

    async def _get(self, path: str, token: str, **params) -> Dict[str, Any]:
        params['access_token'] = token
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/{path.lstrip('/')}", params=params)
        except httpx.HTTPError as e:
            logger.error(f"Instagram request to {path} failed: {e}")
            raise IntegrationError("Instagram request failed", detail=str(e))

        if response.status_code >= 400:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            logger.error(f"Instagram returned {response.status_code} for {path}: {detail}")
            raise IntegrationError(
                "Instagram API request failed",
                detail=detail,
                upstream_status=response.status_code,
            )

        return response.json()

    async def get_media(self, user_id: str, token: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        data = await self._get(
            f"{user_id}/media",
            token,
            fields=MEDIA_FIELDS,
            limit=limit or self.config.posts_limit,
        )
        return data.get('data', [])

    async def get_highlights(self, user_id: str, token: str) -> List[Dict[str, Any]]:
        data = await self._get(f"{user_id}/stories", token, fields=HIGHLIGHT_FIELDS)
        return data.get('data', [])

    async def get_highlight_stories(self, highlight_id: str, token: str) -> List[Dict[str, Any]]:
        data = await self._get(f"{highlight_id}/stories", token, fields=STORY_FIELDS)
        return data.get('data', [])

    async def get_profile(self, token: str) -> Dict[str, Any]:
        return await self._get("me", token, fields=PROFILE_FIELDS)


class InstagramSync:
    """Mirrors Instagram content into the local database."""

    def __init__(self, client: Optional[InstagramClient] = None, config=None):
        self.config = config or get_config()
        self.client = client or InstagramClient(self.config.instagram)

    async def _settings(self, session: AsyncSession) -> Optional[SiteSettings]:
        result = await session.execute(select(SiteSettings).order_by(SiteSettings.created_at).limit(1))
        return result.scalar_one_or_none()

    async def _credentials(self, session: AsyncSession) -> Tuple[Optional[SiteSettings], str, str]:
        """Stored token and user id, falling back to the configured ones."""
        settings = await self._settings(session)
        token = (settings.instagram_access_token if settings else None) or self.config.instagram.access_token
        if not token:
            raise ValidationError("Instagram not connected. Please connect your Instagram account first.")

        user_id = (settings.instagram_user_id if settings else None) or self.config.instagram.user_id
        if not user_id:
            raise ValidationError("Instagram user ID not found.")
        return settings, token, user_id

    async def _mark_synced(self, session: AsyncSession, settings: Optional[SiteSettings]) -> None:
        if settings is None:
            settings = SiteSettings()
            session.add(settings)
        settings.instagram_last_sync = utcnow()
        await session.commit()

    async def sync_highlights(self, session: AsyncSession) -> Dict[str, int]:
        """Upsert every highlight and replace its stories.

        A highlight whose stories cannot be fetched or stored is logged and
        skipped; the remaining highlights are still synced.
        """
        _, token, user_id = await self._credentials(session)
        highlights = await self.client.get_highlights(user_id, token)

        synced_highlights = 0
        synced_stories = 0

        for index, remote in enumerate(highlights):
            try:
                stories = await self.client.get_highlight_stories(remote['id'], token)

                result = await session.execute(
                    select(InstagramHighlight)
                    .where(InstagramHighlight.instagram_id == remote['id'])
                    .execution_options(populate_existing=True)
                )
                highlight = result.scalar_one_or_none()
                if highlight is None:
                    highlight = InstagramHighlight(instagram_id=remote['id'])
                    session.add(highlight)

                highlight.name = remote.get('name') or ''
                highlight.cover_image = (remote.get('cover_media') or {}).get('thumbnail_url') or ''
                highlight.order = index
                highlight.active = True

                highlight.stories.clear()
                for story_index, story in enumerate(stories):
                    highlight.stories.append(InstagramStory(
                        instagram_id=story['id'],
                        media_type=story.get('media_type') or 'IMAGE',
                        media_url=story.get('media_url'),
                        thumbnail_url=story.get('thumbnail_url') or story.get('media_url'),
                        timestamp=parse_datetime(story.get('timestamp')),
                        order=story_index,
                    ))
                await session.commit()

                synced_highlights += 1
                synced_stories += len(stories)
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to sync highlight {remote.get('id')}: {e}")
                continue

        settings = await self._settings(session)
        await self._mark_synced(session, settings)

        logger.info(f"Synced {synced_highlights} highlights with {synced_stories} stories")
        audit_log("INSTAGRAM_SYNC", highlights=synced_highlights, stories=synced_stories)
        return {'highlights': synced_highlights, 'stories': synced_stories}

    async def sync_posts(self, session: AsyncSession, limit: Optional[int] = None) -> Dict[str, int]:
        """Upsert recent feed media into ``InstagramPost`` by remote id."""
        settings, token, user_id = await self._credentials(session)
        media = await self.client.get_media(user_id, token, limit)

        created = updated = 0
        for item in media:
            result = await session.execute(
                select(InstagramPost).where(InstagramPost.instagram_id == item['id'])
            )
            post = result.scalar_one_or_none()
            if post is None:
                post = InstagramPost(instagram_id=item['id'], active=True)
                session.add(post)
                created += 1
            else:
                updated += 1

            post.caption = item.get('caption')
            post.media_type = item.get('media_type') or 'IMAGE'
            post.media_url = item.get('media_url')
            post.thumbnail_url = item.get('thumbnail_url') or item.get('media_url')
            post.permalink = item.get('permalink')
            post.timestamp = parse_datetime(item.get('timestamp'))

        await self._mark_synced(session, settings)

        audit_log("INSTAGRAM_POSTS_SYNC", created=created, updated=updated)
        return {'created': created, 'updated': updated, 'total': len(media)}

    async def _already_imported(self, session: AsyncSession, remote_id: str) -> bool:
        for model in (Image, Video):
            found = await session.execute(select(model.id).where(model.instagram_id == remote_id).limit(1))
            if found.scalar_one_or_none():
                return True
        return False

    async def import_to_images(self, session: AsyncSession, media: List[Dict[str, Any]], cdn) -> Dict[str, Any]:
        """Copy Instagram images and videos into the portfolio through the CDN.

        Images become ``Image`` rows and videos ``Video`` rows; media already
        imported under the same Instagram id is skipped.
        """
        folder = self.config.instagram.import_folder
        imported = 0
        skipped = 0
        errors: List[str] = []

        for item in media:
            media_type = item.get('media_type')
            if media_type not in IMPORTABLE_TYPES or not item.get('media_url'):
                skipped += 1
                continue

            remote_id = str(item.get('id') or '')
            is_video = media_type == 'VIDEO'
            caption = item.get('caption') or ''
            title = caption[:IMPORT_TITLE_LENGTH] or f"Instagram {media_type.lower()} {remote_id}"

            if remote_id and await self._already_imported(session, remote_id):
                skipped += 1
                continue

            try:
                uploaded = await cdn.upload_from_url(
                    item['media_url'],
                    folder=folder,
                    resource_type='video' if is_video else 'image',
                )
            except Exception as e:
                logger.warning(f"Failed to import Instagram media {remote_id}: {e}")
                errors.append(f"Failed to upload {remote_id} to CDN")
                continue

            if is_video:
                session.add(Video(
                    instagram_id=remote_id or None,
                    cdn_public_id=uploaded.get('public_id'),
                    url=uploaded['secure_url'],
                    thumbnail_url=uploaded.get('thumbnail_url') or video_thumbnail_url(uploaded['secure_url']),
                    title=title,
                    description=caption,
                    category=IMPORT_CATEGORY,
                    duration=int(uploaded['duration']) if uploaded.get('duration') else None,
                    show_in_gallery=True,
                ))
            else:
                session.add(Image(
                    instagram_id=remote_id or None,
                    cdn_public_id=uploaded.get('public_id'),
                    url=uploaded['secure_url'],
                    thumbnail_url=uploaded.get('thumbnail_url') or uploaded['secure_url'],
                    title=title,
                    description=caption,
                    category=IMPORT_CATEGORY,
                    tags=['instagram', 'import', media_type.lower()],
                    featured=False,
                    show_on_homepage=False,
                    show_in_gallery=True,
                    order=0,
                    width=uploaded.get('width'),
                    height=uploaded.get('height'),
                    format=uploaded.get('format'),
                ))
            await session.commit()
            imported += 1

        audit_log("INSTAGRAM_IMPORT", imported=imported, skipped=skipped, errors=len(errors))
        return {'imported': imported, 'skipped': skipped, 'errors': errors}

    async def sync_status(self, session: AsyncSession) -> Dict[str, Any]:
        settings = await self._settings(session)
        highlights = (await session.execute(select(func.count()).select_from(InstagramHighlight))).scalar_one()
        stories = (await session.execute(select(func.count()).select_from(InstagramStory))).scalar_one()
        return {
            'connected': bool(settings and settings.instagram_access_token),
            'username': settings.instagram_username if settings else None,
            'lastSync': settings.instagram_last_sync.isoformat() if settings and settings.instagram_last_sync else None,
            'autoSync': bool(settings and settings.instagram_auto_sync),
            'highlightsCount': highlights,
            'storiesCount': stories,
        }


async def list_posts(session: AsyncSession, limit: int = 30) -> List[InstagramPost]:
    stmt = (
        select(InstagramPost)
        .where(InstagramPost.active.is_(True))
        .order_by(InstagramPost.timestamp.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_highlights(session: AsyncSession) -> List[Dict[str, Any]]:
    """Active highlights in order, shaped for the story viewer."""
    stmt = (
        select(InstagramHighlight)
        .where(InstagramHighlight.active.is_(True))
        .order_by(InstagramHighlight.order.asc())
    )
    result = await session.execute(stmt)
    return [
        {
            'id': highlight.id,
            'name': highlight.name,
            'coverImage': highlight.cover_image,
            'stories': [
                {
                    'id': story.id,
                    'image': story.media_url,
                    'title': 'Video' if story.media_type == 'VIDEO' else None,
                }
                for story in highlight.stories
            ],
        }
        for highlight in result.scalars().all()
    ]
