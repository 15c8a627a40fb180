"""FastAPI dependencies: configuration, authentication and services."""

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Config, get_config
from ..core.exceptions import AuthenticationError, PermissionDeniedError
from ..database.session import get_db_dependency
from ..models.client import Client
from ..services import (
    BookingService,
    CatalogService,
    CloudinaryClient,
    FinanceService,
    GalleryService,
    InstagramSync,
    InvoiceService,
    PhotobookService,
)
from ..services.auth import ADMIN_TOKEN, CLIENT_TOKEN, decode_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_config() -> Config:
    return get_config()


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    config: Config = Depends(get_app_config),
) -> Dict[str, Any]:
    """Claims of a valid admin bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return decode_token(credentials.credentials, ADMIN_TOKEN, config)


async def require_client(
    request: Request,
    session: AsyncSession = Depends(get_db_dependency),
    config: Config = Depends(get_app_config),
) -> Client:
    """The active client behind the portal session cookie."""
    token = request.cookies.get(config.auth.client_cookie_name)
    if not token:
        raise AuthenticationError("Not authenticated")

    claims = decode_token(token, CLIENT_TOKEN, config)
    client = await session.get(Client, claims['sub'])
    if client is None:
        raise AuthenticationError("Invalid token")
    if not client.active:
        raise PermissionDeniedError("Account is deactivated")
    return client


def get_booking_service(config: Config = Depends(get_app_config)) -> BookingService:
    return BookingService(config)


def get_catalog_service(config: Config = Depends(get_app_config)) -> CatalogService:
    return CatalogService(config)


def get_gallery_service(config: Config = Depends(get_app_config)) -> GalleryService:
    return GalleryService(config)


def get_photobook_service(config: Config = Depends(get_app_config)) -> PhotobookService:
    return PhotobookService(config)


def get_invoice_service(config: Config = Depends(get_app_config)) -> InvoiceService:
    return InvoiceService(config)


def get_finance_service(config: Config = Depends(get_app_config)) -> FinanceService:
    return FinanceService(config)


def get_cdn(config: Config = Depends(get_app_config)) -> CloudinaryClient:
    return CloudinaryClient(config.cdn)


def get_instagram_sync(config: Config = Depends(get_app_config)) -> InstagramSync:
    return InstagramSync(config=config)


def client_ip(request: Request) -> Optional[str]:
    """Caller address, honouring ``X-Forwarded-For`` from a reverse proxy."""
    forwarded = request.headers.get('x-forwarded-for')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.client.host if request.client else None
