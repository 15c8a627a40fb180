"""Password hashing, JWT issuing and credential checks for admins and clients."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Config, get_config
from ..core.exceptions import AuthenticationError, NotFoundError, PermissionDeniedError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.client import Client
from ..models.site import AdminUser

logger = get_logger(__name__)

ADMIN_TOKEN = "admin"
CLIENT_TOKEN = "client"

INVALID_CREDENTIALS = "Invalid email or password"
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


def _encode(claims: Dict[str, Any], lifetime: timedelta, config: Config) -> str:
    to_encode = claims.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + lifetime
    return jwt.encode(to_encode, config.auth.secret_key, algorithm=config.auth.algorithm)


def create_admin_token(admin: AdminUser, config: Optional[Config] = None) -> str:
    """Issue a bearer token for the CMS."""
    config = config or get_config()
    return _encode(
        {"sub": admin.id, "email": admin.email, "role": admin.role, "type": ADMIN_TOKEN},
        timedelta(minutes=config.auth.admin_token_minutes),
        config,
    )


def create_client_token(client: Client, config: Optional[Config] = None) -> str:
    """Issue the client portal session token."""
    config = config or get_config()
    return _encode(
        {"sub": client.id, "email": client.email, "name": client.name, "type": CLIENT_TOKEN},
        timedelta(days=config.auth.client_token_days),
        config,
    )


def decode_token(token: str, expected_type: str, config: Optional[Config] = None) -> Dict[str, Any]:
    """Verify a token and return its claims.

    Raises:
        AuthenticationError: if the token is malformed, expired, signed with
            another key or was issued for another audience type.
    """
    config = config or get_config()
    try:
        claims = jwt.decode(token, config.auth.secret_key, algorithms=[config.auth.algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except JWTError:
        raise AuthenticationError("Invalid token")

    if claims.get("type") != expected_type or not claims.get("sub"):
        raise AuthenticationError("Invalid token")
    return claims


async def authenticate_admin(session: AsyncSession, email: str, password: str) -> AdminUser:
    result = await session.execute(
        select(AdminUser).where(func.lower(AdminUser.email) == email.strip().lower())
    )
    admin = result.scalar_one_or_none()

    if admin is None or not verify_password(password, admin.password_hash):
        logger.warning(f"Failed admin login for {email}")
        audit_log("ADMIN_LOGIN_FAILED", email=email)
        raise AuthenticationError(INVALID_CREDENTIALS)

    audit_log("ADMIN_LOGIN", admin_id=admin.id, email=admin.email)
    return admin


async def authenticate_client(session: AsyncSession, email: str, password: str) -> Client:
    """Check client portal credentials; deactivated accounts are refused."""
    result = await session.execute(
        select(Client).where(func.lower(Client.email) == email.strip().lower())
    )
    client = result.scalar_one_or_none()

    if client is None or not verify_password(password, client.password_hash):
        logger.warning(f"Failed client login for {email}")
        audit_log("CLIENT_LOGIN_FAILED", email=email)
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not client.active:
        audit_log("CLIENT_LOGIN_REFUSED", client_id=client.id, reason="inactive")
        raise PermissionDeniedError("Account is deactivated")

    audit_log("CLIENT_LOGIN", client_id=client.id, email=client.email)
    return client


async def change_admin_password(
    session: AsyncSession,
    admin_id: str,
    current_password: Optional[str],
    new_password: Optional[str],
) -> AdminUser:
    """Replace an admin's password after checking the current one."""
    if not current_password or not new_password:
        raise ValidationError("Current and new password are required")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    admin = await session.get(AdminUser, admin_id)
    if admin is None:
        raise NotFoundError("Admin", admin_id)

    if not verify_password(current_password, admin.password_hash):
        audit_log("ADMIN_PASSWORD_CHANGE_FAILED", admin_id=admin_id)
        raise ValidationError("Current password is incorrect")

    admin.password_hash = hash_password(new_password)
    await session.commit()

    audit_log("ADMIN_PASSWORD_CHANGED", admin_id=admin_id)
    return admin


async def create_admin(
    session: AsyncSession,
    email: str,
    password: str,
    name: Optional[str] = None,
    role: str = "admin",
) -> AdminUser:
    """Create a CMS administrator."""
    email = email.strip().lower()
    if not email or not password:
        raise ValidationError("Email and password are required")

    existing = await session.execute(select(AdminUser.id).where(AdminUser.email == email))
    if existing.scalar_one_or_none():
        raise ValidationError(f"Admin {email} already exists")

    admin = AdminUser(email=email, password_hash=hash_password(password), name=name, role=role)
    session.add(admin)
    await session.commit()

    audit_log("ADMIN_CREATED", admin_id=admin.id, email=email)
    return admin
