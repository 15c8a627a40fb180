"""Database session management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from .engine import get_database_engine
from ..core.exceptions import StudioError
from ..core.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def get_async_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session context manager."""
    db_engine = get_database_engine()
    async with db_engine.get_session() as session:
        try:
            yield session
        except StudioError:
            raise
        except Exception as e:
            logger.error(f"Database session error: {e}")
            raise


# Dependency injection for FastAPI
async def get_db_dependency() -> AsyncGenerator[AsyncSession, None]:
    """Database dependency for FastAPI."""
    async with get_async_db_session() as session:
        yield session
