"""Async database engine for the studio's SQLite or PostgreSQL store."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional

from sqlalchemy import URL, event, inspect
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ..core.config import Config, get_config
from ..core.logger import get_logger
from ..models.base import Base

logger = get_logger(__name__)

SQLITE_PRAGMAS = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
)


def _set_sqlite_pragma(dbapi_connection, connection_record):
    # Gallery/photo and photobook/page cascades rely on foreign keys
    cursor = dbapi_connection.cursor()
    for pragma in SQLITE_PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


class DatabaseEngine:
    """Owns the async engine and session factory for one configuration."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.config.database.type == "sqlite"

    def get_database_url(self) -> URL:
        db_config = self.config.database

        if self.is_sqlite:
            db_path = self.config.database_path
            db_path.parent.mkdir(parents=True, exist_ok=True)
            return URL.create("sqlite+aiosqlite", database=str(db_path))

        if db_config.type == "postgresql":
            return URL.create(
                "postgresql+asyncpg",
                username=db_config.username,
                password=db_config.password,
                host=db_config.host,
                port=db_config.port,
                database=db_config.database,
            )

        raise ValueError(f"Unsupported database type: {db_config.type}")

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": self.config.database.echo, "pool_pre_ping": True}
        if self.is_sqlite:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False, "timeout": 30}
        return options

    def get_async_engine(self) -> AsyncEngine:
        """Create the engine on first use."""
        if self._engine is not None:
            return self._engine

        self._engine = create_async_engine(self.get_database_url(), **self._engine_options())
        if self.is_sqlite:
            event.listen(self._engine.sync_engine, "connect", _set_sqlite_pragma)

        # Services commit explicitly and keep using their objects afterwards
        self._session_maker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info(f"Created async database engine: {self.config.database.type}")
        return self._engine

    def get_session_maker(self) -> async_sessionmaker:
        if self._session_maker is None:
            self.get_async_engine()
        return self._session_maker

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that commits on success and rolls back on error."""
        async with self.get_session_maker()() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _run_metadata(self, operation: Callable, description: str) -> None:
        # Importing the package registers every model on Base.metadata
        from .. import models  # noqa: F401

        async with self.get_async_engine().begin() as conn:
            await conn.run_sync(operation)
        logger.info(f"{description} {len(Base.metadata.tables)} tables")

    async def create_all_tables(self) -> None:
        await self._run_metadata(Base.metadata.create_all, "Created")

    async def drop_all_tables(self) -> None:
        await self._run_metadata(Base.metadata.drop_all, "Dropped")

    async def get_table_names(self) -> List[str]:
        async with self.get_async_engine().connect() as conn:
            return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    async def close(self) -> None:
        """Dispose of the engine; the next use creates a new one."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        logger.info("Closed database connections")


_db_engine: Optional[DatabaseEngine] = None


def get_database_engine() -> DatabaseEngine:
    """Process-wide engine, created from the global configuration on first use."""
    global _db_engine
    if _db_engine is None:
        _db_engine = DatabaseEngine()
    return _db_engine


def set_database_engine(engine: Optional[DatabaseEngine]) -> None:
    """Install the engine used by the web app (the CLI and tests swap it)."""
    global _db_engine
    _db_engine = engine
