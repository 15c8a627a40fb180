"""Database initialization and management."""

from .engine import DatabaseEngine, get_database_engine, set_database_engine
from .session import get_async_db_session, get_db_dependency

__all__ = [
    'DatabaseEngine',
    'get_database_engine',
    'set_database_engine',
    'get_async_db_session',
    'get_db_dependency',
]
