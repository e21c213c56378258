"""
Async database engine and session factory.

The engine is built lazily from ``DATABASE_URL`` and handed to stores through
FastAPI dependencies, so tests can substitute an in-memory SQLite engine.
"""

import os
from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

DEFAULT_DATABASE_URL = 'sqlite+aiosqlite:///./routemaker.db'


def get_database_url() -> str:
    return os.environ.get('DATABASE_URL', DEFAULT_DATABASE_URL)


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    url = get_database_url()
    kwargs: dict = {'pool_pre_ping': True}
    if url.startswith('postgresql'):
        kwargs['pool_size'] = int(os.environ.get('DB_POOL_SIZE', '5'))
        kwargs['max_overflow'] = int(os.environ.get('DB_MAX_OVERFLOW', '10'))
    return create_async_engine(url, **kwargs)


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory shared by every store in the process."""
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


def get_db_session_maker() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency; tests override it with an in-memory session factory."""
    return get_session_maker()
