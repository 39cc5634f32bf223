"""Async SQLAlchemy engine for the SQL event journal.

Created on first use: a process running the in-memory journal never opens a
connection pool.
"""

from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings


@lru_cache(maxsize=1)
def get_db_engine() -> AsyncEngine:
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_db_engine(), class_=AsyncSession, expire_on_commit=False)


async def dispose_db_engine() -> None:
    """Close the pool if one was opened. Safe to call more than once."""
    if get_db_engine.cache_info().currsize == 0:
        return
    await get_db_engine().dispose()
    get_session_factory.cache_clear()
    get_db_engine.cache_clear()
