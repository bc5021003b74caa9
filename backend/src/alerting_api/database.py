"""Database connection and session management."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from alerting_api.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Get the process wide database engine."""
    settings = get_settings()
    url = settings.async_database_url
    options: dict = {
        # Security: Never echo SQL statements as they may contain sensitive data
        "echo": False,
    }
    if url.startswith("postgresql"):
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            # Validate connections before checkout to detect stale connections
            pool_pre_ping=True,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the engine."""
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
