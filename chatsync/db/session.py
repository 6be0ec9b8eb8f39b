"""Async database session factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from chatsync.config import settings
from chatsync.models import Base


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async engine backing the preference store."""
    return create_async_engine(
        settings.DATABASE_URL if database_url is None else database_url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create the preference tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
