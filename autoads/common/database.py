"""
Database engine and session management.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from autoads.common.config import DatabaseSettings
from autoads.common.logger import get_logger
from autoads.models import Base

logger = get_logger(__name__)


class Database:
    """
    Owns the async engine and session factory.

    One instance is created at process startup and handed to every service;
    services open a short-lived session per operation.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "Database":
        url = settings.async_url
        if settings.is_sqlite:
            # In-memory SQLite needs a single shared connection
            engine = create_async_engine(
                url,
                echo=settings.echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool if ":memory:" in url else None,
            )
        else:
            engine = create_async_engine(
                url,
                echo=settings.echo,
                pool_size=settings.pool_size,
                max_overflow=settings.max_overflow,
                pool_pre_ping=True,
            )
        return cls(engine)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session; the caller commits, rollback happens on error."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
