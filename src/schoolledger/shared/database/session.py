"""
Database Session Factory
Creates async SQLAlchemy sessions with proper configuration
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from schoolledger.shared.database.base_model import Base
from schoolledger.shared.exceptions import StoreError
from schoolledger.shared.logging import get_logger

logger = get_logger(__name__)


class DatabaseSessionFactory:
    """
    Factory for creating async database sessions.

    Manages the async engine and session maker. Stores open one short
    transaction per operation through :meth:`transaction`.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        """
        Initialize session factory with database connection.

        Args:
            database_url: async SQLAlchemy URL (sqlite+aiosqlite, postgresql+asyncpg, ...)
            echo: Whether to log SQL statements (debug mode)
        """
        self.database_url = database_url
        self.echo = echo

        engine_kwargs = {"echo": echo}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(pool_pre_ping=True, pool_recycle=3600)
        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)

        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,
        )

        logger.info("Database session factory initialized", backend=self.engine.dialect.name)

    @asynccontextmanager
    async def transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Session bound to a single transaction; commits on success.

        Driver failures surface as StoreError("<operation> failed: <cause>").
        """
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except SQLAlchemyError as e:
                logger.error("Session error, rolled back", operation=operation, error=str(e))
                raise StoreError(f"{operation} failed: {e}") from e

    async def create_all(self) -> None:
        """Create every mapped table that is not there yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all connections and dispose of the engine."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
