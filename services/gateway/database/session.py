"""Async database session management using SQLAlchemy.

Provides a shared connection pool and async session factory for the
account, API key, service registry and request log stores.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config.settings import get_settings
from core.exceptions import InternalError
from services.gateway.database.models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Async database manager using SQLAlchemy.

    The engine is created lazily on first use, so constructing the manager
    does not touch the database or the settings.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        pool_size: Optional[int] = None,
        max_overflow: Optional[int] = None,
        echo: bool = False,
    ):
        """Initialize the database manager.

        Args:
            database_url: PostgreSQL connection URL (async); defaults to settings
            pool_size: Connection pool size; defaults to settings
            max_overflow: Max connections above pool_size; defaults to settings
            echo: Enable SQL logging
        """
        self._database_url = database_url
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._echo = echo

        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        """Get the async engine, creating it if needed."""
        if self._engine is None:
            settings = get_settings()
            self._engine = create_async_engine(
                self._database_url or settings.database_url,
                echo=self._echo,
                pool_size=self._pool_size or settings.database_pool_size,
                max_overflow=self._max_overflow or settings.database_max_overflow,
                pool_pre_ping=True,
                pool_recycle=300,  # Recycle connections every 5 minutes
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory, creating it if needed."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=True,
            )
        return self._session_factory

    async def connect(self) -> None:
        """Initialize the database connection and create tables."""
        logger.info("Connecting to database...")

        # Create tables if they don't exist
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database connected and tables created")

    async def disconnect(self) -> None:
        """Close the database connection pool."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an async session with automatic cleanup.

        Usage:
            async with db_manager.session() as session:
                result = await session.execute(query)

        Raises:
            InternalError: If the database operation fails
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database error: {e}")
            raise InternalError("Database operation failed") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def use_session(
        self, session: Optional[AsyncSession] = None
    ) -> AsyncGenerator[AsyncSession, None]:
        """Reuse the caller's session, or open (and commit) a new one."""
        if session is not None:
            yield session
            return

        async with self.session() as new_session:
            yield new_session


# Global database manager instance
db_manager = DatabaseManager()
