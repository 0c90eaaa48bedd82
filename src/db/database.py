"""Async SQLAlchemy database engine and session management."""

from collections.abc import AsyncGenerator

import structlog
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import Settings

logger = structlog.get_logger()


class Database:
    """Owns the engine and session factory for one application instance.

    Constructed and connected in the app lifespan, disposed on shutdown.
    """

    def __init__(self, url: str, echo: bool = False, pool_size: int = 10, max_overflow: int = 20):
        self._url = url
        self._echo = echo
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.debug,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    def connect(self) -> None:
        self._engine = create_async_engine(
            self._url,
            echo=self._echo,
            pool_pre_ping=True,
            pool_size=self._pool_size,
            max_overflow=self._max_overflow,
        )
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        logger.info("database_connected")

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("database_disposed")

    def session(self) -> AsyncSession:
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory()

    async def create_all(self) -> None:
        """Create all tables. Use Alembic migrations in production."""
        from src.db.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_initialized")

    async def ping(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("database_check_failed", exc_info=True)
            return False


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session bound to the app's Database."""
    db: Database = request.app.state.db
    async with db.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
