"""Database configuration and connection management for report history."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./watcher_report.db"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class DatabaseConfig:
    """Database configuration and connection management."""

    def __init__(
        self,
        url: Optional[str] = None,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_recycle: int = 3600,
        echo: bool = False,
    ):
        """Initialize database configuration.

        Args:
            url: Database URL. If None, reads from WATCHER_REPORT_DB_URL env var
            pool_size: Number of connections to maintain in pool
            max_overflow: Maximum overflow connections beyond pool_size
            pool_recycle: Recycle connections after this many seconds
            echo: Enable SQLAlchemy logging
        """
        self.url = url or self._get_database_url()
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_recycle = pool_recycle
        self.echo = echo

        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def _get_database_url(self) -> str:
        """Get database URL from environment variables."""
        for env_var in ["WATCHER_REPORT_DB_URL", "DATABASE_URL"]:
            url = os.getenv(env_var)
            if url:
                return url

        return DEFAULT_DATABASE_URL

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def engine(self) -> AsyncEngine:
        """Get or create async database engine."""
        if self._engine is None:
            if self.is_sqlite and ":memory:" not in self.url:
                self._engine = create_async_engine(
                    self.url,
                    poolclass=NullPool,
                    echo=self.echo,
                )
            elif self.is_sqlite:
                # One shared connection, otherwise each session sees an empty database
                self._engine = create_async_engine(self.url, echo=self.echo)
            else:
                self._engine = create_async_engine(
                    self.url,
                    pool_size=self.pool_size,
                    max_overflow=self.max_overflow,
                    pool_recycle=self.pool_recycle,
                    echo=self.echo,
                )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create async session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Create async database session context manager."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create history tables if they do not exist."""
        from . import models  # noqa: F401  registers tables on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close database engine and connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            from sqlalchemy import text
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
                return True
        except Exception:
            return False
