from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def normalized_database_url(raw: str) -> str:
    """
    Normalize DATABASE_URL for SQLAlchemy async drivers.

    Hosted Postgres usually hands out ``postgresql://`` / ``postgres://``
    URLs; the async engine needs ``postgresql+asyncpg://``.

    Raises:
        ValueError: If the URL is empty
    """
    raw = (raw or "").strip()
    if not raw:
        raise ValueError("DATABASE_URL is empty; the analysis archive needs a database URL")

    if raw.startswith("postgresql://"):
        return raw.replace("postgresql://", "postgresql+asyncpg://", 1)
    if raw.startswith("postgres://"):
        return raw.replace("postgres://", "postgresql+asyncpg://", 1)

    return raw


class Database:
    """Async engine + session factory, built once at startup and injected."""

    def __init__(self, database_url: str):
        self.url = normalized_database_url(database_url)
        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=False,
            pool_pre_ping=True,
        )
        self._sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine, expire_on_commit=False
        )
        logger.info(f"Database engine created ({self.engine.dialect.name})")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._sessionmaker() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()
