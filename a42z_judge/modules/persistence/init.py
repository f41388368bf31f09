from __future__ import annotations

from loguru import logger

from .db import Database
from .models import Base


async def ensure_sqlite_schema(database: Database) -> None:
    """Create tables for local sqlite databases; hosted databases own their schema."""
    if database.engine.dialect.name != "sqlite":
        return

    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("SQLite schema ensured")
