"""
Create the tables for identities, sessions, users, schedules and leaves.

Run once against a fresh database:
  DATABASE_URL=postgresql+asyncpg://... python -m shiftplan.db.init_db
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

# Registers every table on Base.metadata
import shiftplan.auth.models  # noqa: F401
import shiftplan.core.models  # noqa: F401
from shiftplan.core.config import settings
from shiftplan.core.logging import configure_logging
from shiftplan.db.session import Base, engine

logger = logging.getLogger(__name__)


async def create_tables(target: AsyncEngine) -> None:
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(target: AsyncEngine) -> None:
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def main() -> None:
    configure_logging(settings.log_level)
    await create_tables(engine)
    logger.info("Created tables: %s", ", ".join(sorted(Base.metadata.tables)))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
