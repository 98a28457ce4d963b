"""Database initialization utilities."""

import logging

from pans_scales.db.base import Base
from pans_scales.db.session import engine

# Register models on the metadata
import pans_scales.models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def init_db() -> None:
    """Initialize the database schema."""
    await create_tables()
    logger.info("Database initialization complete")
