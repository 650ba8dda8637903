import logging
from sqlalchemy.ext.asyncio import AsyncEngine
from modbase.core.database import engine as default_engine
import modbase.models  # noqa: F401  registers every model on the metadata
from modbase.models.base import Base

logger = logging.getLogger(__name__)

async def create_tables(engine: AsyncEngine = None):
    """Create all tables (safe if already created)"""
    engine = engine or default_engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

async def drop_tables(engine: AsyncEngine = None):
    engine = engine or default_engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database tables dropped")
