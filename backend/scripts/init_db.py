"""
Prepare a fresh database: create the users and medicines tables, then create
the bootstrap admin when ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD are set.
Run with: python -m scripts.init_db
"""

import asyncio
import logging
from app.config import get_settings
from app.database import engine, Base
from app.main import configure_logging, seed_admin_user

logger = logging.getLogger("scripts.init_db")


async def init():
    configure_logging(get_settings().log_level)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))
    try:
        await seed_admin_user()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init())
