import asyncio

import asyncpg
from alembic import command
from alembic.config import Config

from tenderflow.core.config import settings
from tenderflow.core.logging_config import logger


async def wait_for_db(retries: int = 5, delay: float = 2):
    db_url = settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://")
    for attempt in range(retries):
        try:
            conn = await asyncpg.connect(db_url)
            await conn.close()
            logger.info("Database is ready")
            return True
        except (OSError, asyncpg.PostgresError) as e:
            logger.error(f"Waiting for database... attempt {attempt + 1}/{retries}: {e}")
            await asyncio.sleep(delay)
    raise ConnectionError(f"Database not reachable after {retries} attempts")


def apply_migrations():
    asyncio.run(wait_for_db())
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    logger.info(f"Running Alembic upgrade to head on {settings.POSTGRES_HOST}/{settings.POSTGRES_DB}")
    try:
        command.upgrade(alembic_cfg, "head")
    except Exception as e:
        logger.error(f"Failed to apply migrations: {e}")
        raise
    logger.info("Migrations applied")


if __name__ == "__main__":
    apply_migrations()
