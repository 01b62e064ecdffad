import asyncio
import structlog

from manp_api.db.session import engine
from manp_api.db.base import Base

logger = structlog.get_logger()


async def init_db():
    """
    Create missing tables. Existing tables are left untouched.
    """
    # Trigger model registration
    from manp_api.models.report import Report  # noqa: F401

    try:
        async with asyncio.timeout(10):
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
    except TimeoutError:
        logger.error("db_init_timeout", message="Connection to database timed out after 10s. Check DATABASE_URL.")
        raise
    except Exception as e:
        logger.error("db_init_failed", error=str(e))
        raise

    logger.info("db_init_complete")


if __name__ == "__main__":
    from manp_api.core.logging import setup_logging

    setup_logging()
    asyncio.run(init_db())
