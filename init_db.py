#!/usr/bin/env python
"""
Initialize database tables from SQLAlchemy models.
Run this once to create the schools and school_embeddings tables.
"""

import asyncio
from pathlib import Path
from dotenv import load_dotenv

# Load .env file explicitly (override any existing env vars)
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path, override=True)

from app.core.config import settings  # noqa: E402
from app.core.db import close_db, init_db  # noqa: E402
from app.core.logging import configure_logging, get_logger  # noqa: E402

logger = get_logger(__name__)


async def main() -> bool:
    """Create all tables defined in models."""
    configure_logging()
    logger.info("init_db_start", database_url=settings.database_url.split("@")[-1])

    try:
        await init_db()
        logger.info("init_db_complete")
        return True
    except Exception as e:
        logger.error("init_db_failed", error=str(e))
        return False
    finally:
        await close_db()


if __name__ == "__main__":
    success = asyncio.run(main())
    raise SystemExit(0 if success else 1)
