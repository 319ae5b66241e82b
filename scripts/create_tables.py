"""One-off helper to create database tables from the SQLAlchemy models.

Usage (locally, with POSTGRES_* set in the environment or .env):

    python scripts/create_tables.py            # create missing tables
    python scripts/create_tables.py --drop     # drop and recreate

Runs through the same asyncpg engine the service uses, so no extra driver is needed.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to Python path so we can import pkg and app modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import text

from app.core.config import settings
from pkg.db_util.postgres_conn import PostgresConnection
from pkg.db_util.sql_alchemy.declarative_base import Base
from pkg.db_util.types import PostgresConfig
from pkg.log.logger import get_logger

# Import all model modules so tables are registered in Base.metadata
from app.chat.repository.sql_schema import chat as _chat  # noqa: F401
from app.export.repository.sql_schema import export as _export  # noqa: F401
from app.llm.repository.sql_schema import comparison as _comparison  # noqa: F401
from app.user.repository.sql_schema import user as _user  # noqa: F401

logger = get_logger("create_tables")


async def main(drop: bool) -> None:
    postgres_conn = PostgresConnection(
        PostgresConfig(
            host=settings.POSTGRES_HOST,
            port=settings.POSTGRES_PORT,
            username=settings.POSTGRES_USER,
            password=settings.POSTGRES_PASSWORD,
            database=settings.POSTGRES_DB,
        ),
        logger,
    )
    engine = await postgres_conn.get_engine()
    try:
        async with engine.begin() as conn:
            if drop:
                logger.info("Dropping existing tables...")
                await conn.run_sync(Base.metadata.drop_all)
            logger.info("Creating tables from SQLAlchemy metadata...")
            await conn.run_sync(Base.metadata.create_all)

        async with engine.connect() as conn:
            result = await conn.execute(text(
                "SELECT table_name FROM information_schema.tables "
                "WHERE table_schema = 'public' ORDER BY table_name"
            ))
            tables = [row[0] for row in result]
        logger.info(f"Tables in database: {', '.join(tables) or 'none'}")
    finally:
        await postgres_conn.close_engine()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--drop", action="store_true", help="drop all tables before creating them")
    asyncio.run(main(parser.parse_args().drop))
