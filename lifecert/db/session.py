import logging

import asyncpg
from asyncpg.pool import Pool
from asyncpg import Connection
from typing import AsyncGenerator
from lifecert.core.config import settings

logger = logging.getLogger(__name__)

db_pool: Pool | None = None

async def get_pool() -> Pool:
    global db_pool
    if db_pool is None:
        await connect_db_pool()
    return db_pool

async def connect_db_pool():
    global db_pool
    if db_pool is None:
        try:
            db_pool = await asyncpg.create_pool(
                dsn=settings.asyncpg_url,
                min_size=5,
                max_size=20,
                timeout=30,
            )
            logger.info("AsyncPG connection pool created.")
        except Exception as e:
            logger.error(f"Error connecting to database: {e}")
            raise

async def close_db_pool():
    global db_pool
    if db_pool:
        await db_pool.close()
        db_pool = None
        logger.info("AsyncPG connection pool closed.")

def get_db_pool() -> Pool | None:
    """The running pool, or None before startup. Never opens one."""
    return db_pool

async def get_db_connection() -> AsyncGenerator[Connection, None]:
    if db_pool is None:
        raise RuntimeError("Database pool is not initialized.")
    async with db_pool.acquire(timeout=settings.DB_ACQUIRE_TIMEOUT) as connection:
        yield connection
