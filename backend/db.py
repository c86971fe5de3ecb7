"""
Database connection pool and connection manager.

All database access goes through conn().
Never use pool.acquire() directly outside this module.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import asyncpg

from backend.config import settings

pool: asyncpg.Pool | None = None


async def init_pool() -> None:
    """
    Initialize the connection pool.
    Called once at application startup.
    """
    global pool
    pool = await asyncpg.create_pool(
        dsn=settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=60,
    )


async def close_pool() -> None:
    """
    Close the connection pool.
    Called at application shutdown.
    """
    global pool
    if pool is not None:
        await pool.close()
        pool = None


@asynccontextmanager
async def conn():
    """
    Acquire a database connection inside a transaction.

    Usage:
        async with conn() as c:
            rows = await c.fetch("SELECT * FROM biblia_versoes")

    Yields:
        asyncpg.Connection
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as connection:
        async with connection.transaction():
            yield connection
