"""PostgreSQL pool and schema migrations for admin accounts."""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

from catering_admin.config import get_settings

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

POOL_MIN_SIZE = 1
POOL_MAX_SIZE = 10

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Return the shared pool.

    Raises:
        RuntimeError: If ``init_database`` has not run
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_database() first.")
    return _pool


async def init_database() -> None:
    """Open the shared pool against ``POSTGRES_URL``; a second call is a no-op."""
    global _pool

    if _pool is not None:
        return

    try:
        _pool = await asyncpg.create_pool(
            get_settings().postgres_url,
            min_size=POOL_MIN_SIZE,
            max_size=POOL_MAX_SIZE,
            command_timeout=30,
        )
    except (OSError, asyncpg.PostgresError) as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise

    logger.info("database_pool_created", min_size=POOL_MIN_SIZE, max_size=POOL_MAX_SIZE)


async def close_database() -> None:
    global _pool

    if _pool is None:
        return

    await _pool.close()
    _pool = None
    logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply pending ``*.sql`` files in name order.

    Applied file names are recorded in ``schema_migrations``; each file runs
    in its own transaction together with its bookkeeping row, so a failed
    file leaves no trace and is retried on the next start.

    Returns:
        Names of the files applied by this call
    """
    files = sorted(migrations_dir.glob("*.sql"))
    if not files:
        logger.warning("no_migrations_found", path=str(migrations_dir))
        return []

    pool = await get_pool()
    applied: list[str] = []

    async with pool.acquire() as conn:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                filename TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
            """
        )
        done = {row["filename"] for row in await conn.fetch("SELECT filename FROM schema_migrations")}

        for path in files:
            if path.name in done:
                continue
            try:
                async with conn.transaction():
                    await conn.execute(path.read_text())
                    await conn.execute(
                        "INSERT INTO schema_migrations (filename) VALUES ($1)",
                        path.name,
                    )
            except asyncpg.PostgresError as e:
                logger.error("migration_failed", file=path.name, error=str(e))
                raise
            applied.append(path.name)
            logger.info("migration_applied", file=path.name)

    logger.info("migrations_complete", applied=len(applied), already_applied=len(done))
    return applied


async def health_check() -> bool:
    """True if the pool is up and the ``admin_users`` table is readable."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1 FROM admin_users LIMIT 1")
    except (RuntimeError, OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
    return True
