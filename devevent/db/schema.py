"""Database schema management module.

Schema is kept current by the versioned migrations in ``migrations/``.
"""

import logging

from psycopg_pool import AsyncConnectionPool

from devevent.db.migrations import get_current_version, run_migrations

logger = logging.getLogger(__name__)


async def _ensure_schema(pool: AsyncConnectionPool) -> None:
    """Ensure the database schema is up to date by running pending migrations.

    This function is idempotent - it can be called multiple times safely.
    """
    async with pool.connection() as conn:
        current_version = await get_current_version(conn)
        logger.info("Current schema version: %d", current_version)

        applied = await run_migrations(conn)

        if applied > 0:
            new_version = await get_current_version(conn)
            logger.info("Schema updated from version %d to %d", current_version, new_version)
        else:
            logger.debug("Schema is up to date at version %d", current_version)
