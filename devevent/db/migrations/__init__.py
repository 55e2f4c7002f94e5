"""Database migrations module.

This module provides a simple migration system for managing database schema changes.
Migrations are versioned SQL files (``NNN_description.sql``) in this directory,
applied in order inside one transaction each.
"""

import logging
from pathlib import Path
from typing import Any

import psycopg

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version INTEGER PRIMARY KEY,
        applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        description TEXT
    );
"""


async def get_current_version(conn: psycopg.AsyncConnection) -> int:
    """Get the current migration version from the database."""
    await conn.execute(_CREATE_TABLE)
    row = await (await conn.execute(
        "SELECT COALESCE(MAX(version), 0) FROM schema_migrations"
    )).fetchone()
    return int(row[0]) if row and row[0] else 0


def list_migrations() -> list[dict[str, Any]]:
    """List the migration files shipped with the package, ordered by version."""
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("*.sql")):
        # Parse version from filename (e.g., "001_events.sql" -> 1)
        try:
            version = int(path.stem.split("_")[0])
        except ValueError:
            continue
        migrations.append({
            "version": version,
            "filename": path.name,
            "description": "_".join(path.stem.split("_")[1:]),
            "path": path,
        })
    return migrations


async def get_pending_migrations(conn: psycopg.AsyncConnection) -> list[dict[str, Any]]:
    """Get list of migrations newer than the database's version."""
    current = await get_current_version(conn)
    return [m for m in list_migrations() if m["version"] > current]


async def apply_migration(
    conn: psycopg.AsyncConnection, version: int, sql: str, description: str = ""
) -> None:
    """Apply a single migration and record it."""
    try:
        async with conn.transaction():
            await conn.execute(sql)
            await conn.execute(
                "INSERT INTO schema_migrations (version, description) VALUES (%s, %s)",
                (version, description),
            )
    except psycopg.Error as e:
        logger.error("Failed to apply migration %d: %s", version, e)
        raise
    logger.info("Applied migration %d: %s", version, description)


async def run_migrations(conn: psycopg.AsyncConnection) -> int:
    """Run all pending migrations.

    Returns:
        Number of migrations applied.
    """
    applied = 0
    for migration in await get_pending_migrations(conn):
        await apply_migration(
            conn,
            migration["version"],
            migration["path"].read_text(),
            migration["description"],
        )
        applied += 1

    if applied:
        logger.info("Applied %d migrations", applied)
    else:
        logger.debug("No pending migrations")
    return applied
