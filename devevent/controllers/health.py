import logging
from typing import Any

import psycopg
from fastapi import APIRouter

from devevent import db

logger = logging.getLogger("devevent.health")
router = APIRouter()


@router.get("/health")
async def health() -> dict[str, Any]:
    pool = db.get_pool()
    database_status = "not_initialized"
    if pool is not None:
        try:
            async with pool.connection() as conn:
                await conn.execute("SELECT 1")
            database_status = "healthy"
        except psycopg.Error as e:
            logger.warning("Database health check failed: %s", e)
            database_status = "unhealthy"

    return {"status": "ok", "database": database_status, "pool": db.get_pool_stats()}
