"""Stats-cache import API."""
from __future__ import annotations

import logging

from fastapi import APIRouter

from observatory import config
from observatory.db import connection
from observatory.models import StatsInfo, SyncResult
from observatory.sync.stats_cache import get_stats_info, sync_from_stats_cache

logger = logging.getLogger("observatory.sync")

sync_router = APIRouter(prefix="/api/sync", tags=["sync"])


@sync_router.get("/status", response_model=StatsInfo)
def sync_status():
    """Whether the stats cache exists and what it covers."""
    return get_stats_info(config.STATS_CACHE_PATH)


@sync_router.get("/preview")
def sync_preview():
    info = get_stats_info(config.STATS_CACHE_PATH)
    if not info.exists:
        return {
            "canSync": False,
            "reason": "Stats cache file not found",
            "path": info.path,
        }
    return {
        "canSync": True,
        "source": info.path,
        "lastUpdated": info.lastUpdated,
        "totalSessions": info.totalSessions,
        "models": info.models,
        "message": "POST to /api/sync/run to import data",
    }


@sync_router.post("/run", response_model=SyncResult)
async def run_sync():
    """Import new days from the stats cache into the ledger."""
    logger.info("Starting sync from stats cache...")
    db = await connection.get_connection()
    result = await sync_from_stats_cache(db, config.STATS_CACHE_PATH)
    if not result.success:
        logger.error(f"Sync failed: {result.error}")
    return result
