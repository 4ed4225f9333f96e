"""Usage and cost analytics over the session ledger."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Query

from observatory.date_utils import normalize_iso_date
from observatory.db import connection
from observatory.db.factory import get_analytics_repository

analytics_router = APIRouter(prefix="/api/analytics", tags=["analytics"])

_PERIOD_DAYS = {"7d": 7, "30d": 30}


def _period_start(period: str) -> str | None:
    """ISO start of a named period; None for all time."""
    days = _PERIOD_DAYS.get(period)
    if days is None:
        return None
    return _days_ago(days)


def _days_ago(days: int) -> str:
    # Date-only bound compares correctly against both day and full timestamps.
    return normalize_iso_date((datetime.now(timezone.utc) - timedelta(days=days)).date())


@analytics_router.get("/summary")
async def get_summary(period: str = Query("7d", description="7d, 30d or all")):
    db = await connection.get_connection()
    summary = await get_analytics_repository(db).get_summary(_period_start(period))
    return {"period": period, **summary}


@analytics_router.get("/daily")
async def get_daily(days: int = Query(30, ge=1)):
    db = await connection.get_connection()
    data = await get_analytics_repository(db).get_daily_usage(_days_ago(days))
    return {"days": days, "data": data}


@analytics_router.get("/costs")
async def get_costs(period: str = Query("30d", description="7d, 30d or all")):
    db = await connection.get_connection()
    costs = await get_analytics_repository(db).get_costs(_period_start(period))
    return {"period": period, **costs}


@analytics_router.get("/tools")
async def get_tools(limit: int = Query(20, ge=1)):
    db = await connection.get_connection()
    tools = await get_analytics_repository(db).get_tool_usage(limit)
    return {"tools": tools}
