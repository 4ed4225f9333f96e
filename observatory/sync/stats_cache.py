"""Import the assistant's stats-cache.json into the session/cost ledger.

The cache holds per-day token totals by model and lifetime usage by model.
Each day becomes a ``daily-<date>`` session and the lifetime usage becomes a
single ``aggregate-totals`` session. Sessions that already exist are left
alone, so repeated runs only add new days.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import aiosqlite

from observatory.date_utils import normalize_iso_date, utc_now_iso
from observatory.db.factory import get_session_repository, get_token_usage_repository
from observatory.model_identity import normalize_model_name
from observatory.models import StatsInfo, SyncResult
from observatory.pricing import calculate_cost

logger = logging.getLogger("observatory.sync")

AGGREGATE_SESSION_ID = "aggregate-totals"

# Daily totals are not split by direction; assume this share is input.
DAILY_INPUT_SHARE = 0.3


def _load_stats_cache(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("stats cache is not a JSON object")
    return data


def _split_daily_tokens(tokens: int) -> tuple[int, int]:
    return int(tokens * DAILY_INPUT_SHARE), int(tokens * (1 - DAILY_INPUT_SHARE))


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def get_stats_info(path: Path) -> StatsInfo:
    """Describe the stats cache without importing anything."""
    if not path.exists():
        return StatsInfo(exists=False, path=str(path))

    try:
        stats = _load_stats_cache(path)
    except (OSError, ValueError) as e:
        logger.warning(f"Unreadable stats cache {path}: {e}")
        return StatsInfo(exists=True, path=str(path))

    model_usage = stats.get("modelUsage")
    return StatsInfo(
        exists=True,
        path=str(path),
        lastUpdated=stats.get("lastComputedDate"),
        totalSessions=stats.get("totalSessions"),
        models=list(model_usage.keys()) if isinstance(model_usage, dict) else [],
    )


async def _import_daily(db: aiosqlite.Connection, daily: dict[str, Any], result: SyncResult) -> None:
    date_str = str(daily.get("date") or "")
    tokens_by_model = daily.get("tokensByModel")
    if not date_str or not isinstance(tokens_by_model, dict):
        return

    session_id = f"daily-{date_str}"
    sessions = get_session_repository(db)
    if await sessions.exists(session_id):
        return

    day = normalize_iso_date(date_str) or date_str
    day_tokens = 0
    day_cost = 0.0
    usage_rows: list[dict[str, Any]] = []
    for model, raw_tokens in tokens_by_model.items():
        tokens = _int(raw_tokens)
        input_tokens, output_tokens = _split_daily_tokens(tokens)
        cost = calculate_cost(model, input_tokens, output_tokens)
        day_tokens += tokens
        day_cost += cost
        usage_rows.append({
            "sessionId": session_id,
            "model": normalize_model_name(model),
            "inputTokens": input_tokens,
            "outputTokens": output_tokens,
            "costUsd": cost,
            "timestamp": day,
        })

    first_model = next(iter(tokens_by_model), None)
    await sessions.upsert({
        "id": session_id,
        "startTime": day,
        "endTime": day,
        "durationSeconds": 86400,
        "model": normalize_model_name(first_model) if first_model else "mixed",
        "workingDirectory": str(Path.home()),
        "totalTokens": day_tokens,
        "totalCostUsd": day_cost,
        "status": "completed",
    }, commit=False)
    result.sessionsCreated += 1

    usage_repo = get_token_usage_repository(db)
    for row in usage_rows:
        await usage_repo.insert(row, commit=False)
        result.tokenRecordsCreated += 1
        result.totalCost += row["costUsd"]
    await db.commit()


async def _import_aggregate(db: aiosqlite.Connection, stats: dict[str, Any], result: SyncResult) -> None:
    model_usage = stats.get("modelUsage")
    if not isinstance(model_usage, dict) or not model_usage:
        return

    sessions = get_session_repository(db)
    if await sessions.exists(AGGREGATE_SESSION_ID):
        return

    now = utc_now_iso()
    total_tokens = 0
    total_cost = 0.0
    usage_rows: list[dict[str, Any]] = []
    for model, usage in model_usage.items():
        if not isinstance(usage, dict):
            continue
        input_tokens = _int(usage.get("inputTokens"))
        output_tokens = _int(usage.get("outputTokens"))
        cache_read = _int(usage.get("cacheReadInputTokens"))
        cache_write = _int(usage.get("cacheCreationInputTokens"))
        cost = calculate_cost(model, input_tokens, output_tokens, cache_read, cache_write)
        total_tokens += input_tokens + output_tokens
        total_cost += cost
        usage_rows.append({
            "sessionId": AGGREGATE_SESSION_ID,
            "model": normalize_model_name(model),
            "inputTokens": input_tokens,
            "outputTokens": output_tokens,
            "cacheReadTokens": cache_read,
            "cacheWriteTokens": cache_write,
            "costUsd": cost,
            "timestamp": now,
        })

    daily = stats.get("dailyModelTokens")
    first_day = None
    if isinstance(daily, list) and daily and isinstance(daily[0], dict):
        first_day = daily[0].get("date")
    await sessions.upsert({
        "id": AGGREGATE_SESSION_ID,
        "startTime": normalize_iso_date(first_day) or now,
        "endTime": now,
        "durationSeconds": 0,
        "model": "mixed",
        "workingDirectory": str(Path.home()),
        "totalTokens": total_tokens,
        "totalCostUsd": total_cost,
        "status": "completed",
    }, commit=False)
    result.sessionsCreated += 1

    usage_repo = get_token_usage_repository(db)
    for row in usage_rows:
        await usage_repo.insert(row, commit=False)
        result.tokenRecordsCreated += 1
        result.totalCost += row["costUsd"]
    await db.commit()


async def sync_from_stats_cache(db: aiosqlite.Connection, path: Path) -> SyncResult:
    """Import days and lifetime totals that are not yet in the ledger."""
    if not path.exists():
        return SyncResult(success=False, error=f"Stats cache not found at {path}")

    try:
        stats = _load_stats_cache(path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read stats cache {path}: {e}")
        return SyncResult(success=False, error=str(e))

    result = SyncResult(success=True)
    try:
        daily_entries = stats.get("dailyModelTokens")
        for daily in daily_entries if isinstance(daily_entries, list) else []:
            if isinstance(daily, dict):
                await _import_daily(db, daily, result)
        await _import_aggregate(db, stats, result)
    except aiosqlite.Error as e:
        logger.error(f"Stats cache import failed: {e}")
        await db.rollback()
        return SyncResult(success=False, error=str(e))

    logger.info(
        f"Stats cache import complete: {result.sessionsCreated} sessions, "
        f"{result.tokenRecordsCreated} token records, ${result.totalCost:.4f} total cost"
    )
    return result
