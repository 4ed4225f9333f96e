"""Repository factory so routers and importers never construct repositories directly."""
from __future__ import annotations

import aiosqlite

from observatory.db.repositories import (
    SqliteAnalyticsRepository,
    SqliteExecutionRepository,
    SqliteSessionRepository,
    SqliteTokenUsageRepository,
)


def get_session_repository(db: aiosqlite.Connection) -> SqliteSessionRepository:
    return SqliteSessionRepository(db)


def get_execution_repository(db: aiosqlite.Connection) -> SqliteExecutionRepository:
    return SqliteExecutionRepository(db)


def get_token_usage_repository(db: aiosqlite.Connection) -> SqliteTokenUsageRepository:
    return SqliteTokenUsageRepository(db)


def get_analytics_repository(db: aiosqlite.Connection) -> SqliteAnalyticsRepository:
    return SqliteAnalyticsRepository(db)
