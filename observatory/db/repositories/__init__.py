"""Repository package for database access."""

from .sessions import SqliteSessionRepository
from .executions import SqliteExecutionRepository
from .token_usage import SqliteTokenUsageRepository
from .analytics import SqliteAnalyticsRepository

__all__ = [
    "SqliteSessionRepository",
    "SqliteExecutionRepository",
    "SqliteTokenUsageRepository",
    "SqliteAnalyticsRepository",
]
