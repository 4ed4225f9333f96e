"""SQLite implementation of TokenUsageRepository."""
from __future__ import annotations

import uuid

import aiosqlite


class SqliteTokenUsageRepository:
    """Per-request token usage and cost rows."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def insert(self, usage: dict, commit: bool = True) -> str:
        usage_id = usage.get("id") or uuid.uuid4().hex
        await self.db.execute(
            """INSERT INTO token_usage (
                id, session_id, execution_id, model, input_tokens, output_tokens,
                thinking_tokens, cache_read_tokens, cache_write_tokens, cost_usd, timestamp
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                usage_id,
                usage["sessionId"],
                usage.get("executionId"),
                usage["model"],
                usage.get("inputTokens", 0),
                usage.get("outputTokens", 0),
                usage.get("thinkingTokens", 0),
                usage.get("cacheReadTokens", 0),
                usage.get("cacheWriteTokens", 0),
                usage.get("costUsd", 0.0),
                usage["timestamp"],
            ),
        )
        if commit:
            await self.db.commit()
        return usage_id

    async def list_for_session(self, session_id: str) -> list[dict]:
        async with self.db.execute(
            "SELECT * FROM token_usage WHERE session_id = ? ORDER BY timestamp DESC",
            (session_id,),
        ) as cur:
            rows = await cur.fetchall()
            return [dict(r) for r in rows]
