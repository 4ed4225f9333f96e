"""SQLite implementation of SessionRepository."""
from __future__ import annotations

import aiosqlite

from observatory.date_utils import utc_now_iso

_ALLOWED_STATUSES = {"active", "completed", "failed"}


class SqliteSessionRepository:
    """SQLite-backed storage for imported and hook-reported sessions."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def upsert(self, session_data: dict, commit: bool = True) -> None:
        await self.db.execute(
            """INSERT INTO sessions (
                id, start_time, end_time, duration_seconds, model,
                working_directory, git_branch, total_tokens, total_cost_usd,
                status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                start_time=excluded.start_time, end_time=excluded.end_time,
                duration_seconds=excluded.duration_seconds, model=excluded.model,
                working_directory=excluded.working_directory,
                git_branch=excluded.git_branch,
                total_tokens=excluded.total_tokens,
                total_cost_usd=excluded.total_cost_usd,
                status=excluded.status
            """,
            (
                session_data["id"],
                session_data["startTime"],
                session_data.get("endTime"),
                session_data.get("durationSeconds"),
                session_data.get("model", "unknown"),
                session_data.get("workingDirectory", ""),
                session_data.get("gitBranch"),
                session_data.get("totalTokens", 0),
                session_data.get("totalCostUsd", 0.0),
                session_data.get("status", "active"),
                session_data.get("createdAt") or utc_now_iso(),
            ),
        )
        if commit:
            await self.db.commit()

    async def get_by_id(self, session_id: str) -> dict | None:
        async with self.db.execute(
            "SELECT * FROM sessions WHERE id = ?", (session_id,)
        ) as cur:
            row = await cur.fetchone()
            if not row:
                return None
            return dict(row)

    async def exists(self, session_id: str) -> bool:
        async with self.db.execute(
            "SELECT 1 FROM sessions WHERE id = ?", (session_id,)
        ) as cur:
            return await cur.fetchone() is not None

    async def list_paginated(self, offset: int, limit: int, status: str | None = None) -> list[dict]:
        if status and status in _ALLOWED_STATUSES:
            query = "SELECT * FROM sessions WHERE status = ? ORDER BY start_time DESC LIMIT ? OFFSET ?"
            params: tuple = (status, limit, offset)
        else:
            query = "SELECT * FROM sessions ORDER BY start_time DESC LIMIT ? OFFSET ?"
            params = (limit, offset)

        async with self.db.execute(query, params) as cur:
            rows = await cur.fetchall()
            return [dict(r) for r in rows]

    async def count(self, status: str | None = None) -> int:
        if status and status in _ALLOWED_STATUSES:
            async with self.db.execute(
                "SELECT COUNT(*) FROM sessions WHERE status = ?", (status,)
            ) as cur:
                row = await cur.fetchone()
        else:
            async with self.db.execute("SELECT COUNT(*) FROM sessions") as cur:
                row = await cur.fetchone()
        return row[0] if row else 0

    async def delete(self, session_id: str) -> None:
        await self.db.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
        await self.db.commit()

    async def update_status(
        self,
        session_id: str,
        status: str | None = None,
        end_time: str | None = None,
        duration_seconds: int | None = None,
        commit: bool = True,
    ) -> None:
        """Set the given lifecycle fields; None leaves a field unchanged."""
        await self.db.execute(
            """UPDATE sessions SET
                status = COALESCE(?, status),
                end_time = COALESCE(?, end_time),
                duration_seconds = COALESCE(?, duration_seconds)
            WHERE id = ?""",
            (status, end_time, duration_seconds, session_id),
        )
        if commit:
            await self.db.commit()

    async def recompute_totals(self, session_id: str, commit: bool = True) -> None:
        """Refresh a session's token and cost totals from its usage rows."""
        await self.db.execute(
            """UPDATE sessions SET
                total_tokens = COALESCE((
                    SELECT SUM(input_tokens + output_tokens) FROM token_usage WHERE session_id = ?
                ), 0),
                total_cost_usd = COALESCE((
                    SELECT SUM(cost_usd) FROM token_usage WHERE session_id = ?
                ), 0)
            WHERE id = ?""",
            (session_id, session_id, session_id),
        )
        if commit:
            await self.db.commit()
