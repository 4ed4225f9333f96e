"""SQLite implementation of AnalyticsRepository."""
from __future__ import annotations

from typing import Any

import aiosqlite


class SqliteAnalyticsRepository:
    """Aggregate queries over sessions, executions and token usage.

    ``since`` arguments are ISO-8601 UTC strings; None means all time.
    """

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def _fetchone(self, query: str, params: tuple = ()) -> dict[str, Any]:
        async with self.db.execute(query, params) as cur:
            row = await cur.fetchone()
            return dict(row) if row else {}

    async def _fetchall(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        async with self.db.execute(query, params) as cur:
            rows = await cur.fetchall()
            return [dict(r) for r in rows]

    async def get_summary(self, since: str | None = None) -> dict[str, Any]:
        where = "WHERE s.start_time >= ?" if since else ""
        params: tuple = (since,) if since else ()

        sessions = await self._fetchone(
            f"""SELECT
                COUNT(*) AS totalSessions,
                COALESCE(SUM(CASE WHEN s.status = 'completed' THEN 1 ELSE 0 END), 0) AS completedSessions,
                COALESCE(SUM(CASE WHEN s.status = 'active' THEN 1 ELSE 0 END), 0) AS activeSessions,
                COALESCE(SUM(s.duration_seconds), 0) AS totalDurationSeconds
            FROM sessions s {where}""",
            params,
        )
        tokens = await self._fetchone(
            f"""SELECT
                COALESCE(SUM(t.input_tokens), 0) AS totalInputTokens,
                COALESCE(SUM(t.output_tokens), 0) AS totalOutputTokens,
                COALESCE(SUM(t.thinking_tokens), 0) AS totalThinkingTokens,
                COALESCE(SUM(t.cost_usd), 0) AS totalCost
            FROM token_usage t LEFT JOIN sessions s ON t.session_id = s.id {where}""",
            params,
        )
        top_tools = await self._fetchall(
            f"""SELECT
                e.tool_name AS toolName,
                COUNT(*) AS count,
                AVG(e.duration_ms) AS avgDurationMs,
                AVG(CASE WHEN e.status = 'success' THEN 1.0 ELSE 0.0 END) AS successRate
            FROM executions e LEFT JOIN sessions s ON e.session_id = s.id {where}
            GROUP BY e.tool_name ORDER BY count DESC LIMIT 10""",
            params,
        )
        models = await self._fetchall(
            f"""SELECT
                t.model AS model,
                COALESCE(SUM(t.input_tokens + t.output_tokens), 0) AS totalTokens,
                COALESCE(SUM(t.cost_usd), 0) AS totalCost
            FROM token_usage t LEFT JOIN sessions s ON t.session_id = s.id {where}
            GROUP BY t.model ORDER BY totalCost DESC""",
            params,
        )
        return {
            "sessions": sessions,
            "tokens": tokens,
            "topTools": top_tools,
            "modelBreakdown": models,
        }

    async def get_daily_usage(self, since: str) -> list[dict[str, Any]]:
        return await self._fetchall(
            """SELECT
                substr(timestamp, 1, 10) AS date,
                SUM(input_tokens) AS inputTokens,
                SUM(output_tokens) AS outputTokens,
                SUM(thinking_tokens) AS thinkingTokens,
                SUM(cost_usd) AS totalCost,
                COUNT(DISTINCT session_id) AS sessionCount
            FROM token_usage WHERE timestamp >= ?
            GROUP BY substr(timestamp, 1, 10) ORDER BY date""",
            (since,),
        )

    async def get_costs(self, since: str | None = None) -> dict[str, Any]:
        where = "WHERE timestamp >= ?" if since else ""
        params: tuple = (since,) if since else ()
        by_model = await self._fetchall(
            f"""SELECT
                model,
                SUM(cost_usd) AS totalCost,
                SUM(input_tokens) AS inputTokens,
                SUM(output_tokens) AS outputTokens
            FROM token_usage {where} GROUP BY model ORDER BY totalCost DESC""",
            params,
        )
        by_day = await self._fetchall(
            f"""SELECT substr(timestamp, 1, 10) AS date, SUM(cost_usd) AS cost
            FROM token_usage {where}
            GROUP BY substr(timestamp, 1, 10) ORDER BY date""",
            params,
        )
        total = await self._fetchone(
            f"SELECT COALESCE(SUM(cost_usd), 0) AS totalCost FROM token_usage {where}",
            params,
        )
        return {
            "totalCost": total.get("totalCost", 0) or 0,
            "byModel": by_model,
            "byDay": by_day,
        }

    async def get_tool_usage(self, limit: int = 20) -> list[dict[str, Any]]:
        return await self._fetchall(
            """SELECT
                tool_name AS toolName,
                COUNT(*) AS totalCalls,
                SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) AS successCount,
                SUM(CASE WHEN status = 'error' THEN 1 ELSE 0 END) AS errorCount,
                AVG(duration_ms) AS avgDurationMs,
                MIN(duration_ms) AS minDurationMs,
                MAX(duration_ms) AS maxDurationMs,
                SUM(input_tokens + output_tokens) AS totalTokens,
                SUM(cost_usd) AS totalCost
            FROM executions
            GROUP BY tool_name ORDER BY totalCalls DESC LIMIT ?""",
            (limit,),
        )
