"""SQLite implementation of ExecutionRepository."""
from __future__ import annotations

import json
import uuid

import aiosqlite


class SqliteExecutionRepository:
    """Tool executions recorded against a session."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def insert(self, execution: dict, commit: bool = True) -> str:
        execution_id = execution.get("id") or uuid.uuid4().hex
        parameters = execution.get("parameters")
        await self.db.execute(
            """INSERT INTO executions (
                id, session_id, timestamp, tool_name, parameters_json,
                duration_ms, input_tokens, output_tokens, cost_usd,
                status, error_message
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                execution_id,
                execution["sessionId"],
                execution["timestamp"],
                execution["toolName"],
                json.dumps(parameters) if parameters is not None else None,
                execution.get("durationMs"),
                execution.get("inputTokens", 0),
                execution.get("outputTokens", 0),
                execution.get("costUsd", 0.0),
                execution.get("status", "pending"),
                execution.get("errorMessage"),
            ),
        )
        if commit:
            await self.db.commit()
        return execution_id

    async def get_by_id(self, execution_id: str) -> dict | None:
        async with self.db.execute(
            "SELECT * FROM executions WHERE id = ?", (execution_id,)
        ) as cur:
            row = await cur.fetchone()
            return dict(row) if row else None

    async def complete(self, execution_id: str, result: dict, commit: bool = True) -> None:
        """Record the outcome of a pending execution."""
        await self.db.execute(
            """UPDATE executions SET
                duration_ms = ?, status = ?, error_message = ?,
                input_tokens = ?, output_tokens = ?, cost_usd = ?
            WHERE id = ?""",
            (
                result.get("durationMs"),
                result["status"],
                result.get("errorMessage"),
                result.get("inputTokens", 0),
                result.get("outputTokens", 0),
                result.get("costUsd", 0.0),
                execution_id,
            ),
        )
        if commit:
            await self.db.commit()

    async def list_paginated(self, offset: int, limit: int, session_id: str | None = None) -> list[dict]:
        if session_id:
            query = "SELECT * FROM executions WHERE session_id = ? ORDER BY timestamp DESC LIMIT ? OFFSET ?"
            params: tuple = (session_id, limit, offset)
        else:
            query = "SELECT * FROM executions ORDER BY timestamp DESC LIMIT ? OFFSET ?"
            params = (limit, offset)

        async with self.db.execute(query, params) as cur:
            rows = await cur.fetchall()
            return [dict(r) for r in rows]

    async def list_for_session(self, session_id: str) -> list[dict]:
        async with self.db.execute(
            "SELECT * FROM executions WHERE session_id = ? ORDER BY timestamp DESC",
            (session_id,),
        ) as cur:
            rows = await cur.fetchall()
            return [dict(r) for r in rows]
