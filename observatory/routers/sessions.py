"""API router for the persisted session ledger."""
from __future__ import annotations

import json
import uuid

from fastapi import APIRouter, HTTPException, Query

from observatory.date_utils import normalize_iso_date, parse_iso, utc_now_iso
from observatory.db import connection
from observatory.db.factory import (
    get_execution_repository,
    get_session_repository,
    get_token_usage_repository,
)
from observatory.models import (
    ExecutionRecord,
    PaginatedResponse,
    SessionCreate,
    SessionDetail,
    SessionRecord,
    SessionUpdate,
    TokenUsageRecord,
)

sessions_router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _safe_json(raw: str | dict | None) -> dict:
    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _session_from_row(row: dict) -> SessionRecord:
    return SessionRecord(
        id=row["id"],
        startTime=row.get("start_time") or "",
        endTime=row.get("end_time"),
        durationSeconds=row.get("duration_seconds"),
        model=row.get("model") or "unknown",
        workingDirectory=row.get("working_directory") or "",
        gitBranch=row.get("git_branch"),
        totalTokens=row.get("total_tokens") or 0,
        totalCostUsd=row.get("total_cost_usd") or 0.0,
        status=row.get("status") or "active",
        createdAt=row.get("created_at") or "",
    )


def execution_from_row(row: dict) -> ExecutionRecord:
    return ExecutionRecord(
        id=row["id"],
        sessionId=row["session_id"],
        timestamp=row.get("timestamp") or "",
        toolName=row.get("tool_name") or "",
        parameters=_safe_json(row.get("parameters_json")),
        durationMs=row.get("duration_ms"),
        inputTokens=row.get("input_tokens") or 0,
        outputTokens=row.get("output_tokens") or 0,
        costUsd=row.get("cost_usd") or 0.0,
        status=row.get("status") or "pending",
        errorMessage=row.get("error_message"),
    )


def token_usage_from_row(row: dict) -> TokenUsageRecord:
    return TokenUsageRecord(
        id=row["id"],
        sessionId=row["session_id"],
        executionId=row.get("execution_id"),
        model=row.get("model") or "unknown",
        inputTokens=row.get("input_tokens") or 0,
        outputTokens=row.get("output_tokens") or 0,
        thinkingTokens=row.get("thinking_tokens") or 0,
        cacheReadTokens=row.get("cache_read_tokens") or 0,
        cacheWriteTokens=row.get("cache_write_tokens") or 0,
        costUsd=row.get("cost_usd") or 0.0,
        timestamp=row.get("timestamp") or "",
    )


@sessions_router.get("", response_model=PaginatedResponse[SessionRecord])
async def list_sessions(
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1),
    status: str | None = Query(None, description="Filter by session status"),
):
    db = await connection.get_connection()
    repo = get_session_repository(db)
    rows = await repo.list_paginated(offset, limit, status)
    total = await repo.count(status)
    return PaginatedResponse[SessionRecord](
        items=[_session_from_row(row) for row in rows],
        total=total,
        offset=offset,
        limit=limit,
    )


@sessions_router.get("/{session_id}", response_model=SessionDetail)
async def get_session(session_id: str):
    db = await connection.get_connection()
    row = await get_session_repository(db).get_by_id(session_id)
    if not row:
        raise HTTPException(status_code=404, detail="Session not found")

    executions = await get_execution_repository(db).list_for_session(session_id)
    usage = await get_token_usage_repository(db).list_for_session(session_id)
    session = _session_from_row(row)
    return SessionDetail(
        **session.model_dump(),
        executions=[execution_from_row(r) for r in executions],
        tokenUsage=[token_usage_from_row(r) for r in usage],
    )


@sessions_router.post("", status_code=201)
async def create_session(payload: SessionCreate):
    """Open a new active session, as reported by a session-start hook."""
    db = await connection.get_connection()
    session_id = uuid.uuid4().hex
    await get_session_repository(db).upsert({
        "id": session_id,
        "startTime": utc_now_iso(),
        "model": payload.model,
        "workingDirectory": payload.workingDirectory,
        "gitBranch": payload.gitBranch,
        "status": "active",
    })
    return {"id": session_id, "message": "Session created"}


@sessions_router.patch("/{session_id}")
async def update_session(session_id: str, payload: SessionUpdate):
    """Update lifecycle fields and refresh token and cost totals."""
    db = await connection.get_connection()
    repo = get_session_repository(db)
    row = await repo.get_by_id(session_id)
    if not row:
        raise HTTPException(status_code=404, detail="Session not found")

    end_time = None
    duration_seconds = None
    if payload.endTime:
        ended = parse_iso(payload.endTime)
        if ended is None:
            raise HTTPException(status_code=400, detail="endTime must be an ISO-8601 timestamp")
        end_time = normalize_iso_date(ended)
        started = parse_iso(row.get("start_time"))
        if started is not None:
            duration_seconds = int((ended - started).total_seconds())

    await repo.update_status(session_id, payload.status, end_time, duration_seconds, commit=False)
    await repo.recompute_totals(session_id, commit=False)
    await db.commit()
    return {"message": "Session updated"}


@sessions_router.delete("/{session_id}")
async def delete_session(session_id: str):
    db = await connection.get_connection()
    repo = get_session_repository(db)
    if not await repo.exists(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    await repo.delete(session_id)
    return {"message": "Session deleted"}
