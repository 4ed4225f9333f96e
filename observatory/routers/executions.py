"""Tool execution API, written to by assistant pre/post tool-use hooks."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from observatory.date_utils import utc_now_iso
from observatory.db import connection
from observatory.db.factory import (
    get_execution_repository,
    get_session_repository,
    get_token_usage_repository,
)
from observatory.model_identity import normalize_model_name
from observatory.models import ExecutionComplete, ExecutionCreate, ExecutionRecord
from observatory.pricing import calculate_cost
from observatory.routers.sessions import execution_from_row

executions_router = APIRouter(prefix="/api/executions", tags=["executions"])


@executions_router.get("")
async def list_executions(
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    sessionId: str | None = Query(None),
):
    db = await connection.get_connection()
    rows = await get_execution_repository(db).list_paginated(offset, limit, sessionId)
    return {"executions": [execution_from_row(row) for row in rows]}


@executions_router.get("/{execution_id}", response_model=ExecutionRecord)
async def get_execution(execution_id: str):
    db = await connection.get_connection()
    row = await get_execution_repository(db).get_by_id(execution_id)
    if not row:
        raise HTTPException(status_code=404, detail="Execution not found")
    return execution_from_row(row)


@executions_router.post("", status_code=201)
async def create_execution(payload: ExecutionCreate):
    """Record a pending tool call against an existing session."""
    db = await connection.get_connection()
    if not await get_session_repository(db).exists(payload.sessionId):
        raise HTTPException(status_code=404, detail="Session not found")

    execution_id = await get_execution_repository(db).insert({
        "sessionId": payload.sessionId,
        "timestamp": utc_now_iso(),
        "toolName": payload.toolName,
        "parameters": payload.parameters,
        "status": "pending",
    })
    return {"id": execution_id, "message": "Execution created"}


@executions_router.patch("/{execution_id}")
async def complete_execution(execution_id: str, payload: ExecutionComplete):
    """Close out an execution, pricing its tokens at the session's model rate."""
    db = await connection.get_connection()
    executions = get_execution_repository(db)
    row = await executions.get_by_id(execution_id)
    if not row:
        raise HTTPException(status_code=404, detail="Execution not found")

    session_id = row["session_id"]
    sessions = get_session_repository(db)
    session = await sessions.get_by_id(session_id)
    model = normalize_model_name(session.get("model") if session else None)
    if model == "unknown":
        model = "sonnet"

    input_tokens = payload.inputTokens or 0
    output_tokens = payload.outputTokens or 0
    thinking_tokens = payload.thinkingTokens or 0
    cost = calculate_cost(model, input_tokens, output_tokens, thinking_tokens=thinking_tokens)

    await executions.complete(execution_id, {
        "durationMs": payload.durationMs,
        "status": payload.status,
        "errorMessage": payload.errorMessage,
        "inputTokens": input_tokens,
        "outputTokens": output_tokens,
        "costUsd": cost,
    }, commit=False)
    if input_tokens or output_tokens:
        await get_token_usage_repository(db).insert({
            "sessionId": session_id,
            "executionId": execution_id,
            "model": model,
            "inputTokens": input_tokens,
            "outputTokens": output_tokens,
            "thinkingTokens": thinking_tokens,
            "costUsd": cost,
            "timestamp": utc_now_iso(),
        }, commit=False)
        await sessions.recompute_totals(session_id, commit=False)
    await db.commit()
    return {"message": "Execution updated"}
