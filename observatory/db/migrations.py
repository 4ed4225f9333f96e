"""Database schema creation and versioning.

All CREATE TABLE statements for the session/cost ledger.
Uses IF NOT EXISTS for idempotent runs.
"""
from __future__ import annotations

import logging

import aiosqlite

logger = logging.getLogger("observatory.db")

SCHEMA_VERSION = 1

_TABLES = """
-- ── Schema version tracking ────────────────────────────────────────
CREATE TABLE IF NOT EXISTS schema_version (
    version   INTEGER NOT NULL,
    applied   TEXT NOT NULL DEFAULT (datetime('now'))
);

-- ── 1. Sessions ────────────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS sessions (
    id                 TEXT PRIMARY KEY,
    start_time         TEXT NOT NULL,
    end_time           TEXT,
    duration_seconds   INTEGER,
    model              TEXT NOT NULL,
    working_directory  TEXT NOT NULL,
    git_branch         TEXT,
    total_tokens       INTEGER DEFAULT 0,
    total_cost_usd     REAL DEFAULT 0,
    status             TEXT NOT NULL DEFAULT 'active'
                       CHECK (status IN ('active', 'completed', 'failed')),
    created_at         TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_time DESC);
CREATE INDEX IF NOT EXISTS idx_sessions_status ON sessions(status);

-- ── 2. Executions (tool calls) ─────────────────────────────────────
CREATE TABLE IF NOT EXISTS executions (
    id               TEXT PRIMARY KEY,
    session_id       TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    timestamp        TEXT NOT NULL,
    tool_name        TEXT NOT NULL,
    parameters_json  TEXT,
    duration_ms      INTEGER,
    input_tokens     INTEGER DEFAULT 0,
    output_tokens    INTEGER DEFAULT 0,
    cost_usd         REAL DEFAULT 0,
    status           TEXT NOT NULL DEFAULT 'pending'
                     CHECK (status IN ('success', 'error', 'pending')),
    error_message    TEXT
);

CREATE INDEX IF NOT EXISTS idx_executions_session ON executions(session_id, timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_executions_tool ON executions(tool_name);

-- ── 3. Token usage ─────────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS token_usage (
    id                  TEXT PRIMARY KEY,
    session_id          TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    execution_id        TEXT REFERENCES executions(id) ON DELETE CASCADE,
    model               TEXT NOT NULL,
    input_tokens        INTEGER NOT NULL DEFAULT 0,
    output_tokens       INTEGER NOT NULL DEFAULT 0,
    thinking_tokens     INTEGER DEFAULT 0,
    cache_read_tokens   INTEGER DEFAULT 0,
    cache_write_tokens  INTEGER DEFAULT 0,
    cost_usd            REAL DEFAULT 0,
    timestamp           TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_token_usage_session ON token_usage(session_id, timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_token_usage_time ON token_usage(timestamp);
"""


async def run_migrations(db: aiosqlite.Connection) -> None:
    """Create all tables. Idempotent."""
    try:
        async with db.execute("SELECT MAX(version) FROM schema_version") as cur:
            row = await cur.fetchone()
            current_version = row[0] if row and row[0] else 0
    except aiosqlite.OperationalError:
        current_version = 0

    if current_version >= SCHEMA_VERSION:
        logger.info(f"Schema is up to date (version {current_version})")
        return

    logger.info(f"Running migrations: {current_version} → {SCHEMA_VERSION}")
    await db.executescript(_TABLES)
    await db.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
    await db.commit()
    logger.info(f"Migrations complete (version {SCHEMA_VERSION})")
