import unittest
from unittest.mock import patch

import aiosqlite
from fastapi import HTTPException

from observatory.db import connection
from observatory.db.migrations import run_migrations
from observatory.models import ExecutionComplete, ExecutionCreate, SessionCreate, SessionUpdate
from observatory.routers import analytics as analytics_router
from observatory.routers import executions as executions_router
from observatory.routers import sessions as sessions_router


class HookWrittenLedgerTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = await aiosqlite.connect(":memory:")
        self.db.row_factory = aiosqlite.Row
        await self.db.execute("PRAGMA foreign_keys=ON")
        await run_migrations(self.db)

        patcher = patch.object(connection, "get_connection", return_value=self.db)
        patcher.start()
        self.addCleanup(patcher.stop)

    async def asyncTearDown(self) -> None:
        await self.db.close()

    async def _open_session(self, model: str = "opus") -> str:
        created = await sessions_router.create_session(
            SessionCreate(model=model, workingDirectory="/home/dev/app", gitBranch="main")
        )
        self.assertEqual(created["message"], "Session created")
        return created["id"]

    async def test_session_lifecycle(self) -> None:
        session_id = await self._open_session()
        detail = await sessions_router.get_session(session_id)
        self.assertEqual(detail.status, "active")
        self.assertEqual(detail.model, "opus")

        end_time = "2999-01-01T00:00:00Z"
        await sessions_router.update_session(session_id, SessionUpdate(status="completed", endTime=end_time))

        detail = await sessions_router.get_session(session_id)
        self.assertEqual(detail.status, "completed")
        self.assertEqual(detail.endTime, "2999-01-01T00:00:00.000Z")
        self.assertGreater(detail.durationSeconds, 0)

    async def test_session_update_errors(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            await sessions_router.update_session("missing", SessionUpdate(status="failed"))
        self.assertEqual(ctx.exception.status_code, 404)

        session_id = await self._open_session()
        with self.assertRaises(HTTPException) as ctx:
            await sessions_router.update_session(session_id, SessionUpdate(endTime="tomorrow"))
        self.assertEqual(ctx.exception.status_code, 400)

    async def test_execution_flow_records_usage_and_totals(self) -> None:
        session_id = await self._open_session("opus")

        created = await executions_router.create_execution(
            ExecutionCreate(sessionId=session_id, toolName="Bash", parameters={"command": "ls"})
        )
        execution_id = created["id"]
        pending = await executions_router.get_execution(execution_id)
        self.assertEqual(pending.status, "pending")
        self.assertEqual(pending.parameters, {"command": "ls"})

        await executions_router.complete_execution(
            execution_id,
            ExecutionComplete(status="success", durationMs=120, inputTokens=1000, outputTokens=2000, thinkingTokens=1000),
        )

        done = await executions_router.get_execution(execution_id)
        self.assertEqual(done.status, "success")
        self.assertEqual(done.durationMs, 120)
        # Opus: 15/M input, 75/M output and thinking.
        self.assertAlmostEqual(done.costUsd, 0.015 + 0.15 + 0.075)

        detail = await sessions_router.get_session(session_id)
        self.assertEqual(len(detail.tokenUsage), 1)
        self.assertEqual(detail.tokenUsage[0].executionId, execution_id)
        self.assertEqual(detail.tokenUsage[0].thinkingTokens, 1000)
        self.assertEqual(detail.totalTokens, 3000)
        self.assertAlmostEqual(detail.totalCostUsd, done.costUsd)

        tools = await analytics_router.get_tools(limit=20)
        self.assertEqual(tools["tools"][0]["toolName"], "Bash")
        self.assertEqual(tools["tools"][0]["successCount"], 1)

        listed = await executions_router.list_executions(offset=0, limit=10, sessionId=session_id)
        self.assertEqual([item.id for item in listed["executions"]], [execution_id])

    async def test_failed_execution_without_tokens_adds_no_usage(self) -> None:
        session_id = await self._open_session("haiku")
        execution_id = (await executions_router.create_execution(
            ExecutionCreate(sessionId=session_id, toolName="Read")
        ))["id"]

        await executions_router.complete_execution(
            execution_id, ExecutionComplete(status="error", errorMessage="denied")
        )

        done = await executions_router.get_execution(execution_id)
        self.assertEqual(done.errorMessage, "denied")
        self.assertEqual(done.costUsd, 0.0)
        self.assertEqual((await sessions_router.get_session(session_id)).tokenUsage, [])

    async def test_unknown_ids_are_404(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            await executions_router.create_execution(ExecutionCreate(sessionId="missing", toolName="Bash"))
        self.assertEqual(ctx.exception.status_code, 404)

        with self.assertRaises(HTTPException) as ctx:
            await executions_router.get_execution("missing")
        self.assertEqual(ctx.exception.status_code, 404)

        with self.assertRaises(HTTPException) as ctx:
            await executions_router.complete_execution("missing", ExecutionComplete(status="success"))
        self.assertEqual(ctx.exception.status_code, 404)
