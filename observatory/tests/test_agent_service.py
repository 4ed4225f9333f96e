import json
import os
import tempfile
import time
import unittest
from pathlib import Path

from observatory.services.agents import AgentService


def _agent_lines(agent_id: str, session_id: str, prompt: str, model: str = "claude-haiku-4-5", slug=None) -> list[dict]:
    first = {
        "type": "user",
        "uuid": f"{agent_id}-u1",
        "sessionId": session_id,
        "agentId": agent_id,
        "isSidechain": True,
        "timestamp": "2026-02-16T10:00:00Z",
        "message": {"role": "user", "content": prompt},
    }
    if slug:
        first["slug"] = slug
    return [
        first,
        {
            "type": "assistant",
            "uuid": f"{agent_id}-a1",
            "sessionId": session_id,
            "agentId": agent_id,
            "timestamp": "2026-02-16T10:00:04Z",
            "message": {
                "role": "assistant",
                "model": model,
                "content": [{"type": "tool_use", "id": "t1", "name": "Glob", "input": {}}],
            },
        },
    ]


class AgentServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.root = Path(tmpdir.name)
        self.now = time.time()
        self.service = AgentService(self.root, clock=lambda: self.now)

    def _write(self, relative_path: str, records: list, age_minutes: float) -> None:
        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(json.dumps(record) for record in records), encoding="utf-8")
        mtime = self.now - age_minutes * 60
        os.utime(path, (mtime, mtime))

    def _seed(self) -> None:
        self._write("proj/agent-aaaa1111bbbb.jsonl", _agent_lines("aaaa1111bbbb", "s1", "Explore the repo and review it"), 2)
        self._write(
            "proj/agent-cccc2222.jsonl",
            _agent_lines("cccc2222", "s1", "Plan the migration", model="claude-opus-4-5", slug="calm-lake"),
            30,
        )
        self._write("proj/agent-dddd3333.jsonl", _agent_lines("dddd3333", "s2", "x" * 300), 180)
        # Not agent transcripts.
        self._write("proj/s1.jsonl", _agent_lines("eeee", "s1", "Explore"), 1)

    def test_recent_agents(self) -> None:
        self._seed()

        agents = self.service.list_recent_agents()

        self.assertEqual([agent.agentId for agent in agents], ["aaaa1111bbbb", "cccc2222"])
        first = agents[0]
        self.assertEqual(first.name, "Agent aaaa1111")
        self.assertEqual(first.model, "haiku")
        self.assertEqual(first.status, "active")
        self.assertEqual(first.type, "explore")
        self.assertEqual(first.messageCount, 2)
        self.assertEqual(first.toolCalls, 1)
        self.assertEqual(first.projectPath, "proj")
        self.assertEqual(first.firstMessage, "Explore the repo and review it")
        second = agents[1]
        self.assertEqual(second.name, "Calm Lake")
        self.assertEqual(second.status, "completed")
        self.assertEqual(second.type, "plan")

    def test_agents_for_session_use_wider_window(self) -> None:
        self._seed()
        self.assertEqual(
            [agent.agentId for agent in self.service.get_agents_for_session("s2")],
            ["dddd3333"],
        )
        self.assertEqual(self.service.get_agents_for_session("missing"), [])

    def test_agent_lookup(self) -> None:
        self._seed()
        agent = self.service.get_agent_by_id("dddd3333")
        self.assertEqual(len(agent.firstMessage), 200)
        self.assertIsNone(self.service.get_agent_by_id("nope"))

    def test_statistics(self) -> None:
        self._seed()

        stats = self.service.get_agent_statistics()

        self.assertEqual(stats.total, 2)
        self.assertEqual(stats.active, 1)
        self.assertEqual(stats.completed, 1)
        self.assertEqual(stats.byModel, {"haiku": 1, "opus": 1})
        self.assertEqual(stats.byType, {"explore": 1, "plan": 1})

    def test_transcript_without_agent_id_is_ignored(self) -> None:
        self._write("proj/agent-orphan.jsonl", [{
            "type": "user",
            "uuid": "u1",
            "sessionId": "s1",
            "message": {"role": "user", "content": "hello"},
        }], 1)
        self.assertEqual(self.service.list_recent_agents(), [])

    def test_missing_directory(self) -> None:
        service = AgentService(self.root / "missing", clock=lambda: self.now)
        self.assertEqual(service.list_recent_agents(), [])
        self.assertEqual(service.get_agent_statistics().total, 0)

    def test_malformed_block_does_not_hide_other_agents(self) -> None:
        records = _agent_lines("bad00001", "s1", "Explore the code")
        records[1]["message"]["content"] = [{"type": ["tool_use"], "name": "Glob"}]
        self._write("proj/agent-bad00001.jsonl", records, 1)
        self._write("proj/agent-good0001.jsonl", _agent_lines("good0001", "s1", "Plan it"), 2)

        agents = self.service.list_recent_agents()

        self.assertEqual([agent.agentId for agent in agents], ["bad00001", "good0001"])
        self.assertEqual(agents[0].toolCalls, 0)

    def test_type_uses_first_non_empty_user_message(self) -> None:
        records = _agent_lines("e0e0e0e0", "s1", "")
        records.insert(1, {
            "type": "user",
            "uuid": "u2",
            "sessionId": "s1",
            "agentId": "e0e0e0e0",
            "timestamp": "2026-02-16T10:00:01Z",
            "message": {"role": "user", "content": "Explore the repository"},
        })
        self._write("proj/agent-e0e0e0e0.jsonl", records, 1)

        agent = self.service.get_agent_by_id("e0e0e0e0")

        self.assertEqual(agent.type, "explore")
        self.assertEqual(agent.firstMessage, "Explore the repository")
