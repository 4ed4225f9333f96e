import unittest

from observatory.parsers.records import decode_lines
from observatory.parsers.summary import (
    format_slug_as_name,
    infer_agent_type,
    infer_status,
    summarize,
)


class SummaryTests(unittest.TestCase):
    def test_no_lines_summarize_to_none(self) -> None:
        self.assertIsNone(summarize([]))

    def test_lines_without_session_id_summarize_to_none(self) -> None:
        lines = decode_lines([{"type": "user", "uuid": "u1", "message": {"role": "user", "content": "hi"}}])
        self.assertIsNone(summarize(lines))

    def test_fold_over_transcript(self) -> None:
        lines = decode_lines([
            {
                "type": "user",
                "uuid": "u1",
                "sessionId": "s1",
                "slug": "greedy-juggling-valley",
                "timestamp": "2026-02-16T10:00:00Z",
                "message": {"role": "user", "content": "Find the config loader"},
            },
            {
                "type": "assistant",
                "uuid": "a1",
                "sessionId": "s1",
                "timestamp": "2026-02-16T10:00:05Z",
                "message": {
                    "role": "assistant",
                    "model": "claude-sonnet-4-5",
                    "content": [
                        {"type": "tool_use", "id": "t1", "name": "Grep", "input": {}},
                        {"type": "tool_use", "id": "t2", "name": "Read", "input": {}},
                    ],
                },
            },
            {
                "type": "user",
                "uuid": "u2",
                "sessionId": "s1",
                "timestamp": "2026-02-16T10:00:06Z",
                "message": {"role": "user", "content": "second"},
            },
            {
                "type": "assistant",
                "uuid": "a2",
                "sessionId": "s1",
                "timestamp": "2026-02-16T10:00:09Z",
                "message": {"role": "assistant", "model": "claude-opus-4-5", "content": "done"},
            },
        ])

        summary = summarize(lines)

        self.assertEqual(summary.session_id, "s1")
        self.assertEqual(summary.slug, "greedy-juggling-valley")
        self.assertEqual(summary.start_time, "2026-02-16T10:00:00Z")
        self.assertEqual(summary.last_activity, "2026-02-16T10:00:09Z")
        self.assertEqual(summary.message_count, 4)
        self.assertEqual(summary.tool_calls, 2)
        self.assertEqual(summary.model, "claude-opus-4-5")
        self.assertEqual(summary.first_user_message, "Find the config loader")
        self.assertFalse(summary.is_agent)

    def test_status_from_mtime(self) -> None:
        now = 1_800_000_000.0
        self.assertEqual(infer_status(now - 2 * 60, now), "active")
        self.assertEqual(infer_status(now - 10 * 60, now), "completed")

    def test_agent_type_priority(self) -> None:
        self.assertEqual(infer_agent_type("let's explore and also review the code"), "explore")
        self.assertEqual(infer_agent_type("Design the storage layer"), "plan")
        self.assertEqual(infer_agent_type("Audit the auth module"), "code-review")
        self.assertEqual(infer_agent_type("Warmup"), "general")
        self.assertEqual(infer_agent_type("Write a haiku"), "unknown")
        self.assertEqual(infer_agent_type(None), "unknown")

    def test_slug_name(self) -> None:
        self.assertEqual(format_slug_as_name("greedy-juggling-valley"), "Greedy Juggling Valley")

    def test_first_user_message_skips_empty_text(self) -> None:
        lines = decode_lines([
            {"type": "user", "uuid": "u1", "sessionId": "s1", "message": {"role": "user", "content": ""}},
            {
                "type": "user",
                "uuid": "u2",
                "sessionId": "s1",
                "message": {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "t"}]},
            },
            {"type": "user", "uuid": "u3", "sessionId": "s1", "message": {"role": "user", "content": "Explore the repository"}},
            {"type": "user", "uuid": "u4", "sessionId": "s1", "message": {"role": "user", "content": "later"}},
        ])

        summary = summarize(lines)

        self.assertEqual(summary.first_user_message, "Explore the repository")
        self.assertEqual(infer_agent_type(summary.first_user_message), "explore")
