"""Fold a transcript into a session or agent summary."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable, Optional

from observatory.parsers.records import ToolUseBlock, TranscriptLine, message_text

# A transcript touched this recently is still being written to.
ACTIVE_WINDOW_SECONDS = 5 * 60

# Checked in order; the first category with a matching keyword wins.
_AGENT_TYPE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("explore", ("explore", "search", "find")),
    ("plan", ("plan", "architect", "design")),
    ("code-review", ("review", "audit", "check")),
    ("general", ("warmup",)),
]


@dataclass
class TranscriptSummary:
    session_id: str = ""
    agent_id: Optional[str] = None
    slug: Optional[str] = None
    start_time: str = ""
    last_activity: str = ""
    message_count: int = 0
    tool_calls: int = 0
    model: Optional[str] = None
    first_user_message: Optional[str] = None

    @property
    def is_agent(self) -> bool:
        return bool(self.agent_id)


def summarize(lines: Iterable[TranscriptLine]) -> TranscriptSummary | None:
    """Single forward pass over a transcript.

    Identity fields and the start time are first-wins; the last activity
    timestamp and the model are last-wins. Returns None when there are no
    lines or none of them carries a session id.
    """
    summary = TranscriptSummary()
    seen_any = False

    for line in lines:
        seen_any = True
        if not summary.session_id and line.session_id:
            summary.session_id = line.session_id
        if not summary.agent_id and line.agent_id:
            summary.agent_id = line.agent_id
        if not summary.slug and line.slug:
            summary.slug = line.slug
        if line.timestamp:
            if not summary.start_time:
                summary.start_time = line.timestamp
            summary.last_activity = line.timestamp

        summary.message_count += 1

        if line.kind == "user":
            if not summary.first_user_message and line.message is not None:
                summary.first_user_message = message_text(line.message)
        elif line.kind == "assistant" and line.message is not None:
            if line.message.model:
                summary.model = line.message.model
            summary.tool_calls += sum(1 for block in line.message.blocks if isinstance(block, ToolUseBlock))

    if not seen_any or not summary.session_id:
        return None
    return summary


def infer_status(mtime: float, now: float | None = None) -> str:
    current = time.time() if now is None else now
    return "active" if mtime > current - ACTIVE_WINDOW_SECONDS else "completed"


def infer_agent_type(first_message: str | None) -> str:
    lowered = (first_message or "").lower()
    for agent_type, keywords in _AGENT_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return agent_type
    return "unknown"


def format_slug_as_name(slug: str) -> str:
    """Title-case a session slug, e.g. greedy-juggling-valley -> Greedy Juggling Valley."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))
