"""Agent sub-transcript summaries and statistics."""
from __future__ import annotations

import logging
import time
from collections import Counter
from pathlib import Path
from typing import Callable

from observatory.model_identity import normalize_model_name
from observatory.models import AgentStats, AgentSummary
from observatory.parsers.discovery import RecentFile, find_recent_files, is_agent_file
from observatory.parsers.jsonl import read_records
from observatory.parsers.records import decode_lines
from observatory.parsers.summary import (
    format_slug_as_name,
    infer_agent_type,
    infer_status,
    summarize,
)

logger = logging.getLogger("observatory.agents")

DEFAULT_AGENT_WINDOW_MINUTES = 120
AGENT_LOOKUP_WINDOW_MINUTES = 240
FIRST_MESSAGE_MAX_CHARS = 200


class AgentService:
    """Summaries of agent transcripts (``agent-*.jsonl``), rebuilt per call."""

    def __init__(self, agents_dir: Path, clock: Callable[[], float] = time.time):
        self.agents_dir = agents_dir
        self._clock = clock

    def _summarize_file(self, recent: RecentFile, now: float) -> AgentSummary | None:
        try:
            summary = summarize(decode_lines(read_records(recent.path)))
        except (OSError, ValueError) as e:
            logger.debug(f"Skipping unreadable agent transcript {recent.path}: {e}")
            return None

        if summary is None or not summary.agent_id:
            return None

        agent_id = summary.agent_id
        first_message = summary.first_user_message or ""
        return AgentSummary(
            agentId=agent_id,
            sessionId=summary.session_id,
            name=format_slug_as_name(summary.slug) if summary.slug else f"Agent {agent_id[:8]}",
            model=normalize_model_name(summary.model),
            status=infer_status(recent.mtime, now),
            messageCount=summary.message_count,
            toolCalls=summary.tool_calls,
            startTime=summary.start_time,
            lastActivity=summary.last_activity,
            projectPath=recent.path.parent.name,
            filePath=str(recent.path),
            firstMessage=first_message[:FIRST_MESSAGE_MAX_CHARS],
            type=infer_agent_type(first_message),
        )

    def list_recent_agents(self, window_minutes: int = DEFAULT_AGENT_WINDOW_MINUTES) -> list[AgentSummary]:
        """Agents whose transcript changed within the window, newest first."""
        now = self._clock()
        agents: list[AgentSummary] = []
        for recent in find_recent_files(self.agents_dir, is_agent_file, window_minutes, now=now):
            agent = self._summarize_file(recent, now)
            if agent is not None:
                agents.append(agent)
        return agents

    def get_agents_for_session(self, session_id: str) -> list[AgentSummary]:
        agents = self.list_recent_agents(AGENT_LOOKUP_WINDOW_MINUTES)
        return [agent for agent in agents if agent.sessionId == session_id]

    def get_agent_statistics(self) -> AgentStats:
        agents = self.list_recent_agents(DEFAULT_AGENT_WINDOW_MINUTES)
        active = sum(1 for agent in agents if agent.status == "active")
        return AgentStats(
            total=len(agents),
            active=active,
            completed=len(agents) - active,
            byModel=dict(Counter(agent.model for agent in agents)),
            byType=dict(Counter(agent.type for agent in agents)),
        )

    def get_agent_by_id(self, agent_id: str) -> AgentSummary | None:
        for agent in self.list_recent_agents(AGENT_LOOKUP_WINDOW_MINUTES):
            if agent.agentId == agent_id:
                return agent
        return None
