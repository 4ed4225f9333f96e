"""Live view over the assistant's project transcripts.

Every call rescans the projects directory and re-reads the transcripts it
needs; nothing is cached between calls, so each result reflects the files as
they were when the call ran.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from observatory.date_utils import epoch_to_iso, iso_to_epoch
from observatory.model_identity import normalize_model_name
from observatory.models import ActiveSession, CurrentSession, ParsedEvent
from observatory.parsers.discovery import RecentFile, find_recent_files, is_transcript_file
from observatory.parsers.events import extract_events_from_records
from observatory.parsers.jsonl import parse_line, parse_lines, read_lines
from observatory.parsers.records import decode_lines
from observatory.parsers.summary import infer_status, summarize

logger = logging.getLogger("observatory.live")

ACTIVE_SESSIONS_WINDOW_MINUTES = 60
ACTIVE_SESSIONS_MAX_FILES = 10
SESSION_EVENTS_WINDOW_MINUTES = 120
LIVE_EVENTS_WINDOW_MINUTES = 30
LIVE_EVENTS_MAX_FILES = 5
LIVE_EVENTS_TAIL_LINES = 20

# Unreadable, vanished or undecodable files contribute nothing.
_SKIPPABLE_ERRORS = (OSError, ValueError)


def _newest_first(events: list[ParsedEvent]) -> list[ParsedEvent]:
    # Stable sort, so events sharing a line timestamp keep their relative order.
    return sorted(events, key=lambda event: iso_to_epoch(event.timestamp), reverse=True)


class LiveTranscriptService:
    """Read-only queries over recently modified transcript files."""

    def __init__(self, projects_dir: Path, clock: Callable[[], float] = time.time):
        self.projects_dir = projects_dir
        self._clock = clock

    def _recent(self, within_minutes: int) -> list[RecentFile]:
        return find_recent_files(
            self.projects_dir,
            is_transcript_file,
            within_minutes,
            now=self._clock(),
        )

    def _active_session(self, recent: RecentFile, now: float) -> ActiveSession | None:
        lines = read_lines(recent.path)
        if not lines:
            return None
        summary = summarize(decode_lines(parse_lines(lines)))
        if summary is None:
            return None
        return ActiveSession(
            sessionId=summary.session_id,
            filePath=str(recent.path),
            projectPath=recent.path.parent.name,
            lastModified=epoch_to_iso(recent.mtime),
            eventCount=len(lines),
            messageCount=summary.message_count,
            toolCalls=summary.tool_calls,
            model=normalize_model_name(summary.model) if summary.model else None,
            slug=summary.slug,
            startTime=summary.start_time,
            lastActivity=summary.last_activity,
            status=infer_status(recent.mtime, now),
            isAgent=summary.is_agent or recent.path.name.startswith("agent-"),
        )

    def list_active_sessions(self) -> list[ActiveSession]:
        """Summaries of the most recently touched transcripts, newest first."""
        now = self._clock()
        recent = self._recent(ACTIVE_SESSIONS_WINDOW_MINUTES)[:ACTIVE_SESSIONS_MAX_FILES]

        sessions: list[ActiveSession] = []
        for item in recent:
            try:
                session = self._active_session(item, now)
            except _SKIPPABLE_ERRORS as e:
                logger.debug(f"Skipping unreadable transcript {item.path}: {e}")
                continue
            if session is not None:
                sessions.append(session)
        return sessions

    def get_events_for_session(self, session_id: str, limit: int = 50) -> list[ParsedEvent]:
        """Newest-first events from the first recent transcript of a session.

        Only the most recently modified file whose first line belongs to the
        session is read.
        """
        if limit <= 0:
            return []

        for item in self._recent(SESSION_EVENTS_WINDOW_MINUTES):
            try:
                lines = read_lines(item.path)
                if not lines:
                    continue
                first = parse_line(lines[0])
                if first is None or first.get("sessionId") != session_id:
                    continue
                events = extract_events_from_records(parse_lines(lines))
            except _SKIPPABLE_ERRORS as e:
                logger.debug(f"Skipping unreadable transcript {item.path}: {e}")
                continue

            events.reverse()
            return _newest_first(events)[:limit]

        return []

    def get_live_events(self, limit: int = 100) -> list[ParsedEvent]:
        """Newest-first events from the tails of the most active transcripts."""
        if limit <= 0:
            return []

        recent = self._recent(LIVE_EVENTS_WINDOW_MINUTES)[:LIVE_EVENTS_MAX_FILES]
        events: list[ParsedEvent] = []
        for item in recent:
            try:
                tail = read_lines(item.path)[-LIVE_EVENTS_TAIL_LINES:]
                events.extend(extract_events_from_records(parse_lines(tail)))
            except _SKIPPABLE_ERRORS as e:
                logger.debug(f"Skipping unreadable transcript {item.path}: {e}")
                continue

        return _newest_first(events)[:limit]

    def get_current_session(self, limit: int = 50) -> CurrentSession:
        """The primary (non-agent, if any) active session and its events."""
        sessions = self.list_active_sessions()
        if not sessions:
            return CurrentSession(session=None, events=[])

        primary = next((session for session in sessions if not session.isAgent), sessions[0])
        events = self.get_events_for_session(primary.sessionId, limit)
        return CurrentSession(session=primary, events=events)
