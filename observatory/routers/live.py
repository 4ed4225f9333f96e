"""Live transcript feed API."""
from __future__ import annotations

from fastapi import APIRouter, Query

from observatory import config
from observatory.models import CurrentSession
from observatory.services.live import LiveTranscriptService

live_router = APIRouter(prefix="/api/live", tags=["live"])


def _live_service() -> LiveTranscriptService:
    return LiveTranscriptService(config.PROJECTS_DIR)


@live_router.get("/sessions")
def list_live_sessions():
    """Recently active transcripts, newest first."""
    sessions = _live_service().list_active_sessions()
    return {"sessions": sessions, "count": len(sessions)}


@live_router.get("/events")
def list_live_events(limit: int = Query(100, ge=1)):
    """Most recent events across recently active transcripts."""
    events = _live_service().get_live_events(limit)
    return {"events": events, "count": len(events)}


@live_router.get("/current", response_model=CurrentSession)
def get_current_session(limit: int = Query(50, ge=1)):
    """The primary active session with its latest events."""
    return _live_service().get_current_session(limit)


@live_router.get("/session/{session_id}")
def get_session_events(session_id: str, limit: int = Query(50, ge=1)):
    events = _live_service().get_events_for_session(session_id, limit)
    return {"sessionId": session_id, "events": events, "count": len(events)}
