"""Agent sub-transcript API."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from observatory import config
from observatory.models import AgentStats, AgentSummary
from observatory.services.agents import DEFAULT_AGENT_WINDOW_MINUTES, AgentService

agents_router = APIRouter(prefix="/api/agents", tags=["agents"])


def _agent_service() -> AgentService:
    return AgentService(config.AGENTS_DIR)


@agents_router.get("")
def list_agents(minutes: int = Query(DEFAULT_AGENT_WINDOW_MINUTES, ge=1)):
    """Agents active within the last ``minutes``."""
    agents = _agent_service().list_recent_agents(minutes)
    return {"agents": agents, "count": len(agents)}


@agents_router.get("/stats", response_model=AgentStats)
def get_agent_stats():
    return _agent_service().get_agent_statistics()


@agents_router.get("/session/{session_id}")
def list_session_agents(session_id: str):
    agents = _agent_service().get_agents_for_session(session_id)
    return {"sessionId": session_id, "agents": agents, "count": len(agents)}


@agents_router.get("/{agent_id}", response_model=AgentSummary)
def get_agent(agent_id: str):
    agent = _agent_service().get_agent_by_id(agent_id)
    if agent is None:
        raise HTTPException(status_code=404, detail="Agent not found")
    return agent
