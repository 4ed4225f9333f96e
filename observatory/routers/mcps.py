"""Configured MCP server API."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException

from observatory import config
from observatory.models import McpServerDetail, McpServerList, McpStats
from observatory.services.mcps import McpService

mcps_router = APIRouter(prefix="/api/mcps", tags=["mcps"])


def _mcp_service() -> McpService:
    return McpService(config.MCP_CONFIG_PATHS)


@mcps_router.get("", response_model=McpServerList)
def list_mcp_servers():
    return _mcp_service().list_servers()


@mcps_router.get("/stats", response_model=McpStats)
def get_mcp_stats():
    return _mcp_service().get_stats()


@mcps_router.get("/{name}", response_model=McpServerDetail)
def get_mcp_server(name: str):
    """One server with its environment values masked."""
    server = _mcp_service().get_server(name)
    if server is None:
        raise HTTPException(status_code=404, detail=f'Server "{name}" not found')
    return server
