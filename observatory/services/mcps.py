"""MCP server discovery from the assistant's ``mcp.json``.

Environment values are never returned in clear; detail views show them
masked down to their last four characters.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from observatory.models import McpServer, McpServerDetail, McpServerList, McpStats

logger = logging.getLogger("observatory.mcps")

NO_CONFIG_ERROR = "No MCP configuration file found"


class McpConfigError(Exception):
    """The MCP config exists but cannot be read as a server map."""


def mask_env_value(value: Any) -> str:
    text = str(value)
    if len(text) <= 8:
        return "****"
    return "****" + text[-4:]


def _server_from_config(name: str, raw: Any) -> McpServerDetail:
    server_config = raw if isinstance(raw, dict) else {}
    env = server_config.get("env")
    env = env if isinstance(env, dict) else {}
    args = server_config.get("args")
    command = server_config.get("command")
    url = server_config.get("url")
    return McpServerDetail(
        name=name,
        type="remote" if url else "local",
        command=command if isinstance(command, str) else None,
        args=[str(arg) for arg in args] if isinstance(args, list) else None,
        url=url if isinstance(url, str) else None,
        hasEnv=bool(env),
        envKeys=list(env.keys()),
        envMasked={key: mask_env_value(value) for key, value in env.items()},
    )


class McpService:
    """Read-only view of configured MCP servers, re-read on every call."""

    def __init__(self, config_paths: list[Path]):
        self.config_paths = config_paths

    def find_config_path(self) -> Path | None:
        for path in self.config_paths:
            if path.exists():
                return path
        return None

    def _load_servers(self, path: Path) -> dict[str, Any]:
        try:
            config = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise McpConfigError(str(e)) from e
        if not isinstance(config, dict):
            raise McpConfigError("MCP config is not a JSON object")
        servers = config.get("mcpServers") or {}
        if not isinstance(servers, dict):
            raise McpConfigError("mcpServers must be an object")
        return servers

    def list_servers(self) -> McpServerList:
        """Local servers first, then remote, each group sorted by name."""
        path = self.find_config_path()
        if path is None:
            return McpServerList(error=NO_CONFIG_ERROR)

        try:
            raw_servers = self._load_servers(path)
        except McpConfigError as e:
            logger.warning(f"Unreadable MCP config {path}: {e}")
            return McpServerList(configPath=str(path), error=str(e))

        servers = [
            McpServer(**_server_from_config(name, raw).model_dump(exclude={"envMasked"}))
            for name, raw in raw_servers.items()
        ]
        servers.sort(key=lambda server: (server.type != "local", server.name.casefold()))
        return McpServerList(servers=servers, configPath=str(path))

    def get_server(self, name: str) -> McpServerDetail | None:
        path = self.find_config_path()
        if path is None:
            return None
        try:
            raw_servers = self._load_servers(path)
        except McpConfigError as e:
            logger.warning(f"Unreadable MCP config {path}: {e}")
            return None
        if name not in raw_servers:
            return None
        return _server_from_config(name, raw_servers[name])

    def get_stats(self) -> McpStats:
        listing = self.list_servers()
        servers = listing.servers
        return McpStats(
            total=len(servers),
            local=sum(1 for server in servers if server.type == "local"),
            remote=sum(1 for server in servers if server.type == "remote"),
            withEnv=sum(1 for server in servers if server.hasEnv),
            configPath=listing.configPath,
        )
