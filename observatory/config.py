"""Observatory backend configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    if not value or not value.strip():
        return default
    return Path(value.strip()).expanduser()


# Project root (one level up from observatory/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Assistant data locations
CLAUDE_HOME = _env_path("OBSERVATORY_CLAUDE_HOME", Path.home() / ".claude")
PROJECTS_DIR = _env_path("OBSERVATORY_PROJECTS_DIR", CLAUDE_HOME / "projects")
AGENTS_DIR = _env_path("OBSERVATORY_AGENTS_DIR", PROJECTS_DIR)
STATS_CACHE_PATH = _env_path("OBSERVATORY_STATS_CACHE_PATH", CLAUDE_HOME / "stats-cache.json")

# MCP server configs, checked in order; the first existing file wins.
MCP_CONFIG_PATHS = [
    _env_path("OBSERVATORY_MCP_CONFIG_PATH", CLAUDE_HOME / "mcp.json"),
    Path.home() / ".config" / "claude" / "mcp.json",
]

# Database
DB_PATH = _env_path("OBSERVATORY_DB_PATH", PROJECT_ROOT / "data" / "observatory.db")

# Server settings
HOST = os.getenv("OBSERVATORY_HOST", "0.0.0.0")
PORT = _env_int("OBSERVATORY_PORT", 3001)
RELOAD = _env_bool("OBSERVATORY_RELOAD", False)
LOG_LEVEL = os.getenv("OBSERVATORY_LOG_LEVEL", "INFO").upper()

# CORS
FRONTEND_ORIGIN = os.getenv("OBSERVATORY_FRONTEND_ORIGIN", "http://localhost:3000")
