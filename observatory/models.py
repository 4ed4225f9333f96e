"""Pydantic models matching the dashboard's TypeScript types."""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Literal, Optional, Generic, TypeVar

T = TypeVar("T")

class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    offset: int
    limit: int

# ── Live transcript models ──────────────────────────────────────────

EventType = Literal["thinking", "tool_call", "tool_result", "response", "user_message"]


class ParsedEvent(BaseModel):
    id: str
    type: EventType
    timestamp: str
    sessionId: str
    model: Optional[str] = None
    isAgent: bool = False
    agentId: Optional[str] = None
    # thinking
    thinking: Optional[str] = None
    # tool_call
    toolName: Optional[str] = None
    toolInput: Optional[dict[str, Any]] = None
    # tool_result
    toolResult: Optional[str] = None
    filePath: Optional[str] = None
    # response
    text: Optional[str] = None
    inputTokens: Optional[int] = None
    outputTokens: Optional[int] = None
    cacheRead: Optional[int] = None
    cacheWrite: Optional[int] = None


class ActiveSession(BaseModel):
    sessionId: str
    filePath: str
    projectPath: str
    lastModified: str
    eventCount: int = 0
    messageCount: int = 0
    toolCalls: int = 0
    model: Optional[str] = None
    slug: Optional[str] = None
    startTime: str = ""
    lastActivity: str = ""
    status: str = "completed"  # "active" | "completed"
    isAgent: bool = False


class CurrentSession(BaseModel):
    session: Optional[ActiveSession] = None
    events: list[ParsedEvent] = Field(default_factory=list)


# ── Agent models ────────────────────────────────────────────────────

AgentType = Literal["explore", "plan", "code-review", "general", "unknown"]


class AgentSummary(BaseModel):
    agentId: str
    sessionId: str
    name: str
    model: str = "unknown"
    status: str = "completed"  # "active" | "completed"
    messageCount: int = 0
    toolCalls: int = 0
    startTime: str = ""
    lastActivity: str = ""
    projectPath: str = ""
    filePath: str = ""
    firstMessage: str = ""
    type: AgentType = "unknown"


class AgentStats(BaseModel):
    total: int = 0
    active: int = 0
    completed: int = 0
    byModel: dict[str, int] = Field(default_factory=dict)
    byType: dict[str, int] = Field(default_factory=dict)


# ── Persisted session / cost models ─────────────────────────────────

class SessionRecord(BaseModel):
    id: str
    startTime: str
    endTime: Optional[str] = None
    durationSeconds: Optional[int] = None
    model: str
    workingDirectory: str
    gitBranch: Optional[str] = None
    totalTokens: int = 0
    totalCostUsd: float = 0.0
    status: str = "active"  # "active" | "completed" | "failed"
    createdAt: str = ""


class ExecutionRecord(BaseModel):
    id: str
    sessionId: str
    timestamp: str
    toolName: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    durationMs: Optional[int] = None
    inputTokens: int = 0
    outputTokens: int = 0
    costUsd: float = 0.0
    status: str = "pending"  # "success" | "error" | "pending"
    errorMessage: Optional[str] = None


class TokenUsageRecord(BaseModel):
    id: str
    sessionId: str
    executionId: Optional[str] = None
    model: str
    inputTokens: int = 0
    outputTokens: int = 0
    thinkingTokens: int = 0
    cacheReadTokens: int = 0
    cacheWriteTokens: int = 0
    costUsd: float = 0.0
    timestamp: str


class SessionDetail(SessionRecord):
    executions: list[ExecutionRecord] = Field(default_factory=list)
    tokenUsage: list[TokenUsageRecord] = Field(default_factory=list)


# Request bodies sent by assistant hooks.

class SessionCreate(BaseModel):
    model: Literal["opus", "sonnet", "haiku"]
    workingDirectory: str
    gitBranch: Optional[str] = None


class SessionUpdate(BaseModel):
    status: Optional[Literal["active", "completed", "failed"]] = None
    endTime: Optional[str] = None


class ExecutionCreate(BaseModel):
    sessionId: str
    toolName: str
    parameters: Optional[dict[str, Any]] = None


class ExecutionComplete(BaseModel):
    status: Literal["success", "error"]
    durationMs: Optional[int] = None
    errorMessage: Optional[str] = None
    inputTokens: Optional[int] = None
    outputTokens: Optional[int] = None
    thinkingTokens: Optional[int] = None


# ── Stats-cache sync models ─────────────────────────────────────────

class StatsInfo(BaseModel):
    exists: bool
    path: str
    lastUpdated: Optional[str] = None
    totalSessions: Optional[int] = None
    models: list[str] = Field(default_factory=list)


class SyncResult(BaseModel):
    success: bool
    sessionsCreated: int = 0
    tokenRecordsCreated: int = 0
    totalCost: float = 0.0
    error: Optional[str] = None


# ── MCP server models ───────────────────────────────────────────────

class McpServer(BaseModel):
    name: str
    type: Literal["local", "remote"]
    command: Optional[str] = None
    args: Optional[list[str]] = None
    url: Optional[str] = None
    hasEnv: bool = False
    envKeys: list[str] = Field(default_factory=list)
    status: str = "configured"


class McpServerDetail(McpServer):
    envMasked: dict[str, str] = Field(default_factory=dict)


class McpServerList(BaseModel):
    servers: list[McpServer] = Field(default_factory=list)
    configPath: Optional[str] = None
    error: Optional[str] = None


class McpStats(BaseModel):
    total: int = 0
    local: int = 0
    remote: int = 0
    withEnv: int = 0
    configPath: Optional[str] = None
