"""Typed view over raw transcript records.

Transcript lines are schema-loose JSON objects. They are decoded into a small
closed set of dataclasses; anything that does not fit a known variant is
dropped rather than passed through untyped.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, Union


# ── Content blocks ─────────────────────────────────────────────────


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ThinkingBlock:
    thinking: str


@dataclass(frozen=True)
class ToolUseBlock:
    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResultBlock:
    tool_use_id: str
    content: Any = ""


ContentBlock = Union[TextBlock, ThinkingBlock, ToolUseBlock, ToolResultBlock]


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _opt_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


def _decode_text(raw: dict) -> TextBlock:
    return TextBlock(text=_str(raw.get("text")))


def _decode_thinking(raw: dict) -> ThinkingBlock:
    return ThinkingBlock(thinking=_str(raw.get("thinking")))


def _decode_tool_use(raw: dict) -> ToolUseBlock:
    tool_input = raw.get("input")
    return ToolUseBlock(
        id=_str(raw.get("id")),
        name=_str(raw.get("name")),
        input=tool_input if isinstance(tool_input, dict) else {},
    )


def _decode_tool_result(raw: dict) -> ToolResultBlock:
    return ToolResultBlock(
        tool_use_id=_str(raw.get("tool_use_id")),
        content=raw.get("content", ""),
    )


_BLOCK_DECODERS: dict[str, Callable[[dict], ContentBlock]] = {
    "text": _decode_text,
    "thinking": _decode_thinking,
    "tool_use": _decode_tool_use,
    "tool_result": _decode_tool_result,
}


def decode_block(raw: Any) -> ContentBlock | None:
    """Decode one content block; unknown block types yield None."""
    if not isinstance(raw, dict):
        return None
    block_type = raw.get("type")
    if not isinstance(block_type, str):
        return None
    decoder = _BLOCK_DECODERS.get(block_type)
    if decoder is None:
        return None
    return decoder(raw)


# ── Messages and lines ─────────────────────────────────────────────


@dataclass(frozen=True)
class Usage:
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    cache_read: Optional[int] = None
    cache_write: Optional[int] = None

    @staticmethod
    def from_dict(raw: Any) -> Optional["Usage"]:
        if not isinstance(raw, dict):
            return None
        return Usage(
            input_tokens=_opt_int(raw.get("input_tokens")),
            output_tokens=_opt_int(raw.get("output_tokens")),
            cache_read=_opt_int(raw.get("cache_read_input_tokens")),
            cache_write=_opt_int(raw.get("cache_creation_input_tokens")),
        )


@dataclass(frozen=True)
class Message:
    role: str
    content: Union[str, list[ContentBlock]]
    model: Optional[str] = None
    usage: Optional[Usage] = None

    @property
    def blocks(self) -> list[ContentBlock]:
        return self.content if isinstance(self.content, list) else []

    @staticmethod
    def from_dict(raw: Any) -> Optional["Message"]:
        if not isinstance(raw, dict):
            return None
        content = raw.get("content")
        decoded: Union[str, list[ContentBlock]]
        if isinstance(content, str):
            decoded = content
        elif isinstance(content, list):
            decoded = [block for block in (decode_block(item) for item in content) if block is not None]
        else:
            decoded = ""
        return Message(
            role=_str(raw.get("role")),
            content=decoded,
            model=_opt_str(raw.get("model")),
            usage=Usage.from_dict(raw.get("usage")),
        )


@dataclass(frozen=True)
class ToolUseResult:
    kind: str = ""
    file_path: Optional[str] = None
    file_content: Optional[str] = None

    @staticmethod
    def from_dict(raw: Any) -> Optional["ToolUseResult"]:
        if raw is None or raw == "" or raw is False:
            return None
        # Some tools report their result as a bare string or list.
        if not isinstance(raw, dict):
            return ToolUseResult(kind="text" if isinstance(raw, str) else "")
        file_info = raw.get("file")
        if not isinstance(file_info, dict):
            file_info = {}
        return ToolUseResult(
            kind=_str(raw.get("type")),
            file_path=_opt_str(file_info.get("filePath")),
            file_content=file_info.get("content") if isinstance(file_info.get("content"), str) else None,
        )


LineKind = Literal["user", "assistant"]


@dataclass(frozen=True)
class TranscriptLine:
    kind: LineKind
    id: str
    timestamp: str
    session_id: str
    parent_id: Optional[str] = None
    agent_id: Optional[str] = None
    is_sidechain: bool = False
    slug: Optional[str] = None
    message: Optional[Message] = None
    tool_use_result: Optional[ToolUseResult] = None

    @property
    def is_agent(self) -> bool:
        return bool(self.agent_id)

    @property
    def model(self) -> Optional[str]:
        return self.message.model if self.message else None


def decode_line(record: Any) -> TranscriptLine | None:
    """Decode a raw JSONL record into a TranscriptLine.

    Records of any other kind (summaries, system notices, snapshots) are
    not part of the conversation and yield None.
    """
    if not isinstance(record, dict):
        return None
    kind = record.get("type")
    if kind not in ("user", "assistant"):
        return None
    return TranscriptLine(
        kind=kind,
        id=_str(record.get("uuid")),
        timestamp=_str(record.get("timestamp")),
        session_id=_str(record.get("sessionId")),
        parent_id=_opt_str(record.get("parentUuid")),
        agent_id=_opt_str(record.get("agentId")),
        is_sidechain=bool(record.get("isSidechain", False)),
        slug=_opt_str(record.get("slug")),
        message=Message.from_dict(record.get("message")),
        tool_use_result=ToolUseResult.from_dict(record.get("toolUseResult")) if "toolUseResult" in record else None,
    )


def decode_lines(records: list[dict]) -> list[TranscriptLine]:
    return [line for line in (decode_line(record) for record in records) if line is not None]


def message_text(message: Optional[Message]) -> str:
    """Plain text of a message: string content, or the first text block."""
    if message is None:
        return ""
    if isinstance(message.content, str):
        return message.content
    for block in message.content:
        if isinstance(block, TextBlock):
            return block.text
    return ""
