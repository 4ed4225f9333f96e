"""Turn transcript lines into live-feed events."""
from __future__ import annotations

from typing import Any, Iterable

from observatory.models import ParsedEvent
from observatory.parsers.records import (
    TextBlock,
    ThinkingBlock,
    ToolUseBlock,
    TranscriptLine,
    decode_line,
)

TOOL_RESULT_MAX_CHARS = 500


def _base_fields(line: TranscriptLine) -> dict[str, Any]:
    return {
        "sessionId": line.session_id,
        "timestamp": line.timestamp,
        "model": line.model,
        "isAgent": line.is_agent,
        "agentId": line.agent_id,
    }


def _usage_fields(line: TranscriptLine) -> dict[str, Any]:
    usage = line.message.usage if line.message else None
    if usage is None:
        return {}
    return {
        "inputTokens": usage.input_tokens,
        "outputTokens": usage.output_tokens,
        "cacheRead": usage.cache_read,
        "cacheWrite": usage.cache_write,
    }


def _assistant_events(line: TranscriptLine) -> list[ParsedEvent]:
    message = line.message
    if message is None or not isinstance(message.content, list):
        return []

    base = _base_fields(line)
    events: list[ParsedEvent] = []
    for block in message.content:
        if isinstance(block, ThinkingBlock):
            if block.thinking:
                events.append(ParsedEvent(
                    **base,
                    id=f"{line.id}-thinking",
                    type="thinking",
                    thinking=block.thinking,
                ))
        elif isinstance(block, TextBlock):
            if block.text:
                events.append(ParsedEvent(
                    **base,
                    **_usage_fields(line),
                    id=f"{line.id}-text",
                    type="response",
                    text=block.text,
                ))
        elif isinstance(block, ToolUseBlock):
            if block.name:
                events.append(ParsedEvent(
                    **base,
                    id=block.id or f"{line.id}-tool",
                    type="tool_call",
                    toolName=block.name,
                    toolInput=block.input,
                ))
    return events


def _tool_result_event(line: TranscriptLine) -> ParsedEvent:
    result = line.tool_use_result
    content = result.file_content if result else None
    return ParsedEvent(
        **_base_fields(line),
        id=f"{line.id}-result",
        type="tool_result",
        filePath=result.file_path if result else None,
        toolResult=content[:TOOL_RESULT_MAX_CHARS] if content is not None else None,
    )


def extract_events(line: TranscriptLine) -> list[ParsedEvent]:
    """Events for one transcript line, in content-block order.

    Only assistant lines with block content and user lines carrying a tool
    result produce events; plain chat text does not.
    """
    if line.kind == "assistant":
        return _assistant_events(line)
    if line.kind == "user" and line.tool_use_result is not None:
        return [_tool_result_event(line)]
    return []


def extract_events_from_records(records: Iterable[dict]) -> list[ParsedEvent]:
    events: list[ParsedEvent] = []
    for record in records:
        line = decode_line(record)
        if line is not None:
            events.extend(extract_events(line))
    return events
