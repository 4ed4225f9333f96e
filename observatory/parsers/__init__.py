"""Transcript parsing: reading, discovery, record decoding, events, summaries."""

from observatory.parsers.discovery import (
    RecentFile,
    find_containers,
    find_recent_files,
    is_agent_file,
    is_transcript_file,
)
from observatory.parsers.events import extract_events, extract_events_from_records
from observatory.parsers.jsonl import parse_line, read_lines, read_records
from observatory.parsers.records import TranscriptLine, decode_line, decode_lines
from observatory.parsers.summary import (
    TranscriptSummary,
    format_slug_as_name,
    infer_agent_type,
    infer_status,
    summarize,
)

__all__ = [
    "RecentFile",
    "TranscriptLine",
    "TranscriptSummary",
    "decode_line",
    "decode_lines",
    "extract_events",
    "extract_events_from_records",
    "find_containers",
    "find_recent_files",
    "format_slug_as_name",
    "infer_agent_type",
    "infer_status",
    "is_agent_file",
    "is_transcript_file",
    "parse_line",
    "read_lines",
    "read_records",
    "summarize",
]
