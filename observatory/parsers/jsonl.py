"""Line-oriented JSONL reading.

Transcripts are appended to by a live writer, so a read can land in the middle
of a partially-written line. Such lines are skipped for that read rather than
failing the scan.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger("observatory.parsers")


def read_lines(path: Path) -> list[str]:
    """Return the non-empty lines of a file.

    Raises FileNotFoundError for a missing path; callers decide whether that
    matters.
    """
    content = path.read_text(encoding="utf-8")
    return [line for line in content.splitlines() if line.strip()]


def parse_line(line: str) -> dict[str, Any] | None:
    """Decode one JSONL record, or None when the line is not a JSON object."""
    try:
        record = json.loads(line)
    except (json.JSONDecodeError, TypeError):
        return None
    return record if isinstance(record, dict) else None


def parse_lines(lines: list[str]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    skipped = 0
    for line in lines:
        record = parse_line(line)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.debug(f"Skipped {skipped} malformed JSONL line(s)")
    return records


def read_records(path: Path) -> list[dict[str, Any]]:
    return parse_lines(read_lines(path))
