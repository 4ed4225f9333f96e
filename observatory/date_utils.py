"""Timestamp helpers shared by the live view and the ledger.

Transcripts stamp lines with ISO-8601 UTC strings (``...Z``); the stats cache
keys days as ``YYYY-MM-DD``. Everything written back out uses millisecond
precision with a ``Z`` suffix so values sort lexically.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _format_datetime_utc(value: datetime) -> str:
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO date or timestamp into an aware UTC datetime."""
    token = (value or "").strip()
    if not token:
        return None
    try:
        parsed = datetime.fromisoformat(token.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_iso_date(value: Any) -> str:
    """Day values stay ``YYYY-MM-DD``; timestamps become UTC ``...Z`` strings.

    Unparseable input yields an empty string.
    """
    if isinstance(value, datetime):
        return _format_datetime_utc(value)
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return ""
    token = value.strip()
    if _DATE_ONLY_RE.match(token):
        return token if parse_iso(token) else ""
    parsed = parse_iso(token)
    return _format_datetime_utc(parsed) if parsed else ""


def iso_to_epoch(value: str | None) -> float:
    """Epoch seconds for an ISO value; 0.0 when it cannot be parsed."""
    parsed = parse_iso(value)
    return parsed.timestamp() if parsed else 0.0


def epoch_to_iso(value: float) -> str:
    return _format_datetime_utc(datetime.fromtimestamp(value, timezone.utc))


def utc_now_iso() -> str:
    return _format_datetime_utc(datetime.now(timezone.utc))
