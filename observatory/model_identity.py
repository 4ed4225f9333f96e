"""Model identity helpers for session display and cost bucketing."""
from __future__ import annotations

_MODEL_FAMILIES = ("opus", "sonnet", "haiku")


def normalize_model_name(raw_model: str | None) -> str:
    """Collapse a raw model id to its family name.

    Example:
      claude-opus-4-5-20251101 -> opus

    Identifiers without a known family pass through unchanged, so new models
    land in their own bucket.
    """
    raw = (raw_model or "").strip()
    if not raw:
        return "unknown"
    lowered = raw.lower()
    for family in _MODEL_FAMILIES:
        if family in lowered:
            return family
    return raw
