"""Transcript file discovery across per-project directories."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, NamedTuple

logger = logging.getLogger("observatory.parsers")

NamePredicate = Callable[[str], bool]


class RecentFile(NamedTuple):
    path: Path
    mtime: float


def is_transcript_file(name: str) -> bool:
    return name.endswith(".jsonl")


def is_agent_file(name: str) -> bool:
    return name.startswith("agent-") and name.endswith(".jsonl")


def find_containers(root: Path) -> list[Path]:
    """Return the immediate sub-directories of ``root``.

    A missing or unreadable root yields an empty list.
    """
    if not root.exists():
        return []
    try:
        return sorted(entry for entry in root.iterdir() if entry.is_dir())
    except OSError as e:
        logger.debug(f"Cannot list {root}: {e}")
        return []


def _scan_container(container: Path, predicate: NamePredicate, cutoff: float) -> list[RecentFile]:
    found: list[RecentFile] = []
    for entry in container.iterdir():
        if not predicate(entry.name):
            continue
        try:
            stats = entry.stat()
        except FileNotFoundError:
            # Removed between listing and stat.
            continue
        if stats.st_mtime > cutoff:
            found.append(RecentFile(entry, stats.st_mtime))
    return found


def find_recent_files(
    root: Path,
    predicate: NamePredicate,
    within_minutes: int,
    now: float | None = None,
) -> list[RecentFile]:
    """Files under every container of ``root`` modified within the window.

    Results from all containers are merged and sorted newest-first. A
    container that cannot be read contributes nothing.
    """
    current = time.time() if now is None else now
    cutoff = current - within_minutes * 60

    recent: list[RecentFile] = []
    for container in find_containers(root):
        try:
            recent.extend(_scan_container(container, predicate, cutoff))
        except OSError as e:
            logger.debug(f"Skipping inaccessible directory {container}: {e}")
            continue

    recent.sort(key=lambda item: item.mtime, reverse=True)
    return recent
