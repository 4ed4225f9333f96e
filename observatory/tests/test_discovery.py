import os
import tempfile
import time
import unittest
from pathlib import Path
from unittest.mock import patch

from observatory.parsers import discovery
from observatory.parsers.discovery import (
    find_containers,
    find_recent_files,
    is_agent_file,
    is_transcript_file,
)


class DiscoveryTests(unittest.TestCase):
    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.root = Path(tmpdir.name)
        self.now = time.time()

    def _touch(self, relative_path: str, age_minutes: float) -> Path:
        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{}\n", encoding="utf-8")
        mtime = self.now - age_minutes * 60
        os.utime(path, (mtime, mtime))
        return path

    def test_name_predicates(self) -> None:
        self.assertTrue(is_transcript_file("abc.jsonl"))
        self.assertFalse(is_transcript_file("abc.json"))
        self.assertTrue(is_agent_file("agent-1234.jsonl"))
        self.assertFalse(is_agent_file("session-agent-1234.jsonl"))
        self.assertFalse(is_agent_file("agent-1234.txt"))

    def test_missing_root_yields_no_containers(self) -> None:
        self.assertEqual(find_containers(self.root / "missing"), [])
        self.assertEqual(find_recent_files(self.root / "missing", is_transcript_file, 60), [])

    def test_containers_are_directories_only(self) -> None:
        (self.root / "proj-a").mkdir()
        (self.root / "proj-b").mkdir()
        (self.root / "stray.jsonl").write_text("", encoding="utf-8")
        self.assertEqual(
            [path.name for path in find_containers(self.root)],
            ["proj-a", "proj-b"],
        )

    def test_recent_files_are_windowed_and_newest_first(self) -> None:
        self._touch("proj-a/old.jsonl", 90)
        self._touch("proj-a/mid.jsonl", 20)
        self._touch("proj-b/new.jsonl", 1)
        self._touch("proj-b/notes.txt", 1)

        recent = find_recent_files(self.root, is_transcript_file, 60, now=self.now)

        self.assertEqual([item.path.name for item in recent], ["new.jsonl", "mid.jsonl"])
        self.assertGreater(recent[0].mtime, recent[1].mtime)

    def test_files_directly_under_root_are_ignored(self) -> None:
        self._touch("top.jsonl", 1)
        self.assertEqual(find_recent_files(self.root, is_transcript_file, 60, now=self.now), [])

    def test_inaccessible_container_is_skipped(self) -> None:
        self._touch("locked/secret.jsonl", 1)
        self._touch("open/visible.jsonl", 1)
        real_scan = discovery._scan_container

        def _scan(container, predicate, cutoff):
            if container.name == "locked":
                raise PermissionError(13, "Permission denied", str(container))
            return real_scan(container, predicate, cutoff)

        with patch.object(discovery, "_scan_container", side_effect=_scan):
            recent = find_recent_files(self.root, is_transcript_file, 60, now=self.now)

        self.assertEqual([item.path.name for item in recent], ["visible.jsonl"])
