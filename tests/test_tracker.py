"""Tests for the file tracker and the share filesystem access."""

from __future__ import annotations

import os
import time

import pytest

from prodline_collector.agent import share as share_module
from prodline_collector.agent.share import LineShare
from prodline_collector.agent.tracker import FileTracker
from prodline_collector.ingestion.file_reader import describe_source
from tests.conftest import SAMPLE_ROWS, write_source

BASE_MTIME = time.time() - 3600


@pytest.fixture
def share(share_root):
    s = LineShare(str(share_root))
    s.ensure_archive()
    return s


class TestLineShare:
    def test_lists_only_top_level_txt(self, share, share_root):
        write_source(share_root, "2025-11-30.txt", [])
        write_source(share_root, "b.txt", [])
        (share_root / "notes.csv").write_text("x")
        write_source(share.archive_root, "old.txt", [])

        names = [s.file_name for s in share.list_sources()]
        assert names == ["2025-11-30.txt", "b.txt"]

    def test_file_removed_while_listing_is_left_out(self, share, share_root, monkeypatch):
        write_source(share_root, "2025-11-29.txt", [])
        write_source(share_root, "2025-11-30.txt", [])

        def stat_after_delete(path):
            if path.endswith("2025-11-29.txt"):
                os.remove(path)
            return describe_source(path)

        monkeypatch.setattr(share_module, "describe_source", stat_after_delete)
        assert [s.file_name for s in share.list_sources()] == ["2025-11-30.txt"]

    def test_unreachable(self, tmp_path):
        assert not LineShare(str(tmp_path / "missing")).is_reachable()

    def test_archive_folder_name(self, share_root):
        assert LineShare(str(share_root)).archive_root == share_root / "Processed"
        assert LineShare(str(share_root), "archive").archive_root == share_root / "archive"


def archive_now(share, path):
    """Describe, read and archive ``path`` as the poller would."""
    source = describe_source(str(path))
    archive = share.archive_path_for(source)
    FileTracker().archive(source, archive, share.read_content(source))
    return source, archive


class TestFileTracker:
    def test_new_file_processed(self, share, share_root):
        source = describe_source(str(write_source(share_root, "a.txt", [SAMPLE_ROWS["full"]])))
        assert FileTracker().should_process(source, share.archive_path_for(source))

    def test_archived_unchanged_skipped(self, share, share_root):
        p = write_source(share_root, "a.txt", [], mtime=BASE_MTIME)
        source, archive = archive_now(share, p)
        assert not FileTracker().should_process(source, archive)

    def test_within_tolerance_skipped(self, share, share_root):
        p = write_source(share_root, "a.txt", [], mtime=BASE_MTIME)
        _, archive = archive_now(share, p)

        os.utime(p, (BASE_MTIME + 0.8, BASE_MTIME + 0.8))
        assert not FileTracker().should_process(describe_source(str(p)), archive)

    def test_newer_source_reprocessed(self, share, share_root):
        p = write_source(share_root, "a.txt", [], mtime=BASE_MTIME)
        _, archive = archive_now(share, p)

        os.utime(p, (BASE_MTIME + 5, BASE_MTIME + 5))
        assert FileTracker().should_process(describe_source(str(p)), archive)

    def test_archive_copies_bytes_and_mtime(self, share, share_root):
        p = write_source(share_root, "a.txt", [SAMPLE_ROWS["full"]], mtime=BASE_MTIME)
        _, archive = archive_now(share, p)

        assert archive.read_bytes() == p.read_bytes()
        assert abs(os.stat(archive).st_mtime - BASE_MTIME) < 0.01
        assert p.exists()

    def test_archive_keeps_what_was_read_not_later_appends(self, share, share_root):
        p = write_source(share_root, "a.txt", [SAMPLE_ROWS["full"]], mtime=BASE_MTIME)
        source = describe_source(str(p))
        content = share.read_content(source)

        write_source(share_root, "a.txt", [SAMPLE_ROWS["full"], SAMPLE_ROWS["full_next"]], mtime=BASE_MTIME + 30)
        archive = share.archive_path_for(source)
        FileTracker().archive(source, archive, content)

        assert archive.read_bytes() == content
        assert abs(os.stat(archive).st_mtime - BASE_MTIME) < 0.01
        assert FileTracker().should_process(describe_source(str(p)), archive)

    def test_archive_overwrites_previous_copy(self, share, share_root):
        p = write_source(share_root, "a.txt", [SAMPLE_ROWS["full"]], mtime=BASE_MTIME)
        archive_now(share, p)

        write_source(share_root, "a.txt", [SAMPLE_ROWS["full"], SAMPLE_ROWS["full_next"]], mtime=BASE_MTIME + 60)
        _, archive = archive_now(share, p)
        assert archive.read_bytes() == p.read_bytes()
        assert abs(os.stat(archive).st_mtime - (BASE_MTIME + 60)) < 0.01

    def test_failed_write_keeps_old_archive(self, share, share_root, monkeypatch):
        p = write_source(share_root, "a.txt", [SAMPLE_ROWS["full"]], mtime=BASE_MTIME)
        _, archive = archive_now(share, p)
        before = archive.read_bytes()

        write_source(share_root, "a.txt", [SAMPLE_ROWS["full_next"]], mtime=BASE_MTIME + 60)

        def broken_replace(src, dst):
            raise OSError("network name no longer available")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(OSError):
            archive_now(share, p)

        assert archive.read_bytes() == before
        assert abs(os.stat(archive).st_mtime - BASE_MTIME) < 0.01
        assert sorted(f.name for f in share.archive_root.iterdir()) == ["a.txt"]
