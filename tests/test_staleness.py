"""Tests for staticbuilder.export.staleness — output freshness classification."""

from __future__ import annotations

import os
import threading
from pathlib import Path

from staticbuilder.export.staleness import StalenessTracker


def _touch(path: Path, mtime: float, text: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    os.utime(path, (mtime, mtime))
    return path


class TestClassify:
    """classify — missing / outdated / uptodate."""

    def test_missing(self, tmp_path: Path) -> None:
        tracker = StalenessTracker()
        assert tracker.classify(tmp_path / "nope.html", 100.0) == ("missing", None)

    def test_outdated(self, tmp_path: Path) -> None:
        target = _touch(tmp_path / "index.html", 100.0, "hello")
        assert StalenessTracker().classify(target, 200.0) == ("outdated", 5)

    def test_uptodate_newer(self, tmp_path: Path) -> None:
        target = _touch(tmp_path / "index.html", 300.0)
        assert StalenessTracker().classify(target, 200.0) == ("uptodate", 1)

    def test_uptodate_same_time(self, tmp_path: Path) -> None:
        target = _touch(tmp_path / "index.html", 200.0)
        assert StalenessTracker().classify(target, 200.0)[0] == "uptodate"

    def test_no_source_time(self, tmp_path: Path) -> None:
        target = _touch(tmp_path / "index.html", 200.0)
        assert StalenessTracker().classify(target, None)[0] == "uptodate"

    def test_accepts_string_paths(self, tmp_path: Path) -> None:
        target = _touch(tmp_path / "index.html", 300.0)
        assert StalenessTracker().classify(str(target), 200.0)[0] == "uptodate"


class TestRunningMaximum:
    def test_latest_tracks_maximum(self, tmp_path: Path) -> None:
        tracker = StalenessTracker()
        assert tracker.latest is None
        tracker.classify(tmp_path / "a", 100.0)
        tracker.classify(tmp_path / "b", 300.0)
        tracker.classify(tmp_path / "c", 200.0)
        tracker.observe(None)
        assert tracker.latest == 300.0

    def test_reset(self) -> None:
        tracker = StalenessTracker()
        tracker.observe(5.0)
        tracker.reset()
        assert tracker.latest is None

    def test_concurrent_observe(self) -> None:
        tracker = StalenessTracker()

        def worker(offset: int) -> None:
            for i in range(500):
                tracker.observe(float(offset * 1000 + i))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert tracker.latest == 7499.0


class TestClassifyTree:
    """classify_tree — copied directories."""

    def test_missing_directory(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        src.mkdir()
        assert StalenessTracker().classify_tree(src, tmp_path / "dst") == ("missing", None)

    def test_uptodate(self, tmp_path: Path) -> None:
        _touch(tmp_path / "src" / "a.css", 100.0, "aa")
        _touch(tmp_path / "src" / "sub" / "b.js", 100.0, "bbb")
        _touch(tmp_path / "dst" / "a.css", 200.0, "aa")
        _touch(tmp_path / "dst" / "sub" / "b.js", 200.0, "bbb")
        result = StalenessTracker().classify_tree(tmp_path / "src", tmp_path / "dst")
        assert result == ("uptodate", 5)

    def test_newer_source_file(self, tmp_path: Path) -> None:
        _touch(tmp_path / "src" / "a.css", 300.0)
        _touch(tmp_path / "dst" / "a.css", 200.0)
        status, _size = StalenessTracker().classify_tree(tmp_path / "src", tmp_path / "dst")
        assert status == "outdated"

    def test_file_without_copy(self, tmp_path: Path) -> None:
        _touch(tmp_path / "src" / "a.css", 100.0)
        _touch(tmp_path / "src" / "new.css", 100.0)
        _touch(tmp_path / "dst" / "a.css", 200.0)
        status, _size = StalenessTracker().classify_tree(tmp_path / "src", tmp_path / "dst")
        assert status == "outdated"
