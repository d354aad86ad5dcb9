"""Staleness tracking — compare existing output against source content.

Used in report mode (``list``) to tell which outputs a build would change:

- ``missing``: the destination does not exist
- ``outdated``: the destination is older than its source
- ``uptodate``: the destination is at least as new as its source

The tracker also keeps the newest source modification time seen during a
run.  Items without a single backing file (routes, redirect maps) are judged
against that running maximum, so evaluation order matters: pages first,
then routes, then redirect maps, then assets.

Thread Safety:
    The running maximum is updated under a lock.

"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from staticbuilder._types import ItemStatus


class StalenessTracker:
    """Classifies outputs and tracks the run's newest modification time."""

    __slots__ = ("_latest", "_lock")

    def __init__(self) -> None:
        self._latest: float | None = None
        self._lock = threading.Lock()

    @property
    def latest(self) -> float | None:
        """Newest source modification time observed since the last reset."""
        with self._lock:
            return self._latest

    def reset(self) -> None:
        with self._lock:
            self._latest = None

    def observe(self, mtime: float | None) -> float | None:
        """Fold *mtime* into the running maximum and return the maximum."""
        with self._lock:
            if mtime is not None and (self._latest is None or mtime > self._latest):
                self._latest = mtime
            return self._latest

    def classify(self, path: str | Path, source_mtime: float | None) -> tuple[ItemStatus, int | None]:
        """Return ``(status, size)`` for the output at *path*.

        *source_mtime* is folded into the running maximum first.

        """
        self.observe(source_mtime)
        target = Path(path)
        if not target.is_file():
            return "missing", None
        stat = target.stat()
        outdated = source_mtime is not None and stat.st_mtime < source_mtime
        return ("outdated" if outdated else "uptodate"), stat.st_size

    def classify_tree(self, source: Path, target: Path) -> tuple[ItemStatus, int | None]:
        """Return ``(status, size)`` for a copied directory.

        The copy is ``missing`` if *target* does not exist, ``outdated`` if
        any source file lacks a copy or is newer than it, ``uptodate``
        otherwise.  Size is the total of the existing copies.

        """
        if not target.is_dir():
            return "missing", None
        status: ItemStatus = "uptodate"
        size = 0
        for src_file in sorted(source.rglob("*")):
            if not src_file.is_file():
                continue
            dest_file = target / src_file.relative_to(source)
            if not dest_file.is_file():
                status = "outdated"
                continue
            dest_stat = dest_file.stat()
            size += dest_stat.st_size
            if dest_stat.st_mtime < src_file.stat().st_mtime:
                status = "outdated"
        return status, size
