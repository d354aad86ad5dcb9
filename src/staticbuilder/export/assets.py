"""Asset handling — copy configured files and folders into the output.

Each configured ``source -> destination`` entry is one asset.  Sources may be
absolute or relative to the project root; destinations are always relative to
the output root and must stay inside it.  Copying runs after pages and routes
so that files generated while rendering (thumbnails, etc.) are picked up.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from staticbuilder.observability.events import BuildItem
from staticbuilder.paths import is_absolute_path, normalize_path

if TYPE_CHECKING:
    from staticbuilder.export.staleness import StalenessTracker
    from staticbuilder.paths import OutputGuard

# Never copied from asset folders
_SKIPPED = shutil.ignore_patterns("__pycache__", ".DS_Store", ".git")


def resolve_source(source: str, root: str) -> str:
    """Absolute, normalized path for an asset *source*."""
    if is_absolute_path(source):
        return source
    return normalize_path(root + "/" + source)


def copy_asset(
    source: str,
    dest: str,
    *,
    root: str,
    guard: OutputGuard,
    tracker: StalenessTracker,
    write: bool = False,
) -> BuildItem:
    """Copy (or, in report mode, inspect) one asset file or folder.

    Args:
        source: Source path as configured (kept verbatim in the report).
        dest: Destination relative to the output root.
        root: Project root for relative sources.
        guard: Containment guard for the output root.
        tracker: Staleness tracker used in report mode.
        write: Copy files instead of reporting on existing copies.

    Returns:
        The BuildItem describing the outcome; the caller logs it.

    """
    item = BuildItem(type="asset", source=source, dest="", uri=source)

    source_path = resolve_source(source, root)
    target = normalize_path(guard.root + "/" + dest)
    if not guard.filter_path(target):
        return item.merge(
            status="ignore",
            reason="Cannot copy asset outside of the static folder",
        )
    item = item.merge(dest=guard.display(target))

    src = Path(source_path)
    dst = Path(target)
    if src.is_dir():
        item = item.merge(type="dir")
    elif src.is_file():
        item = item.merge(type="file")
    else:
        return item.merge(status="ignore", reason="Source file or folder not found")

    if not write:
        if item.type == "dir":
            status, size = tracker.classify_tree(src, dst)
        else:
            status, size = tracker.classify(dst, src.stat().st_mtime)
        return item.merge(status=status, size=size)

    try:
        if item.type == "dir":
            shutil.copytree(src, dst, ignore=_SKIPPED, dirs_exist_ok=True)
            size = sum(f.stat().st_size for f in dst.rglob("*") if f.is_file())
        else:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
            size = dst.stat().st_size
    except OSError as exc:
        return item.merge(status="failed", reason=str(exc))

    return item.merge(status="generated", size=size)
