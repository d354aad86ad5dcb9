"""Observers used by the command line — progress lines, counts and JSON export."""

from __future__ import annotations

import json
import sys
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from staticbuilder.observability.events import BuildItem


def nice_size(size: int) -> str:
    """Format a byte count for humans: ``512 B``, ``1.5 kB``, ``2 MB``."""
    value = float(size)
    for unit in ("B", "kB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            if unit == "B":
                return f"{int(value)} {unit}"
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    return f"{size} B"


def format_item(item: BuildItem) -> str:
    """One report line: ``[status] type - source (size, N files)``."""
    status = item.status or "n/a"
    line = f"[{status}] {item.type} - {item.source}"
    if isinstance(item.size, int):
        extra = ""
        if item.files is not None:
            count = item.files if isinstance(item.files, int) else len(item.files)
            extra = f", {count} files"
        line += f" ({nice_size(item.size)}{extra})"
    return line


class ItemPrinter:
    """Prints one line per item as it is built."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream

    def on_item(self, item: BuildItem) -> None:
        print(format_item(item), file=self._stream or sys.stdout)


class StatusCounter:
    """Counts items per status.

    Args:
        initial: Statuses reported even when no item reaches them.

    """

    def __init__(self, initial: tuple[str, ...] = ()) -> None:
        self.counts: dict[str, int] = dict.fromkeys(initial, 0)

    def on_item(self, item: BuildItem) -> None:
        status = item.status or "n/a"
        self.counts[status] = self.counts.get(status, 0) + 1

    def line(self) -> str:
        return ", ".join(f"{status}: {count}" for status, count in self.counts.items())


class JsonCollector:
    """Collects items for a final JSON dump."""

    def __init__(self) -> None:
        self.items: list[dict[str, Any]] = []

    def on_item(self, item: BuildItem) -> None:
        self.items.append(item.to_dict())

    def dumps(self) -> str:
        return json.dumps(self.items, indent=4)
