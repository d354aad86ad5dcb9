"""Build records — one BuildItem per page, route, asset or redirect map.

BuildItems are frozen dataclasses: the builder produces a new record with
``merge()`` for every change of status instead of mutating a shared dict,
so a record handed to an observer never changes afterwards.

Thread Safety:
    All records are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass, field, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from staticbuilder._types import ItemStatus, ItemType


@dataclass(frozen=True, slots=True)
class BuildItem:
    """Outcome of building (or inspecting) a single artifact.

    Attributes:
        type: Kind of artifact (page, route, redirect, asset, dir, file,
            redirects-map).
        status: Classification; empty until the builder decides.
        source: Origin: content file, route pattern, or asset path.
        dest: Output path relative to the output root (absolute when the
            path falls outside of it).
        uri: Logical URI being processed.
        size: Byte length of the written or existing output.
        reason: Why the item was ignored or is invalid.
        title: Page title (pages only).
        files: Attached files: a count in report mode, the copied
            destinations in write mode (pages only).
        redirect: Redirect target (redirect routes only).

    """

    type: ItemType
    status: ItemStatus = ""
    source: str = ""
    dest: str | None = None
    uri: str = ""
    size: int | None = None
    reason: str = ""
    title: str | None = None
    files: tuple[str, ...] | int | None = None
    redirect: str | None = None

    def merge(self, **changes: Any) -> BuildItem:
        """Return a copy with *changes* applied."""
        if not changes:
            return self
        if isinstance(changes.get("files"), list):
            changes["files"] = tuple(changes["files"])
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for JSON export."""
        data = asdict(self)
        if isinstance(self.files, tuple):
            data["files"] = list(self.files)
        return data


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Every item produced by one ``Builder.run`` call.

    Attributes:
        items: Build items in the order they were logged.
        last_modified: Newest content modification time seen in the run.

    """

    items: tuple[BuildItem, ...] = ()
    last_modified: float | None = None
    _counts: Counter[str] = field(default_factory=Counter, compare=False, repr=False)

    def __post_init__(self) -> None:
        self._counts.update(item.status for item in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[BuildItem]:
        return iter(self.items)

    def count(self, status: str) -> int:
        """Number of items with *status*."""
        return self._counts.get(status, 0)

    def stats(self) -> dict[str, int]:
        """Item counts keyed by status, in first-seen order."""
        return dict(self._counts)

    @property
    def has_missing(self) -> bool:
        return self.count("missing") > 0

    def of_type(self, *types: str) -> list[BuildItem]:
        return [item for item in self.items if item.type in types]

    def to_json(self) -> str:
        return json.dumps([item.to_dict() for item in self.items], indent=4)
