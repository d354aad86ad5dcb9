"""File watcher — rebuild the export when the project changes.

Monitors content files, templates, route modules, asset sources and the
config file.  Each debounced batch of changes is reduced to a
:class:`ChangeBatch`, which tells the caller whether a few pages can be
rebuilt on their own or the whole site must be rebuilt:

- Content file changed -> rebuild the owning page
- Content added/removed, template, route or config changed -> full rebuild
- Asset source changed -> full rebuild (assets are copied at the end of a run)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change

from staticbuilder.config_loader import CONFIG_FILES

if TYPE_CHECKING:
    from collections.abc import Iterator

    from staticbuilder.config import BuildConfig

type ChangeKind = Literal["created", "modified", "deleted"]
type ChangeCategory = Literal["content", "template", "config", "asset", "route"]


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.
        category: What kind of file changed (determines the rebuild scope).

    """

    path: Path
    kind: ChangeKind
    category: ChangeCategory


@dataclass(frozen=True, slots=True)
class ChangeBatch:
    """Changes reported together after debouncing."""

    events: tuple[ChangeEvent, ...]

    @property
    def needs_full_build(self) -> bool:
        """Anything other than edits to existing content files."""
        return any(
            event.category != "content" or event.kind != "modified"
            for event in self.events
        )

    def content_paths(self) -> list[Path]:
        return [e.path for e in self.events if e.category == "content"]


_CHANGE_KIND_MAP: dict[Change, ChangeKind] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


def categorize_change(path: Path, config: BuildConfig) -> ChangeCategory | None:
    """Determine the category of a changed file based on its location.

    Returns None for files outside every watched location, including
    everything under the output directory.

    """
    if str(path).startswith(config.output_path + "/"):
        return None
    try:
        rel = path.relative_to(config.root)
    except ValueError:
        return None

    parts = rel.parts
    if not parts:
        return None

    if len(parts) == 1 and parts[0] in CONFIG_FILES:
        return "config"

    first_dir = parts[0]
    if first_dir == config.content_dir:
        return "content"
    if first_dir == config.templates_dir:
        return "template"
    if first_dir == config.routes_dir:
        return "route"
    for source in config.assets:
        if rel.as_posix() == source or rel.as_posix().startswith(source.rstrip("/") + "/"):
            return "asset"
    return None


class SiteWatcher:
    """Watches the project root and yields batches of relevant changes.

    Uses watchfiles for efficient filesystem monitoring.  Iteration blocks
    until the next batch arrives; :meth:`stop` ends it from another thread.

    """

    def __init__(self, config: BuildConfig, *, debounce: int = 300) -> None:
        self._config = config
        self._debounce = debounce
        self._stop_event = threading.Event()

    def stop(self) -> None:
        """Signal the watch loop to finish."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def batches(self) -> Iterator[ChangeBatch]:
        """Yield one ChangeBatch per debounced set of relevant changes."""
        from watchfiles import watch

        for raw_changes in watch(
            self._config.root,
            stop_event=self._stop_event,
            debounce=self._debounce,
            step=100,
        ):
            batch = self.categorize(raw_changes)
            if batch is not None:
                yield batch

    def categorize(self, raw_changes: set[tuple[Change, str]]) -> ChangeBatch | None:
        """Turn raw watchfiles changes into a batch; *None* if none matter."""
        events: list[ChangeEvent] = []
        for change_type, path_str in sorted(raw_changes, key=lambda c: c[1]):
            path = Path(path_str)
            category = categorize_change(path, self._config)
            if category is None:
                continue
            kind = _CHANGE_KIND_MAP.get(change_type, "modified")
            events.append(ChangeEvent(path=path, kind=kind, category=category))
        if not events:
            return None
        return ChangeBatch(events=tuple(events))
