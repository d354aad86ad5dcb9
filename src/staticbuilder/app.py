"""Staticbuilder application — config, content tree and builder wired together.

The three public functions (build, list_items, watch) are the primary entry
points; the command line is a thin layer over them.
"""

from __future__ import annotations

import sys
import time
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from staticbuilder._errors import ConfigError, StaticBuilderError
from staticbuilder.config_loader import load_config
from staticbuilder.content.tree import FileSite
from staticbuilder.export.builder import Builder
from staticbuilder.observability.events import RunSummary

if TYPE_CHECKING:
    from collections.abc import Callable

    from staticbuilder.config import BuildConfig
    from staticbuilder.content.models import Page
    from staticbuilder.observability.events import BuildItem
    from staticbuilder.observability.log import Observer

type ObserverLike = Observer | Callable[[BuildItem], Any]


def load_site(config: BuildConfig) -> FileSite:
    """Load the content tree, templates and route modules for *config*.

    Raises:
        ContentError: If the content directory is missing or malformed.
        ConfigError: If a route module is invalid.

    """
    return FileSite.from_config(config)


def resolve_targets(site: FileSite, pages: Iterable[str]) -> list[Page] | None:
    """Look up page ids; *None* (the whole site) when no ids are given.

    Raises:
        ConfigError: If a page id does not exist.

    """
    ids = [p for p in pages if p]
    if not ids:
        return None
    targets: list[Page] = []
    for page_id in ids:
        page = site.find(page_id)
        if page is None:
            msg = f"Page not found: {page_id!r}"
            raise ConfigError(msg)
        targets.append(page)
    return targets


def run(
    root: str | Path = ".",
    pages: Iterable[str] = (),
    *,
    write: bool,
    observers: Iterable[ObserverLike] = (),
    config_file: Path | bool | None = None,
    banner: bool = False,
    **kwargs: Any,
) -> RunSummary:
    """Build or list *pages* (default: the whole site) under *root*.

    Each requested page is one builder run; routes, redirect maps and assets
    are processed on every run, and the summaries are concatenated.

    Args:
        root: Project root.
        pages: Page ids to restrict the run to.
        write: Write files (``build``) or only report (``list``).
        observers: Called with every item as it is logged.
        config_file: See :func:`~staticbuilder.config_loader.load_config`.
        banner: Print the header to stderr.
        **kwargs: Override BuildConfig fields.

    """
    config = load_config(Path(root), config_file=config_file, **kwargs)
    t0 = time.perf_counter()
    site = load_site(config)
    targets = resolve_targets(site, pages)

    if banner:
        from staticbuilder.banner import print_banner

        print_banner(
            config,
            len(site.index()),
            "build" if write else "list",
            route_count=len(site.routes),
            load_ms=(time.perf_counter() - t0) * 1000,
        )

    builder = Builder(site, config)
    for observer in observers:
        builder.on_log(observer)

    if targets is None:
        return builder.run(site, write=write)

    items: list[BuildItem] = []
    last_modified: float | None = None
    for target in targets:
        summary = builder.run(target, write=write)
        items.extend(summary.items)
        if summary.last_modified is not None:
            last_modified = max(last_modified or 0.0, summary.last_modified)
    return RunSummary(items=tuple(items), last_modified=last_modified)


def build(root: str | Path = ".", pages: Iterable[str] = (), **kwargs: Any) -> RunSummary:
    """Export the site (or *pages*) as static files.

    Args:
        root: Path to the project root.
        pages: Page ids to build instead of the whole site.
        **kwargs: Forwarded to :func:`run` (observers, config_file, and
            BuildConfig overrides).

    """
    return run(root, pages, write=True, **kwargs)


def list_items(root: str | Path = ".", pages: Iterable[str] = (), **kwargs: Any) -> RunSummary:
    """Report what a build would do without writing anything."""
    return run(root, pages, write=False, **kwargs)


def watch(
    root: str | Path = ".",
    *,
    observers: Iterable[ObserverLike] = (),
    config_file: Path | bool | None = None,
    banner: bool = False,
    **kwargs: Any,
) -> None:
    """Build the site, then rebuild on every relevant change until interrupted.

    Edits to existing content files rebuild only the owning pages; any other
    change (templates, routes, config, assets, added or removed content)
    reloads the project and rebuilds the whole site.  Errors raised by a
    rebuild are printed and watching continues.

    """
    from staticbuilder.content.watcher import SiteWatcher

    observers = tuple(observers)
    config = load_config(Path(root), config_file=config_file, **kwargs)
    site = load_site(config)

    if banner:
        from staticbuilder.banner import print_banner

        print_banner(config, len(site.index()), "watch", route_count=len(site.routes))

    def full_build() -> tuple[BuildConfig, FileSite]:
        fresh_config = load_config(Path(root), config_file=config_file, **kwargs)
        fresh_site = load_site(fresh_config)
        builder = Builder(fresh_site, fresh_config)
        for observer in observers:
            builder.on_log(observer)
        builder.run(fresh_site, write=True)
        return fresh_config, fresh_site

    try:
        config, site = full_build()
    except StaticBuilderError as exc:
        print(f"  Build error: {exc}", file=sys.stderr)

    watcher = SiteWatcher(config)
    try:
        for batch in watcher.batches():
            try:
                if batch.needs_full_build:
                    config, site = full_build()
                    continue

                site = load_site(config)
                builder = Builder(site, config)
                for observer in observers:
                    builder.on_log(observer)
                changed = {
                    page.uri: page
                    for path in batch.content_paths()
                    if (page := site.page_for_path(path)) is not None
                }
                if changed:
                    builder.run(list(changed.values()), write=True)
            except StaticBuilderError as exc:
                print(f"  Rebuild error: {exc}", file=sys.stderr)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
