"""Static builder — export pages, routes and assets to a plain file tree.

The builder walks the host's content pages (once per language), then the
configured route patterns, then optional redirect maps, then assets.  Each
step produces one :class:`~staticbuilder.observability.events.BuildItem`,
logged through the :class:`~staticbuilder.observability.log.EventLog` as
soon as it is decided.

Two modes:

- **report** (``write=False``): nothing is rendered or written; each item is
  classified as ``missing``, ``outdated`` or ``uptodate`` against the
  existing output.
- **write** (``write=True``): pages and routes are rendered, their internal
  links rewritten, and the results written.  A full-site run empties the
  output directory first.

Every destination is normalized and checked by the
:class:`~staticbuilder.paths.OutputGuard` before anything is written;
destinations outside the output root become ``ignore`` items.
"""

from __future__ import annotations

import os
import shutil
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Any

from staticbuilder._errors import ConfigError, RenderError
from staticbuilder.content.models import URL_PREFIX, Page, RequestContext, Site
from staticbuilder.export.assets import copy_asset
from staticbuilder.export.expander import (
    expand_pattern,
    is_parameterized,
    is_supported,
    parse_pattern,
)
from staticbuilder.export.redirects import REDIRECT_MAPS, redirect_page, render_redirects_map
from staticbuilder.export.staleness import StalenessTracker
from staticbuilder.export.urls import UrlRewriter, has_extension
from staticbuilder.observability.events import BuildItem, RunSummary
from staticbuilder.observability.log import EventLog
from staticbuilder.paths import OutputGuard, normalize_path
from staticbuilder.routes.table import run_route

if TYPE_CHECKING:
    from collections.abc import Callable

    from staticbuilder._types import FilterResult, LanguageCode
    from staticbuilder.config import BuildConfig
    from staticbuilder.observability.log import Observer, ObserverHandle

# Page URLs already ending in one of these are written without the extension
_KNOWN_EXTENSIONS = ("js", "json", "css", "txt", "svg", "xml", "atom", "rss")

_OUTSIDE_REASON = "Output path goes outside of the static directory"


class Builder:
    """Exports a site as static files.

    Args:
        site: Host content system (pages, renderer, route table).
        config: Frozen build configuration.
        event_log: Sink for build items; a fresh one by default.

    Raises:
        ConfigError: If the output directory cannot be created, is not
            writable, or would contain the project root.

    """

    def __init__(
        self,
        site: Site,
        config: BuildConfig,
        *,
        event_log: EventLog | None = None,
    ) -> None:
        output = config.output_path
        root = config.root_path
        if root == output or root.startswith(output + "/"):
            msg = f"Output directory {output} must not contain the project root"
            raise ConfigError(msg)

        output_dir = Path(output)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Output directory {output} cannot be created: {exc}"
            raise ConfigError(msg) from exc
        if not os.access(output_dir, os.W_OK):
            msg = f"Output directory {output} is not writable"
            raise ConfigError(msg)

        self._site = site
        self._config = config
        self._root = root
        self._guard = OutputGuard(output)
        self._rewriter = UrlRewriter(
            config.base_url,
            extension=config.extension,
            ugly_urls=config.ugly_urls,
        )
        self._tracker = StalenessTracker()
        self._log = event_log if event_log is not None else EventLog()
        self._langs: tuple[LanguageCode, ...] = (
            config.languages or site.languages() or (None,)
        )
        self._last_item: str | None = None
        self._run_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def output_dir(self) -> str:
        """Absolute, normalized output root."""
        return self._guard.root

    @property
    def languages(self) -> tuple[LanguageCode, ...]:
        return self._langs

    @property
    def last_item(self) -> str | None:
        """Identifier of the last item the builder started on."""
        return self._last_item

    @property
    def summary(self) -> RunSummary:
        """Items logged so far in the current (or last) run."""
        return RunSummary(items=self._log.items(), last_modified=self._tracker.latest)

    def on_log(self, observer: Observer | Callable[[BuildItem], Any]) -> ObserverHandle:
        """Register an observer called with every item as it is logged."""
        return self._log.on_log(observer)

    def run(
        self,
        content: Site | Page | Iterable[Page] | None = None,
        *,
        write: bool = False,
    ) -> RunSummary:
        """Build (or report on) *content* plus routes, redirect maps and assets.

        Args:
            content: Pages to build; *None* or a site means every page.
            write: Write files instead of reporting on existing output.

        Returns:
            The run's summary.

        Raises:
            RenderError: If the host renderer fails in write mode and
                ``catch_errors`` is enabled.

        """
        with self._run_lock:
            self._log.clear()
            self._tracker.reset()
            self._last_item = None

            full_site = content is None or isinstance(content, Site)
            if write and full_site:
                self._clean_output()

            self._build_pages(self._get_pages(content), write)

            for route in self._config.routes:
                self.build_route(route, write)

            if self._config.with_redirects:
                for line_format, path in REDIRECT_MAPS:
                    self.generate_redirects_map(line_format, path, write)

            # Assets last, so files generated while rendering are ready
            for source, dest in self._config.assets.items():
                self.copy_asset(source, dest, write)

            return self.summary

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def should_build_route(self, uri: str) -> bool:
        """Whether *uri* passes the dynamic-route and exclusion checks."""
        if "(" in uri:
            return False
        for ignored in self._config.exclude_routes:
            if ignored.endswith("*") and uri.startswith(ignored.rstrip("*")):
                return False
            if uri == ignored:
                return False
        return True

    @staticmethod
    def default_filter(page: Page, module_prefix: str = "module.") -> FilterResult:
        """Skip module pages and pages without a content file."""
        if page.template.startswith(module_prefix):
            return False, f'Ignoring module pages (template prefix: "{module_prefix}")'
        if page.content_file() is None:
            return False, "Page has no content file."
        return True

    def _filter_page(self, page: Page) -> tuple[bool, str]:
        predicate = self._config.filter
        if predicate is not None:
            result = predicate(page)
        else:
            result = self.default_filter(page, self._config.module_template_prefix)
        if isinstance(result, (tuple, list)):
            accepted = bool(result[0]) if result else False
            reason = str(result[1]) if len(result) > 1 else "Excluded by filter"
            return accepted, reason
        return bool(result), "Excluded by filter"

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def _get_pages(self, content: Site | Page | Iterable[Page] | None) -> list[Page]:
        if content is None:
            return list(self._site.index())
        if isinstance(content, Site):
            return list(content.index())
        if isinstance(content, Page):
            return [content]
        return list(content)  # type: ignore[arg-type]

    def _build_pages(self, pages: list[Page], write: bool) -> None:
        workers = self._config.workers
        if workers <= 1 or len(pages) < 2:
            for page in pages:
                self.build_page(page, write)
            return

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="staticbuilder") as pool:
            futures = [pool.submit(self.build_page, page, write) for page in pages]
            for future in futures:
                future.result()

    def build_page(self, page: Page, write: bool = False) -> list[BuildItem]:
        """Build every language version of *page*.

        Pages excluded by route rules produce no item; pages rejected by
        the filter produce a single ``ignore`` item.

        """
        if not self.should_build_route(page.uri):
            return []

        accepted, reason = self._filter_page(page)
        if not accepted:
            return [self._log.log(BuildItem(
                type="page", status="ignore", source=page.uri, uri=page.uri, reason=reason,
            ))]

        # Attached files are language-independent: copy them once
        return [
            self.build_page_version(page, lang, write, copy_files=(i == 0))
            for i, lang in enumerate(self._langs)
        ]

    def page_filename(self, url: str) -> str:
        """Output file for a page URL stripped of the placeholder.

        ``""`` (home) -> ``<out>/index.html``; ``feed.rss`` -> ``<out>/feed.rss``;
        ``blog/post`` -> ``<out>/blog/post<extension>``.

        """
        url = url.strip("/")
        if not url:
            target = self._guard.root + "/index.html"
        elif url.rsplit(".", 1)[-1].lower() in _KNOWN_EXTENSIONS and "." in url:
            target = self._guard.root + "/" + url
        else:
            target = self._guard.root + "/" + url + self._config.extension
        return normalize_path(target)

    def build_page_version(
        self,
        page: Page,
        lang: LanguageCode = None,
        write: bool = False,
        *,
        copy_files: bool = True,
    ) -> BuildItem:
        """Build (or report on) one language version of *page*."""
        context = RequestContext(uri=page.uri, language=lang)
        content_file = page.content_file(lang)
        source = self._relative_source(content_file) if content_file else page.uri
        self._last_item = source

        item = BuildItem(
            type="page",
            source=source,
            uri=page.uri,
            title=page.title(lang),
            files=(),
        )

        page_url = page.url(lang)
        url = page_url.replace(URL_PREFIX, "").strip("/")
        if "://" in url or url.startswith(("http:", "https:")):
            return self._log.log(item, {
                "status": "invalid",
                "reason": f"Cannot use {url!r} as basis for page's file name",
            })

        target = self.page_filename(url)
        item = item.merge(dest=self._guard.display(target))
        if not self._guard.filter_path(target):
            return self._log.log(item, {"status": "ignore", "reason": _OUTSIDE_REASON})

        files: list[Path] = []
        with_files = self._config.with_files
        if with_files and copy_files:
            files = list(page.files())
            if callable(with_files):
                files = [f for f in files if with_files(f)]

        if not write:
            status, size = self._tracker.classify(target, page.modified(lang))
            return self._log.log(item, {"status": status, "size": size, "files": len(files)})

        try:
            text = self._site.render(page, context)
        except Exception as exc:
            if not self._config.catch_errors:
                raise
            msg = f"Failed to build page {source!r}: {exc}"
            raise RenderError(msg, last_item=source) from exc

        text = self._rewriter.rewrite(text, page_url)
        item = self._write_file(target, text, item)

        if files:
            item = self._copy_page_files(url, files, item)

        return self._log.log(item)

    def _copy_page_files(self, url: str, files: list[Path], item: BuildItem) -> BuildItem:
        """Copy attached *files* into the directory named after the page URL."""
        directory = normalize_path(self._guard.root + "/" + url)
        copied: list[str] = []
        problems: list[str] = []
        for file in files:
            dest = directory + "/" + file.name
            if not self._guard.filter_path(dest):
                problems.append(f"{file.name}: {_OUTSIDE_REASON}")
                continue
            try:
                Path(directory).mkdir(parents=True, exist_ok=True)
                shutil.copy2(file, dest)
            except OSError as exc:
                problems.append(f"{file.name}: {exc}")
                continue
            copied.append(self._guard.display(dest))

        changes: dict[str, Any] = {"files": tuple(copied)}
        if problems:
            changes["reason"] = "; ".join(problems)
        return item.merge(**changes)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def build_route(self, uri: str, write: bool = False) -> BuildItem | None:
        """Build (or report on) the route *uri*.

        ``*`` expands to every GET pattern of the route table; patterns with
        one ``{param}`` expand through the named page's visible children.

        """
        if not isinstance(uri, str) or not self.should_build_route(uri):
            return None

        self._last_item = uri

        if uri == "*":
            for pattern in self._site.routes.patterns("GET"):
                self.build_route(pattern, write)
            return None

        item = BuildItem(type="route", source=uri, dest=uri, uri=uri)

        if is_parameterized(uri):
            return self._expand_route(uri, item, write)

        target = uri.replace(":", "=")
        if not has_extension(target):
            target = target.rstrip("/") + self._config.extension
        target = normalize_path(self._guard.root + "/" + target)
        item = item.merge(dest=self._guard.display(target))

        if not self._guard.filter_path(target):
            return self._log.log(item, {"status": "ignore", "reason": _OUTSIDE_REASON})

        context = RequestContext(uri=uri.strip("/"))
        match = self._site.routes.match(context.uri, context.method)
        if match is None:
            return self._log.log(item, {"status": "invalid", "reason": "No route matches this URI"})

        if match.redirect:
            item = item.merge(type="redirect", redirect=match.redirect)
            if self._config.with_redirects:
                return self._log.log(item, {"status": "included"})

        if not write:
            status, size = self._tracker.classify(target, self._tracker.latest)
            return self._log.log(item, {"status": status, "size": size})

        try:
            text = run_route(match, context)
        except Exception as exc:
            if not self._config.catch_errors:
                raise
            msg = f"Failed to build route {uri!r}: {exc}"
            raise RenderError(msg, last_item=uri) from exc

        if not text and match.redirect:
            redirect = match.redirect
            if "://" not in redirect:
                redirect = context.url(redirect)
            text = redirect_page(redirect)

        text = self._rewriter.rewrite(text, uri)
        return self._log.log(self._write_file(target, text, item))

    def _expand_route(self, uri: str, item: BuildItem, write: bool) -> BuildItem:
        if not is_supported(uri):
            return self._log.log(item, {
                "status": "ignore",
                "reason": "Unsupported route pattern (only one {param} is allowed)",
            })

        pattern = parse_pattern(uri)
        if pattern is None:
            return self._log.log(item, {"status": "invalid", "reason": "Unsupported route pattern"})

        routes = expand_pattern(pattern, self._site)
        if routes is None:
            return self._log.log(item, {
                "status": "invalid",
                "reason": f"Page {pattern.page_id!r} not found",
            })

        for route in routes:
            self.build_route(route, write)
        return self._log.log(item, {"status": "generated" if write else ""})

    # ------------------------------------------------------------------
    # Redirect maps and assets
    # ------------------------------------------------------------------

    def redirects_map_text(self, line_format: str) -> str:
        """Redirect map for the redirect items logged so far."""
        return render_redirects_map(self._log.items(), line_format)

    def generate_redirects_map(self, line_format: str, path: str, write: bool = False) -> BuildItem:
        """Write (or report on) one redirect map file at the output root."""
        text = self.redirects_map_text(line_format)
        target = normalize_path(self._guard.root + "/" + path)
        item = BuildItem(
            type="redirects-map",
            source=path,
            dest=self._guard.display(target),
            uri=path,
        )
        if not self._guard.filter_path(target):
            return self._log.log(item, {"status": "ignore", "reason": _OUTSIDE_REASON})

        if write:
            return self._log.log(self._write_file(target, text, item))
        status, size = self._tracker.classify(target, self._tracker.latest)
        return self._log.log(item, {"status": status, "size": size})

    def copy_asset(self, source: str, dest: str, write: bool = False) -> BuildItem | None:
        """Copy (or report on) one configured asset."""
        if not isinstance(source, str) or not isinstance(dest, str):
            return None
        self._last_item = source
        return self._log.log(copy_asset(
            source,
            dest,
            root=self._root,
            guard=self._guard,
            tracker=self._tracker,
            write=write,
        ))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _relative_source(self, path: Path) -> str:
        source = normalize_path(str(path))
        if source.startswith(self._root + "/"):
            return source[len(self._root) + 1:]
        return source

    def _clean_output(self) -> None:
        """Empty the output directory, keeping the directory itself."""
        output_dir = Path(self._guard.root)
        output_dir.mkdir(parents=True, exist_ok=True)
        for child in output_dir.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()

    @staticmethod
    def _write_file(target: str, text: str, item: BuildItem) -> BuildItem:
        """Write *text* to *target*, creating parent dirs as needed."""
        data = text.encode("utf-8")
        path = Path(target)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            return item.merge(status="failed", size=len(data), reason=str(exc))
        return item.merge(status="generated", size=len(data))
