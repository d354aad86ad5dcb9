"""Filesystem content tree — the reference host for the builder.

Layout conventions::

    content/
      site.md                   site-wide fields (optional)
      home/home.md              home page, served at the site root
      1-blog/blog.md            visible page "blog" (numbered folder)
      1-blog/1-hello/post.md    visible child "blog/hello", template "post"
      1-blog/1-hello/photo.jpg  attached file
      error/error.md            unnumbered (invisible) page "error"

A numeric ``N-`` / ``N_`` prefix marks a page as visible and orders it among
its siblings; the slug is the remainder of the folder name.  Multilingual
sites store one text file per language (``post.en.md``, ``post.fr.md``);
a missing translation falls back to the default language file.

Text files may start with YAML front matter delimited by ``---`` lines.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from staticbuilder._errors import ContentError
from staticbuilder.content.models import URL_PREFIX

if TYPE_CHECKING:
    from staticbuilder._types import LanguageCode
    from staticbuilder.config import BuildConfig
    from staticbuilder.content.models import RequestContext
    from staticbuilder.content.render import TemplateRenderer
    from staticbuilder.routes.table import RouteTable

HOME_ID = "home"

_NUM_RE = re.compile(r"^(\d+)[-_](.+)$")
_CONTENT_SUFFIXES = frozenset({".md", ".txt"})
_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def parse_content(text: str, source: Path | None = None) -> tuple[dict[str, Any], str]:
    """Split a content file into front matter fields and body text.

    Raises:
        ContentError: If the front matter is not a YAML mapping.

    """
    m = _FRONT_MATTER_RE.match(text)
    if m is None:
        return {}, text
    try:
        fields = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid front matter in {source or '<text>'}: {exc}"
        raise ContentError(msg) from exc
    if not isinstance(fields, dict):
        msg = f"Front matter in {source or '<text>'} must be a mapping"
        raise ContentError(msg)
    return {str(k): v for k, v in fields.items()}, text[m.end():]


def _field_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


class FilePage:
    """A page backed by a directory under ``content/``.

    Args:
        directory: The page directory.
        site: Owning site (provides the language list).
        parent: Parent page, or *None* for top-level pages.

    """

    __slots__ = (
        "_children",
        "_content_files",
        "_directory",
        "_files",
        "_parent",
        "_site",
        "_template",
        "_uri",
        "num",
        "slug",
    )

    def __init__(self, directory: Path, site: FileSite, parent: FilePage | None = None) -> None:
        self._directory = directory
        self._site = site
        self._parent = parent

        m = _NUM_RE.match(directory.name)
        self.num: int | None = int(m.group(1)) if m else None
        self.slug: str = m.group(2) if m else directory.name
        self._uri = f"{parent.uri}/{self.slug}" if parent is not None else self.slug

        self._content_files: dict[LanguageCode, Path] = {}
        self._files: list[Path] = []
        self._children: list[FilePage] = []
        self._template = "default"
        self._scan()

    def _scan(self) -> None:
        languages = set(self._site.languages())
        templates: dict[LanguageCode, str] = {}

        for entry in sorted(self._directory.iterdir()):
            if entry.name.startswith((".", "_")):
                continue
            if entry.is_dir():
                self._children.append(FilePage(entry, self._site, self))
                continue
            if entry.suffix not in _CONTENT_SUFFIXES:
                self._files.append(entry)
                continue

            stem = entry.stem
            template, _, lang = stem.rpartition(".")
            if template and lang in languages:
                self._content_files.setdefault(lang, entry)
                templates.setdefault(lang, template)
            else:
                self._content_files.setdefault(None, entry)
                templates.setdefault(None, stem)

        default = self._site.default_language
        for key in (None, default, *sorted(k for k in templates if k)):
            if key in templates:
                self._template = templates[key]
                break

    def __repr__(self) -> str:
        return f"FilePage({self._uri!r})"

    # ----- Page protocol -----

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def template(self) -> str:
        return self._template

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def parent(self) -> FilePage | None:
        return self._parent

    @property
    def is_home(self) -> bool:
        return self._uri == HOME_ID

    @property
    def is_visible(self) -> bool:
        return self.num is not None

    def url(self, language: LanguageCode = None) -> str:
        parts: list[str] = []
        if language and self._site.is_multilang:
            parts.append(language)
        if not self.is_home:
            parts.append(self._uri)
        if not parts:
            return URL_PREFIX
        return URL_PREFIX + "/" + "/".join(parts)

    def title(self, language: LanguageCode = None) -> str:
        return self.field("title", language) or self.slug

    def content_file(self, language: LanguageCode = None) -> Path | None:
        if language in self._content_files:
            return self._content_files[language]
        if None in self._content_files:
            return self._content_files[None]
        return self._content_files.get(self._site.default_language)

    def modified(self, language: LanguageCode = None) -> float | None:
        path = self.content_file(language)
        if path is None:
            return None
        return path.stat().st_mtime

    def files(self) -> list[Path]:
        return list(self._files)

    def children(self) -> list[FilePage]:
        return list(self._children)

    def visible_children(self) -> list[FilePage]:
        visible = [c for c in self._children if c.num is not None]
        return sorted(visible, key=lambda c: c.num or 0)

    def fields(self, language: LanguageCode = None) -> dict[str, Any]:
        """Front matter fields of the page's text file for *language*."""
        return self._read(language)[0]

    def body(self, language: LanguageCode = None) -> str:
        """Body text (after front matter) for *language*."""
        return self._read(language)[1]

    def field(self, name: str, language: LanguageCode = None) -> str | None:
        value = self.fields(language).get(name)
        if value is not None:
            return _field_text(value)
        if name in ("slug", "uid"):
            return self.slug
        if name == "uri":
            return self._uri
        return None

    def _read(self, language: LanguageCode) -> tuple[dict[str, Any], str]:
        path = self.content_file(language)
        if path is None:
            return {}, ""
        return parse_content(path.read_text(encoding="utf-8"), path)


class FileSite:
    """A site backed by a ``content/`` directory tree.

    Args:
        root: Project root.
        content_path: Directory holding the page tree.
        routes: Programmatic routes; defaults to an empty table.
        languages: Language codes; empty for single-language sites.
        renderer: Renderer used by :meth:`render`.

    Raises:
        ContentError: If *content_path* is not a directory.

    """

    def __init__(
        self,
        root: Path,
        content_path: Path,
        *,
        routes: RouteTable | None = None,
        languages: tuple[str, ...] = (),
        renderer: TemplateRenderer | None = None,
    ) -> None:
        from staticbuilder.routes.table import RouteTable

        if not content_path.is_dir():
            msg = f"Content directory not found: {content_path}"
            raise ContentError(msg)

        self._root = root
        self._content_path = content_path
        self._routes = routes if routes is not None else RouteTable()
        self._languages = tuple(languages)
        self._renderer = renderer
        self._pages: list[FilePage] = [
            FilePage(entry, self)
            for entry in sorted(content_path.iterdir())
            if entry.is_dir() and not entry.name.startswith((".", "_"))
        ]

    @classmethod
    def from_config(cls, config: BuildConfig) -> FileSite:
        """Load the content tree, templates and routes described by *config*."""
        from staticbuilder.content.render import TemplateRenderer
        from staticbuilder.routes.loader import load_route_table

        return cls(
            config.root,
            config.content_path,
            routes=load_route_table(config.routes_path),
            languages=config.languages,
            renderer=TemplateRenderer(config.templates_path),
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def content_path(self) -> Path:
        return self._content_path

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def is_multilang(self) -> bool:
        return bool(self._languages)

    @property
    def default_language(self) -> str | None:
        return self._languages[0] if self._languages else None

    def languages(self) -> tuple[str, ...]:
        return self._languages

    def info(self) -> dict[str, Any]:
        """Site-wide fields from ``content/site.md`` (if present)."""
        for suffix in (".md", ".txt"):
            path = self._content_path / f"site{suffix}"
            if path.is_file():
                return parse_content(path.read_text(encoding="utf-8"), path)[0]
        return {}

    def children(self) -> list[FilePage]:
        return list(self._pages)

    def visible_children(self) -> list[FilePage]:
        visible = [p for p in self._pages if p.num is not None]
        return sorted(visible, key=lambda p: p.num or 0)

    def index(self) -> list[FilePage]:
        """Every page, depth-first with parents before their children."""
        pages: list[FilePage] = []
        stack = list(reversed(self._pages))
        while stack:
            page = stack.pop()
            pages.append(page)
            stack.extend(reversed(page.children()))
        return pages

    def find(self, page_id: str) -> FilePage | None:
        page_id = page_id.strip("/")
        for page in self.index():
            if page.uri == page_id:
                return page
        return None

    def page_for_path(self, path: Path) -> FilePage | None:
        """Return the page whose directory directly contains *path*."""
        for page in self.index():
            if path.parent == page.directory:
                return page
        return None

    def render(self, page: FilePage, context: RequestContext) -> str:
        if self._renderer is None:
            msg = "FileSite has no renderer configured"
            raise ContentError(msg)
        return self._renderer.render(page, self, context)
