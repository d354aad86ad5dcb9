"""Staticbuilder configuration.

BuildConfig is the central configuration object, frozen after creation.
Every recognised option is an explicit field; see ``config_loader`` for the
file format and the rejection of unknown keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from staticbuilder._types import FilePredicate, PagePredicate
from staticbuilder.paths import is_absolute_path, normalize_path, normalize_slashes

DEFAULT_ASSETS: Mapping[str, str] = MappingProxyType({
    "assets": "assets",
    "content": "content",
    "thumbs": "thumbs",
})


def normalize_extension(ext: str) -> str:
    """Normalize the output filename suffix.

    ``html`` -> ``.html``, ``/index.html`` and ``.htm`` are kept as-is,
    backslashes become forward slashes.

    """
    ext = normalize_slashes(ext.strip())
    if ext[:1] in ("/", "."):
        return ext
    return "." + ext


def normalize_assets(assets: object) -> dict[str, str]:
    """Normalize the assets option into a ``source -> destination`` mapping.

    Accepts a mapping, or a sequence whose string entries map to themselves.
    Non-string destinations are dropped.

    """
    if isinstance(assets, Mapping):
        items = assets.items()
    else:
        items = ((dest, dest) for dest in assets)  # type: ignore[union-attr]
    return {
        str(source): dest
        for source, dest in items
        if isinstance(dest, str)
    }


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Configuration for a static build.

    Attributes:
        root: Project root (contains content/, templates/, routes/).
              Always resolved to an absolute path on construction.
        output: Output directory; relative paths resolve against ``root``.
        content_dir: Directory containing the content tree.
        templates_dir: Directory containing page templates.
        routes_dir: Directory containing route modules.
        base_url: Replacement for the internal URL placeholder.  ``""`` or
            ``"./"`` select relative URLs.
        routes: Route patterns to build (``"*"`` means every GET route).
        exclude_routes: URIs to skip; entries ending in ``*`` are prefixes.
        assets: Mapping of asset source (file or directory) to destination
            relative to the output root.
        extension: Suffix appended to page and route output names.
        ugly_urls: Rewrite internal links to explicit file names.
        with_files: Copy each page's attached files next to its output.
            May be a predicate selecting which files to copy.
        with_redirects: Emit nginx/apache redirect maps instead of HTML
            files for redirect routes.
        catch_errors: Wrap host render crashes in ``RenderError`` carrying
            the identifier of the last attempted item.
        filter: Page inclusion predicate returning ``bool`` or
            ``(bool, reason)``.  Defaults to ``Builder.default_filter``.
        languages: Language codes to build.  Empty means "ask the site".
        module_template_prefix: Template prefix reserved for structural
            pages, which the default filter ignores.
        workers: Number of threads used for page builds (1 = sequential).

    """

    root: Path = field(default_factory=Path.cwd)
    output: Path = field(default_factory=lambda: Path("static"))
    content_dir: str = "content"
    templates_dir: str = "templates"
    routes_dir: str = "routes"
    base_url: str = "/"
    routes: tuple[str, ...] = ("*",)
    exclude_routes: tuple[str, ...] = ()
    assets: Mapping[str, str] = field(default_factory=lambda: DEFAULT_ASSETS)
    extension: str = "/index.html"
    ugly_urls: bool = False
    with_files: bool | FilePredicate = False
    with_redirects: bool = False
    catch_errors: bool = True
    filter: PagePredicate | None = None
    languages: tuple[str, ...] = ()
    module_template_prefix: str = "module."
    workers: int = 1

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        object.__setattr__(self, "extension", normalize_extension(self.extension))
        object.__setattr__(
            self, "assets", MappingProxyType(normalize_assets(self.assets)),
        )
        object.__setattr__(self, "routes", tuple(self.routes))
        object.__setattr__(self, "exclude_routes", tuple(self.exclude_routes))
        object.__setattr__(self, "languages", tuple(self.languages))

    @property
    def root_path(self) -> str:
        """Project root as a normalized ``/``-separated string."""
        return normalize_path(str(self.root))

    @property
    def output_path(self) -> str:
        """Absolute, normalized output directory."""
        out = normalize_slashes(str(self.output))
        if not is_absolute_path(out):
            out = self.root_path + "/" + out
        return normalize_path(out)

    @property
    def content_path(self) -> Path:
        """Absolute path to the content directory."""
        return self.root / self.content_dir

    @property
    def templates_path(self) -> Path:
        """Absolute path to the templates directory."""
        return self.root / self.templates_dir

    @property
    def routes_path(self) -> Path:
        """Absolute path to the route modules directory."""
        return self.root / self.routes_dir

    @property
    def relative_urls(self) -> bool:
        """Whether internal links are rewritten relative to each page."""
        return self.base_url in ("", "./")
