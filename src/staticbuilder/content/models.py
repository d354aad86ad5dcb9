"""Host interface — what the builder needs from a content system.

The builder never reaches into a content engine directly.  It consumes the
protocols below, and passes an immutable :class:`RequestContext` into every
render call instead of mutating a shared "current page / current language"
state.  This is what allows page builds to run on worker threads.

The reference implementation lives in :mod:`staticbuilder.content.tree`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from staticbuilder._types import LanguageCode
    from staticbuilder.routes.table import RouteTable

# Sentinel substituted for the site base URL while rendering.  Every internal
# link in rendered output starts with it, which lets the URL rewriter find
# and transform internal links without parsing HTML.
URL_PREFIX = "STATICBUILDER_URL_PREFIX"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """A virtual request the host renders against.

    Attributes:
        uri: Page or route URI being rendered (no leading slash).
        language: Active language code, or *None* on single-language sites.
        method: HTTP method of the virtual request.
        base_url: Base URL the host should use when building links.

    """

    uri: str
    language: LanguageCode = None
    method: str = "GET"
    base_url: str = URL_PREFIX

    def url(self, path: str = "") -> str:
        """Build an internal URL for *path* under the context's base URL."""
        path = path.strip("/")
        if not path:
            return self.base_url
        return f"{self.base_url}/{path}"


@runtime_checkable
class Page(Protocol):
    """A content page as seen by the builder."""

    @property
    def uri(self) -> str:
        """Language-neutral page id, e.g. ``blog/first-post``."""
        ...

    @property
    def template(self) -> str:
        """Intended template name."""
        ...

    def url(self, language: LanguageCode = None) -> str:
        """Page URL for *language*, starting with :data:`URL_PREFIX`."""
        ...

    def title(self, language: LanguageCode = None) -> str: ...

    def content_file(self, language: LanguageCode = None) -> Path | None:
        """Backing content file, or *None* for an empty page directory."""
        ...

    def modified(self, language: LanguageCode = None) -> float | None:
        """Modification time of the backing content file."""
        ...

    def files(self) -> Sequence[Path]:
        """Files attached to the page."""
        ...

    def visible_children(self) -> Sequence[Page]: ...

    def field(self, name: str, language: LanguageCode = None) -> str | None: ...


@runtime_checkable
class Site(Protocol):
    """A content system the builder can export."""

    @property
    def routes(self) -> RouteTable:
        """Programmatic routes registered alongside the content pages."""
        ...

    def languages(self) -> tuple[str, ...]:
        """Configured language codes (empty for single-language sites)."""
        ...

    def index(self) -> Sequence[Page]:
        """Every page of the site, parents before children."""
        ...

    def find(self, page_id: str) -> Page | None: ...

    def render(self, page: Page, context: RequestContext) -> str:
        """Render *page* to text for the given virtual request."""
        ...
