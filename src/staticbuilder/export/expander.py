"""Route pattern expansion — one ``{param}`` segment into concrete routes.

A pattern such as ``blog/{slug}`` or ``blog/tag-{tag}/feed.xml`` names a
content page (``blog``) whose visible children supply the parameter values::

    blog/{slug}        + children slugs a, b   -> blog/a, blog/b
    blog/tag-{tag}.rss + children tags "x, y"  -> blog/tag-x.rss, blog/tag-y.rss

Patterns with several parameters, or regex-style groups, are not expanded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from staticbuilder.routes.table import count_parameters

if TYPE_CHECKING:
    from collections.abc import Iterable

    from staticbuilder.content.models import Page, Site

_PATTERN_RE = re.compile(r"^([^{}]+)(/[^/{}]*)\{([^/{}]+)\}([^/{}]*)(.*)$")


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A parsed single-parameter route pattern.

    Attributes:
        page_id: Id of the page whose children supply values (``blog``).
        prefix: Text between the page id and the parameter (``/tag-``).
        param: Parameter name, read as a field of each child (``slug``).
        suffix: Text after the parameter within the same segment.
        trailing: Rest of the pattern after that segment.

    """

    page_id: str
    prefix: str
    param: str
    suffix: str
    trailing: str

    def substitute(self, value: str) -> str:
        """Concrete route for one parameter *value*."""
        return f"{self.page_id}{self.prefix}{value}{self.suffix}{self.trailing}"


def is_parameterized(uri: str) -> bool:
    return "{" in uri


def is_dynamic(uri: str) -> bool:
    """Regex-style patterns (``(:any)``, ``(.*)``) cannot be exported."""
    return "(" in uri


def is_supported(uri: str) -> bool:
    """Whether *uri* is concrete or carries exactly one parameter."""
    return not is_dynamic(uri) and count_parameters(uri) <= 1


def parse_pattern(uri: str) -> RoutePattern | None:
    """Split *uri* into its parts, or return *None* if it has no parameter."""
    m = _PATTERN_RE.match(uri)
    if m is None:
        return None
    return RoutePattern(*m.groups())


def pluck(pages: Iterable[Page], field: str, separator: str = ",") -> list[str]:
    """Collect the unique, non-empty values of *field* across *pages*.

    Field values are split on *separator*, so a ``tags: a, b`` field yields
    two values.  Order of first appearance is preserved.

    """
    values: list[str] = []
    seen: set[str] = set()
    for page in pages:
        raw = page.field(field)
        if raw is None:
            continue
        for value in str(raw).split(separator):
            value = value.strip()
            if value and value not in seen:
                seen.add(value)
                values.append(value)
    return values


def expand_pattern(pattern: RoutePattern, site: Site) -> list[str] | None:
    """Concrete routes for *pattern*, or *None* if its page does not exist."""
    page = site.find(pattern.page_id)
    if page is None:
        return None
    return [
        pattern.substitute(value)
        for value in pluck(page.visible_children(), pattern.param)
    ]
