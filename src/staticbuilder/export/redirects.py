"""Redirect maps — server configuration for routes that are redirects.

When ``with_redirects`` is enabled, redirect routes are not written as HTML
files.  Instead, two text files are produced at the output root, one per
web server syntax:

- ``.redirects.nginx``: ``"/old" "/new";`` lines, for an nginx ``map`` block
- ``.redirects.apache``: ``/old /new`` lines, for ``RewriteMap``

Without redirect maps, a redirect route that has no handler is exported as a
small HTML page with a meta refresh.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from staticbuilder.observability.events import BuildItem

NGINX_FORMAT = '"%s" "%s";'
APACHE_FORMAT = "%s %s"

# (line format, file name at the output root), in generation order
REDIRECT_MAPS: tuple[tuple[str, str], ...] = (
    (NGINX_FORMAT, ".redirects.nginx"),
    (APACHE_FORMAT, ".redirects.apache"),
)

_ESCAPES = str.maketrans({"\\": "\\\\", "'": "\\'", '"': '\\"', "\0": "\\0"})


def escape(value: str) -> str:
    """Backslash-escape quotes, backslashes and NUL characters."""
    return value.translate(_ESCAPES)


def render_redirects_map(items: Iterable[BuildItem], line_format: str) -> str:
    """One *line_format* line per item carrying a redirect target."""
    lines = [
        line_format % ("/" + escape(item.uri.lstrip("/")), escape(item.redirect))
        for item in items
        if item.redirect
    ]
    return "\n".join(lines)


def redirect_page(target: str) -> str:
    """HTML document sending browsers on to *target*."""
    url = html.escape(target, quote=True)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f'<meta http-equiv="refresh" content="0; url={url}">\n'
        f'<link rel="canonical" href="{url}">\n'
        "</head>\n"
        f'<body><a href="{url}">{url}</a></body>\n'
        "</html>\n"
    )
