"""URL rewriting — turn placeholder links in rendered output into final URLs.

While rendering, the host builds every internal link on top of
:data:`~staticbuilder.content.models.URL_PREFIX`.  After rendering, the
rewriter swaps the placeholder for one of three schemes:

- **absolute / root-relative**: the placeholder becomes the base URL
  (``/`` or ``https://example.com/``)
- **relative**: each link becomes a path relative to the page it appears in
- **ugly URLs**: links gain an explicit file name (``/blog`` ->
  ``/blog/index.html``), combinable with either of the above

Only text starting with the placeholder is touched; plain text and unrelated
URLs pass through unchanged.
"""

from __future__ import annotations

import re

from staticbuilder.content.models import URL_PREFIX
from staticbuilder.paths import relative_url

# Relative-URL mode replacement for placeholder occurrences left after the scan
_RELATIVE_BASE = "./"


def has_extension(url: str) -> bool:
    """Return True if the last path segment of *url* has a file extension."""
    name = url.rsplit("/", 1)[-1]
    return "." in name and not name.endswith(".")


class UrlRewriter:
    """Rewrites placeholder-prefixed URLs in rendered text.

    Args:
        base_url: Replacement for the placeholder.  ``""`` or ``"./"`` select
            page-relative URLs.
        extension: Suffix appended to extension-less links in ugly-URL mode,
            and to the current page's URL in relative mode.
        ugly_urls: Give every internal link an explicit file name.
        prefix: The placeholder token.

    """

    __slots__ = ("_base_url", "_extension", "_find", "_leftover", "_prefix", "_relative", "_ugly")

    def __init__(
        self,
        base_url: str = "/",
        *,
        extension: str = "/index.html",
        ugly_urls: bool = False,
        prefix: str = URL_PREFIX,
    ) -> None:
        self._relative = base_url in ("", _RELATIVE_BASE)
        if self._relative:
            base_url = _RELATIVE_BASE
        elif not base_url.endswith("/"):
            base_url += "/"
        self._base_url = base_url
        self._extension = extension
        self._ugly = ugly_urls
        self._prefix = prefix
        # Stop at whitespace, quotes, brackets, query and fragment separators
        self._find = re.compile(re.escape(prefix) + r"(/?[^?#&<>{}\"'\s]*)")
        self._leftover = re.compile(re.escape(prefix) + r"/?")

    @property
    def relative(self) -> bool:
        return self._relative

    @property
    def base_url(self) -> str:
        return self._base_url

    def rewrite(self, text: str, page_url: str) -> str:
        """Rewrite every placeholder URL in *text*.

        Args:
            text: Rendered output.
            page_url: URL of the page the text belongs to (with or without
                the placeholder prefix).

        """
        if self._relative or self._ugly:
            text = self._find.sub(lambda m: self._rewrite_match(m, page_url), text)
        # Anything still carrying the placeholder gets the literal base URL
        return self._leftover.sub(lambda _m: self._base_url, text)

    def _rewrite_match(self, match: re.Match[str], page_url: str) -> str:
        url = match.group(0)
        if self._ugly:
            path = match.group(1)
            if not path or path == "/":
                url = url.rstrip("/") + "/index.html"
            elif not url.endswith("/") and not has_extension(url):
                url += self._extension

        if self._relative:
            current = (page_url + self._extension).replace(self._prefix, "")
            url = relative_url(current, url.replace(self._prefix, ""))
        return url
