"""Content layer — the host interface and a filesystem content tree.

The builder consumes pages through the protocols in ``models``; ``tree``
provides the reference implementation backed by a directory of Markdown files.
"""

from staticbuilder.content.models import URL_PREFIX, Page, RequestContext, Site
from staticbuilder.content.tree import FilePage, FileSite

__all__ = ["URL_PREFIX", "FilePage", "FileSite", "Page", "RequestContext", "Site"]
