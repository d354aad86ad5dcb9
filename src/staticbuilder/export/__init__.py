"""Export layer — static output generation.

Builds content pages and programmatic routes into plain files, rewrites
internal links for the configured URL scheme, and copies assets.
"""

from staticbuilder.export.builder import Builder
from staticbuilder.export.redirects import REDIRECT_MAPS, redirect_page, render_redirects_map
from staticbuilder.export.staleness import StalenessTracker
from staticbuilder.export.urls import UrlRewriter

__all__ = [
    "REDIRECT_MAPS",
    "Builder",
    "StalenessTracker",
    "UrlRewriter",
    "redirect_page",
    "render_redirects_map",
]
