"""Template renderer — Markdown bodies through Patitas, pages through Kida.

Each page renders with ``templates/<template>.html``, falling back to
``templates/default.html``.  Templates receive:

- ``page``: the :class:`~staticbuilder.content.tree.FilePage`
- ``site``: the owning site
- ``content``: the page body rendered to HTML
- ``title``: the page title in the active language
- ``language``: the active language code (or *None*)
- ``children``: the page's visible children
- ``url(path)``: internal URL builder; links built with it are rewritten by
  the exporter for the configured URL scheme

Patitas and Kida ship in the ``render`` extra; they are imported lazily so
the path/route/export layers work without them.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from staticbuilder._errors import ConfigError

if TYPE_CHECKING:
    from staticbuilder.content.models import RequestContext
    from staticbuilder.content.tree import FilePage, FileSite

_DEFAULT_TEMPLATE = "default.html"


def _resolve_template_name(page: FilePage, templates_path: Path) -> str:
    """Return the template file for *page*, falling back to ``default.html``."""
    name = f"{page.template}.html"
    if (templates_path / name).is_file():
        return name
    return _DEFAULT_TEMPLATE


class TemplateRenderer:
    """Renders file-backed pages to HTML.

    The Kida environment and Markdown parser are created on first use and
    shared across threads; rendering itself holds no mutable state.

    Args:
        templates_path: Directory containing page templates.

    """

    def __init__(self, templates_path: Path) -> None:
        self._templates_path = templates_path
        self._env: Any = None
        self._markdown: Any = None
        self._lock = threading.Lock()

    @property
    def templates_path(self) -> Path:
        return self._templates_path

    def _ensure_loaded(self) -> tuple[Any, Any]:
        with self._lock:
            if self._env is None:
                try:
                    from kida import Environment, FileSystemLoader
                    from patitas import Markdown
                except ImportError as exc:
                    msg = (
                        "Rendering content pages requires patitas and kida. "
                        "Install with: pip install staticbuilder[render]"
                    )
                    raise ConfigError(msg) from exc

                self._env = Environment(
                    loader=FileSystemLoader([str(self._templates_path)]),
                    autoescape=False,
                )
                self._markdown = Markdown(plugins=["table"])
            return self._env, self._markdown

    def render_markdown(self, text: str) -> str:
        """Convert Markdown *text* to HTML."""
        _env, md = self._ensure_loaded()
        return md(text) if text else ""

    def render(self, page: FilePage, site: FileSite, context: RequestContext) -> str:
        """Render *page* for the virtual request *context*."""
        env, _md = self._ensure_loaded()
        language = context.language

        template = env.get_template(_resolve_template_name(page, self._templates_path))
        return template.render(
            page=page,
            site=site,
            content=self.render_markdown(page.body(language)),
            title=page.title(language),
            language=language,
            children=page.visible_children(),
            url=context.url,
        )
