"""Tests for staticbuilder.content.render — Kida templates over Patitas Markdown."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from staticbuilder._errors import ConfigError
from staticbuilder.content.models import URL_PREFIX, RequestContext
from staticbuilder.content.render import TemplateRenderer
from staticbuilder.content.tree import FileSite


@pytest.fixture
def templates(site_root: Path) -> Path:
    directory = site_root / "templates"
    directory.mkdir()
    (directory / "default.html").write_text("<main>{{ title }}</main>")
    (directory / "post.html").write_text(
        '<h1>{{ title }}</h1>{{ content }}<a href="{{ url("blog") }}">blog</a>'
    )
    return directory


class TestMissingExtra:
    def test_install_hint(self, site_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "kida", None)
        renderer = TemplateRenderer(site_root / "templates")
        with pytest.raises(ConfigError, match=r"staticbuilder\[render\]"):
            renderer.render_markdown("# Title")


class TestTemplateRenderer:
    """Rendering through the real template and Markdown engines."""

    @pytest.fixture(autouse=True)
    def _engines(self) -> None:
        pytest.importorskip("kida")
        pytest.importorskip("patitas")

    def test_page_template(self, site_root: Path, templates: Path) -> None:
        renderer = TemplateRenderer(templates)
        site = FileSite(site_root, site_root / "content", renderer=renderer)
        post = site.find("blog/hello")
        assert post is not None

        html = site.render(post, RequestContext("blog/hello"))
        assert html.startswith("<h1>Hello</h1>")
        assert "First post." in html
        assert f'href="{URL_PREFIX}/blog"' in html

    def test_default_template(self, site_root: Path, templates: Path) -> None:
        site = FileSite(site_root, site_root / "content", renderer=TemplateRenderer(templates))
        home = site.find("home")
        assert home is not None
        assert site.render(home, RequestContext("home")) == "<main>Home</main>"

    def test_markdown(self, templates: Path) -> None:
        renderer = TemplateRenderer(templates)
        assert "<strong>bold</strong>" in renderer.render_markdown("Some **bold** text")
        assert renderer.render_markdown("") == ""
