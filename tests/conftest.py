"""Shared test fixtures for staticbuilder."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from staticbuilder.config import BuildConfig
from staticbuilder.content.tree import FileSite
from staticbuilder.routes.table import RouteTable


class StubRenderer:
    """Renders pages without templates: title, child links and a home link.

    Links are built through the request context, so they carry the URL
    placeholder exactly like real templates do.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[tuple[str, str | None]] = []

    def render(self, page: Any, site: Any, context: Any) -> str:
        self.calls.append((page.uri, context.language))
        if page.uri == self.fail_on:
            msg = f"cannot render {page.uri}"
            raise RuntimeError(msg)
        lang = context.language
        links = "".join(
            f'<a href="{child.url(lang)}">{child.title(lang)}</a>'
            for child in page.visible_children()
        )
        return (
            f'<link href="{context.url("assets/site.css")}">'
            f"<h1>{page.title(lang)}</h1>{links}"
            f'<a href="{context.url()}">home</a>'
        )


def write_page(content: Path, folder: str, template: str, text: str, **files: str) -> Path:
    """Create a page folder with one text file and optional attached files."""
    directory = content / folder
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{template}.md").write_text(text)
    for name, data in files.items():
        (directory / name.replace("_", ".")).write_text(data)
    return directory


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """A small project: home, a blog with two posts, and an error page.

    ``content/``::

        home/home.md
        1-blog/blog.md
        1-blog/1-hello/post.md  + photo.jpg
        1-blog/2-world/post.md
        error/error.md

    plus ``assets/site.css``.
    """
    root = tmp_path / "site"
    content = root / "content"
    write_page(content, "home", "home", "---\ntitle: Home\n---\nWelcome.\n")
    write_page(content, "1-blog", "blog", "---\ntitle: Blog\n---\n")
    write_page(
        content, "1-blog/1-hello", "post",
        "---\ntitle: Hello\ntags: [python, web]\n---\nFirst post.\n",
        photo_jpg="jpeg-bytes",
    )
    write_page(
        content, "1-blog/2-world", "post",
        "---\ntitle: World\ntags: web\n---\nSecond post.\n",
    )
    write_page(content, "error", "error", "---\ntitle: Error\n---\nNot found.\n")

    assets = root / "assets"
    assets.mkdir()
    (assets / "site.css").write_text("body { margin: 0; }\n")
    return root


def make_config(root: Path, **overrides: Any) -> BuildConfig:
    """BuildConfig for *root* with only the ``assets`` folder copied by default."""
    overrides.setdefault("assets", {"assets": "assets"})
    return BuildConfig(root=root, **overrides)


def make_site(
    config: BuildConfig,
    *,
    routes: RouteTable | None = None,
    renderer: Any = None,
) -> FileSite:
    """FileSite for *config* using the stub renderer."""
    return FileSite(
        config.root,
        config.content_path,
        routes=routes,
        languages=config.languages,
        renderer=renderer or StubRenderer(),
    )
