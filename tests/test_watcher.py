"""Tests for staticbuilder.content.watcher — change detection and categorization."""

from __future__ import annotations

from pathlib import Path

import pytest
from watchfiles import Change

from staticbuilder.config import BuildConfig
from staticbuilder.content.watcher import (
    ChangeBatch,
    ChangeEvent,
    SiteWatcher,
    categorize_change,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config(tmp_path: Path) -> BuildConfig:
    """A BuildConfig rooted at a temp directory."""
    return BuildConfig(root=tmp_path)


# ---------------------------------------------------------------------------
# ChangeEvent / ChangeBatch
# ---------------------------------------------------------------------------


class TestChangeEvent:
    """Verify ChangeEvent is frozen and well-behaved."""

    def test_frozen(self) -> None:
        event = ChangeEvent(path=Path("/tmp/test.md"), kind="modified", category="content")
        with pytest.raises(AttributeError):
            event.kind = "created"  # type: ignore[misc]

    def test_equality(self) -> None:
        a = ChangeEvent(path=Path("/a.md"), kind="modified", category="content")
        b = ChangeEvent(path=Path("/a.md"), kind="modified", category="content")
        assert a == b

    def test_hashable(self) -> None:
        event = ChangeEvent(path=Path("/a.md"), kind="created", category="template")
        assert isinstance(hash(event), int)


class TestChangeBatch:
    """needs_full_build decides between page-only and full rebuilds."""

    def test_content_edits_only(self) -> None:
        batch = ChangeBatch(events=(
            ChangeEvent(Path("/s/content/a/a.md"), "modified", "content"),
            ChangeEvent(Path("/s/content/b/b.md"), "modified", "content"),
        ))
        assert batch.needs_full_build is False
        assert batch.content_paths() == [Path("/s/content/a/a.md"), Path("/s/content/b/b.md")]

    def test_content_added(self) -> None:
        batch = ChangeBatch(events=(ChangeEvent(Path("/s/content/new.md"), "created", "content"),))
        assert batch.needs_full_build is True

    def test_template_change(self) -> None:
        batch = ChangeBatch(events=(
            ChangeEvent(Path("/s/content/a/a.md"), "modified", "content"),
            ChangeEvent(Path("/s/templates/post.html"), "modified", "template"),
        ))
        assert batch.needs_full_build is True
        assert batch.content_paths() == [Path("/s/content/a/a.md")]


# ---------------------------------------------------------------------------
# categorize_change
# ---------------------------------------------------------------------------


class TestCategorizeChange:
    """Unit tests for categorize_change()."""

    def test_content(self, config: BuildConfig) -> None:
        path = config.root / "content" / "1-blog" / "blog.md"
        assert categorize_change(path, config) == "content"

    def test_template(self, config: BuildConfig) -> None:
        path = config.root / "templates" / "partials" / "nav.html"
        assert categorize_change(path, config) == "template"

    def test_route_file(self, config: BuildConfig) -> None:
        path = config.root / "routes" / "search.py"
        assert categorize_change(path, config) == "route"

    @pytest.mark.parametrize(
        "name", ["staticbuilder.yaml", "staticbuilder.yml", "staticbuilder.toml"],
    )
    def test_config_files(self, config: BuildConfig, name: str) -> None:
        assert categorize_change(config.root / name, config) == "config"

    def test_asset_source(self, config: BuildConfig) -> None:
        path = config.root / "assets" / "css" / "site.css"
        assert categorize_change(path, config) == "asset"

    def test_output_ignored(self, config: BuildConfig) -> None:
        path = config.root / "static" / "index.html"
        assert categorize_change(path, config) is None

    def test_unknown_file_returns_none(self, config: BuildConfig) -> None:
        assert categorize_change(config.root / "random" / "file.txt", config) is None

    def test_root_file_not_config(self, config: BuildConfig) -> None:
        assert categorize_change(config.root / "README.md", config) is None

    def test_file_outside_root_returns_none(self, config: BuildConfig) -> None:
        assert categorize_change(Path("/completely/elsewhere/file.md"), config) is None

    def test_custom_directories(self, tmp_path: Path) -> None:
        config = BuildConfig(root=tmp_path, content_dir="pages", templates_dir="layouts")
        assert categorize_change(config.root / "pages" / "a.md", config) == "content"
        assert categorize_change(config.root / "layouts" / "base.html", config) == "template"

    def test_custom_asset_mapping(self, tmp_path: Path) -> None:
        config = BuildConfig(root=tmp_path, assets={"media/logo.svg": "logo.svg"})
        assert categorize_change(config.root / "media" / "logo.svg", config) == "asset"
        assert categorize_change(config.root / "media" / "other.svg", config) is None


class TestSiteWatcherCategorize:
    """SiteWatcher.categorize — raw watchfiles changes to batches."""

    def test_relevant_changes(self, config: BuildConfig) -> None:
        watcher = SiteWatcher(config)
        post = config.root / "content" / "post" / "post.md"
        template = config.root / "templates" / "post.html"
        batch = watcher.categorize({
            (Change.modified, str(template)),
            (Change.added, str(post)),
        })
        assert batch is not None
        assert batch.events == (
            ChangeEvent(path=post, kind="created", category="content"),
            ChangeEvent(path=template, kind="modified", category="template"),
        )

    def test_only_irrelevant_changes(self, config: BuildConfig) -> None:
        watcher = SiteWatcher(config)
        batch = watcher.categorize({
            (Change.modified, str(config.root / "static" / "index.html")),
            (Change.deleted, str(config.root / "notes.txt")),
        })
        assert batch is None

    def test_stop(self, config: BuildConfig) -> None:
        watcher = SiteWatcher(config)
        assert watcher.stopped is False
        watcher.stop()
        assert watcher.stopped is True
