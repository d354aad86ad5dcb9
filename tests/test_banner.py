"""Tests for staticbuilder.banner — header, results and failure output."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from staticbuilder._errors import RenderError
from staticbuilder.banner import print_banner, print_render_failure, print_results
from staticbuilder.config import BuildConfig


def _capture(func: object, *args: object, **kwargs: object) -> str:
    buf = io.StringIO()
    with patch.object(sys, "stderr", buf):
        func(*args, **kwargs)  # type: ignore[operator]
    return buf.getvalue()


class TestPrintBanner:
    """Tests for the build header."""

    def _capture_banner(self, **kwargs: object) -> str:
        config = BuildConfig(root=Path("/tmp/test-site"))
        return _capture(print_banner, config, 5, **kwargs)

    def test_build_mode(self) -> None:
        output = self._capture_banner(mode="build", load_ms=42.5)
        assert "staticbuilder" in output
        assert "[build]" in output
        assert "5 pages loaded" in output
        assert "42ms" in output
        assert "output: " in output
        assert "/tmp/test-site/static" in output

    def test_list_mode(self) -> None:
        output = self._capture_banner(mode="list")
        assert "[list]" in output
        assert "Watching" not in output

    def test_watch_mode(self) -> None:
        output = self._capture_banner(mode="watch")
        assert "Watching for changes" in output

    def test_routes_shown(self) -> None:
        assert "3 routes" in self._capture_banner(mode="build", route_count=3)

    def test_single_page_singular(self) -> None:
        config = BuildConfig(root=Path("/tmp/test-site"))
        output = _capture(print_banner, config, 1, "build")
        assert "1 page loaded" in output

    def test_languages(self) -> None:
        config = BuildConfig(root=Path("/tmp/test-site"), languages=("en", "fr"))
        output = _capture(print_banner, config, 2, "build")
        assert "languages: en, fr" in output

    def test_warnings_displayed(self) -> None:
        output = self._capture_banner(mode="build", warnings=["Missing template: post.html"])
        assert "Missing template: post.html" in output


class TestPrintResults:
    def test_build(self) -> None:
        output = _capture(print_results, "generated: 4, failed: 0", 12.3, write=True)
        assert "Results: generated: 4, failed: 0" in output
        assert "Built in 12ms" in output

    def test_list(self) -> None:
        output = _capture(print_results, "", 1.0, write=False)
        assert "Results: nothing to do" in output
        assert "Listed in" in output


class TestPrintRenderFailure:
    def test_with_cause(self) -> None:
        try:
            try:
                raise KeyError("title")
            except KeyError as exc:
                raise RenderError("failed", last_item="content/home/home.md") from exc
        except RenderError as error:
            output = _capture(print_render_failure, error)
        assert "Build aborted" in output
        assert "last item: content/home/home.md" in output
        assert "KeyError" in output

    def test_without_cause(self) -> None:
        output = _capture(print_render_failure, RenderError("template missing"))
        assert "template missing" in output
        assert "last item" not in output
