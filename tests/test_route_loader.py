"""Tests for staticbuilder.routes.loader — route module discovery and loading."""

from pathlib import Path

import pytest

from staticbuilder._errors import ConfigError
from staticbuilder.routes.loader import _derive_path, discover_routes, load_route_table


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def routes_dir(tmp_path: Path) -> Path:
    """Create a routes/ directory for testing."""
    d = tmp_path / "routes"
    d.mkdir()
    return d


def _write_route(routes_dir: Path, name: str, content: str) -> Path:
    """Write a route module and return its path."""
    p = routes_dir / name
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content)
    return p


# ---------------------------------------------------------------------------
# _derive_path
# ---------------------------------------------------------------------------


class TestDerivePath:
    """Path derivation from file position relative to routes/ dir."""

    def test_simple_file(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "search.py", "")
        assert _derive_path(routes_dir / "search.py", routes_dir) == "search"

    def test_nested_file(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "api/users.py", "")
        assert _derive_path(routes_dir / "api" / "users.py", routes_dir) == "api/users"


# ---------------------------------------------------------------------------
# discover_routes — discovery and loading
# ---------------------------------------------------------------------------


class TestDiscoverRoutes:
    """Unit tests for the route discovery pipeline."""

    def test_missing_directory_returns_empty(self, tmp_path: Path) -> None:
        assert discover_routes(tmp_path / "nonexistent") == ()

    def test_empty_directory_returns_empty(self, routes_dir: Path) -> None:
        assert discover_routes(routes_dir) == ()

    def test_discovers_get_handler(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "search.py", (
            "async def get(request):\n"
            "    return 'search results'\n"
        ))
        defs = discover_routes(routes_dir)
        assert len(defs) == 1
        assert defs[0].pattern == "search"
        assert defs[0].methods == ("GET",)
        assert defs[0].redirect is None

    def test_discovers_multiple_methods(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "items.py", (
            "async def get(request):\n"
            "    return 'list items'\n"
            "\n"
            "async def post(request):\n"
            "    return 'create item'\n"
        ))
        defs = discover_routes(routes_dir)
        assert {d.methods[0] for d in defs} == {"GET", "POST"}

    def test_handler_function_maps_to_get(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "search.py", (
            "async def handler(request):\n"
            "    return 'search'\n"
        ))
        defs = discover_routes(routes_dir)
        assert len(defs) == 1
        assert defs[0].methods == ("GET",)

    def test_handler_ignored_when_get_exists(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "search.py", (
            "async def get(request):\n"
            "    return 'get search'\n"
            "\n"
            "async def handler(request):\n"
            "    return 'handler search'\n"
        ))
        defs = discover_routes(routes_dir)
        assert len([d for d in defs if d.methods == ("GET",)]) == 1

    def test_explicit_path_with_parameter(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "tags.py", (
            "path = '/blog/tag-{tag}.xml'\n"
            "\n"
            "async def get(request):\n"
            "    return request.arguments['tag']\n"
        ))
        defs = discover_routes(routes_dir)
        assert defs[0].pattern == "blog/tag-{tag}.xml"

    def test_path_must_be_str(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "bad.py", "path = 42\n")
        with pytest.raises(ConfigError, match="'path' must be a str"):
            discover_routes(routes_dir)

    def test_explicit_name_override(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "search.py", (
            "name = 'site-search'\n"
            "\n"
            "async def get(request):\n"
            "    return 'search'\n"
        ))
        assert "site-search" in discover_routes(routes_dir)[0].name

    def test_redirect_module(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "old-blog.py", "redirect = 'blog'\n")
        defs = discover_routes(routes_dir)
        assert len(defs) == 1
        assert defs[0].pattern == "old-blog"
        assert defs[0].redirect == "blog"
        assert defs[0].handler is None

    def test_redirect_must_be_str(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "old.py", "redirect = ['blog']\n")
        with pytest.raises(ConfigError, match="'redirect' must be a str"):
            discover_routes(routes_dir)

    def test_nested_route_discovery(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "api/users.py", (
            "async def get(request):\n"
            "    return 'users'\n"
        ))
        assert discover_routes(routes_dir)[0].pattern == "api/users"

    def test_skips_private_files(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "__init__.py", "# init")
        _write_route(routes_dir, "_helpers.py", "def util(): pass")
        _write_route(routes_dir, "search.py", (
            "async def get(request):\n"
            "    return 'search'\n"
        ))
        assert len(discover_routes(routes_dir)) == 1

    def test_duplicate_paths_raises(self, routes_dir: Path) -> None:
        for name in ("page_a.py", "page_b.py"):
            _write_route(routes_dir, name, (
                "path = '/same'\n"
                "\n"
                "async def get(request):\n"
                "    return 'x'\n"
            ))
        with pytest.raises(ConfigError, match="Duplicate route"):
            discover_routes(routes_dir)

    def test_sync_handler_raises(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "bad.py", (
            "def get(request):\n"
            "    return 'not async'\n"
        ))
        with pytest.raises(ConfigError, match="must be an async function"):
            discover_routes(routes_dir)

    def test_no_params_handler_raises(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "bad.py", (
            "async def get():\n"
            "    return 'no params'\n"
        ))
        with pytest.raises(ConfigError, match="must accept at least one parameter"):
            discover_routes(routes_dir)

    def test_broken_module_raises(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "broken.py", "raise ValueError('nope')\n")
        with pytest.raises(ConfigError, match="Failed to load route module"):
            discover_routes(routes_dir)

    def test_module_with_no_handlers_returns_empty(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "utils.py", "CONSTANT = 42\n")
        assert discover_routes(routes_dir) == ()

    def test_source_path_recorded(self, routes_dir: Path) -> None:
        py_file = _write_route(routes_dir, "search.py", (
            "async def get(request):\n"
            "    return 'search'\n"
        ))
        assert discover_routes(routes_dir)[0].source == py_file


class TestLoadRouteTable:
    def test_table_matches_discovered_routes(self, routes_dir: Path) -> None:
        _write_route(routes_dir, "feed.py", (
            "path = 'blog/feed.xml'\n"
            "\n"
            "async def get(request):\n"
            "    return '<rss/>'\n"
        ))
        table = load_route_table(routes_dir)
        assert table.patterns("GET") == ("blog/feed.xml",)
        assert table.match("blog/feed.xml") is not None
