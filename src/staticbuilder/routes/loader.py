"""Route loader — discover route modules and build a route table.

Scans a ``routes/`` directory for Python modules and extracts route
definitions using a file-path convention:

    routes/search.py         -> search
    routes/api/users.py      -> api/users
    routes/feed.py           -> path = "blog/feed.xml"  (explicit override)

Handler convention — function names map to HTTP methods::

    async def get(request):      # GET
    async def post(request):     # POST
    async def handler(request):  # GET (catch-all default)

Modules may export optional metadata:

    path: str      — override URL pattern; may contain one ``{param}``
    name: str      — route name for reports
    redirect: str  — make the route a redirect to this target
"""

import importlib.util
import inspect
import sys
from pathlib import Path

from staticbuilder._errors import ConfigError
from staticbuilder.routes.table import RouteDefinition, RouteTable

# HTTP methods recognised as handler function names
_METHOD_NAMES: frozenset[str] = frozenset({
    "get",
    "post",
    "put",
    "delete",
    "patch",
})

# Catch-all handler name (maps to GET)
_HANDLER_NAME = "handler"


def discover_routes(routes_dir: Path) -> tuple[RouteDefinition, ...]:
    """Scan *routes_dir* for Python modules and return route definitions.

    Skips ``__init__.py``, ``__pycache__`` directories, and files whose names
    start with ``_``.  Returns an empty tuple when *routes_dir* does not exist
    or contains no loadable modules.

    Raises:
        ConfigError: On duplicate patterns or invalid handler signatures.

    """
    if not routes_dir.is_dir():
        return ()

    definitions: list[RouteDefinition] = []
    seen: dict[tuple[str, str], Path] = {}

    for py_file in sorted(routes_dir.rglob("*.py")):
        if py_file.name.startswith("_"):
            continue
        if "__pycache__" in py_file.parts:
            continue

        module = _load_module(py_file, routes_dir)
        if module is None:
            continue

        for defn in _extract_definitions(module, py_file, routes_dir):
            for method in defn.methods:
                key = (defn.pattern, method)
                if key in seen:
                    msg = (
                        f"Duplicate route {method} {defn.pattern!r}: "
                        f"defined in {seen[key]} and {py_file}"
                    )
                    raise ConfigError(msg)
                seen[key] = py_file
            definitions.append(defn)

    return tuple(definitions)


def load_route_table(routes_dir: Path) -> RouteTable:
    """Discover routes in *routes_dir* and return them as a :class:`RouteTable`."""
    return RouteTable(discover_routes(routes_dir))


def _load_module(py_file: Path, routes_dir: Path) -> object | None:
    """Import a Python file as a module without touching ``sys.path``."""
    relative = py_file.relative_to(routes_dir)
    parts = list(relative.with_suffix("").parts)
    module_name = "staticbuilder_routes." + ".".join(parts)

    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        return None

    try:
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)  # type: ignore[union-attr]
    except Exception as exc:
        msg = f"Failed to load route module {py_file}: {exc}"
        raise ConfigError(msg) from exc

    return module


def _derive_path(py_file: Path, routes_dir: Path) -> str:
    """Derive a URL pattern from a file's position relative to *routes_dir*.

    ``routes/search.py``       -> ``search``
    ``routes/api/users.py``    -> ``api/users``

    """
    relative = py_file.relative_to(routes_dir).with_suffix("")
    return "/".join(relative.parts)


def _extract_definitions(
    module: object,
    py_file: Path,
    routes_dir: Path,
) -> list[RouteDefinition]:
    """Extract route definitions from a loaded module."""
    path = getattr(module, "path", None)
    if path is None:
        path = _derive_path(py_file, routes_dir)
    elif not isinstance(path, str):
        msg = f"Route module {py_file}: 'path' must be a str, got {type(path).__name__}"
        raise ConfigError(msg)
    path = path.strip("/")

    route_name = getattr(module, "name", None) or "route:" + path

    redirect = getattr(module, "redirect", None)
    if redirect is not None:
        if not isinstance(redirect, str):
            msg = f"Route module {py_file}: 'redirect' must be a str"
            raise ConfigError(msg)
        return [RouteDefinition(
            pattern=path,
            handler=None,
            methods=("GET",),
            name=route_name,
            source=py_file,
            redirect=redirect,
        )]

    definitions: list[RouteDefinition] = []

    for method_name in sorted(_METHOD_NAMES):
        func = getattr(module, method_name, None)
        if func is not None and callable(func):
            _validate_handler(func, method_name, py_file)
            definitions.append(RouteDefinition(
                pattern=path,
                handler=func,
                methods=(method_name.upper(),),
                name=f"{route_name}:{method_name.upper()}",
                source=py_file,
            ))

    # Catch-all ``handler`` (maps to GET), only if there is no explicit ``get``
    handler_func = getattr(module, _HANDLER_NAME, None)
    if handler_func is not None and callable(handler_func):
        has_get = any(d.methods == ("GET",) for d in definitions)
        if not has_get:
            _validate_handler(handler_func, _HANDLER_NAME, py_file)
            definitions.append(RouteDefinition(
                pattern=path,
                handler=handler_func,
                methods=("GET",),
                name=route_name,
                source=py_file,
            ))

    return definitions


def _validate_handler(func: object, name: str, source: Path) -> None:
    """Validate that a handler is async and accepts at least one parameter.

    Raises:
        ConfigError: If the handler is not async or has no parameters.

    """
    if not inspect.iscoroutinefunction(func):
        msg = (
            f"Route handler '{name}' in {source} must be an async function "
            f"(use 'async def {name}(request)')."
        )
        raise ConfigError(msg)

    sig = inspect.signature(func)  # type: ignore[arg-type]
    if len(sig.parameters) < 1:
        msg = (
            f"Route handler '{name}' in {source} must accept at least one "
            f"parameter (the RouteRequest object)."
        )
        raise ConfigError(msg)
