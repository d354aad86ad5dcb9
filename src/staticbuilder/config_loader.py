"""Load BuildConfig from staticbuilder.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.

Keys may sit at the top level of the file or under a ``staticbuilder:``
section.  Every key must name a :class:`BuildConfig` field; anything else is
rejected so that typos do not silently fall back to defaults.
"""

from __future__ import annotations

import dataclasses
import importlib.util
import sys
import tomllib
from pathlib import Path
from typing import Any

import yaml

from staticbuilder._errors import ConfigError
from staticbuilder.config import BuildConfig
from staticbuilder.routes.table import count_parameters

CONFIG_FILES = ("staticbuilder.yaml", "staticbuilder.yml", "staticbuilder.toml")

_SECTION = "staticbuilder"

_KNOWN_KEYS = frozenset(f.name for f in dataclasses.fields(BuildConfig)) - {"root"}

# Options that may name a ``module:attr`` callable in a config file
_CALLABLE_KEYS = ("filter", "with_files")


def load_config(
    root: Path,
    *,
    config_file: Path | bool | None = None,
    **overrides: Any,
) -> BuildConfig:
    """Load BuildConfig from root, optionally merging staticbuilder.yaml.

    Args:
        root: Project root.
        config_file: Explicit config file, *None* to look for one of
            :data:`CONFIG_FILES` in *root*, or *False* to skip file config.
        **overrides: BuildConfig fields; these win over file values.

    Raises:
        ConfigError: For unreadable files, unknown keys, unresolvable
            callables, or route patterns with more than one parameter.

    """
    root = Path(root).resolve()

    file_config: dict[str, Any] = {}
    if config_file is None or config_file is True:
        file_config = read_config_file(root)
    elif config_file is not False:
        file_config = parse_config_file(Path(config_file))

    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    _check_keys(merged)

    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    for key in _CALLABLE_KEYS:
        if isinstance(merged.get(key), str):
            merged[key] = resolve_callable(merged[key], root, key)
    for key in ("routes", "exclude_routes", "languages"):
        if isinstance(merged.get(key), str):
            merged[key] = (merged[key],)

    _check_routes(merged.get("routes", ()))

    try:
        return BuildConfig(root=root, **merged)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid configuration: {exc}"
        raise ConfigError(msg) from exc


def read_config_file(root: Path) -> dict[str, Any]:
    """Read the first config file found in *root*; empty dict if none."""
    for name in CONFIG_FILES:
        path = root / name
        if path.is_file():
            return parse_config_file(path)
    return {}


def parse_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML or TOML config file into BuildConfig keyword arguments.

    Raises:
        ConfigError: If the file is missing, malformed, or not a mapping.

    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc

    try:
        if path.suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        msg = f"Malformed config file {path}: {exc}"
        raise ConfigError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping"
        raise ConfigError(msg)
    return _flatten_section(data, path)


def _flatten_section(data: dict[str, Any], path: Path) -> dict[str, Any]:
    """Use the ``staticbuilder`` section when present, else the whole file."""
    if _SECTION not in data:
        return dict(data)
    section = data[_SECTION]
    if not isinstance(section, dict):
        msg = f"Config file {path}: '{_SECTION}' must be a mapping"
        raise ConfigError(msg)
    return dict(section)


def _check_keys(options: dict[str, Any]) -> None:
    unknown = sorted(set(options) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown config option(s): {', '.join(unknown)}"
        raise ConfigError(msg)


def _check_routes(routes: Any) -> None:
    for route in routes:
        if isinstance(route, str) and count_parameters(route) > 1:
            msg = (
                f"Route pattern {route!r} has more than one parameter; "
                "only one {param} segment can be expanded"
            )
            raise ConfigError(msg)


def resolve_callable(target: str, root: Path, option: str) -> Any:
    """Resolve ``module:attr`` against ``<root>/<module>.py``.

    Raises:
        ConfigError: If the module or attribute cannot be found, or the
            attribute is not callable.

    """
    module_part, _, attr = target.partition(":")
    if not module_part or not attr:
        msg = f"{option} {target!r}: expected 'module:attr'"
        raise ConfigError(msg)

    py_file = root / (module_part.replace(".", "/") + ".py")
    if not py_file.is_file():
        msg = f"{option} {target!r}: {py_file} not found"
        raise ConfigError(msg)

    module_name = f"staticbuilder_config_{module_part.replace('.', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        msg = f"{option} {target!r}: failed to load {py_file}"
        raise ConfigError(msg)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        msg = f"{option} {target!r}: failed to load {py_file}: {exc}"
        raise ConfigError(msg) from exc

    callable_obj = getattr(module, attr, None)
    if not callable(callable_obj):
        msg = f"{option} {target!r}: {attr} not callable in {py_file}"
        raise ConfigError(msg)
    return callable_obj
