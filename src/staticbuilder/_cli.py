"""Staticbuilder CLI — staticbuilder build / list / watch.

Entry point for the ``staticbuilder`` command-line interface.

Exit codes:
    0  success
    1  usage error, missing content/config, or a render crash
    2  at least one item is ``missing`` (``list`` found work to do)
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import NoReturn

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISSING = 2


class _ArgumentParser(argparse.ArgumentParser):
    """Parser that reports usage errors with exit code 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_ERROR, f"{self.prog}: error: {message}\n")


def _config_file(value: str) -> Path | bool:
    """``--config=false`` disables config files; anything else is a path."""
    if value.lower() == "false":
        return False
    return Path(value)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("pages", nargs="*", help="Build these page ids instead of the entire site")
    parser.add_argument("--root", default=".", help="Project root directory")
    parser.add_argument(
        "--config",
        type=_config_file,
        default=None,
        metavar="PATH|false",
        help="Config file (default: staticbuilder.yaml in the root); 'false' to disable",
    )
    parser.add_argument("--output", default=None, help="Output directory")
    parser.add_argument(
        "--base-url", default=None, help="Base URL for links ('' or './' for relative URLs)",
    )
    parser.add_argument(
        "--json", action="store_true", help="Output data and outcome for each item as JSON",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress output")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the staticbuilder CLI."""
    parser = _ArgumentParser(
        prog="staticbuilder",
        description="Export a content site as static files.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    build_parser = subparsers.add_parser(
        "build",
        help="Build entire site (or specific pages)",
    )
    _add_common(build_parser)

    list_parser = subparsers.add_parser(
        "list",
        help="List items that would be built but don't write anything",
    )
    _add_common(list_parser)

    watch_parser = subparsers.add_parser(
        "watch",
        help="Build the site and rebuild on changes",
    )
    _add_common(watch_parser)

    return parser


def _get_version() -> str:
    """Get the package version."""
    from staticbuilder import __version__

    return __version__


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.output is not None:
        overrides["output"] = Path(args.output)
    if args.base_url is not None:
        overrides["base_url"] = args.base_url
    return overrides


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_ERROR)

    sys.exit(_run(args))


def _run(args: argparse.Namespace) -> int:
    from staticbuilder._errors import RenderError, StaticBuilderError
    from staticbuilder.app import run, watch
    from staticbuilder.banner import print_render_failure, print_results
    from staticbuilder.observability import ItemPrinter, JsonCollector, StatusCounter

    quiet = args.quiet or args.json
    write = args.command != "list"

    counter = StatusCounter(("generated", "failed") if write else ("outdated", "uptodate"))
    observers: list[object] = [counter]
    if not quiet:
        observers.append(ItemPrinter())
    collector = JsonCollector()
    if args.json:
        observers.append(collector)

    t0 = time.perf_counter()
    try:
        if args.command == "watch":
            watch(
                args.root,
                observers=observers,
                config_file=args.config,
                banner=not quiet,
                **_overrides(args),
            )
            return EXIT_OK
        run(
            args.root,
            args.pages,
            write=write,
            observers=observers,
            config_file=args.config,
            banner=not quiet,
            **_overrides(args),
        )
    except RenderError as exc:
        print_render_failure(exc)
        return EXIT_ERROR
    except StaticBuilderError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if not quiet:
        print_results(counter.line(), (time.perf_counter() - t0) * 1000, write=write)
    if args.json:
        print(collector.dumps())

    if counter.counts.get("missing", 0) > 0:
        return EXIT_MISSING
    return EXIT_OK


if __name__ == "__main__":
    main()
