"""Console banner — build header, results line and render diagnostics.

Everything here goes to stderr so that stdout stays clean for item lines
and JSON output.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from staticbuilder._errors import RenderError
    from staticbuilder.config import BuildConfig


# ---------------------------------------------------------------------------
# ANSI helpers, respecting NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""


_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (_YELLOW, "build"),
    "list": (_CYAN, "list"),
    "watch": (_GREEN, "watch"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: BuildConfig,
    page_count: int,
    mode: str,
    *,
    route_count: int = 0,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the build header to stderr.

    Args:
        config: Resolved BuildConfig.
        page_count: Number of content pages found.
        mode: One of ``"build"``, ``"list"``, ``"watch"``.
        route_count: Number of programmatic routes discovered.
        load_ms: Time spent loading the site in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from staticbuilder import __version__

    lines: list[str] = [
        "",
        f"  {_BOLD}staticbuilder{_RESET} {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {_plural(page_count, 'page')} loaded{timing}")
    if route_count > 0:
        lines.append(f"  {_DIM}├─{_RESET} {_plural(route_count, 'route')}")

    languages = ", ".join(config.languages) or "default"
    lines.append(f"  {_DIM}├─{_RESET} languages: {languages}")
    lines.append(f"  {_DIM}├─{_RESET} base url: {_DIM}{config.base_url or './'}{_RESET}")
    lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")

    if mode == "watch":
        lines.append("")
        lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")
    print("\n".join(lines), file=sys.stderr)


def print_results(stats: str, elapsed_ms: float, *, write: bool) -> None:
    """Print the per-status counts and timing after a run."""
    verb = "Built" if write else "Listed"
    lines = [
        "",
        "─" * 41,
        f"  Results: {stats or 'nothing to do'}",
        f"  {verb} in {elapsed_ms:.0f}ms",
    ]
    print("\n".join(lines), file=sys.stderr)


def print_render_failure(error: RenderError) -> None:
    """Print the diagnostic for a render crash that aborted the run."""
    lines = [
        "",
        f"  {_RED}{_BOLD}Build aborted{_RESET}: the renderer failed.",
    ]
    if error.last_item:
        lines.append(f"  {_DIM}├─{_RESET} last item: {error.last_item}")
    cause = error.__cause__
    if cause is not None:
        lines.append(f"  {_DIM}└─{_RESET} {type(cause).__name__}: {cause}")
    else:
        lines.append(f"  {_DIM}└─{_RESET} {error}")
    lines.append("")
    print("\n".join(lines), file=sys.stderr)
