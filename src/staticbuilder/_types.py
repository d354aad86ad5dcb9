"""Shared type definitions for staticbuilder."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from pathlib import Path

# Kind of artifact a BuildItem describes
type ItemType = Literal[
    "page", "route", "redirect", "asset", "dir", "file", "redirects-map",
]

# Outcome of building (or inspecting) an item; "" before classification
type ItemStatus = Literal[
    "",
    "generated",
    "outdated",
    "uptodate",
    "missing",
    "ignore",
    "invalid",
    "included",
    "failed",
]

# Language code, or None for single-language sites
type LanguageCode = str | None

# Page filter outcome: a flag, or a flag plus the reason for exclusion
type FilterResult = bool | tuple[bool, str]

# Page inclusion predicate
type PagePredicate = Callable[[Any], FilterResult]

# Attached-file predicate for ``with_files``
type FilePredicate = Callable[[Path], bool]

# Filesystem modification time (seconds since the epoch)
type Timestamp = float
