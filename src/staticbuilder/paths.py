"""Path utilities — lexical path handling and output containment.

All functions here are purely lexical: they never touch the filesystem and
never resolve symlinks.  Paths are handled as ``/``-separated strings so the
same rules apply to filesystem destinations and to URLs.

The :class:`OutputGuard` enforces the single security invariant of the
exporter: nothing is written, copied, or reported as in-scope outside the
configured output root.
"""

from __future__ import annotations

import re

_ABSOLUTE_RE = re.compile(r"^([/\\]|[a-z]:)", re.IGNORECASE)
_SLASHES_RE = re.compile(r"[/\\]+")
_DOT_RUN_RE = re.compile(r"\.{2,}")


def is_absolute_path(path: str) -> bool:
    """Return True if *path* starts with a separator or a drive letter.

    ``/var/www``, ``\\\\server``, ``C:/site`` and ``c:site`` are absolute;
    ``assets`` and ``./assets`` are not.

    """
    return _ABSOLUTE_RE.match(path) is not None


def normalize_slashes(path: str, sep: str = "/") -> str:
    """Collapse every run of forward/back slashes into a single *sep*."""
    return _SLASHES_RE.sub(lambda _m: sep, path)


def normalize_path(path: str, sep: str = "/") -> str:
    """Resolve ``.`` and ``..`` segments lexically.

    ``..`` removes the preceding segment.  A ``..`` with nothing left to
    remove is kept literally so that :meth:`OutputGuard.filter_path` can still
    see it.  Runs of dots inside other segments collapse to a single dot, and
    empty or ``.`` segments are dropped.  A leading separator is preserved.

        ``/a/b/../c``   -> ``/a/c``
        ``a//./b/``     -> ``a/b``
        ``../x``        -> ``../x``

    """
    path = normalize_slashes(path, sep)
    out: list[str] = []
    for segment in path.split(sep):
        if segment == "..":
            if out and out[-1] != "..":
                out.pop()
            else:
                out.append(segment)
            continue
        segment = _DOT_RUN_RE.sub(".", segment)
        if segment in ("", "."):
            continue
        out.append(segment)
    prefix = sep if path.startswith(sep) else ""
    return prefix + sep.join(out)


def relative_url(from_path: str = "", to_path: str = "") -> str:
    """Build a relative URL leading from *from_path* to *to_path*.

    Both paths are treated as absolute from the same root.  Shared leading
    segments are dropped, then one ``../`` is emitted per remaining directory
    of *from_path*.  When *from_path* is exhausted (the target sits next to or
    below it), the last shared segment is handed back to *to_path* so that
    sibling files are not over-ascended.

        ``/a/b/index.html`` -> ``/a/c/index.html``        = ``./../c/index.html``
        ``/a/b/index.html`` -> ``/a/b/page2/index.html``  = ``./page2/index.html``
        ``/a/index.html``   -> ``/a/index.html``          = ``./index.html``

    """
    source = from_path.lstrip("/").split("/")
    target = to_path.lstrip("/").split("/")
    last = ""
    while source and target and source[0] == target[0]:
        last = source.pop(0)
        target.pop(0)

    if not source:
        if last:
            target.insert(0, last)
        return "./" + "/".join(target)
    return "./" + "../" * (len(source) - 1) + "/".join(target)


class OutputGuard:
    """Containment check for paths under an output root.

    Args:
        root: Absolute, normalized output directory (no trailing separator).

    """

    __slots__ = ("_root",)

    def __init__(self, root: str) -> None:
        self._root = root.rstrip("/")

    @property
    def root(self) -> str:
        """The output root every accepted path must descend from."""
        return self._root

    def filter_path(self, absolute_path: str) -> bool:
        """Return True if *absolute_path* is a strict descendant of the root.

        Any path still containing ``..`` is rejected outright, even if a
        prefix match would succeed.

        """
        if ".." in absolute_path:
            return False
        return absolute_path.startswith(self._root + "/")

    def display(self, absolute_path: str) -> str:
        """Return *absolute_path* relative to the root, for reports.

        Paths outside the root are returned unchanged.

        """
        if absolute_path.startswith(self._root + "/"):
            return absolute_path[len(self._root) + 1:]
        return absolute_path
