"""Route table — ordered URL patterns with handlers or redirect targets.

Patterns are ``/``-separated paths without a leading slash.  A segment may
contain ``{name}`` placeholders, which match one path segment::

    search               -> matches "search"
    blog/{slug}          -> matches "blog/hello", arguments {"slug": "hello"}
    tags/{tag}/feed.xml  -> matches "tags/python/feed.xml"

The builder only needs three things from the table: the list of GET
patterns (to expand the ``*`` wildcard), matching a concrete URI to a route,
and executing the matched handler against a :class:`RequestContext`.
"""

from __future__ import annotations

import asyncio
import inspect
import io
import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from staticbuilder._errors import RouteError

if TYPE_CHECKING:
    from staticbuilder.content.models import RequestContext

_PARAM_RE = re.compile(r"\{([^/{}]+)\}")


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A single registered route.

    Attributes:
        pattern: URL pattern (e.g., ``search``, ``blog/{slug}``).
        handler: Callable accepting a :class:`RouteRequest`, or *None* for
            pure redirects.
        methods: HTTP methods this route responds to.
        name: Route name for debugging and reports.
        source: Filesystem path to the originating module, if any.
        redirect: Redirect target; when set the route is a redirect.

    """

    pattern: str
    handler: Callable[..., Any] | None
    methods: tuple[str, ...] = ("GET",)
    name: str = ""
    source: Path | None = None
    redirect: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A route matched against a concrete URI."""

    definition: RouteDefinition
    arguments: Mapping[str, str] = field(default_factory=dict)

    @property
    def pattern(self) -> str:
        return self.definition.pattern

    @property
    def redirect(self) -> str | None:
        return self.definition.redirect


@dataclass(frozen=True, slots=True)
class RouteRequest:
    """What a route handler receives.

    Handlers may return their output, or write it to ``out``.  A non-empty
    return value takes precedence over anything written to ``out``.

    """

    context: RequestContext
    arguments: Mapping[str, str]
    out: io.StringIO = field(default_factory=io.StringIO)

    @property
    def uri(self) -> str:
        return self.context.uri

    @property
    def language(self) -> str | None:
        return self.context.language

    def url(self, path: str = "") -> str:
        """Internal URL for *path*, rewritten later by the builder."""
        return self.context.url(path)

    def write(self, text: str) -> None:
        self.out.write(text)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a route pattern into an anchored regular expression."""
    parts: list[str] = []
    pos = 0
    for m in _PARAM_RE.finditer(pattern):
        parts.append(re.escape(pattern[pos:m.start()]))
        parts.append(f"(?P<{m.group(1)}>[^/]+)")
        pos = m.end()
    parts.append(re.escape(pattern[pos:]))
    return re.compile("^" + "".join(parts) + "$")


def count_parameters(pattern: str) -> int:
    """Number of ``{name}`` placeholders in *pattern*."""
    return len(_PARAM_RE.findall(pattern))


class RouteTable:
    """Ordered collection of routes, matched first-to-last.

    Args:
        definitions: Initial route definitions, in priority order.

    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self, definitions: tuple[RouteDefinition, ...] = ()) -> None:
        self._routes: list[RouteDefinition] = []
        self._compiled: list[re.Pattern[str] | None] = []
        for defn in definitions:
            self.add(defn)

    def add(self, definition: RouteDefinition) -> RouteDefinition:
        """Register *definition* after all existing routes.

        Raises:
            RouteError: If the same pattern is already registered for one of
                the definition's methods.

        """
        pattern = definition.pattern.strip("/")
        if pattern != definition.pattern:
            definition = RouteDefinition(
                pattern=pattern,
                handler=definition.handler,
                methods=definition.methods,
                name=definition.name,
                source=definition.source,
                redirect=definition.redirect,
            )
        for existing in self._routes:
            if existing.pattern == pattern and set(existing.methods) & set(definition.methods):
                msg = f"Duplicate route pattern {pattern!r} for {definition.methods}"
                raise RouteError(msg)

        self._routes.append(definition)
        # Regex-style patterns are kept for listing but never matched
        self._compiled.append(None if "(" in pattern else compile_pattern(pattern))
        return definition

    def route(
        self,
        pattern: str,
        *,
        methods: tuple[str, ...] = ("GET",),
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a handler for *pattern*."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.add(RouteDefinition(
                pattern=pattern,
                handler=func,
                methods=methods,
                name=name or f"route:{pattern.strip('/')}",
            ))
            return func

        return decorator

    def redirect(self, pattern: str, target: str) -> RouteDefinition:
        """Register a redirect from *pattern* to *target*."""
        return self.add(RouteDefinition(
            pattern=pattern,
            handler=None,
            name=f"redirect:{pattern.strip('/')}",
            redirect=target,
        ))

    def patterns(self, method: str = "GET") -> tuple[str, ...]:
        """Patterns of every route answering *method*, in table order."""
        method = method.upper()
        return tuple(r.pattern for r in self._routes if method in r.methods)

    def match(self, uri: str, method: str = "GET") -> RouteMatch | None:
        """Return the first route matching *uri*, or *None*."""
        uri = uri.strip("/")
        method = method.upper()
        for defn, regex in zip(self._routes, self._compiled, strict=True):
            if regex is None or method not in defn.methods:
                continue
            m = regex.match(uri)
            if m is not None:
                return RouteMatch(definition=defn, arguments=m.groupdict())
        return None

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[RouteDefinition]:
        return iter(self._routes)


def run_route(match: RouteMatch, context: RequestContext) -> str:
    """Execute the matched handler and capture its output.

    Async handlers are driven to completion with ``asyncio.run``.  A
    non-empty return value wins over text written to ``request.out``.

    """
    handler = match.definition.handler
    if handler is None:
        return ""

    request = RouteRequest(context=context, arguments=match.arguments)
    result = handler(request)
    if inspect.isawaitable(result):
        result = asyncio.run(_await(result))

    if isinstance(result, bytes):
        result = result.decode("utf-8")
    if result:
        return str(result)
    return request.out.getvalue()


async def _await(awaitable: Any) -> Any:
    return await awaitable
