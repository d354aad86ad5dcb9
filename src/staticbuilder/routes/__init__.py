"""Routes layer — programmatic routes exported next to content pages.

Route modules live in the project's ``routes/`` directory and are collected
into an ordered :class:`RouteTable` that the builder queries and executes.
"""

from staticbuilder.routes.loader import discover_routes, load_route_table
from staticbuilder.routes.table import (
    RouteDefinition,
    RouteMatch,
    RouteRequest,
    RouteTable,
    run_route,
)

__all__ = [
    "RouteDefinition",
    "RouteMatch",
    "RouteRequest",
    "RouteTable",
    "discover_routes",
    "load_route_table",
    "run_route",
]
