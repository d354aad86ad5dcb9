"""Staticbuilder error hierarchy.

All staticbuilder-specific errors inherit from StaticBuilderError for easy catching.
Recoverable build outcomes (ignored paths, unmatched routes, failed writes) are
reported as BuildItem statuses instead.
"""


class StaticBuilderError(Exception):
    """Base error for all staticbuilder operations."""


class ConfigError(StaticBuilderError):
    """Invalid or missing configuration."""


class ContentError(StaticBuilderError):
    """Error while reading the content tree."""


class RouteError(StaticBuilderError):
    """Invalid route table usage."""


class ExportError(StaticBuilderError):
    """Error during static export."""


class RenderError(ExportError):
    """The host renderer crashed while building an item.

    Attributes:
        last_item: Identifier (content file or route pattern) of the item
            that was being built when the renderer failed.

    """

    def __init__(self, message: str, *, last_item: str | None = None) -> None:
        super().__init__(message)
        self.last_item = last_item
