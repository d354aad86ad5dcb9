"""Build observability — structured records and their observers.

Every page, route, asset and redirect map the builder touches becomes one
frozen :class:`BuildItem`.  Items flow through an :class:`EventLog`, which
keeps them for the run's :class:`RunSummary` and dispatches them to
observers as they are produced.

Quick Start:
    >>> from staticbuilder.observability import EventLog, ItemPrinter
    >>> log = EventLog()
    >>> handle = log.on_log(ItemPrinter())
    >>> # Builder.run(...) now prints one line per item
    >>> handle.remove()

"""

from staticbuilder.observability.events import BuildItem, RunSummary
from staticbuilder.observability.log import EventLog, Observer, ObserverHandle
from staticbuilder.observability.observers import (
    ItemPrinter,
    JsonCollector,
    StatusCounter,
    format_item,
    nice_size,
)

__all__ = [
    "BuildItem",
    "EventLog",
    "ItemPrinter",
    "JsonCollector",
    "Observer",
    "ObserverHandle",
    "RunSummary",
    "StatusCounter",
    "format_item",
    "nice_size",
]
