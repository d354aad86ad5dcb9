"""Event log — the builder's item sink with synchronous observers.

Every BuildItem the builder produces passes through :meth:`EventLog.log`,
which appends it to the current run and hands it to each registered
observer in registration order before returning.

Thread Safety:
    Appends and observer dispatch happen under one re-entrant lock, so each
    observer sees whole items one at a time even when pages are built on
    worker threads.  Observers that raise are not shielded: the exception
    propagates to the caller of ``log``.

"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from staticbuilder.observability.events import BuildItem


@runtime_checkable
class Observer(Protocol):
    """Receives every logged item."""

    def on_item(self, item: BuildItem) -> None: ...


class ObserverHandle:
    """Registration returned by :meth:`EventLog.on_log`; call ``remove()`` to detach."""

    __slots__ = ("_callback", "_log")

    def __init__(self, log: EventLog, callback: Callable[[BuildItem], Any]) -> None:
        self._log = log
        self._callback = callback

    def remove(self) -> None:
        self._log._detach(self._callback)


class EventLog:
    """Ordered store of BuildItems for the current run."""

    __slots__ = ("_items", "_lock", "_observers")

    def __init__(self) -> None:
        self._items: list[BuildItem] = []
        self._observers: list[Callable[[BuildItem], Any]] = []
        self._lock = threading.RLock()

    def log(self, item: BuildItem, merge: dict[str, Any] | None = None) -> BuildItem:
        """Apply *merge*, record the item, notify observers, and return it."""
        if merge:
            item = item.merge(**merge)
        with self._lock:
            self._items.append(item)
            for callback in list(self._observers):
                callback(item)
        return item

    def on_log(self, observer: Observer | Callable[[BuildItem], Any]) -> ObserverHandle:
        """Register *observer* (an ``Observer`` or a plain callable)."""
        callback = observer.on_item if isinstance(observer, Observer) else observer
        with self._lock:
            self._observers.append(callback)
        return ObserverHandle(self, callback)

    def _detach(self, callback: Callable[[BuildItem], Any]) -> None:
        with self._lock:
            if callback in self._observers:
                self._observers.remove(callback)

    def items(self) -> tuple[BuildItem, ...]:
        with self._lock:
            return tuple(self._items)

    def query(self, *, type: str | None = None, status: str | None = None) -> list[BuildItem]:
        """Items matching *type* and/or *status*, oldest first."""
        with self._lock:
            return [
                item for item in self._items
                if (type is None or item.type == type)
                and (status is None or item.status == status)
            ]

    def clear(self) -> int:
        """Drop all items (observers stay registered); return the count cleared."""
        with self._lock:
            count = len(self._items)
            self._items.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
