"""
Push-style change delivery for the document store.

Writes publish the collection path they touched on a ChangeBus. A Subscription
watches one collection, recomputes its snapshot on every change and hands it to
a single consumer, either a callback or an unbounded queue read with get().
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Dict, List, Optional

log = logging.getLogger("store.realtime")

Listener = Callable[[str], None]


class ChangeBus:
    """Thread-safe fan-out of 'collection changed' events to listeners."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[Listener]] = {}

    def watch(self, collection: str, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(collection, []).append(listener)

        def _unwatch() -> None:
            with self._lock:
                listeners = self._listeners.get(collection, [])
                if listener in listeners:
                    listeners.remove(listener)
                if not listeners:
                    self._listeners.pop(collection, None)

        return _unwatch

    def publish(self, collection: str) -> None:
        with self._lock:
            listeners = list(self._listeners.get(collection, []))
        for listener in listeners:
            try:
                listener(collection)
            except Exception:
                log.exception("Change listener failed for %s", collection)

    def listener_count(self, collection: str) -> int:
        with self._lock:
            return len(self._listeners.get(collection, []))


class Subscription:
    """
    Single-consumer stream of snapshots for one watched collection.

    With a callback every snapshot is passed to it as soon as it is computed.
    Without one, snapshots queue up (no bound, no dropping) and are read with
    get(). Call unsubscribe() (or leave a `with` block) to stop delivery.
    """

    def __init__(self, snapshot: Callable[[], Any], callback: Optional[Callable[[Any], None]] = None):
        self._snapshot = snapshot
        self._callback = callback
        self._queue: "queue.SimpleQueue[Any]" = queue.SimpleQueue()
        self._unwatch: Optional[Callable[[], None]] = None
        self._closed = False

    def attach(self, unwatch: Callable[[], None]) -> None:
        self._unwatch = unwatch

    def refresh(self, _collection: str | None = None) -> None:
        if self._closed:
            return
        snapshot = self._snapshot()
        if self._callback is not None:
            self._callback(snapshot)
        else:
            self._queue.put(snapshot)

    def get(self, timeout: float | None = None) -> Any:
        """Next pending snapshot. Raises queue.Empty when none arrives in time."""
        return self._queue.get(timeout=timeout)

    def drain(self) -> List[Any]:
        items = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                return items

    @property
    def closed(self) -> bool:
        return self._closed

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


def open_subscription(
    store,
    collection: str,
    snapshot: Callable[[], Any],
    callback: Optional[Callable[[Any], None]] = None,
) -> Subscription:
    """Watch `collection` on `store`, deliver the current snapshot, then one per change."""
    sub = Subscription(snapshot, callback)
    sub.attach(store.watch(collection, sub.refresh))
    try:
        sub.refresh()
    except Exception:
        sub.unsubscribe()
        raise
    return sub


__all__ = ["ChangeBus", "Subscription", "open_subscription"]
