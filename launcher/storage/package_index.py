"""
In-memory set of installed packages.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, FrozenSet, Iterable, List

from launcher.domain.models import PackageIdentifier

logger = logging.getLogger(__name__)

IndexListener = Callable[[FrozenSet[PackageIdentifier]], None]


class InstalledPackageIndex:
    """
    Lock-guarded set of installed identifiers.

    Readers only ever receive frozen snapshots. Listeners are called with the
    new snapshot after every change, outside the lock.
    """

    def __init__(self, initial: Iterable[PackageIdentifier] = ()):
        self._lock = threading.Lock()
        self._items = set(initial)
        self._listeners: List[IndexListener] = []

    def snapshot(self) -> FrozenSet[PackageIdentifier]:
        with self._lock:
            return frozenset(self._items)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def add(self, identifier: PackageIdentifier) -> None:
        with self._lock:
            self._items.add(identifier)
            snapshot = frozenset(self._items)
        self._publish(snapshot)

    def discard(self, identifier: PackageIdentifier) -> None:
        with self._lock:
            self._items.discard(identifier)
            snapshot = frozenset(self._items)
        self._publish(snapshot)

    def subscribe(self, listener: IndexListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: FrozenSet[PackageIdentifier]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Index listener failed: {e}", exc_info=True)
