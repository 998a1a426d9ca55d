"""
Keyed Store — per-agent state owned by a single component instance.

Every component that keeps per-agent state (baselines, metric history,
derived baselines) holds its own KeyedStore instead of a module-level map,
so independent engine instances never share state.

Writers to the same key are serialized with a per-key lock:

    with store.locked(agent_id):
        history = store.setdefault(agent_id, factory)
        history.append(record)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar

V = TypeVar("V")


class KeyedStore(Generic[V]):

    def __init__(self):
        self._items: Dict[str, V] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[V]:
        return self._items.get(key)

    def set(self, key: str, value: V) -> None:
        self._items[key] = value

    def setdefault(self, key: str, factory: Callable[[], V]) -> V:
        if key not in self._items:
            self._items[key] = factory()
        return self._items[key]

    def keys(self) -> List[str]:
        return list(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    # ------------------------------------------------------------------
    # Single-writer-per-key
    # ------------------------------------------------------------------

    @contextmanager
    def locked(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.RLock())
        with lock:
            yield
