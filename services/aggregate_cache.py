"""Read-through cache for aggregate views (full listings).

One instance per view type: the ingredient listing and the expanded recipe
listing each get their own ``AggregateCache``. Entries never expire on a
timer; every code path that writes to a collection must invalidate the views
built from it.

Each key also has a generation that ``invalidate`` bumps. A rebuild reads the
generation before it touches the store and passes it back to ``store``; if a
write invalidated the key in the meantime the rebuilt value is discarded
instead of caching data from before that write.
"""

from typing import Dict, Generic, Optional, Tuple, TypeVar
import logging
import threading

logger = logging.getLogger("dynamicrecipes.cache")

T = TypeVar("T")


class AggregateCache(Generic[T]):
    """Keyed memoization store, safe to share between tasks and worker threads."""

    def __init__(self, name: str):
        self.name = name
        self._entries: Dict[str, T] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def load(self, key: str) -> Tuple[Optional[T], bool]:
        """Return ``(value, True)`` on a hit and ``(None, False)`` on a miss."""
        with self._lock:
            if key in self._entries:
                return self._entries[key], True
        return None, False

    def generation(self, key: str) -> int:
        with self._lock:
            return self._generations.get(key, 0)

    def store(self, key: str, value: T, if_generation: Optional[int] = None) -> bool:
        """
        Cache value under key.

        With ``if_generation`` the value is stored only if key has not been
        invalidated since that generation was read. Returns whether it was stored.
        """
        with self._lock:
            current = self._generations.get(key, 0)
            stale = if_generation is not None and current != if_generation
            if not stale:
                self._entries[key] = value
        if stale:
            logger.debug(
                "%s cache skipped %r (generation %d, now %d)",
                self.name, key, if_generation, current,
            )
            return False
        logger.debug("%s cache stored %r", self.name, key)
        return True

    def invalidate(self, key: str) -> None:
        """Drop the entry for key and bump its generation. Absent keys are fine."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            self._generations[key] = self._generations.get(key, 0) + 1
        if removed:
            logger.debug("%s cache invalidated %r", self.name, key)

    def clear(self) -> None:
        with self._lock:
            for key in set(self._entries) | set(self._generations):
                self._generations[key] = self._generations.get(key, 0) + 1
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
