"""Short-lived memoization of registry lookups."""

import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, Optional

from .parsers import DependencyRecord
from ..utils.logging import get_logger


@dataclass(frozen=True)
class RegistryLookup:
    """Outcome of one latest-version lookup."""

    name: str
    latest: Optional[str] = None
    error: Optional[str] = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.latest is not None


class ResultCache:
    """Whole-pool TTL cache of ``name -> latest version`` for one registry.

    Entries never expire individually: once ``ttl`` seconds have passed since
    the last :meth:`update`, the next update clears everything and the cache
    refills lazily. :meth:`get` never stores; only :meth:`update` does, after
    a whole pass has been fetched.

    Instances belong to a single event loop and are not locked.
    """

    def __init__(self, ttl: float = 30.0, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the cache.

        Args:
            ttl: Seconds after which the whole cache is dropped
            clock: Monotonic time source, injectable for tests
        """
        if ttl < 0:
            raise ValueError(f"Cache TTL cannot be negative: {ttl}")
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, str] = {}
        self._last_updated = clock()
        self.hits = 0
        self.misses = 0
        self.logger = get_logger(__name__)

    async def get(
        self,
        record: DependencyRecord,
        fallback: Callable[[str], Awaitable[str]]
    ) -> str:
        """Return the cached latest version, or await ``fallback(name)``.

        The fallback's result is not stored; errors it raises propagate.
        """
        cached = self._entries.get(record.name)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        return await fallback(record.name)

    def update(self, lookups: Iterable[RegistryLookup]) -> None:
        """Record a finished pass.

        Clears the cache if the TTL has elapsed since the previous update,
        otherwise stores every successful lookup. The update time is reset
        either way.
        """
        now = self._clock()
        if now - self._last_updated >= self.ttl:
            self.logger.debug(f"Cache expired, dropping {len(self._entries)} entries")
            self._entries.clear()
        else:
            for lookup in lookups:
                if lookup.ok:
                    self._entries[lookup.name] = lookup.latest
        self._last_updated = now

    def peek(self, name: str) -> Optional[str]:
        return self._entries.get(name)

    def clear(self) -> None:
        self._entries.clear()
        self._last_updated = self._clock()

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
