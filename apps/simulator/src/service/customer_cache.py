"""
Cache of existing customer account ids.
"""

import time
from typing import Callable, List, Optional


class CustomerCache:
    """
    Holds the customer id list loaded from the directory.

    The list is loaded on first use and kept for `ttl_sec` seconds, or for
    the life of the cache object when no TTL is set. It may go stale when
    accounts change in between; callers accept that.
    """

    def __init__(self, ttl_sec: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_sec
        self._clock = clock
        self._ids: Optional[List[int]] = None
        self._loaded_at = 0.0

    def _expired(self) -> bool:
        # an empty list is never cached
        if not self._ids:
            return True
        return self._ttl is not None and self._clock() - self._loaded_at >= self._ttl

    def get(self, loader: Callable[[], List[int]]) -> List[int]:
        if self._expired():
            self._ids = list(loader())
            self._loaded_at = self._clock()
        return self._ids

    def invalidate(self) -> None:
        self._ids = None
