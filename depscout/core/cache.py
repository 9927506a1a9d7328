"""Memoizing cache for latest-version lookups.

Each resolver owns one :class:`VersionCache`. A key maps to the latest
known version, or to ``None`` when the upstream lookup failed; both are
final for the lifetime of the cache. Absence of a key means "not yet
looked up".

Lookups use double-checked locking per key: the first check is
lock-free, and a second check runs under the key's ``asyncio.Lock`` so
that concurrent requests for the same key trigger a single fetch.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Iterator, Optional

from depscout.utils.logger import get_logger

logger = get_logger("cache")

#: Coroutine factory performing the actual upstream lookup.
Fetcher = Callable[[], Awaitable[Optional[str]]]


class VersionCache:
    """Process-lifetime mapping of lookup key → latest version.

    Args:
        name: Label used in log messages (e.g. ``"npm"``).

    Example::

        cache = VersionCache("npm")
        latest = await cache.get_or_fetch("left-pad", fetch_left_pad)
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._values: Dict[str, Optional[str]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def get(self, key: str) -> Optional[str]:
        """Return the cached value (``None`` for both misses and failures)."""
        return self._values.get(key)

    async def get_or_fetch(self, key: str, fetch: Fetcher) -> Optional[str]:
        """Return the cached value for ``key``, calling ``fetch`` on a miss.

        Exceptions raised by ``fetch`` propagate and leave the key
        uncached, so a later call retries.
        """
        if key in self._values:
            return self._values[key]

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key in self._values:
                return self._values[key]

            value = await fetch()
            self._values[key] = value
            logger.debug("Cached %s[%s] = %s", self.name or "cache", key, value)
            return value
