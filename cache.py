"""Thread-safe in-memory LRU cache for weather data."""

import logging
import threading
import time
from collections import OrderedDict

from config import CACHE_CAPACITY, FRESHNESS_WINDOW
from errors import InvalidArgument
from models import CacheEntry

log = logging.getLogger(__name__)


class WeatherCache:
    """Bounded city -> CacheEntry map, least-recently-used first.

    Reads (``get``/``get_fresh``) and writes (``put``) both count as a use.
    Every operation holds the lock only for the dict manipulation itself;
    callers must never do I/O while inside it.
    """

    def __init__(self, capacity=CACHE_CAPACITY, freshness=FRESHNESS_WINDOW, clock=time.time):
        if capacity < 1:
            raise InvalidArgument(f"Cache capacity must be >= 1, got {capacity}")
        self._lock = threading.Lock()
        self._entries = OrderedDict()  # city -> CacheEntry, oldest use first
        self._closed = False
        self.capacity = capacity
        self.freshness = freshness
        self._clock = clock

    def get(self, city):
        with self._lock:
            entry = self._entries.get(city)
            if entry is not None:
                self._entries.move_to_end(city)
            return entry

    def get_fresh(self, city):
        """Return the cached payload if younger than the freshness window, else None."""
        with self._lock:
            entry = self._entries.get(city)
            if entry is None:
                log.debug("Cache miss for %s", city)
                return None
            self._entries.move_to_end(city)
            if self._clock() - entry.fetched_at < self.freshness:
                log.debug("Cache hit for %s", city)
                return entry.payload
            log.debug("Cache entry for %s is stale", city)
            return None

    def put(self, city, payload):
        """Store payload for city. Returns None without storing once closed."""
        entry = CacheEntry(payload=payload, fetched_at=self._clock())
        with self._lock:
            if self._closed:
                log.debug("Cache closed, dropping result for %s", city)
                return None
            self._entries[city] = entry
            self._entries.move_to_end(city)
            if len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("Evicted %s from cache", evicted)
        return entry

    def age(self, city):
        """Return seconds since the city was stored, or None if not cached."""
        with self._lock:
            entry = self._entries.get(city)
            if entry:
                return self._clock() - entry.fetched_at
            return None

    def snapshot_keys(self):
        with self._lock:
            return list(self._entries)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def close(self):
        """Clear the cache and refuse any later put."""
        with self._lock:
            self._closed = True
            self._entries.clear()

    @property
    def closed(self):
        return self._closed

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, city):
        with self._lock:
            return city in self._entries
