"""Decision cache: Redis when REDIS_URL is set and reachable, in-process LRU otherwise."""

import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Optional

import redis as redis_lib

from safecheck import config

logger = logging.getLogger("cache")


class MemoryBackend:
    """LRU map with a per-entry expiry. Thread-safe."""

    def __init__(self, max_entries: int, clock=time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._data = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= self._clock():
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._data[key] = (self._clock() + ttl, value)
            self._data.move_to_end(key)
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class RedisBackend:
    def __init__(self, client):
        self.client = client

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(key)
        except redis_lib.RedisError as e:
            logger.warning("Redis get failed for %s: %s", key, e)
            return None
        return json.loads(raw) if raw else None

    def set(self, key: str, value: Any, ttl: int) -> None:
        try:
            self.client.setex(key, ttl, json.dumps(value))
        except redis_lib.RedisError as e:
            logger.warning("Redis set failed for %s: %s", key, e)

    def clear(self) -> None:
        # shared store; entries expire on their own
        pass


class ResultCache:
    """Caches decisions under "check:<url>" for CACHE_TTL_SECONDS."""

    def __init__(self, backend=None, ttl: int = None):
        self.backend = backend or MemoryBackend(config.CACHE_MAX_ENTRIES)
        self.ttl = config.CACHE_TTL_SECONDS if ttl is None else ttl

    @staticmethod
    def key(url: str) -> str:
        return f"check:{url}"

    def get(self, url: str) -> Optional[dict]:
        return self.backend.get(self.key(url))

    def set(self, url: str, decision: dict) -> None:
        self.backend.set(self.key(url), decision, self.ttl)

    def clear(self) -> None:
        self.backend.clear()


def create_cache(redis_url: str = None) -> ResultCache:
    if redis_url:
        try:
            client = redis_lib.from_url(redis_url)
            client.ping()
            logger.info("Using Redis at %s for result cache", redis_url)
            return ResultCache(RedisBackend(client))
        except Exception:
            logger.exception("Failed to connect to Redis, falling back to in-memory cache")
    return ResultCache()
