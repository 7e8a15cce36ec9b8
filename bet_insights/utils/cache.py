# bet_insights/utils/cache.py
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger


class ResponseCache(ABC):
    """Cache for provider responses, injected into providers."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Returns the cached value or None when missing/expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float) -> None:
        """Stores value for ttl seconds."""

    @abstractmethod
    def clear(self) -> None:
        pass


class TTLCache(ResponseCache):
    """Process-local cache with per-entry expiry.

    Expired entries are dropped when read, and swept in bulk whenever the
    number of entries grows past ``max_entries``.
    """

    def __init__(self, max_entries: int = 100, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        row = self._entries.get(key)
        if row is None:
            return None
        expires_at, value = row
        if expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        if ttl <= 0:
            return
        self._entries[key] = (self._clock() + ttl, value)
        if len(self._entries) > self.max_entries:
            self.evict_expired()

    def evict_expired(self) -> int:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache entries.")
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        return {"size": len(self._entries), "keys": list(self._entries.keys())}

    def __len__(self) -> int:
        return len(self._entries)


class NullCache(ResponseCache):
    """Caches nothing."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl: float) -> None:
        return None

    def clear(self) -> None:
        return None
