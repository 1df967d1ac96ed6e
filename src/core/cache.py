"""Small in-memory TTL cache with LRU eviction.

Store values with a clock-based expiration timestamp and evict the least
recently used entry before an insert would exceed maxsize. Expiry is lazy:
reads drop expired entries, prune() is the only eager sweep.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Generic, Mapping, Optional, TypeVar

from core.clock import Clock, system_clock

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    # Stores value + clock-based expiration time
    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """Bounded key/value store with per-entry expiry and LRU eviction.

    The OrderedDict is kept in recency order: the first item is the least
    recently used one and is always the next eviction candidate. get() and
    overwriting set() move a key to the end.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 3600.0,
        maxsize: int = 1000,
        clock: Clock = system_clock,
    ) -> None:
        ttl = float(ttl_seconds)
        size = int(maxsize)
        if ttl < 0:
            raise ValueError("ttl_seconds must be >= 0")
        if size < 0:
            raise ValueError("maxsize must be >= 0")

        self._ttl = ttl
        self._maxsize = size
        self._clock = clock
        self._store: "OrderedDict[object, CacheEntry[T]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def size(self) -> int:
        # Counts expired entries that were not read or pruned yet
        return len(self._store)

    def get(self, key: object, default: Any = None) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return default

        if self._is_expired(entry, self._clock()):
            del self._store[key]
            logger.debug("cache.expired", extra={"cache_key": _short(key)})
            return default

        # Move to end to mark as recently used
        self._store.move_to_end(key, last=True)
        return entry.value

    def set(self, key: object, value: T, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._ttl if ttl_seconds is None else float(ttl_seconds)
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl)

        if key in self._store:
            # Overwrite is a recency touch, not a new entry
            self._store[key] = entry
            self._store.move_to_end(key, last=True)
            return

        while self._store and len(self._store) >= self._maxsize:
            evicted, _ = self._store.popitem(last=False)
            logger.debug("cache.evicted", extra={"cache_key": _short(evicted)})

        if self._maxsize == 0:
            return

        self._store[key] = entry

    def has(self, key: object) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def delete(self, key: object) -> bool:
        return self._store.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        self._store.clear()

    def prune(self) -> int:
        """Remove every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [k for k, entry in self._store.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._store[key]
        return len(expired)

    @staticmethod
    def _is_expired(entry: CacheEntry[T], now: float) -> bool:
        return now >= entry.expires_at


def _short(key: object) -> str:
    return str(key)[:64]


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return _jsonable(asdict(value))
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def create_cache_key(params: Mapping[str, Any]) -> str:
    """Build a stable cache key from request parameters.

    Keys are sorted and None values dropped, so two mappings that only differ
    in ordering or in unset parameters map to the same key.
    """
    cleaned = {k: _jsonable(v) for k, v in params.items() if v is not None}
    return json.dumps(cleaned, sort_keys=True, separators=(",", ":"), default=str)
