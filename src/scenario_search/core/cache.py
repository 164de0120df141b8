"""TTL cache for complete search responses."""

import copy
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..models.query import SearchQuery
from ..models.result import SearchResponse

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached response with its lifetime."""
    key: str
    response: SearchResponse
    created_at: float
    expires_at: float
    sequence: int = 0


def make_cache_key(query: SearchQuery, default_page_size: int = 20) -> str:
    """
    Canonical key for a query.

    Text is trimmed, whitespace-collapsed and lower-cased; filter lists are
    sorted; pagination defaults are made explicit. Keys are JSON with sorted
    fields so equal queries always serialize identically.
    """
    pagination = query.pagination
    payload: Dict[str, Any] = {
        "query": query.normalized_text,
        "filters": query.filters.to_dict() if query.filters is not None else None,
        "pagination": {
            "page": pagination.page if pagination else 1,
            "page_size": pagination.page_size if pagination else default_page_size,
        },
        "highlights": bool(query.include_highlights),
        "suggestions": bool(query.include_suggestions),
        "sort": [query.sort.value, query.sort_direction.value],
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


class ResultCache:
    """
    Memoizes search responses keyed by canonical query.

    Entries expire ``ttl_seconds`` after they are stored. When a put pushes
    the entry count above ``max_entries``, expired entries are dropped and,
    if the count is still above ``low_water_mark``, the oldest entries are
    removed until it is exactly at the mark. A single lock guards all state.
    Responses are copied on the way in and out, so callers never hold a
    reference to a stored entry.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 1000,
        low_water_mark: int = 800,
        default_page_size: int = 20,
        clock: Callable[[], float] = time.monotonic
    ):
        if ttl_seconds <= 0:
            raise ValueError("TTL must be positive")
        if max_entries < 1:
            raise ValueError("Max entries must be positive")
        if not 0 <= low_water_mark <= max_entries:
            raise ValueError("Low-water mark must be between 0 and max entries")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.low_water_mark = low_water_mark
        self.default_page_size = default_page_size
        self._clock = clock

        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sequence = 0
        self._stats = {
            'hits': 0,
            'misses': 0,
            'expired': 0,
            'evictions': 0,
        }

    def key_for(self, query: SearchQuery) -> str:
        return make_cache_key(query, self.default_page_size)

    def get(self, query: SearchQuery) -> Optional[SearchResponse]:
        """Return the cached response, or None on a miss or stale entry."""
        key = self.key_for(query)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() < entry.expires_at:
                self._stats['hits'] += 1
                return copy.deepcopy(entry.response)

            if entry is not None:
                del self._entries[key]
                self._stats['expired'] += 1
            self._stats['misses'] += 1
            return None

    def put(self, query: SearchQuery, response: SearchResponse) -> None:
        """Store a response and enforce the size bound."""
        key = self.key_for(query)
        with self._lock:
            now = self._clock()
            self._sequence += 1
            self._entries[key] = CacheEntry(
                key=key,
                response=copy.deepcopy(response),
                created_at=now,
                expires_at=now + self.ttl_seconds,
                sequence=self._sequence
            )
            if len(self._entries) > self.max_entries:
                self._evict(now)

    def _evict(self, now: float) -> None:
        before = len(self._entries)

        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]

        if len(self._entries) > self.low_water_mark:
            oldest_first = sorted(
                self._entries.values(),
                key=lambda e: (e.created_at, e.sequence)
            )
            excess = len(self._entries) - self.low_water_mark
            for entry in oldest_first[:excess]:
                del self._entries[entry.key]

        removed = before - len(self._entries)
        self._stats['evictions'] += removed
        logger.debug(f"Cache eviction removed {removed} entries ({len(expired)} expired)")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Search cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Counters and hit rate for observability."""
        with self._lock:
            lookups = self._stats['hits'] + self._stats['misses']
            return {
                **self._stats,
                'size': len(self._entries),
                'hit_rate': self._stats['hits'] / lookups if lookups else 0.0,
                'ttl_seconds': self.ttl_seconds,
                'max_entries': self.max_entries,
                'low_water_mark': self.low_water_mark,
            }
