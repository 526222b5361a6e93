"""Per-instance memoization of remote lookups.

Every entity instance owns at most one :class:`ResultCache`, created the first
time it is needed. Entries are keyed by an operation name plus the ordered
argument values the operation was called with, and live as long as the
instance: there is no TTL and no eviction.

Design goals:
    1. Deterministic keys: keys are md5 hashes of a normalized argument tuple,
       so ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}`` share an entry.
    2. At most once: a producer runs at most once per key, even when it
       returns ``None``.
    3. Observability: hit/miss counters are exposed via ``get_cache_stats``.

Quick example::

    from remote_entities.cache import ResultCache

    cache = ResultCache()
    key = cache.make_key("photosets", {"per_page": "100"})
    photosets = cache.fetch(key, lambda: Photoset.find_all_by_user_id("1"))
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


def _normalize(value: Any) -> Any:
    """Order-independent form of ``value`` that keeps container and key types.

    Containers are tagged so that ``{"a": 1}`` and ``[("a", 1)]`` stay apart;
    unordered members are sorted by ``repr`` so mixed key types never compare.
    """
    if isinstance(value, dict):
        items = [(_normalize(k), _normalize(v)) for k, v in value.items()]
        return ("dict", tuple(sorted(items, key=repr)))
    if isinstance(value, list):
        return ("list", tuple(_normalize(v) for v in value))
    if isinstance(value, tuple):
        return ("tuple", tuple(_normalize(v) for v in value))
    if isinstance(value, (set, frozenset)):
        return ("set", tuple(sorted((_normalize(v) for v in value), key=repr)))
    return value


class ResultCache:
    """In-memory store of previously computed results.

    Notes:
        * Single-thread oriented; an entity and its cache are never shared
          between threads.
        * Values are stored as-is (no copying or serialization).
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}
        self.hits = 0
        self.misses = 0

    def make_key(self, *args: Any) -> str:
        """Create a cache key from an operation name and its arguments."""
        key_data = repr(_normalize(args)).encode()
        return hashlib.md5(key_data).hexdigest()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def fetch(self, key: str, producer: Callable[[], T]) -> T:
        """Return the stored result for ``key``, computing it on first use.

        Args:
            key: Key from :meth:`make_key`.
            producer: Zero-argument callable computing the result.

        Returns:
            The stored or freshly computed result.
        """
        value = self._entries.get(key, _MISSING)
        if value is not _MISSING:
            self.hits += 1
            logger.debug(f"Cache hit for {key}")
            return value
        self.misses += 1
        logger.debug(f"Cache miss for {key}")
        value = producer()
        self._entries[key] = value
        return value

    def clear(self) -> None:
        """Drop all stored results."""
        self._entries.clear()

    def get_cache_stats(self) -> Dict[str, Any]:
        return {
            "cache_size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
        }
