"""In-memory suggestion cache keyed by schema fingerprint."""

from typing import Any, Dict, Optional, Tuple
import hashlib
import logging
import time

from autodash.config import get_settings
from autodash.schemas.dataset import Schema

logger = logging.getLogger(__name__)
settings = get_settings()


def schema_fingerprint(schema: Schema, length: Optional[int] = None) -> str:
    """
    Deterministic short id of a schema's column names and types.

    The fingerprint is order sensitive: the same columns in a different order
    yield a different key.

    Args:
        schema: Inferred schema
        length: Number of hex characters kept, defaults to settings.fingerprint_length

    Returns:
        Truncated md5 hex digest
    """
    if length is None:
        length = settings.fingerprint_length
    key = "|".join(f"{column.name}:{column.type.value}" for column in schema.columns)
    return hashlib.md5(key.encode()).hexdigest()[:length]


class SuggestionCache:
    """
    Process-lifetime cache of validated suggestion sets.

    Entries never expire on their own; callers bound growth with clear(),
    evict() or evict_older_than().
    """

    def __init__(self):
        self._cache: Dict[str, Tuple[Any, float]] = {}  # key -> (value, timestamp)

    def get(self, key: str) -> Optional[Any]:
        """Retrieve a cached value."""
        entry = self._cache.get(key)
        if entry is None:
            return None
        return entry[0]

    def set(self, key: str, value: Any) -> None:
        """Store a value with the current timestamp."""
        self._cache[key] = (value, time.time())

    def has(self, key: str) -> bool:
        return key in self._cache

    def evict(self, key: str) -> bool:
        """Remove one key. Returns whether it was present."""
        return self._cache.pop(key, None) is not None

    def evict_older_than(self, seconds: float) -> int:
        """Remove entries stored more than `seconds` ago. Returns the count removed."""
        cutoff = time.time() - seconds
        expired_keys = [
            key for key, (_, timestamp) in self._cache.items() if timestamp < cutoff
        ]
        for key in expired_keys:
            del self._cache[key]
        if expired_keys:
            logger.info(f"Evicted {len(expired_keys)} stale suggestion entries")
        return len(expired_keys)

    def clear(self) -> None:
        """Clear all entries."""
        count = len(self._cache)
        self._cache.clear()
        logger.info(f"Cleared {count} cached suggestion entries")

    def __len__(self) -> int:
        return len(self._cache)
