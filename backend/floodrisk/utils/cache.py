import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: float


class TTLCache(Generic[T]):
    """
    Time-boxed key/value cache owned by a single source scorer.

    Entries expire once ``now - timestamp >= ttl``. When the cache grows past
    ``max_size`` the single oldest-inserted entry is evicted (FIFO on insertion
    order, not LRU: reads do not refresh an entry's position).
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_size: int,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.name = name
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl_seconds:
            del self._entries[key]
            logger.debug(f"[{self.name}] expired {key!r}")
            return None
        return entry.data

    def set(self, key: str, value: T) -> None:
        # Overwriting keeps the key's original insertion slot.
        self._entries[key] = CacheEntry(data=value, timestamp=self._clock())
        if len(self._entries) > self.max_size:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            logger.debug(f"[{self.name}] evicted oldest entry {oldest_key!r}")

    def clear(self) -> None:
        self._entries.clear()
        logger.info(f"[{self.name}] cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


def coord_key(*values: float, precision: int = 4) -> str:
    """Deterministic key fragment so float noise below ``precision`` still hits."""
    # Adding 0.0 folds -0.0 into 0.0 so tiny negative noise shares a key.
    return ",".join(f"{round(v, precision) + 0.0:.{precision}f}" for v in values)
