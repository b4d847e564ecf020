import threading
import time
from typing import Callable, Dict, Optional, Tuple

from loguru import logger


class TTLCache:
    """In-memory key/value store whose entries expire a fixed time after insert.

    Expiry is lazy: an entry is checked (and dropped) when it is read, never
    swept in the background. Safe to share between asyncio tasks and threads.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug(f"Cache entry for {key!r} expired")
                return None
            return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
