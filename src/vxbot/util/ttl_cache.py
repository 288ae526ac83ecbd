import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

import structlog

_logger = structlog.get_logger()


class TTLCache:
    """Bounded, thread-safe key/value map whose entries expire after ``ttl`` seconds.

    Serves both as the Slack event de-duplication set (``check_and_mark``)
    and as the short-lived per-user response cache (``get``/``set``).
    Oldest entries are evicted first once ``max_size`` is reached.
    """

    def __init__(
        self,
        ttl: float,
        max_size: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._ttl = ttl
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()

    def check_and_mark(self, key: str) -> bool:
        """Mark ``key`` seen; True when it already was. Atomic across threads."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry[0] < self._ttl:
                return True
            self._store(key, True)
            return False

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._store(key, value)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def _store(self, key: str, value: Any) -> None:
        self._purge_expired()
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        while len(self._entries) > self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            _logger.debug("ttl_cache_evicted", key=evicted)

    def _purge_expired(self) -> None:
        now = self._clock()
        # Insertion order == age order, so stop at the first live entry
        while self._entries:
            key, (stored_at, _) = next(iter(self._entries.items()))
            if now - stored_at < self._ttl:
                break
            del self._entries[key]
