"""
Small process-local key/value store with per-entry expiry.

Used as the fallback store for email OTPs when the database is unavailable.
Entries are not durable and are not shared between processes.
"""
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._items: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._items[key] = (value, now + ttl_seconds)

    def _prune(self, now: float) -> None:
        # Caller holds the lock
        expired = [k for k, (_, expires_at) in self._items.items() if now >= expires_at]
        for k in expired:
            del self._items[k]

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None once it has expired (expired entries are dropped)."""
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            value, expires_at = item
            if self._clock() >= expires_at:
                del self._items[key]
                return None
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# Shared instance wired into the OTP service
otp_fallback_cache = TTLCache()
