# core/cache.py

"""
In-memory TTL cache for permission records.

The gate itself never caches. This cache is only used by
CachedPermissionStore, which invalidates the affected key synchronously
on every write it performs. Writes that bypass the wrapper (another
process, a manual SQL edit) stay invisible until the TTL expires, so
keep PERMISSION_CACHE_TTL_SECONDS short or leave it at 0.
"""

from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Dict, NamedTuple, Optional


class _Slot(NamedTuple):
    value: Any
    expires_at: datetime


class SimpleCache:
    """
    Thread-safe key → value map with per-entry expiry.

    `get` takes a default so callers can cache None (an absent
    permission record) and still tell a miss apart from a cached absence.
    """

    def __init__(self, ttl_seconds: int = 300):
        self.ttl_seconds = ttl_seconds
        self._slots: Dict[str, _Slot] = {}
        self._lock = Lock()

    def get(self, key: str, default: Any = None) -> Any:
        now = datetime.now()
        with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                return default
            if now >= slot.expires_at:
                del self._slots[key]
                return default
            return slot.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        slot = _Slot(value, datetime.now() + timedelta(seconds=ttl))
        with self._lock:
            self._slots[key] = slot

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._slots.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)
