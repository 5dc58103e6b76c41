from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from schoolledger.shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL = 5 * 60.0          # seconds
CLEANUP_INTERVAL = 10 * 60.0    # seconds


@dataclass(slots=True)
class _Entry:
    value: Any
    timestamp: datetime
    expires_at: float


@dataclass(frozen=True, slots=True)
class CachedValue:
    value: Any
    timestamp: datetime


class TTLCache:
    """
    Single-process key/value cache with per-entry TTL.

    Expiry is lazy (``get``/``has``/``get_with_timestamp`` drop stale entries
    and return the absence value) and eager through :meth:`cleanup`, which a
    background task runs every ``cleanup_interval`` seconds once :meth:`start`
    is called inside a running loop. :meth:`dispose` stops that task.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        cleanup_interval: float = CLEANUP_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._data: Dict[str, _Entry] = {}
        self._shutdown = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    # ---------- reads ----------
    def get(self, key: str) -> Any:
        entry = self._live(key)
        return None if entry is None else entry.value

    def has(self, key: str) -> bool:
        return self._live(key) is not None

    def get_with_timestamp(self, key: str) -> Optional[CachedValue]:
        entry = self._live(key)
        if entry is None:
            return None
        return CachedValue(value=entry.value, timestamp=entry.timestamp)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def size(self) -> int:
        return len(self._data)

    # ---------- writes ----------
    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._data[key] = _Entry(value=value, timestamp=datetime.now(), expires_at=self._clock() + ttl)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def remove_prefix(self, prefix: str) -> int:
        stale = [k for k in self._data if k.startswith(prefix)]
        for k in stale:
            del self._data[k]
        return len(stale)

    def clear(self) -> None:
        self._data.clear()

    def refresh_ttl(self, key: str, ttl: Optional[float] = None) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False
        entry.expires_at = self._clock() + (self.default_ttl if ttl is None else ttl)
        return True

    def cleanup(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._data.items() if e.expires_at <= now]
        for k in expired:
            del self._data[k]
        return len(expired)

    # ---------- lifecycle ----------
    def start(self) -> None:
        """Schedule periodic cleanup on the running event loop (no-op if already running)."""
        if self._task is not None and not self._task.done():
            return
        self._shutdown = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run_cleanup())

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run_cleanup(self) -> None:
        while not self._shutdown.is_set():
            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=self.cleanup_interval)
            except asyncio.TimeoutError:
                removed = self.cleanup()
                if removed:
                    logger.debug("cache_cleanup", removed=removed, size=self.size())

    def dispose(self) -> None:
        """Stop the periodic cleanup. Cached entries stay readable."""
        self._shutdown.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _live(self, key: str) -> Optional[_Entry]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._data[key]
            return None
        return entry
