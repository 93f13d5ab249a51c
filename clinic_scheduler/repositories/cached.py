"""TTL cache in front of a schedule repository."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from loguru import logger

from ..models.schedule import ScheduleConfig
from .base import ScheduleConfigRepository


@dataclass
class CachedSchedule:
    """Cached lookup result (None means the scope has no schedule)."""

    config: Optional[ScheduleConfig]
    expires_at: datetime


class CachedScheduleConfigRepository(ScheduleConfigRepository):
    """
    Read-through cache for schedules.

    Schedules are read on every availability request but change rarely.
    Saving through this repository replaces the cached entry so the new
    version is visible immediately in this process.
    """

    def __init__(self, inner: ScheduleConfigRepository, ttl_seconds: float = 300.0):
        """
        Initialize cache.

        Args:
            inner: Repository holding the schedules
            ttl_seconds: Time-to-live of cached entries in seconds
        """
        self._inner = inner
        self._ttl = ttl_seconds
        self._cache: Dict[Optional[str], CachedSchedule] = {}
        self._lock = asyncio.Lock()

    async def get(self, scope_id: Optional[str]) -> Optional[ScheduleConfig]:
        """Cached schedule of a scope, loading it on miss or expiry."""
        async with self._lock:
            entry = self._cache.get(scope_id)
            if entry and datetime.now(timezone.utc) < entry.expires_at:
                return entry.config

        config = await self._inner.get(scope_id)
        async with self._lock:
            self._cache[scope_id] = CachedSchedule(
                config=config,
                expires_at=datetime.now(timezone.utc) + timedelta(seconds=self._ttl),
            )
        logger.debug(f"Schedule cache miss for scope {scope_id or 'global'}")
        return config

    async def save(self, config: ScheduleConfig) -> ScheduleConfig:
        """Save through to the inner repository and refresh the cache."""
        stored = await self._inner.save(config)
        async with self._lock:
            self._cache[stored.scope_id] = CachedSchedule(
                config=stored,
                expires_at=datetime.now(timezone.utc) + timedelta(seconds=self._ttl),
            )
        return stored

    async def invalidate(self, scope_id: Optional[str]) -> None:
        """Drop one scope from the cache; None is the global schedule."""
        async with self._lock:
            self._cache.pop(scope_id, None)

    async def invalidate_all(self) -> None:
        """Drop every cached scope."""
        async with self._lock:
            self._cache.clear()
