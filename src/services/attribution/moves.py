"""
c0rd - Bulk Move Tracker
========================

Correlation cache for member_move audit entries.

DESIGN:
    A moderator dragging several members at once produces one audit entry
    with a member count, but one voice state update per member. Each entry
    is cached per (destination, entry id) and can be claimed up to its
    count, so a bulk move costs a single audit log query.

    Moves into one destination are serialized by a per-destination lock;
    the first mover queries while the rest wait and then claim from cache.
    A lock lives only while some task holds or waits on it.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Dict, Optional, Tuple

from src.utils.cache import Clock, TTLCache


MoveKey = Tuple[int, int]
"""(destination channel id, audit entry id)."""


@dataclass
class MoveAttribution:
    """One cached bulk move and how many of its members were attributed."""

    executor: Any
    first_seen: datetime
    uses_consumed: int
    uses_total: int

    def has_capacity(self, grace: int = 0) -> bool:
        return self.uses_consumed < self.uses_total + grace


class MoveTracker:
    """
    Per-destination cache of member_move audit entries.

    Args:
        ttl: Age after which entries are swept.
        fresh_window: Max age of an entry (from its creation) for a
            cache-only claim without a new query.
        grace: Extra claims tolerated beyond the entry's count.
        clock: Returns the current aware time.
    """

    def __init__(
        self,
        ttl: timedelta,
        fresh_window: timedelta,
        clock: Clock,
        grace: int = 0,
    ) -> None:
        self._cache: TTLCache[MoveKey, MoveAttribution] = TTLCache(
            ttl=ttl, max_size=500, clock=clock
        )
        self._fresh_window = fresh_window
        self._grace = grace
        self._clock = clock
        self._locks: Dict[int, asyncio.Lock] = {}
        self._holders: Dict[int, int] = {}

    @asynccontextmanager
    async def lock(self, destination_id: int) -> AsyncIterator[None]:
        """
        Hold the destination's lock for the duration of the block.

        The lock is dropped once no task holds or waits on it, so the
        table only ever contains destinations with moves in flight.
        """
        lock = self._locks.get(destination_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[destination_id] = lock
        self._holders[destination_id] = self._holders.get(destination_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[destination_id] -= 1
            if self._holders[destination_id] == 0:
                del self._holders[destination_id]
                del self._locks[destination_id]

    @property
    def active_locks(self) -> int:
        return len(self._locks)

    def claim(self, destination_id: int) -> Optional[MoveAttribution]:
        """
        Claim one use of any fresh cached move into this destination.

        Returns:
            The claimed move with its counter already incremented, or None
            when nothing fresh with remaining capacity is cached.
        """
        self._cache.cleanup_expired()
        now = self._clock()
        for (dest, _), move in self._cache.items():
            if dest != destination_id:
                continue
            if now - move.first_seen >= self._fresh_window:
                continue
            if move.has_capacity(self._grace):
                move.uses_consumed += 1
                return move
        return None

    def knows(self, destination_id: int, entry_id: int) -> bool:
        return (destination_id, entry_id) in self._cache

    def claim_entry(self, destination_id: int, entry_id: int) -> Optional[MoveAttribution]:
        """Claim one use of a specific cached entry, if it has capacity left."""
        move = self._cache.get((destination_id, entry_id))
        if move is None or not move.has_capacity(self._grace):
            return None
        move.uses_consumed += 1
        return move

    def record(
        self,
        destination_id: int,
        entry_id: int,
        executor: Any,
        first_seen: datetime,
        total: int,
    ) -> MoveAttribution:
        """Cache a newly matched entry with its first use already consumed."""
        move = MoveAttribution(
            executor=executor,
            first_seen=first_seen,
            uses_consumed=1,
            uses_total=max(total, 1),
        )
        self._cache.set((destination_id, entry_id), move)
        return move

    def __len__(self) -> int:
        return len(self._cache)


__all__ = ["MoveAttribution", "MoveTracker", "MoveKey"]
