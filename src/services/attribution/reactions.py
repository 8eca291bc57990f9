"""
c0rd - Reaction Deduplicator
============================

At-most-once-per-window filter for redelivered reaction events.
"""

from datetime import timedelta
from enum import Enum
from typing import Optional, Tuple

from src.utils.cache import Clock, TTLCache


class ReactionDirection(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class ReactionDeduplicator:
    """
    Suppress a repeated (message, user, direction) inside the TTL window.

    The marker is recorded once and never refreshed by a suppressed
    duplicate, so a steady stream of redeliveries still lets one
    notification through per window.
    """

    def __init__(self, ttl: timedelta, clock: Optional[Clock] = None) -> None:
        self._seen: TTLCache[Tuple[int, int, ReactionDirection], bool] = TTLCache(
            ttl=ttl, max_size=5000, clock=clock
        )

    def should_notify(
        self,
        message_id: int,
        user_id: int,
        direction: ReactionDirection,
    ) -> bool:
        key = (message_id, user_id, ReactionDirection(direction))
        if key in self._seen:
            return False
        self._seen.cleanup_expired()
        self._seen.set(key, True)
        return True

    def __len__(self) -> int:
        return len(self._seen)


__all__ = ["ReactionDirection", "ReactionDeduplicator"]
