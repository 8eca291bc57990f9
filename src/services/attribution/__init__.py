"""
c0rd - Attribution Service
==========================

Audit log correlation: who deleted, kicked, moved or muted whom, and
which invite a new member used.
"""

from src.services.attribution.engine import AttributionEngine, timeout_change
from src.services.attribution.invites import InviteSnapshot, InviteTracker, InviteUse
from src.services.attribution.models import (
    Attribution,
    AttributionQuery,
    DomainEvent,
    EventKind,
    TimeoutChange,
)
from src.services.attribution.moves import MoveAttribution, MoveTracker
from src.services.attribution.reactions import ReactionDeduplicator, ReactionDirection

__all__ = [
    "AttributionEngine",
    "timeout_change",
    "InviteSnapshot",
    "InviteTracker",
    "InviteUse",
    "Attribution",
    "AttributionQuery",
    "DomainEvent",
    "EventKind",
    "TimeoutChange",
    "MoveAttribution",
    "MoveTracker",
    "ReactionDeduplicator",
    "ReactionDirection",
]
