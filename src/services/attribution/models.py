"""
c0rd - Attribution Models
=========================

Value types shared by the attribution engine and its correlation caches.

DESIGN:
    A DomainEvent is an immutable tagged record of something that happened
    in the target server. The engine maps its kind to an AttributionQuery,
    runs the query against the audit log and returns an Attribution, which
    may legitimately be unknown.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple

import discord


# =============================================================================
# Domain Events
# =============================================================================

class EventKind(str, Enum):
    """Discriminant for every event the bot mirrors."""

    MEMBER_JOIN = "member_join"
    MEMBER_LEAVE = "member_leave"
    MEMBER_UPDATE = "member_update"
    MESSAGE_DELETE = "message_delete"
    MESSAGE_EDIT = "message_edit"
    VOICE_STATE = "voice_state"
    VOICE_MODERATION = "voice_moderation"
    VOICE_MOVE = "voice_move"
    REACTION_ADD = "reaction_add"
    REACTION_REMOVE = "reaction_remove"
    THREAD_CREATE = "thread_create"
    THREAD_UPDATE = "thread_update"
    THREAD_DELETE = "thread_delete"
    SCHEDULED_EVENT_CREATE = "scheduled_event_create"
    SCHEDULED_EVENT_UPDATE = "scheduled_event_update"
    SCHEDULED_EVENT_DELETE = "scheduled_event_delete"
    SCHEDULED_EVENT_USER_ADD = "scheduled_event_user_add"
    SCHEDULED_EVENT_USER_REMOVE = "scheduled_event_user_remove"
    AUDIT_ENTRY = "audit_entry"


@dataclass(frozen=True)
class DomainEvent:
    """
    One observed event from the target server.

    Attributes:
        kind: What happened.
        guild_id: Server the event belongs to.
        subject_id: Member, thread or author the event is about.
        timestamp: When the event was observed.
        payload: Kind-specific extras (channel ids, destination, ...).
    """

    kind: EventKind
    guild_id: int
    subject_id: int
    timestamp: datetime
    payload: Mapping[str, Any] = field(default_factory=dict)


# =============================================================================
# Queries and Results
# =============================================================================

EntryPredicate = Callable[[discord.AuditLogEntry], bool]


@dataclass(frozen=True)
class AttributionQuery:
    """
    Parameters for one audit log lookup.

    Attributes:
        actions: Accepted audit actions. A single action is filtered
            server-side; several are fetched unfiltered and filtered here.
        subject_id: Entry target must match this id.
        delay: Seconds to wait before querying.
        predicate: Extra per-entry condition.
        exclude_self: Discard the match when the executor is the subject.
        label: Name used in logs.
    """

    actions: Tuple[discord.AuditLogAction, ...]
    subject_id: int
    delay: float
    predicate: Optional[EntryPredicate] = None
    exclude_self: bool = True
    label: str = "audit"


@dataclass(frozen=True)
class Attribution:
    """Result of an attribution attempt."""

    actor: Optional[Any] = None
    entry: Optional[discord.AuditLogEntry] = None
    source: str = "unknown"

    @classmethod
    def unknown(cls) -> "Attribution":
        return cls()

    @property
    def is_known(self) -> bool:
        return self.actor is not None

    @property
    def action(self) -> Optional[discord.AuditLogAction]:
        return self.entry.action if self.entry is not None else None

    @property
    def reason(self) -> Optional[str]:
        return self.entry.reason if self.entry is not None else None


@dataclass(frozen=True)
class TimeoutChange:
    """Timeout transition read from a member_update audit entry."""

    applied: bool
    until: Optional[datetime]


__all__ = [
    "EventKind",
    "DomainEvent",
    "EntryPredicate",
    "AttributionQuery",
    "Attribution",
    "TimeoutChange",
]
