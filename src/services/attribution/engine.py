"""
c0rd - Attribution Engine
=========================

Decides who caused an event that does not carry its own actor.

DESIGN:
    The audit log is eventually consistent with the gateway, so every
    lookup follows the same four steps:

    1. Wait a short fixed delay.
    2. Fetch one small page of recent entries (never paginate).
    3. Keep entries whose target is the subject, created inside the match
       window, that satisfy the kind's predicate. Take the newest. If its
       executor is the subject, discard it.
    4. Nothing left means "unknown", which is a normal outcome.

    Any failed query resolves to unknown. Nothing here raises to callers.

    Bulk voice moves are the exception to step 2: one audit entry can
    explain several moves, so matches are cached and claimed per member
    (see moves.MoveTracker).
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import aiohttp
import discord

from src.core.config import Config
from src.core.logger import logger
from src.services.attribution.models import (
    Attribution,
    AttributionQuery,
    DomainEvent,
    EventKind,
    TimeoutChange,
)
from src.services.attribution.moves import MoveTracker
from src.utils.cache import Clock


Sleeper = Callable[[float], Awaitable[None]]

QUERY_FAILURES = (discord.HTTPException, aiohttp.ClientError, asyncio.TimeoutError, OSError)
"""Failed Discord reads. Dropped connections surface as aiohttp.ClientError."""

_MISSING = object()


# =============================================================================
# Entry Helpers
# =============================================================================

def entry_target_id(entry: discord.AuditLogEntry) -> Optional[int]:
    target = entry.target
    return getattr(target, "id", None) if target is not None else None


def entry_executor(entry: discord.AuditLogEntry) -> Optional[Any]:
    return entry.user


def entry_executor_id(entry: discord.AuditLogEntry) -> Optional[int]:
    user = entry.user
    if user is not None:
        return user.id
    return getattr(entry, "user_id", None)


def entry_extra_channel_id(entry: discord.AuditLogEntry) -> Optional[int]:
    channel = getattr(entry.extra, "channel", None)
    return getattr(channel, "id", None)


def timeout_change(entry: discord.AuditLogEntry) -> Optional[TimeoutChange]:
    """
    Classify a member_update entry as a timeout being applied or removed.

    Returns:
        The transition, or None when the entry does not touch the timeout.
    """
    for attr in ("timed_out_until", "communication_disabled_until"):
        until = getattr(entry.after, attr, _MISSING)
        if until is not _MISSING:
            return TimeoutChange(applied=until is not None, until=until)
    return None


# =============================================================================
# Attribution Engine
# =============================================================================

class AttributionEngine:
    """
    Audit log correlation for one bot instance.

    Args:
        config: Timing and window settings.
        clock: Returns the current aware UTC time.
        sleep: Awaitable used for the pre-query delays.
    """

    def __init__(
        self,
        config: Config,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleeper] = None,
    ) -> None:
        self._clock: Clock = clock or discord.utils.utcnow
        self._sleep: Sleeper = sleep or asyncio.sleep

        self.page_size = config.audit_page_size
        self.match_window = timedelta(seconds=config.audit_match_window_seconds)
        self.audit_delay = config.audit_log_delay_ms / 1000
        self.move_delay = config.move_audit_delay_ms / 1000
        self.message_delete_delay = config.message_delete_delay_ms / 1000

        self.moves = MoveTracker(
            ttl=timedelta(seconds=config.move_cache_ttl_seconds),
            fresh_window=self.match_window,
            clock=self._clock,
            grace=config.move_count_grace,
        )

        self._builders: Dict[EventKind, Callable[[DomainEvent], AttributionQuery]] = {
            EventKind.MESSAGE_DELETE: self._message_delete_query,
            EventKind.MEMBER_LEAVE: self._removal_query,
            EventKind.VOICE_MODERATION: self._voice_moderation_query,
            EventKind.THREAD_UPDATE: self._thread_update_query,
        }

    # =========================================================================
    # Entry Points
    # =========================================================================

    async def attribute(self, guild: discord.Guild, event: DomainEvent) -> Attribution:
        """Resolve the actor behind a domain event, by kind."""
        if event.kind == EventKind.VOICE_MOVE:
            return await self._resolve_move(
                guild, event.subject_id, event.payload["destination_id"]
            )

        builder = self._builders.get(event.kind)
        if builder is None:
            return Attribution.unknown()
        return await self.resolve(guild, builder(event))

    async def resolve(self, guild: discord.Guild, query: AttributionQuery) -> Attribution:
        """Run one wait/query/filter cycle."""
        if query.delay > 0:
            await self._sleep(query.delay)

        entries = await self._fetch(guild, query.actions, query.label)
        if entries is None:
            return Attribution.unknown()

        entry = self._newest_match(entries, query)
        if entry is None:
            logger.debug(f"Attribution {query.label}: no match for {query.subject_id}")
            return Attribution.unknown()

        if query.exclude_self and entry_executor_id(entry) == query.subject_id:
            logger.debug(f"Attribution {query.label}: self action by {query.subject_id} ignored")
            return Attribution.unknown()

        return Attribution(actor=entry_executor(entry), entry=entry, source="audit_log")

    # =========================================================================
    # Kind Helpers
    # =========================================================================

    async def message_deleter(self, message: discord.Message) -> Attribution:
        return await self.attribute(message.guild, DomainEvent(
            kind=EventKind.MESSAGE_DELETE,
            guild_id=message.guild.id,
            subject_id=message.author.id,
            timestamp=self._clock(),
            payload={"channel_id": message.channel.id, "message_id": message.id},
        ))

    async def removal_action(self, member: discord.Member) -> Attribution:
        """
        Find a kick or ban behind a member leaving.

        The returned attribution keeps the matched entry even when its
        executor is missing, so callers can still tell kicks from bans.
        """
        return await self.attribute(member.guild, DomainEvent(
            kind=EventKind.MEMBER_LEAVE,
            guild_id=member.guild.id,
            subject_id=member.id,
            timestamp=self._clock(),
        ))

    async def voice_moderator(self, member: discord.Member) -> Attribution:
        return await self.attribute(member.guild, DomainEvent(
            kind=EventKind.VOICE_MODERATION,
            guild_id=member.guild.id,
            subject_id=member.id,
            timestamp=self._clock(),
        ))

    async def voice_mover(self, member: discord.Member, destination: Any) -> Attribution:
        return await self.attribute(member.guild, DomainEvent(
            kind=EventKind.VOICE_MOVE,
            guild_id=member.guild.id,
            subject_id=member.id,
            timestamp=self._clock(),
            payload={"destination_id": destination.id},
        ))

    async def thread_editor(self, thread: discord.Thread) -> Attribution:
        return await self.attribute(thread.guild, DomainEvent(
            kind=EventKind.THREAD_UPDATE,
            guild_id=thread.guild.id,
            subject_id=thread.id,
            timestamp=self._clock(),
        ))

    timeout_change = staticmethod(timeout_change)

    # =========================================================================
    # Query Builders
    # =========================================================================

    def _message_delete_query(self, event: DomainEvent) -> AttributionQuery:
        channel_id = event.payload.get("channel_id")
        return AttributionQuery(
            actions=(discord.AuditLogAction.message_delete,),
            subject_id=event.subject_id,
            delay=self.message_delete_delay,
            predicate=lambda entry: entry_extra_channel_id(entry) == channel_id,
            label="message_delete",
        )

    def _removal_query(self, event: DomainEvent) -> AttributionQuery:
        return AttributionQuery(
            actions=(discord.AuditLogAction.kick, discord.AuditLogAction.ban),
            subject_id=event.subject_id,
            delay=self.audit_delay,
            label="member_removal",
        )

    def _voice_moderation_query(self, event: DomainEvent) -> AttributionQuery:
        return AttributionQuery(
            actions=(discord.AuditLogAction.member_update,),
            subject_id=event.subject_id,
            delay=self.audit_delay,
            label="voice_moderation",
        )

    def _thread_update_query(self, event: DomainEvent) -> AttributionQuery:
        return AttributionQuery(
            actions=(discord.AuditLogAction.thread_update,),
            subject_id=event.subject_id,
            delay=self.audit_delay,
            label="thread_update",
        )

    # =========================================================================
    # Bulk Moves
    # =========================================================================

    async def _resolve_move(
        self,
        guild: discord.Guild,
        member_id: int,
        destination_id: int,
    ) -> Attribution:
        """
        Attribute a voice channel switch to a moderator, if one moved them.

        Holding the destination lock across the query lets simultaneous
        moves into one channel reuse the first mover's result.
        """
        async with self.moves.lock(destination_id):
            cached = self.moves.claim(destination_id)
            if cached is not None:
                return Attribution(actor=cached.executor, source="move_cache")

            if self.move_delay > 0:
                await self._sleep(self.move_delay)

            entries = await self._fetch(
                guild, (discord.AuditLogAction.member_move,), "member_move"
            )
            if entries is None:
                return Attribution.unknown()

            now = self._clock()
            for entry in entries:
                if now - entry.created_at > self.match_window:
                    continue
                if entry_extra_channel_id(entry) != destination_id:
                    continue

                if self.moves.knows(destination_id, entry.id):
                    claimed = self.moves.claim_entry(destination_id, entry.id)
                    if claimed is not None:
                        return Attribution(actor=claimed.executor, entry=entry, source="move_cache")
                    continue

                executor = entry_executor(entry)
                if executor is None or executor.id == member_id:
                    continue

                total = getattr(entry.extra, "count", None) or 1
                self.moves.record(destination_id, entry.id, executor, entry.created_at, total)
                logger.debug(f"Bulk move cached: {total} member(s) into {destination_id}")
                return Attribution(actor=executor, entry=entry, source="audit_log")

            return Attribution.unknown()

    # =========================================================================
    # Audit Log Access
    # =========================================================================

    async def _fetch(
        self,
        guild: discord.Guild,
        actions: Sequence[discord.AuditLogAction],
        label: str,
    ) -> Optional[List[discord.AuditLogEntry]]:
        """
        Fetch one page of audit entries, newest first.

        Returns:
            The entries, or None when the query failed.
        """
        kwargs: Dict[str, Any] = {"limit": self.page_size}
        if len(actions) == 1:
            kwargs["action"] = actions[0]

        try:
            return [entry async for entry in guild.audit_logs(**kwargs)]
        except QUERY_FAILURES as e:
            logger.warning("Audit Log Query Failed", [
                ("Lookup", label),
                ("Guild", str(getattr(guild, "id", "?"))),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            return None

    def _newest_match(
        self,
        entries: Sequence[discord.AuditLogEntry],
        query: AttributionQuery,
    ) -> Optional[discord.AuditLogEntry]:
        now: datetime = self._clock()
        for entry in entries:
            if query.actions and entry.action not in query.actions:
                continue
            if now - entry.created_at > self.match_window:
                continue
            if entry_target_id(entry) != query.subject_id:
                continue
            if query.predicate is not None and not query.predicate(entry):
                continue
            return entry
        return None


__all__ = [
    "AttributionEngine",
    "QUERY_FAILURES",
    "entry_target_id",
    "entry_executor_id",
    "entry_extra_channel_id",
    "timeout_change",
]
