"""
c0rd - Attribution Engine Tests
===============================

Audit log correlation: matching rules, self exclusion, failure fallback
and bulk move amortization.
"""

import asyncio
from dataclasses import replace
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import discord
import pytest

from conftest import http_error
from src.services.attribution import (
    AttributionEngine,
    DomainEvent,
    EventKind,
    timeout_change,
)

A = discord.AuditLogAction

AUTHOR_ID = 10
MODERATOR_ID = 20
CHANNEL_ID = 55
VOICE_DEST_ID = 900


def _message(guild, author_id=AUTHOR_ID, channel_id=CHANNEL_ID):
    message = MagicMock()
    message.id = 4242
    message.guild = guild
    message.author.id = author_id
    message.channel.id = channel_id
    return message


def _member(guild, member_id):
    member = MagicMock()
    member.id = member_id
    member.guild = guild
    return member


def _channel(channel_id=VOICE_DEST_ID):
    channel = MagicMock()
    channel.id = channel_id
    return channel


# =============================================================================
# Message Delete
# =============================================================================

class TestMessageDeleter:
    """Who deleted someone else's message."""

    @pytest.mark.asyncio
    async def test_matches_entry_in_same_channel(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.message_delete, target_id=AUTHOR_ID, executor_id=MODERATOR_ID, channel_id=CHANNEL_ID),
        ])
        result = await engine.message_deleter(_message(guild))
        assert result.is_known
        assert result.actor.id == MODERATOR_ID
        assert result.source == "audit_log"

    @pytest.mark.asyncio
    async def test_queries_one_filtered_page(self, engine, audit_guild):
        guild = audit_guild([])
        await engine.message_deleter(_message(guild))
        kwargs = guild.audit_logs.call_args.kwargs
        assert kwargs == {"limit": 5, "action": A.message_delete}

    @pytest.mark.asyncio
    async def test_other_channel_is_not_a_match(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.message_delete, target_id=AUTHOR_ID, executor_id=MODERATOR_ID, channel_id=99),
        ])
        result = await engine.message_deleter(_message(guild))
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_other_target_is_not_a_match(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.message_delete, target_id=11, executor_id=MODERATOR_ID, channel_id=CHANNEL_ID),
        ])
        result = await engine.message_deleter(_message(guild))
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_entry_outside_window_is_ignored(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.message_delete, target_id=AUTHOR_ID, executor_id=MODERATOR_ID,
                       channel_id=CHANNEL_ID, age=6),
        ])
        result = await engine.message_deleter(_message(guild))
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_newest_match_wins(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.message_delete, target_id=AUTHOR_ID, executor_id=21, channel_id=CHANNEL_ID, age=1),
            make_entry(A.message_delete, target_id=AUTHOR_ID, executor_id=22, channel_id=CHANNEL_ID, age=3),
        ])
        result = await engine.message_deleter(_message(guild))
        assert result.actor.id == 21

    @pytest.mark.asyncio
    async def test_waits_configured_delay(self, config, clock, audit_guild):
        sleep = AsyncMock()
        engine = AttributionEngine(replace(config, message_delete_delay_ms=1000), clock=clock, sleep=sleep)
        await engine.message_deleter(_message(audit_guild([])))
        sleep.assert_awaited_once_with(1.0)


# =============================================================================
# Self Exclusion and Fallbacks
# =============================================================================

class TestSelfExclusion:
    """An executor acting on themselves is never an attribution."""

    @pytest.mark.asyncio
    async def test_self_delete_is_unknown(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.message_delete, target_id=AUTHOR_ID, executor_id=AUTHOR_ID, channel_id=CHANNEL_ID),
        ])
        result = await engine.message_deleter(_message(guild))
        assert not result.is_known
        assert result.entry is None

    @pytest.mark.asyncio
    async def test_self_match_is_discarded_not_skipped(self, engine, make_entry, audit_guild):
        """The newest match decides; an older entry does not stand in for it."""
        guild = audit_guild([
            make_entry(A.member_update, target_id=AUTHOR_ID, executor_id=AUTHOR_ID, age=1),
            make_entry(A.member_update, target_id=AUTHOR_ID, executor_id=MODERATOR_ID, age=2),
        ])
        result = await engine.voice_moderator(_member(guild, AUTHOR_ID))
        assert not result.is_known


class TestUnknownFallback:
    """Failed or empty lookups resolve to unknown without raising."""

    @pytest.mark.asyncio
    async def test_forbidden_query(self, engine, audit_guild):
        guild = audit_guild(error=http_error(discord.Forbidden, 403, "Missing Access"))
        result = await engine.message_deleter(_message(guild))
        assert not result.is_known
        assert result.source == "unknown"

    @pytest.mark.asyncio
    async def test_server_error_query(self, engine, audit_guild):
        guild = audit_guild(error=http_error(discord.HTTPException, 500, "Internal"))
        result = await engine.removal_action(_member(guild, AUTHOR_ID))
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_timeout_query(self, engine, audit_guild):
        guild = audit_guild(error=asyncio.TimeoutError())
        result = await engine.voice_moderator(_member(guild, AUTHOR_ID))
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_dropped_connection_query(self, engine, audit_guild):
        guild = audit_guild(error=aiohttp.ServerDisconnectedError())
        result = await engine.message_deleter(_message(guild))
        assert not result.is_known
        assert result.source == "unknown"

    @pytest.mark.asyncio
    async def test_dropped_connection_during_move(self, engine, audit_guild):
        guild = audit_guild(error=aiohttp.ClientOSError(104, "Connection reset by peer"))
        result = await engine.voice_mover(_member(guild, AUTHOR_ID), _channel())
        assert not result.is_known
        assert engine.moves.active_locks == 0

    @pytest.mark.asyncio
    async def test_empty_page(self, engine, audit_guild):
        result = await engine.thread_editor(SimpleNamespace(id=1, guild=audit_guild([])))
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_unsupported_kind_skips_query(self, engine, clock, audit_guild):
        guild = audit_guild([])
        event = DomainEvent(kind=EventKind.REACTION_ADD, guild_id=2000, subject_id=1, timestamp=clock())
        result = await engine.attribute(guild, event)
        assert not result.is_known
        guild.audit_logs.assert_not_called()


# =============================================================================
# Member Removal
# =============================================================================

class TestRemovalAction:
    """Kick or ban behind a member leaving."""

    @pytest.mark.asyncio
    async def test_kick_with_reason(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.kick, target_id=AUTHOR_ID, executor_id=MODERATOR_ID, reason="spam"),
        ])
        result = await engine.removal_action(_member(guild, AUTHOR_ID))
        assert result.action == A.kick
        assert result.reason == "spam"
        assert result.actor.id == MODERATOR_ID

    @pytest.mark.asyncio
    async def test_ban_among_unrelated_entries(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_update, target_id=AUTHOR_ID, executor_id=MODERATOR_ID),
            make_entry(A.ban, target_id=AUTHOR_ID, executor_id=MODERATOR_ID, age=1),
        ])
        result = await engine.removal_action(_member(guild, AUTHOR_ID))
        assert result.action == A.ban

    @pytest.mark.asyncio
    async def test_fetches_unfiltered_for_two_actions(self, engine, audit_guild):
        guild = audit_guild([])
        await engine.removal_action(_member(guild, AUTHOR_ID))
        assert "action" not in guild.audit_logs.call_args.kwargs

    @pytest.mark.asyncio
    async def test_plain_leave_is_unknown(self, engine, audit_guild):
        result = await engine.removal_action(_member(audit_guild([]), AUTHOR_ID))
        assert result.entry is None
        assert result.action is None

    @pytest.mark.asyncio
    async def test_missing_executor_keeps_entry(self, engine, make_entry, audit_guild):
        guild = audit_guild([make_entry(A.ban, target_id=AUTHOR_ID)])
        result = await engine.removal_action(_member(guild, AUTHOR_ID))
        assert not result.is_known
        assert result.action == A.ban


# =============================================================================
# Bulk Moves
# =============================================================================

class TestBulkMoveAmortization:
    """One member_move entry explains several moves with one query."""

    @pytest.mark.asyncio
    async def test_three_moves_one_query(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_move, executor_id=MODERATOR_ID, channel_id=VOICE_DEST_ID, count=3, age=1),
        ])
        dest = _channel()

        results = [await engine.voice_mover(_member(guild, 100 + i), dest) for i in range(3)]

        assert guild.audit_logs.call_count == 1
        assert all(r.actor.id == MODERATOR_ID for r in results)
        assert results[0].source == "audit_log"
        assert results[1].source == "move_cache"

    @pytest.mark.asyncio
    async def test_fourth_move_queries_again(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_move, executor_id=MODERATOR_ID, channel_id=VOICE_DEST_ID, count=3, age=1),
        ])
        dest = _channel()
        for i in range(3):
            await engine.voice_mover(_member(guild, 100 + i), dest)

        fourth = await engine.voice_mover(_member(guild, 200), dest)

        assert guild.audit_logs.call_count == 2
        assert not fourth.is_known

    @pytest.mark.asyncio
    async def test_concurrent_moves_share_query(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_move, executor_id=MODERATOR_ID, channel_id=VOICE_DEST_ID, count=3, age=1),
        ])
        dest = _channel()

        results = await asyncio.gather(*[
            engine.voice_mover(_member(guild, 100 + i), dest) for i in range(3)
        ])

        assert guild.audit_logs.call_count == 1
        assert {r.actor.id for r in results} == {MODERATOR_ID}
        assert engine.moves.active_locks == 0

    @pytest.mark.asyncio
    async def test_locks_do_not_accumulate_per_destination(self, engine, audit_guild):
        guild = audit_guild([])
        for dest_id in range(900, 950):
            await engine.voice_mover(_member(guild, 100), _channel(dest_id))

        assert engine.moves.active_locks == 0

    @pytest.mark.asyncio
    async def test_waiting_mover_keeps_lock_alive(self, engine):
        moves = engine.moves
        entered = []

        async def second():
            async with moves.lock(VOICE_DEST_ID):
                entered.append("second")

        async with moves.lock(VOICE_DEST_ID):
            task = asyncio.ensure_future(second())
            await asyncio.sleep(0)
            assert entered == []
            assert moves.active_locks == 1

        await task
        assert entered == ["second"]
        assert moves.active_locks == 0

    @pytest.mark.asyncio
    async def test_grace_allows_extra_claim(self, config, clock, make_entry, audit_guild):
        engine = AttributionEngine(replace(config, move_count_grace=1), clock=clock, sleep=AsyncMock())
        guild = audit_guild([
            make_entry(A.member_move, executor_id=MODERATOR_ID, channel_id=VOICE_DEST_ID, count=2, age=1),
        ])
        dest = _channel()

        results = [await engine.voice_mover(_member(guild, 100 + i), dest) for i in range(3)]

        assert guild.audit_logs.call_count == 1
        assert all(r.is_known for r in results)

    @pytest.mark.asyncio
    async def test_other_destination_not_shared(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_move, executor_id=MODERATOR_ID, channel_id=VOICE_DEST_ID, count=3, age=1),
        ])
        await engine.voice_mover(_member(guild, 100), _channel())

        other = await engine.voice_mover(_member(guild, 101), _channel(901))

        assert guild.audit_logs.call_count == 2
        assert not other.is_known

    @pytest.mark.asyncio
    async def test_stale_entry_is_unknown(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_move, executor_id=MODERATOR_ID, channel_id=VOICE_DEST_ID, count=3, age=10),
        ])
        result = await engine.voice_mover(_member(guild, 100), _channel())
        assert not result.is_known
        assert len(engine.moves) == 0

    @pytest.mark.asyncio
    async def test_self_move_is_unknown(self, engine, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_move, executor_id=100, channel_id=VOICE_DEST_ID, count=1),
        ])
        result = await engine.voice_mover(_member(guild, 100), _channel())
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_cached_entry_ages_out_of_fresh_window(self, engine, clock, make_entry, audit_guild):
        guild = audit_guild([
            make_entry(A.member_move, executor_id=MODERATOR_ID, channel_id=VOICE_DEST_ID, count=3, age=1),
        ])
        dest = _channel()
        await engine.voice_mover(_member(guild, 100), dest)

        clock.advance(6)
        result = await engine.voice_mover(_member(guild, 101), dest)

        assert guild.audit_logs.call_count == 2
        assert not result.is_known

    @pytest.mark.asyncio
    async def test_failed_query_is_unknown(self, engine, audit_guild):
        guild = audit_guild(error=http_error(discord.HTTPException, 429, "Too Many Requests"))
        result = await engine.voice_mover(_member(guild, 100), _channel())
        assert not result.is_known


# =============================================================================
# Timeout Classification
# =============================================================================

class TestTimeoutChange:
    """member_update entries touching the timeout field."""

    def test_applied(self, make_entry, clock):
        until = clock.now + timedelta(hours=1)
        entry = make_entry(A.member_update, target_id=1, after=SimpleNamespace(timed_out_until=until))
        change = timeout_change(entry)
        assert change.applied is True
        assert change.until == until

    def test_removed(self, make_entry):
        entry = make_entry(A.member_update, target_id=1, after=SimpleNamespace(timed_out_until=None))
        change = timeout_change(entry)
        assert change.applied is False

    def test_raw_field_name(self, make_entry, clock):
        entry = make_entry(
            A.member_update, target_id=1,
            after=SimpleNamespace(communication_disabled_until=clock.now),
        )
        assert timeout_change(entry).applied is True

    def test_unrelated_update(self, make_entry):
        entry = make_entry(A.member_update, target_id=1, after=SimpleNamespace(nick="new"))
        assert timeout_change(entry) is None

    def test_engine_exposes_helper(self, engine, make_entry):
        entry = make_entry(A.member_update, target_id=1, after=SimpleNamespace(timed_out_until=None))
        assert engine.timeout_change(entry).applied is False
