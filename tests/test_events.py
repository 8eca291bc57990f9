"""
c0rd - Event Cog Tests
======================

Guild gating, voice transition classification, reaction dedup wiring
and startup failure handling.
"""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import FakeGuild, http_error, make_user
from src.bot import C0rdBot
from src.events.reactions import ReactionEvents
from src.events.voice import VoiceEvents
from src.services.attribution import Attribution, ReactionDeduplicator, ReactionDirection


TARGET = SimpleNamespace(id=2000)


def _bot(config, clock=None):
    bot = MagicMock()
    bot.watches = MagicMock(return_value=True)
    bot.engine.voice_mover = AsyncMock(return_value=Attribution.unknown())
    bot.engine.voice_moderator = AsyncMock(return_value=Attribution.unknown())
    bot.logging_service = AsyncMock()
    if clock is not None:
        bot.reactions = ReactionDeduplicator(ttl=timedelta(seconds=5), clock=clock)
    return bot


def _state(channel=None, mute=False, deaf=False, self_stream=False, self_video=False):
    return SimpleNamespace(
        channel=channel, mute=mute, deaf=deaf,
        self_stream=self_stream, self_video=self_video,
    )


# =============================================================================
# Guild Gate
# =============================================================================

class TestWatches:
    """Events flow only from the target guild once channels are ready."""

    def _self(self, config, ready=True):
        return SimpleNamespace(config=config, logging_ready=ready)

    def test_target_guild_when_ready(self, config):
        assert C0rdBot.watches(self._self(config), TARGET) is True

    def test_nothing_before_ready(self, config):
        assert C0rdBot.watches(self._self(config, ready=False), TARGET) is False

    def test_other_guilds(self, config):
        assert C0rdBot.watches(self._self(config), SimpleNamespace(id=1000)) is False
        assert C0rdBot.watches(self._self(config), None) is False


# =============================================================================
# Voice
# =============================================================================

class TestVoiceEvents:
    """First matching transition wins."""

    @pytest.fixture
    def member(self):
        m = make_user(10)
        m.guild = TARGET
        return m

    @pytest.mark.asyncio
    async def test_join(self, config, member):
        bot = _bot(config)
        lobby = SimpleNamespace(id=1, name="lobby")
        await VoiceEvents(bot).on_voice_state_update(member, _state(), _state(lobby))

        bot.logging_service.log_voice_join.assert_awaited_once_with(member, lobby)
        bot.engine.voice_mover.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_switch_asks_for_mover(self, config, member):
        bot = _bot(config)
        lobby = SimpleNamespace(id=1, name="lobby")
        afk = SimpleNamespace(id=2, name="afk")
        await VoiceEvents(bot).on_voice_state_update(member, _state(lobby), _state(afk))

        bot.engine.voice_mover.assert_awaited_once_with(member, afk)
        bot.logging_service.log_voice_switch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_server_mute(self, config, member):
        bot = _bot(config)
        lobby = SimpleNamespace(id=1, name="lobby")
        await VoiceEvents(bot).on_voice_state_update(member, _state(lobby), _state(lobby, mute=True))

        bot.engine.voice_moderator.assert_awaited_once_with(member)
        args = bot.logging_service.log_voice_mute.await_args.args
        assert args[1] is True

    @pytest.mark.asyncio
    async def test_stream_and_video(self, config, member):
        bot = _bot(config)
        lobby = SimpleNamespace(id=1, name="lobby")
        cog = VoiceEvents(bot)

        await cog.on_voice_state_update(member, _state(lobby), _state(lobby, self_stream=True))
        await cog.on_voice_state_update(member, _state(lobby), _state(lobby, self_video=True))

        calls = bot.logging_service.log_stream.await_args_list
        assert calls[0].args == (member, lobby, True)
        assert calls[1].kwargs == {"video": True}

    @pytest.mark.asyncio
    async def test_other_guild_is_ignored(self, config, member):
        bot = _bot(config)
        bot.watches.return_value = False
        await VoiceEvents(bot).on_voice_state_update(member, _state(), _state(SimpleNamespace(name="x")))
        bot.logging_service.log_voice_join.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_errors_are_swallowed(self, config, member):
        bot = _bot(config)
        bot.engine.voice_mover.side_effect = RuntimeError("boom")
        lobby = SimpleNamespace(id=1, name="lobby")
        afk = SimpleNamespace(id=2, name="afk")

        await VoiceEvents(bot).on_voice_state_update(member, _state(lobby), _state(afk))

        bot.logging_service.log_voice_switch.assert_not_awaited()


# =============================================================================
# Reactions
# =============================================================================

class TestReactionEvents:
    """Duplicate deliveries inside the window are logged once."""

    def _reaction(self):
        message = SimpleNamespace(id=4242, guild=TARGET)
        return SimpleNamespace(message=message, emoji="👍")

    @pytest.mark.asyncio
    async def test_duplicate_add_logged_once(self, config, clock):
        bot = _bot(config, clock)
        cog = ReactionEvents(bot)
        reaction, user = self._reaction(), make_user(10)

        await cog.on_reaction_add(reaction, user)
        await cog.on_reaction_add(reaction, user)

        bot.logging_service.log_reaction.assert_awaited_once_with(
            user, reaction.message, "👍", ReactionDirection.ADD
        )

    @pytest.mark.asyncio
    async def test_bots_are_skipped(self, config, clock):
        bot = _bot(config, clock)
        await ReactionEvents(bot).on_reaction_add(self._reaction(), make_user(10, bot=True))
        bot.logging_service.log_reaction.assert_not_awaited()


# =============================================================================
# Startup
# =============================================================================

class TestStartup:
    """on_ready builds the layout once, or shuts down cleanly."""

    def _self(self, config, reconcile):
        return SimpleNamespace(
            _ready_initialized=False,
            user=SimpleNamespace(name="c0rd", id=1),
            guilds=[],
            config=config,
            target_guild=FakeGuild(2000, "Target"),
            logging_guild=FakeGuild(),
            reconciler=SimpleNamespace(reconcile=reconcile),
            logging_service=MagicMock(),
            invites=SimpleNamespace(snapshot=AsyncMock(return_value=0)),
            logging_ready=False,
            close=AsyncMock(),
        )

    @pytest.mark.asyncio
    async def test_reconcile_http_error_closes(self, config):
        bot = self._self(config, AsyncMock(
            side_effect=http_error(discord.HTTPException, 500, "Internal Server Error"),
        ))

        await C0rdBot.on_ready(bot)

        bot.close.assert_awaited_once()
        bot.logging_service.bind.assert_not_called()
        bot.invites.snapshot.assert_not_awaited()
        assert bot.logging_ready is False

    @pytest.mark.asyncio
    async def test_missing_permission_closes_before_reconcile(self, config):
        bot = self._self(config, AsyncMock())
        bot.logging_guild.me.guild_permissions.manage_channels = False

        await C0rdBot.on_ready(bot)

        bot.close.assert_awaited_once()
        bot.reconciler.reconcile.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_second_ready_is_skipped(self, config):
        bot = self._self(config, AsyncMock())
        bot._ready_initialized = True

        await C0rdBot.on_ready(bot)

        bot.reconciler.reconcile.assert_not_awaited()
        bot.close.assert_not_awaited()
