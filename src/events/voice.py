"""
c0rd - Voice Events
===================

Classifies voice state transitions and logs each with its actor.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class VoiceEvents(commands.Cog):
    """Voice state event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    @safe_execute
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        """
        Handle one voice state change.

        DESIGN: The first matching transition wins, checked in order:
        join, leave, channel change, server mute, server deafen,
        stream, camera.
        """
        if not self.bot.watches(member.guild):
            return

        service = self.bot.logging_service
        engine = self.bot.engine

        if before.channel is None and after.channel is not None:
            await service.log_voice_join(member, after.channel)

        elif before.channel is not None and after.channel is None:
            await service.log_voice_leave(member, before.channel)

        elif before.channel != after.channel:
            mover = await engine.voice_mover(member, after.channel)
            await service.log_voice_switch(member, before.channel, after.channel, mover)

        elif before.mute != after.mute:
            moderator = await engine.voice_moderator(member)
            await service.log_voice_mute(member, after.mute, moderator)

        elif before.deaf != after.deaf:
            moderator = await engine.voice_moderator(member)
            await service.log_voice_deafen(member, after.deaf, moderator)

        elif before.self_stream != after.self_stream:
            await service.log_stream(member, after.channel, after.self_stream)

        elif before.self_video != after.self_video:
            await service.log_stream(member, after.channel, after.self_video, video=True)


async def setup(bot: "C0rdBot") -> None:
    """Add the voice events cog to the bot."""
    await bot.add_cog(VoiceEvents(bot))
    logger.debug("Voice Events Loaded")
