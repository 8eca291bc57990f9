"""
c0rd - Scheduled Event Events
=============================

Mirrors scheduled event lifecycle and interest changes.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class ScheduledEventEvents(commands.Cog):
    """Scheduled event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    @safe_execute
    async def on_scheduled_event_create(self, event: discord.ScheduledEvent) -> None:
        if self.bot.watches(event.guild):
            await self.bot.logging_service.log_event_create(event)

    @commands.Cog.listener()
    @safe_execute
    async def on_scheduled_event_delete(self, event: discord.ScheduledEvent) -> None:
        if self.bot.watches(event.guild):
            await self.bot.logging_service.log_event_delete(event)

    @commands.Cog.listener()
    @safe_execute
    async def on_scheduled_event_update(
        self,
        before: discord.ScheduledEvent,
        after: discord.ScheduledEvent,
    ) -> None:
        if self.bot.watches(after.guild):
            await self.bot.logging_service.log_event_update(before, after)

    @commands.Cog.listener()
    @safe_execute
    async def on_scheduled_event_user_add(self, event: discord.ScheduledEvent, user: discord.User) -> None:
        if self.bot.watches(event.guild):
            await self.bot.logging_service.log_event_interest(event, user, interested=True)

    @commands.Cog.listener()
    @safe_execute
    async def on_scheduled_event_user_remove(self, event: discord.ScheduledEvent, user: discord.User) -> None:
        if self.bot.watches(event.guild):
            await self.bot.logging_service.log_event_interest(event, user, interested=False)


async def setup(bot: "C0rdBot") -> None:
    """Add the scheduled event cog to the bot."""
    await bot.add_cog(ScheduledEventEvents(bot))
    logger.debug("Scheduled Event Events Loaded")
