"""
c0rd - Thread Events
====================

Handles thread create, update and delete events.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.services.server_logs.handlers.threads import thread_state_title
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class ThreadEvents(commands.Cog):
    """Thread event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    @safe_execute
    async def on_thread_create(self, thread: discord.Thread) -> None:
        if not self.bot.watches(thread.guild):
            return

        owner = thread.owner
        if owner is None and thread.owner_id:
            owner = self.bot.get_user(thread.owner_id)
        await self.bot.logging_service.log_thread_create(thread, owner)

    @commands.Cog.listener()
    @safe_execute
    async def on_thread_delete(self, thread: discord.Thread) -> None:
        if not self.bot.watches(thread.guild):
            return

        await self.bot.logging_service.log_thread_delete(thread)

    @commands.Cog.listener()
    @safe_execute
    async def on_thread_update(self, before: discord.Thread, after: discord.Thread) -> None:
        """Only renames and archive/lock changes are logged, and only those cost an audit query."""
        if not self.bot.watches(after.guild):
            return

        if before.name == after.name and thread_state_title(before, after) is None:
            return

        editor = await self.bot.engine.thread_editor(after)
        await self.bot.logging_service.log_thread_update(before, after, editor)


async def setup(bot: "C0rdBot") -> None:
    """Add the thread events cog to the bot."""
    await bot.add_cog(ThreadEvents(bot))
    logger.debug("Thread Events Loaded")
