"""
c0rd - Message Events
=====================

Mirrors message deletions and edits from the target server.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    @safe_execute
    async def on_message_delete(self, message: discord.Message) -> None:
        """
        Log a deleted message with whoever deleted it.

        DESIGN: Only cached messages reach this listener, so content is
        always available. Bot messages are not mirrored.
        """
        if not self.bot.watches(message.guild) or message.author.bot:
            return

        deleter = await self.bot.engine.message_deleter(message)
        await self.bot.logging_service.log_message_delete(message, deleter)

    @commands.Cog.listener()
    @safe_execute
    async def on_message_edit(self, before: discord.Message, after: discord.Message) -> None:
        if not self.bot.watches(after.guild) or after.author.bot:
            return

        await self.bot.logging_service.log_message_edit(before, after)


async def setup(bot: "C0rdBot") -> None:
    """Add the message events cog to the bot."""
    await bot.add_cog(MessageEvents(bot))
    logger.debug("Message Events Loaded")
