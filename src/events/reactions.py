"""
c0rd - Reaction Events
======================

Logs reaction adds and removes, once per window per user and message.
"""

from typing import TYPE_CHECKING, Union

import discord
from discord.ext import commands

from src.core.logger import logger
from src.services.attribution import ReactionDirection
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class ReactionEvents(commands.Cog):
    """Reaction event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    async def _handle(
        self,
        reaction: discord.Reaction,
        user: Union[discord.Member, discord.User],
        direction: ReactionDirection,
    ) -> None:
        message = reaction.message
        if not self.bot.watches(message.guild) or user.bot:
            return

        if not self.bot.reactions.should_notify(message.id, user.id, direction):
            logger.debug(f"Reaction {direction.value} by {user.id} on {message.id} suppressed")
            return

        await self.bot.logging_service.log_reaction(user, message, reaction.emoji, direction)

    @commands.Cog.listener()
    @safe_execute
    async def on_reaction_add(self, reaction: discord.Reaction, user: discord.Member) -> None:
        await self._handle(reaction, user, ReactionDirection.ADD)

    @commands.Cog.listener()
    @safe_execute
    async def on_reaction_remove(self, reaction: discord.Reaction, user: discord.Member) -> None:
        await self._handle(reaction, user, ReactionDirection.REMOVE)


async def setup(bot: "C0rdBot") -> None:
    """Add the reaction events cog to the bot."""
    await bot.add_cog(ReactionEvents(bot))
    logger.debug("Reaction Events Loaded")
