"""
c0rd - Invite Events
====================

Keeps the invite baseline current between joins.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class InviteEvents(commands.Cog):
    """Invite event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    @safe_execute
    async def on_invite_create(self, invite: discord.Invite) -> None:
        if not self.bot.watches(invite.guild):
            return

        self.bot.invites.record_created(invite)
        logger.debug(f"Invite {invite.code} added to baseline")

    @commands.Cog.listener()
    @safe_execute
    async def on_invite_delete(self, invite: discord.Invite) -> None:
        if not self.bot.watches(invite.guild):
            return

        self.bot.invites.record_deleted(invite)
        logger.debug(f"Invite {invite.code} removed from baseline")


async def setup(bot: "C0rdBot") -> None:
    """Add the invite events cog to the bot."""
    await bot.add_cog(InviteEvents(bot))
    logger.debug("Invite Events Loaded")
