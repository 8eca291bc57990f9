"""
c0rd - Member Events
====================

Handles member join, leave, and profile update events.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class MemberEvents(commands.Cog):
    """Member event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    @safe_execute
    async def on_member_join(self, member: discord.Member) -> None:
        """
        Log a join with the invite that was used.

        DESIGN: The invite baseline is refreshed on every join, even when
        no invite could be matched, so the next join compares against
        current counters.
        """
        if not self.bot.watches(member.guild):
            return

        invite = await self.bot.invites.resolve_join(member.guild)
        logger.tree("Member Joined", [
            ("User", f"{member.name} ({member.id})"),
            ("Invite", invite.code if invite else "Unknown"),
        ], emoji="📥")

        await self.bot.logging_service.log_member_join(member, invite)

    @commands.Cog.listener()
    @safe_execute
    async def on_member_remove(self, member: discord.Member) -> None:
        if not self.bot.watches(member.guild):
            return

        removal = await self.bot.engine.removal_action(member)
        await self.bot.logging_service.log_member_leave(member, removal)

    @commands.Cog.listener()
    @safe_execute
    async def on_member_update(self, before: discord.Member, after: discord.Member) -> None:
        """Nickname and per-server avatar changes."""
        if not self.bot.watches(after.guild):
            return

        if before.nick != after.nick:
            await self.bot.logging_service.log_nickname_change(after, before.nick, after.nick)

        if before.guild_avatar != after.guild_avatar:
            await self.bot.logging_service.log_server_avatar_change(before, after)

    @commands.Cog.listener()
    @safe_execute
    async def on_user_update(self, before: discord.User, after: discord.User) -> None:
        """Global profile changes, for users who are members of the target server."""
        guild = self.bot.target_guild
        if guild is None or not self.bot.watches(guild):
            return

        member = guild.get_member(after.id)
        if member is None or after.bot:
            return

        await self.bot.logging_service.log_user_update(member, before, after)


async def setup(bot: "C0rdBot") -> None:
    """Add the member events cog to the bot."""
    await bot.add_cog(MemberEvents(bot))
    logger.debug("Member Events Loaded")
