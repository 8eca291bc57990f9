"""
c0rd - Audit Log Events
=======================

Routes new audit log entries and AutoMod executions to the logging service.

DESIGN:
    Moderation actions (bans, kicks, timeouts, disconnects) get dedicated
    embeds. Everything else with a route is mirrored generically.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.services.server_logs import AUDIT_ROUTES, MODERATION_ACTIONS
from src.utils.error_handler import safe_execute

if TYPE_CHECKING:
    from src.bot import C0rdBot


class AuditLogEvents(commands.Cog):
    """Audit log event handlers."""

    def __init__(self, bot: "C0rdBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    @safe_execute
    async def on_audit_log_entry_create(self, entry: discord.AuditLogEntry) -> None:
        if not self.bot.watches(entry.guild):
            return

        if entry.action in MODERATION_ACTIONS:
            await self.bot.logging_service.log_moderation_entry(entry)
        elif entry.action in AUDIT_ROUTES:
            await self.bot.logging_service.log_audit_entry(entry)

    @commands.Cog.listener()
    @safe_execute
    async def on_automod_action(self, execution: discord.AutoModAction) -> None:
        if not self.bot.watches(execution.guild):
            return

        await self.bot.logging_service.log_automod_action(execution)


async def setup(bot: "C0rdBot") -> None:
    """Add the audit log events cog to the bot."""
    await bot.add_cog(AuditLogEvents(bot))
    logger.debug("Audit Log Events Loaded")
