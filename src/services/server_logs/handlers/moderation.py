"""
c0rd - Moderation Handler
=========================

Handles ban, unban, kick, timeout and voice disconnect logging, all read
straight from audit log entries.
"""

from typing import TYPE_CHECKING, Any, Optional

import discord

from src.core.config import EmbedColors
from src.core.logger import logger
from src.services.attribution import timeout_change
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


MODERATION_ACTIONS = frozenset({
    discord.AuditLogAction.ban,
    discord.AuditLogAction.unban,
    discord.AuditLogAction.kick,
    discord.AuditLogAction.member_update,
    discord.AuditLogAction.member_disconnect,
})
"""Audit actions rendered by this mixin instead of the generic audit log."""


class ModerationLogsMixin:
    """Mixin for moderation logging (bans, unbans, kicks, timeouts)."""

    async def log_moderation_entry(
        self: "LoggingService",
        entry: discord.AuditLogEntry,
    ) -> None:
        """
        Log a moderation audit entry.

        member_update entries only produce a log when they change a
        timeout; nickname and role edits are covered elsewhere.
        """
        if not self._should_log(entry.guild.id):
            return

        action = entry.action
        if action == discord.AuditLogAction.ban:
            await self._log_target_action(entry, "🔨 Member Banned", EmbedColors.NEGATIVE, "Ban", ping=True)
        elif action == discord.AuditLogAction.unban:
            await self._log_target_action(entry, "🔓 Member Unbanned", EmbedColors.SUCCESS, "Unban")
        elif action == discord.AuditLogAction.kick:
            await self._log_target_action(entry, "👢 Member Kicked", EmbedColors.ORANGE, "Kick", ping=True)
        elif action == discord.AuditLogAction.member_update:
            await self._log_timeout(entry)
        elif action == discord.AuditLogAction.member_disconnect:
            await self._log_disconnect(entry)

    async def _log_target_action(
        self: "LoggingService",
        entry: discord.AuditLogEntry,
        title: str,
        color: int,
        category: str,
        ping: bool = False,
    ) -> None:
        target = entry.target
        embed = self._create_embed(title, color, category=category, user_id=getattr(target, "id", None))
        embed.add_field(name="User", value=_target_line(self, target), inline=True)
        if entry.user is not None:
            embed.add_field(name="By", value=self._format_user_line(entry.user), inline=True)
        embed.add_field(name="Reason", value=self._format_reason(entry.reason), inline=False)
        self._set_user_thumbnail(embed, target)

        logger.tree(f"Moderation: {category}", [
            ("Target", _target_line(self, target)),
            ("By", f"{entry.user.name} ({entry.user.id})" if entry.user else "Unknown"),
        ], emoji="🔨")

        await self._send_log(LogChannel.MODERATION, embed, content=self._moderator_ping() if ping else None)

    async def _log_timeout(
        self: "LoggingService",
        entry: discord.AuditLogEntry,
    ) -> None:
        change = timeout_change(entry)
        if change is None:
            return

        target = entry.target
        if change.applied:
            embed = self._create_embed("⏰ Member Timed Out", EmbedColors.WARNING, category="Timeout", user_id=getattr(target, "id", None))
        else:
            embed = self._create_embed("⏰ Timeout Removed", EmbedColors.SUCCESS, category="Timeout Remove", user_id=getattr(target, "id", None))

        embed.add_field(name="User", value=_target_line(self, target), inline=True)
        if entry.user is not None:
            embed.add_field(name="By", value=self._format_user_line(entry.user), inline=True)
        if change.applied and change.until is not None:
            embed.add_field(name="Until", value=f"<t:{int(change.until.timestamp())}:F>", inline=True)
        embed.add_field(name="Reason", value=self._format_reason(entry.reason), inline=False)
        self._set_user_thumbnail(embed, target)

        await self._send_log(
            LogChannel.MODERATION,
            embed,
            content=self._moderator_ping() if change.applied else None,
        )

    async def _log_disconnect(
        self: "LoggingService",
        entry: discord.AuditLogEntry,
    ) -> None:
        # Disconnect entries carry no target, only a count.
        count = getattr(entry.extra, "count", None) or 1
        embed = self._create_embed("🔌 Voice Disconnect", EmbedColors.ORANGE, category="Disconnect")
        embed.add_field(name="Members", value=f"`{count}`", inline=True)
        if entry.user is not None:
            embed.add_field(name="By", value=self._format_user_line(entry.user), inline=True)
            self._set_actor(embed, entry.user)

        await self._send_log(LogChannel.MODERATION, embed)


def _target_line(service: "LoggingService", target: Optional[Any]) -> str:
    if target is None:
        return "Unknown"
    if getattr(target, "name", None):
        return service._format_user_line(target)
    return f"<@{target.id}> / {target.id}"


__all__ = ["ModerationLogsMixin", "MODERATION_ACTIONS"]
