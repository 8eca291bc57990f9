"""
c0rd - Threads Handler
======================

Handles thread create, update and delete logging.
"""

from typing import TYPE_CHECKING, Any, List, Optional

import discord

from src.core.config import EmbedColors
from src.services.attribution import Attribution
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


def thread_state_title(before: discord.Thread, after: discord.Thread) -> Optional[str]:
    """Title for an archive/lock transition, or None if neither changed."""
    if before.archived == after.archived and before.locked == after.locked:
        return None
    if after.archived and after.locked:
        return "Thread Archived & Locked"
    if after.archived and not before.archived:
        return "Thread Archived"
    if not after.archived and before.archived:
        return "Thread Unarchived"
    if after.locked and not before.locked:
        return "Thread Locked"
    if not after.locked and before.locked:
        return "Thread Unlocked"
    return None


class ThreadsLogsMixin:
    """Mixin for thread logging."""

    async def log_thread_create(
        self: "LoggingService",
        thread: discord.Thread,
        owner: Optional[Any] = None,
    ) -> None:
        if not self._should_log(thread.guild.id):
            return

        embed = self._create_embed(
            "🧵 Thread Created",
            EmbedColors.SUCCESS,
            description=f"**Name:** {thread.name}\n**Link:** {thread.jump_url}",
            category="Thread Create",
        )
        embed.add_field(name="Parent Channel", value=self._format_channel(thread.parent), inline=True)
        embed.add_field(name="Auto Archive", value=f"{thread.auto_archive_duration} minutes", inline=True)
        if owner is not None:
            self._set_actor(embed, owner)

        await self._send_log(LogChannel.THREADS, embed)

    async def log_thread_delete(
        self: "LoggingService",
        thread: discord.Thread,
    ) -> None:
        if not self._should_log(thread.guild.id):
            return

        embed = self._create_embed(
            "🗑️ Thread Deleted",
            EmbedColors.NEGATIVE,
            description=f"**Name:** {thread.name}",
            category="Thread Delete",
        )
        embed.add_field(name="Parent Channel", value=self._format_channel(thread.parent), inline=True)

        await self._send_log(LogChannel.THREADS, embed)

    async def log_thread_update(
        self: "LoggingService",
        before: discord.Thread,
        after: discord.Thread,
        editor: Attribution,
    ) -> None:
        """Log a rename or archive/lock change. Other updates are ignored."""
        if not self._should_log(after.guild.id):
            return

        changes: List[str] = []
        if before.name != after.name:
            changes.append(f"**Name:** {before.name} → {after.name}")

        title = thread_state_title(before, after)
        if title is None and not changes:
            return

        embed = self._create_embed(
            f"🧵 {title or 'Thread Updated'}",
            EmbedColors.BLURPLE,
            description="\n".join(changes) or None,
            category="Thread Update",
        )
        embed.add_field(name="Thread", value=f"[{after.name}]({after.jump_url})", inline=True)
        if editor.is_known:
            self._set_actor(embed, editor.actor)
            embed.add_field(name="By", value=self._format_user_line(editor.actor), inline=True)

        await self._send_log(LogChannel.THREADS, embed)
