"""
c0rd - Messages Handler
=======================

Handles message delete and edit logging.
"""

import re
from typing import TYPE_CHECKING

import discord

from src.core.config import EmbedColors
from src.services.attribution import Attribution
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


URL_ONLY = re.compile(r"^\s*https?://\S+\s*$")


def _is_link_preview(before: discord.Message, after: discord.Message) -> bool:
    """A bare link whose embed count changed is Discord unfurling it, not an edit."""
    return bool(URL_ONLY.match(after.content or "")) and len(before.embeds) != len(after.embeds)


class MessageLogsMixin:
    """Mixin for message logging."""

    async def log_message_delete(
        self: "LoggingService",
        message: discord.Message,
        attribution: Attribution,
    ) -> None:
        """
        Log a message deletion.

        The moderator role is pinged only when someone other than the
        author deleted the message.
        """
        if not self._should_log(message.guild.id if message.guild else None, message.author.id):
            return

        embed = self._create_embed("🗑️ Message Deleted", EmbedColors.NEGATIVE, category="Message Delete", user_id=message.author.id)
        embed.add_field(name="Author", value=self._format_user_field(message.author), inline=True)
        embed.add_field(name="Channel", value=self._format_channel(message.channel), inline=True)

        content = f"```{message.content[:900]}```" if message.content else "*(no content)*"
        embed.add_field(name="Content", value=content, inline=False)

        if message.attachments:
            att_names = [f"📎 {att.filename}" for att in message.attachments[:5]]
            embed.add_field(name="Attachments", value="\n".join(att_names), inline=True)

        ping = None
        if attribution.is_known:
            deleter = attribution.actor
            embed.add_field(name="Deleted By", value=self._format_user_line(deleter), inline=False)
            if deleter.id != message.author.id:
                ping = self._moderator_ping()

        self._set_user_thumbnail(embed, message.author)
        await self._send_log(LogChannel.MESSAGES, embed, content=ping)

    async def log_message_edit(
        self: "LoggingService",
        before: discord.Message,
        after: discord.Message,
    ) -> None:
        """Log a message edit. Embed-only updates are ignored."""
        if not self._should_log(after.guild.id if after.guild else None, after.author.id):
            return

        if before.content == after.content:
            return
        if _is_link_preview(before, after):
            return

        embed = self._create_embed("✏️ Message Edited", EmbedColors.GOLD, category="Message Edit", user_id=after.author.id)
        embed.add_field(name="Author", value=self._format_user_field(after.author), inline=True)
        embed.add_field(name="Channel", value=self._format_channel(after.channel), inline=True)

        before_content = f"```{before.content[:400]}```" if before.content else "*(empty)*"
        after_content = f"```{after.content[:400]}```" if after.content else "*(empty)*"
        embed.add_field(name="Before", value=before_content, inline=False)
        embed.add_field(name="After", value=after_content, inline=False)
        embed.add_field(name="Jump", value=f"[Message]({after.jump_url})", inline=True)

        self._set_user_thumbnail(embed, after.author)
        await self._send_log(LogChannel.MESSAGES, embed)
