"""
c0rd - Voice Handler
====================

Handles voice channel activity logging.
"""

from typing import TYPE_CHECKING, Any

import discord

from src.core.config import EmbedColors
from src.services.attribution import Attribution
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


class VoiceLogsMixin:
    """Mixin for voice activity logging."""

    async def log_voice_join(
        self: "LoggingService",
        member: discord.Member,
        channel: Any,
    ) -> None:
        if not self._should_log(member.guild.id, member.id):
            return

        embed = self._create_embed("🟢 Voice Join", EmbedColors.SUCCESS, category="Voice Join", user_id=member.id)
        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        embed.add_field(name="Channel", value=f"🔊 {self._format_channel(channel)}", inline=True)
        self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.VOICE, embed)

    async def log_voice_leave(
        self: "LoggingService",
        member: discord.Member,
        channel: Any,
    ) -> None:
        if not self._should_log(member.guild.id, member.id):
            return

        embed = self._create_embed("🔴 Voice Leave", EmbedColors.NEGATIVE, category="Voice Leave", user_id=member.id)
        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        embed.add_field(name="Channel", value=f"🔊 {self._format_channel(channel)}", inline=True)
        self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.VOICE, embed)

    async def log_voice_switch(
        self: "LoggingService",
        member: discord.Member,
        before: Any,
        after: Any,
        mover: Attribution,
    ) -> None:
        """Log a channel change, as a move when a moderator was found."""
        if not self._should_log(member.guild.id, member.id):
            return

        if mover.is_known:
            embed = self._create_embed("🔀 User Moved", EmbedColors.ORANGE, category="Voice Move", user_id=member.id)
        else:
            embed = self._create_embed("🔀 Switched Voice Channel", EmbedColors.BLUE, category="Voice Switch", user_id=member.id)

        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        embed.add_field(name="Moved", value=f"{self._format_channel(before)} → {self._format_channel(after)}", inline=True)
        if mover.is_known:
            embed.add_field(name="Moved By", value=self._format_user_line(mover.actor), inline=False)
        self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.VOICE, embed)

    async def log_voice_mute(
        self: "LoggingService",
        member: discord.Member,
        muted: bool,
        moderator: Attribution,
    ) -> None:
        """Log a server mute/unmute."""
        if not self._should_log(member.guild.id, member.id):
            return

        if muted:
            embed = self._create_embed("🔇 Server Muted", EmbedColors.WARNING, category="Voice Mute", user_id=member.id)
        else:
            embed = self._create_embed("🔊 Server Unmuted", EmbedColors.SUCCESS, category="Voice Unmute", user_id=member.id)

        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        if moderator.is_known:
            embed.add_field(name="By", value=self._format_user_line(moderator.actor), inline=True)
        self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.VOICE, embed)

    async def log_voice_deafen(
        self: "LoggingService",
        member: discord.Member,
        deafened: bool,
        moderator: Attribution,
    ) -> None:
        """Log a server deafen/undeafen."""
        if not self._should_log(member.guild.id, member.id):
            return

        if deafened:
            embed = self._create_embed("🔇 Server Deafened", EmbedColors.WARNING, category="Voice Deafen", user_id=member.id)
        else:
            embed = self._create_embed("🔊 Server Undeafened", EmbedColors.SUCCESS, category="Voice Undeafen", user_id=member.id)

        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        if moderator.is_known:
            embed.add_field(name="By", value=self._format_user_line(moderator.actor), inline=True)
        self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.VOICE, embed)

    async def log_stream(
        self: "LoggingService",
        member: discord.Member,
        channel: Any,
        started: bool,
        video: bool = False,
    ) -> None:
        """Log a screenshare or camera starting/stopping."""
        if not self._should_log(member.guild.id, member.id):
            return

        what = "Video" if video else "Streaming"
        if started:
            embed = self._create_embed(f"📺 Started {what}", EmbedColors.PURPLE, category=what, user_id=member.id)
        else:
            embed = self._create_embed(f"📺 Stopped {what}", EmbedColors.GREY, category=what, user_id=member.id)

        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        embed.add_field(name="Channel", value=f"🔊 {self._format_channel(channel)}", inline=True)
        self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.SCREENSHARE, embed)
