"""
c0rd - Scheduled Events Handler
===============================

Handles scheduled event logging.
"""

from typing import TYPE_CHECKING, List, Optional

import discord

from src.core.config import EmbedColors
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


STATUS_TITLES = {
    discord.EventStatus.active: "📅 Event Started",
    discord.EventStatus.completed: "📅 Event Ended",
    discord.EventStatus.cancelled: "📅 Event Canceled",
}


def _timestamp(dt) -> str:
    return f"<t:{int(dt.timestamp())}:F>" if dt else "None"


class EventsLogsMixin:
    """Mixin for scheduled event logging."""

    async def log_event_create(
        self: "LoggingService",
        event: discord.ScheduledEvent,
    ) -> None:
        """Log a scheduled event creation."""
        if not self._should_log(event.guild_id):
            return

        embed = self._create_embed("📅 Event Created", EmbedColors.SUCCESS, category="Event Create")
        embed.add_field(name="Event", value=f"`{event.name}`", inline=True)
        embed.add_field(name="Starts", value=_timestamp(event.start_time), inline=True)
        if event.end_time:
            embed.add_field(name="Ends", value=_timestamp(event.end_time), inline=True)

        if event.location:
            embed.add_field(name="Location", value=f"`{event.location}`", inline=True)
        elif event.channel:
            embed.add_field(name="Channel", value=self._format_channel(event.channel), inline=True)

        if event.creator:
            embed.add_field(name="By", value=self._format_user_line(event.creator), inline=True)

        if event.description:
            embed.add_field(name="Description", value=f"```{event.description[:200]}```", inline=False)

        await self._send_log(LogChannel.EVENTS, embed)

    async def log_event_update(
        self: "LoggingService",
        before: discord.ScheduledEvent,
        after: discord.ScheduledEvent,
    ) -> None:
        """Log a status transition or a name, description or start time change."""
        if not self._should_log(after.guild_id):
            return

        changes: List[str] = []
        if before.name != after.name:
            changes.append(f"**Name:** {before.name} → {after.name}")
        if before.description != after.description:
            changes.append("**Description** changed")
        if before.start_time != after.start_time:
            changes.append(f"**Start:** {_timestamp(before.start_time)} → {_timestamp(after.start_time)}")

        title: Optional[str] = None
        if before.status != after.status:
            title = STATUS_TITLES.get(after.status)
        if title is None and not changes:
            return

        embed = self._create_embed(
            title or "📅 Event Updated",
            EmbedColors.GOLD,
            description="\n".join(changes) or None,
            category="Event Update",
        )
        embed.add_field(name="Event", value=f"`{after.name}`", inline=True)
        if after.user_count is not None:
            embed.add_field(name="Interested", value=f"`{after.user_count}`", inline=True)

        await self._send_log(LogChannel.EVENTS, embed)

    async def log_event_delete(
        self: "LoggingService",
        event: discord.ScheduledEvent,
    ) -> None:
        if not self._should_log(event.guild_id):
            return

        embed = self._create_embed("📅 Event Deleted", EmbedColors.NEGATIVE, category="Event Delete")
        embed.add_field(name="Event", value=f"`{event.name}`", inline=True)

        await self._send_log(LogChannel.EVENTS, embed)

    async def log_event_interest(
        self: "LoggingService",
        event: discord.ScheduledEvent,
        user: discord.User,
        interested: bool,
    ) -> None:
        """Log a user marking or unmarking interest in an event."""
        if not self._should_log(event.guild_id, user.id):
            return

        if interested:
            embed = self._create_embed("⭐ Interested In Event", EmbedColors.BLUE, category="Event Interest", user_id=user.id)
        else:
            embed = self._create_embed("⭐ No Longer Interested", EmbedColors.GREY, category="Event Interest", user_id=user.id)
        embed.add_field(name="User", value=self._format_user_line(user), inline=True)
        embed.add_field(name="Event", value=f"`{event.name}`", inline=True)

        await self._send_log(LogChannel.EVENTS, embed)


__all__ = ["EventsLogsMixin"]
