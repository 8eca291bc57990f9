"""
c0rd - Server Logging Service
=============================

Renders resolved events into embeds and posts them to the logging channels.

DESIGN:
    One text channel per LogChannel, resolved by the topology reconciler.
    Each log type lives in a handler mixin and routes to one channel.
    Sending never raises: a missing channel or failed send is logged and
    the event is dropped from the trail, not from the bot.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

import discord

from src.core.config import Config
from src.core.logger import logger
from src.services.topology import LogChannel, LoggingTopology
from src.utils.discord_rate_limit import log_http_error

from .handlers import (
    AuditLogsMixin,
    AutoModLogsMixin,
    EventsLogsMixin,
    MemberLogsMixin,
    MessageLogsMixin,
    ModerationLogsMixin,
    ReactionsLogsMixin,
    ThreadsLogsMixin,
    VoiceLogsMixin,
)


# =============================================================================
# Logging Service
# =============================================================================

class LoggingService(
    MessageLogsMixin,
    MemberLogsMixin,
    VoiceLogsMixin,
    ReactionsLogsMixin,
    ThreadsLogsMixin,
    ModerationLogsMixin,
    AuditLogsMixin,
    AutoModLogsMixin,
    EventsLogsMixin,
):
    """
    Server activity logging service.

    Attributes:
        config: Bot configuration.
        topology: Channel map, bound once the reconciler has run.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.topology: Optional[LoggingTopology] = None

    def bind(self, topology: LoggingTopology) -> None:
        self.topology = topology
        logger.tree("Logging Service Bound", [
            ("Category", getattr(topology.category, "name", "?")),
            ("Channels", f"{len(topology.channels)}/{len(LogChannel)}"),
        ], emoji="📋")

    @property
    def enabled(self) -> bool:
        return self.topology is not None

    def _should_log(self, guild_id: Optional[int], user_id: Optional[int] = None) -> bool:
        """Only the target guild is mirrored; ignored bots are skipped."""
        if not self.enabled or guild_id is None:
            return False
        if user_id and user_id in self.config.ignored_bot_ids:
            return False
        return guild_id == self.config.target_guild_id

    # =========================================================================
    # Helpers
    # =========================================================================

    def _create_embed(
        self,
        title: str,
        color: int,
        description: Optional[str] = None,
        category: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> discord.Embed:
        """Create a standardized log embed."""
        embed = discord.Embed(
            title=title,
            description=description,
            color=color,
            timestamp=datetime.now(timezone.utc),
        )
        footer_parts = []
        if category:
            footer_parts.append(category)
        if user_id:
            footer_parts.append(f"ID: {user_id}")
        if footer_parts:
            embed.set_footer(text=" • ".join(footer_parts))
        return embed

    def _format_user_field(self, user: Union[discord.User, discord.Member]) -> str:
        return f"{user.mention}\n`{user.name}`"

    def _format_user_line(self, user: Any) -> str:
        """Mention, name and id on one line."""
        return f"<@{user.id}> ({user.name}) / {user.id}"

    def _format_channel(self, channel: Any) -> str:
        if channel is None:
            return "#unknown"
        name = getattr(channel, "name", None)
        if name:
            return f"#{name}"
        channel_id = getattr(channel, "id", None)
        return f"#channel-{channel_id}" if channel_id else "#unknown"

    def _format_reason(self, reason: Optional[str]) -> str:
        if not reason:
            return "```No reason provided```"
        if len(reason) > 500:
            reason = reason[:497] + "..."
        return f"```{reason}```"

    def _truncate(self, text: Optional[str], limit: int = 1024) -> str:
        if not text:
            return "*empty*"
        return text if len(text) <= limit else text[: limit - 3] + "..."

    def _set_user_thumbnail(self, embed: discord.Embed, user: Any) -> None:
        avatar = getattr(user, "display_avatar", None)
        if avatar is not None:
            embed.set_thumbnail(url=avatar.url)

    def _set_actor(self, embed: discord.Embed, user: Any) -> None:
        avatar = getattr(user, "display_avatar", None)
        embed.set_author(name=f"{user.name}", icon_url=avatar.url if avatar is not None else None)

    def _moderator_ping(self) -> Optional[str]:
        if self.config.moderator_role_id:
            return f"<@&{self.config.moderator_role_id}>"
        return None

    # =========================================================================
    # Delivery
    # =========================================================================

    async def _send_log(
        self,
        log_channel: LogChannel,
        embed: discord.Embed,
        content: Optional[str] = None,
    ) -> Optional[discord.Message]:
        """Send a log to its channel. Returns the message if successful."""
        if self.topology is None:
            return None

        channel = self.topology.get(log_channel)
        if channel is None:
            logger.debug(f"Logging Service: no channel for {log_channel.key}")
            return None

        try:
            return await channel.send(content=content, embed=embed)
        except discord.HTTPException as e:
            log_http_error(e, "Log Send", [("Channel", log_channel.channel_name)])
            return None


__all__ = ["LoggingService"]
