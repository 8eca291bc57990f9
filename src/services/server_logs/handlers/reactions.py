"""
c0rd - Reactions Handler
========================

Handles reaction add and remove logging.
"""

from typing import TYPE_CHECKING, Any, Union

import discord

from src.core.config import EmbedColors
from src.services.attribution import ReactionDirection
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


class ReactionsLogsMixin:
    """Mixin for reaction logging."""

    async def log_reaction(
        self: "LoggingService",
        user: Union[discord.User, discord.Member],
        message: discord.Message,
        emoji: Any,
        direction: ReactionDirection,
    ) -> None:
        if not self._should_log(message.guild.id if message.guild else None, user.id):
            return

        if direction == ReactionDirection.ADD:
            embed = self._create_embed(
                "➕ Reaction Added",
                EmbedColors.SUCCESS,
                description=f"Added {emoji} to [message]({message.jump_url})",
                category="Reaction Add",
                user_id=user.id,
            )
        else:
            embed = self._create_embed(
                "➖ Reaction Removed",
                EmbedColors.NEGATIVE,
                description=f"Removed {emoji} from [message]({message.jump_url})",
                category="Reaction Remove",
                user_id=user.id,
            )

        embed.add_field(name="User", value=self._format_user_field(user), inline=True)
        embed.add_field(name="Channel", value=self._format_channel(message.channel), inline=True)

        await self._send_log(LogChannel.REACTIONS, embed)
