"""
c0rd - AutoMod Handler
======================

Handles AutoMod rule execution logging.
"""

from typing import TYPE_CHECKING, Dict

import discord

from src.core.config import EmbedColors
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


AUTOMOD_ACTIONS: Dict[int, str] = {
    1: "Block Message",
    2: "Send Alert Message",
    3: "Timeout",
    4: "Block Member Interaction",
}

AUTOMOD_TRIGGERS: Dict[int, str] = {
    1: "Keyword",
    2: "Harmful Link",
    3: "Spam",
    4: "Keyword Preset",
    5: "Mention Spam",
    6: "Member Profile",
}


def _enum_label(value: object, names: Dict[int, str]) -> str:
    raw = getattr(value, "value", value)
    return names.get(raw, f"Unknown ({raw})") if isinstance(raw, int) else "Unknown"


class AutoModLogsMixin:
    """Mixin for AutoMod action logging."""

    async def log_automod_action(
        self: "LoggingService",
        execution: discord.AutoModAction,
    ) -> None:
        """Log an AutoMod rule execution."""
        if not self._should_log(execution.guild_id, execution.user_id):
            return

        action_name = _enum_label(execution.action.type, AUTOMOD_ACTIONS)
        trigger_name = _enum_label(execution.rule_trigger_type, AUTOMOD_TRIGGERS)

        embed = self._create_embed("🛡️ AutoMod Action", EmbedColors.WARNING, category="AutoMod", user_id=execution.user_id)
        embed.add_field(name="User", value=f"<@{execution.user_id}> / {execution.user_id}", inline=True)
        embed.add_field(name="Action", value=f"`{action_name}`", inline=True)
        embed.add_field(name="Trigger", value=f"`{trigger_name}`", inline=True)

        if execution.channel_id:
            embed.add_field(name="Channel", value=f"<#{execution.channel_id}>", inline=True)

        if execution.matched_keyword:
            embed.add_field(name="Matched", value=f"`{execution.matched_keyword}`", inline=True)

        if execution.content:
            embed.add_field(name="Content", value=f"```{execution.content[:300]}```", inline=False)

        member = execution.member
        if member is not None:
            self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.AUTOMOD, embed)


__all__ = ["AutoModLogsMixin", "AUTOMOD_ACTIONS", "AUTOMOD_TRIGGERS"]
