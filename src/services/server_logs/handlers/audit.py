"""
c0rd - Audit Handler
====================

Generic audit log mirroring for roles, channels, emojis and the other
administrative changes that have no dedicated gateway handler.

DESIGN:
    Each action is routed to one logging channel by AUDIT_ROUTES.
    The embed lists the diffed attributes from entry.before/entry.after.
    Unrouted actions are dropped silently.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import discord

from src.core.config import EmbedColors
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


A = discord.AuditLogAction

AUDIT_ROUTES: Dict[discord.AuditLogAction, LogChannel] = {
    A.role_create: LogChannel.ROLES,
    A.role_update: LogChannel.ROLES,
    A.role_delete: LogChannel.ROLES,
    A.member_role_update: LogChannel.ROLES,
    A.channel_create: LogChannel.CHANNELS,
    A.channel_update: LogChannel.CHANNELS,
    A.channel_delete: LogChannel.CHANNELS,
    A.overwrite_create: LogChannel.CHANNELS,
    A.overwrite_update: LogChannel.CHANNELS,
    A.overwrite_delete: LogChannel.CHANNELS,
    A.guild_update: LogChannel.SERVER,
    A.invite_create: LogChannel.INVITES,
    A.invite_update: LogChannel.INVITES,
    A.invite_delete: LogChannel.INVITES,
    A.emoji_create: LogChannel.EMOJIS,
    A.emoji_update: LogChannel.EMOJIS,
    A.emoji_delete: LogChannel.EMOJIS,
    A.sticker_create: LogChannel.STICKERS,
    A.sticker_update: LogChannel.STICKERS,
    A.sticker_delete: LogChannel.STICKERS,
    A.integration_create: LogChannel.INTEGRATIONS,
    A.integration_update: LogChannel.INTEGRATIONS,
    A.integration_delete: LogChannel.INTEGRATIONS,
    A.webhook_create: LogChannel.INTEGRATIONS,
    A.webhook_update: LogChannel.INTEGRATIONS,
    A.webhook_delete: LogChannel.INTEGRATIONS,
    A.bot_add: LogChannel.INTEGRATIONS,
    A.app_command_permission_update: LogChannel.INTEGRATIONS,
    A.stage_instance_create: LogChannel.STAGES,
    A.stage_instance_update: LogChannel.STAGES,
    A.stage_instance_delete: LogChannel.STAGES,
    A.automod_rule_create: LogChannel.AUTOMOD,
    A.automod_rule_update: LogChannel.AUTOMOD,
    A.automod_rule_delete: LogChannel.AUTOMOD,
}

_CATEGORY_COLORS = {
    discord.AuditLogActionCategory.create: EmbedColors.SUCCESS,
    discord.AuditLogActionCategory.delete: EmbedColors.NEGATIVE,
    discord.AuditLogActionCategory.update: EmbedColors.GOLD,
}

MAX_CHANGES = 10


def action_title(action: discord.AuditLogAction) -> str:
    """role_create -> Role Create"""
    return action.name.replace("_", " ").title()


def _format_value(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_value(v) for v in value) or "None"
    name = getattr(value, "name", None)
    if isinstance(name, str) and hasattr(value, "id"):
        return name
    return str(value)


def diff_lines(entry: discord.AuditLogEntry, limit: int = MAX_CHANGES) -> List[str]:
    """Render the before/after diff of an entry as `attr: old → new` lines."""
    before = dict(iter(entry.before)) if entry.before is not None else {}
    after = dict(iter(entry.after)) if entry.after is not None else {}

    lines: List[str] = []
    for key in sorted(set(before) | set(after)):
        old, new = before.get(key), after.get(key)
        if old == new:
            continue
        label = key.replace("_", " ").title()
        if key in before and key in after:
            lines.append(f"**{label}:** {_format_value(old)} → {_format_value(new)}")
        elif key in after:
            lines.append(f"**{label}:** {_format_value(new)}")
        else:
            lines.append(f"**{label}:** ~~{_format_value(old)}~~")
        if len(lines) >= limit:
            break
    return lines


class AuditLogsMixin:
    """Mixin for generic audit log mirroring."""

    def audit_route(self: "LoggingService", action: discord.AuditLogAction) -> Optional[LogChannel]:
        return AUDIT_ROUTES.get(action)

    async def log_audit_entry(
        self: "LoggingService",
        entry: discord.AuditLogEntry,
    ) -> None:
        """Log an audit entry to the channel its action routes to."""
        if not self._should_log(entry.guild.id):
            return

        route = self.audit_route(entry.action)
        if route is None:
            return

        color = _CATEGORY_COLORS.get(entry.category, EmbedColors.BLUE)
        changes = diff_lines(entry)
        embed = self._create_embed(
            f"🔍 {action_title(entry.action)}",
            color,
            description="\n".join(changes)[:4000] or None,
            category="Audit",
            user_id=entry.user.id if entry.user else None,
        )

        target = entry.target
        if target is not None:
            embed.add_field(name="Target", value=_target_label(target), inline=True)
        if entry.user is not None:
            embed.add_field(name="By", value=self._format_user_line(entry.user), inline=True)
            self._set_actor(embed, entry.user)
        if entry.reason:
            embed.add_field(name="Reason", value=self._format_reason(entry.reason), inline=False)
        embed.add_field(name="Audit ID", value=f"`{entry.id}`", inline=True)

        await self._send_log(route, embed)


def _target_label(target: Any) -> str:
    mention = getattr(target, "mention", None)
    name = getattr(target, "name", None)
    if mention and name:
        return f"{mention} (`{name}`)"
    if name:
        return f"`{name}`"
    return f"`{getattr(target, 'id', target)}`"


__all__ = ["AuditLogsMixin", "AUDIT_ROUTES", "diff_lines", "action_title"]
