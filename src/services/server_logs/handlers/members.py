"""
c0rd - Members Handler
======================

Handles member join, leave, nickname, avatar and profile logging.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

import discord

from src.core.config import EmbedColors
from src.services.attribution import Attribution, InviteUse
from src.services.topology import LogChannel

if TYPE_CHECKING:
    from ..service import LoggingService


NEW_ACCOUNT_DAYS = 7
"""Accounts younger than this get an age warning on join."""


class MemberLogsMixin:
    """Mixin for member-related logging."""

    async def log_member_join(
        self: "LoggingService",
        member: discord.Member,
        invite: Optional[InviteUse] = None,
    ) -> None:
        """Log a member join with the invite used, when it could be worked out."""
        if not self._should_log(member.guild.id, member.id):
            return

        age_days = (datetime.now(timezone.utc) - member.created_at).days
        is_new = age_days < NEW_ACCOUNT_DAYS

        embed = self._create_embed(
            "📥 Member Joined",
            EmbedColors.WARNING if is_new else EmbedColors.SUCCESS,
            category="Join",
            user_id=member.id,
        )
        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        embed.add_field(name="Account Created", value=f"<t:{int(member.created_at.timestamp())}:R>", inline=True)
        embed.add_field(name="Members", value=f"`{member.guild.member_count:,}`", inline=True)

        if invite is not None and invite.inviter is not None:
            embed.add_field(
                name="Invite Used",
                value=f"{invite.url} - Invited by {self._format_user_line(invite.inviter)}",
                inline=False,
            )
        elif invite is not None:
            embed.add_field(name="Invite Used", value=invite.url, inline=False)
        else:
            embed.add_field(name="Invited By", value="Unknown", inline=False)

        if is_new:
            embed.add_field(
                name="⚠️ Account Age Warning",
                value=f"Account is only {age_days} days old",
                inline=False,
            )

        self._set_user_thumbnail(embed, member)
        await self._send_log(LogChannel.JOINS, embed)

    async def log_member_leave(
        self: "LoggingService",
        member: discord.Member,
        removal: Attribution,
    ) -> None:
        """
        Log a member leaving.

        When a kick or ban entry matched, the embed names the action and
        its reason, with "Unknown" standing in for a missing executor.
        """
        if not self._should_log(member.guild.id, member.id):
            return

        embed = self._create_embed("📤 Member Left", EmbedColors.NEGATIVE, category="Leave", user_id=member.id)
        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        embed.add_field(name="Members", value=f"`{member.guild.member_count:,}`", inline=True)

        roles = self._role_names(member)
        if roles:
            embed.add_field(name="Roles", value=", ".join(roles)[:1024], inline=False)

        if removal.entry is not None:
            verb = "Kicked" if removal.action == discord.AuditLogAction.kick else "Banned"
            by = self._format_user_line(removal.actor) if removal.is_known else "Unknown"
            embed.add_field(name=f"{verb} By", value=by, inline=True)
            if removal.reason:
                embed.add_field(name="Reason", value=self._format_reason(removal.reason), inline=False)

        self._set_user_thumbnail(embed, member)
        await self._send_log(LogChannel.LEAVES, embed)

    async def log_nickname_change(
        self: "LoggingService",
        member: discord.Member,
        old_nick: Optional[str],
        new_nick: Optional[str],
    ) -> None:
        if not self._should_log(member.guild.id, member.id):
            return

        embed = self._create_embed("✨ Nickname Changed", EmbedColors.GOLD, category="Nickname", user_id=member.id)
        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        embed.add_field(name="Old Nickname", value=old_nick or "*None (using username)*", inline=True)
        embed.add_field(name="New Nickname", value=new_nick or "*None (using username)*", inline=True)
        self._set_user_thumbnail(embed, member)

        await self._send_log(LogChannel.MEMBERS, embed)

    async def log_server_avatar_change(
        self: "LoggingService",
        before: discord.Member,
        after: discord.Member,
    ) -> None:
        if not self._should_log(after.guild.id, after.id):
            return

        old_url = before.guild_avatar.url if before.guild_avatar else None
        new_url = after.guild_avatar.url if after.guild_avatar else None

        embed = self._create_embed("🖼️ Server Avatar Changed", EmbedColors.BLUE, category="Server Avatar", user_id=after.id)
        embed.add_field(name="User", value=self._format_user_field(after), inline=True)
        embed.add_field(
            name="Old Server Avatar",
            value=f"[View]({old_url})" if old_url else "*None (using global avatar)*",
            inline=True,
        )
        embed.add_field(
            name="New Server Avatar",
            value=f"[View]({new_url})" if new_url else "*None (using global avatar)*",
            inline=True,
        )
        if new_url:
            embed.set_thumbnail(url=new_url)
        if old_url:
            embed.set_image(url=old_url)

        await self._send_log(LogChannel.MEMBERS, embed)

    async def log_user_update(
        self: "LoggingService",
        member: discord.Member,
        before: discord.User,
        after: discord.User,
    ) -> None:
        """Log a global username, display name or avatar change of a target member."""
        if not self._should_log(member.guild.id, member.id):
            return

        changes: List[str] = []
        if before.name != after.name:
            changes.append(f"**Username:** `{before.name}` → `{after.name}`")
        if before.global_name != after.global_name:
            changes.append(f"**Display Name:** `{before.global_name or 'None'}` → `{after.global_name or 'None'}`")
        avatar_changed = before.avatar != after.avatar

        if not changes and not avatar_changed:
            return

        title = "🖼️ Avatar Changed" if avatar_changed else "✨ User Profile Updated"
        embed = self._create_embed(title, EmbedColors.GOLD, description="\n".join(changes) or None, category="Profile", user_id=after.id)
        embed.add_field(name="User", value=self._format_user_field(member), inline=True)
        self._set_user_thumbnail(embed, after)

        await self._send_log(LogChannel.MEMBERS, embed)

    def _role_names(self, member: discord.Member) -> List[str]:
        return [r.name for r in member.roles if r.id != member.guild.id]
