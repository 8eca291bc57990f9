"""
c0rd - Logging Channel Layout
=============================

The fixed set of logging channels created under the c0rd category.

Keys are persisted. Renaming a member orphans its stored channel id and
the channel is re-adopted by name on the next reconcile.
"""

from enum import Enum
from typing import Dict


class LogChannel(Enum):
    """Logical channel key mapping to the channel name in the logging server."""

    MODERATION = "moderation"
    MESSAGES = "message"
    MEMBERS = "member"
    VOICE = "voice"
    ROLES = "role"
    CHANNELS = "channel"
    SERVER = "server"
    INVITES = "invite"
    EMOJIS = "emoji"
    STICKERS = "sticker"
    INTEGRATIONS = "integration"
    THREADS = "thread"
    STAGES = "stage"
    AUTOMOD = "automod"
    JOINS = "member-join"
    LEAVES = "member-leave"
    REACTIONS = "reaction"
    SCREENSHARE = "screenshare"
    POLLS = "poll"
    EVENTS = "event"

    @property
    def key(self) -> str:
        """Storage key for this channel (lowercase member name)."""
        return self.name.lower()

    @property
    def channel_name(self) -> str:
        return self.value

    @property
    def topic(self) -> str:
        return CHANNEL_TOPICS[self]

    @classmethod
    def from_key(cls, key: str) -> "LogChannel":
        return cls[key.upper()]


# Channel topics for each logging channel
CHANNEL_TOPICS: Dict[LogChannel, str] = {
    LogChannel.MODERATION: "Logs for moderation actions (bans, kicks, timeouts)",
    LogChannel.MESSAGES: "Logs for message events (deletes, edits, bulk deletes)",
    LogChannel.MEMBERS: "Logs for member events (nickname, profile updates)",
    LogChannel.VOICE: "Logs for voice channel events (joins, leaves, mutes, deafens, moves)",
    LogChannel.ROLES: "Logs for role events (create, delete, update, permissions, assigned, removed)",
    LogChannel.CHANNELS: "Logs for channel events (create, delete, update, permissions)",
    LogChannel.SERVER: "Logs for server events (settings, boosts, banners)",
    LogChannel.INVITES: "Logs for invite events (create, delete, uses)",
    LogChannel.EMOJIS: "Logs for emoji events (create, delete, update, rename)",
    LogChannel.STICKERS: "Logs for sticker events (create, delete, update)",
    LogChannel.INTEGRATIONS: "Logs for integrations, bots, webhooks, and applications",
    LogChannel.THREADS: "Logs for thread events (create, delete, archive, unarchive)",
    LogChannel.STAGES: "Logs for stage channel events (create, delete, updates)",
    LogChannel.AUTOMOD: "Logs for auto moderation and rule executions",
    LogChannel.JOINS: "Logs for member joins with inviter info and account age",
    LogChannel.LEAVES: "Logs for member leaves with role information",
    LogChannel.REACTIONS: "Logs for message reaction events (add, remove)",
    LogChannel.SCREENSHARE: "Logs for screenshare and video stream events",
    LogChannel.POLLS: "Logs for poll events (create, end, votes)",
    LogChannel.EVENTS: "Logs for scheduled events (create, update, delete, user interest)",
}


__all__ = ["LogChannel", "CHANNEL_TOPICS"]
