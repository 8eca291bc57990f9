"""
c0rd - Topology Reconciler
==========================

Keeps exactly one logging category and one text channel per LogChannel in
the logging server.

DESIGN:
    Category, in priority order:
    1. Stored id that still resolves to a category is trusted as-is.
    2. Otherwise categories named exactly like the configured name are
       collected oldest first. The first is adopted, the rest are deleted
       (children first, then the category).
    3. Otherwise a new category is created.

    Channels are resolved only once the category is known, concurrently
    per key:
    1. Stored id that is a text channel under the category: sync topic.
    2. Otherwise a child with the exact channel name is adopted.
    3. Otherwise a new channel is created.

    Every adoption or creation is persisted immediately. Deletions are
    best-effort; a failed delete is counted and logged, never raised.
    Running twice against a quiet server changes nothing the second time.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import discord

from src.core.logger import logger
from src.services.topology.layout import LogChannel
from src.services.topology.store import TopologyRecord, TopologyStore
from src.utils.async_utils import gather_keyed
from src.utils.discord_rate_limit import log_http_error


REQUIRED_PERMISSIONS: Tuple[str, ...] = (
    "view_channel",
    "send_messages",
    "embed_links",
    "read_message_history",
    "view_audit_log",
    "manage_channels",
)

CLEANUP_REASON = "Cleaning up duplicate logging channels"


# =============================================================================
# Errors and Reports
# =============================================================================

class SetupError(Exception):
    """Raised at startup when the bot cannot operate in a server."""

    def __init__(self, guild_name: str, missing: Iterable[str]) -> None:
        self.guild_name = guild_name
        self.missing = list(missing)
        super().__init__(f"Missing permissions in {guild_name}: {', '.join(self.missing)}")


@dataclass
class CleanupReport:
    """Outcome of a best-effort deletion pass."""

    deleted: int = 0
    failed: int = 0
    failed_names: List[str] = field(default_factory=list)

    def merge(self, other: "CleanupReport") -> None:
        self.deleted += other.deleted
        self.failed += other.failed
        self.failed_names.extend(other.failed_names)


@dataclass
class ReconcileReport:
    """What one reconcile run changed."""

    created: List[str] = field(default_factory=list)
    adopted: List[str] = field(default_factory=list)
    topics_updated: List[str] = field(default_factory=list)
    cleanup: CleanupReport = field(default_factory=CleanupReport)

    @property
    def deleted(self) -> int:
        return self.cleanup.deleted

    @property
    def failed(self) -> int:
        return self.cleanup.failed

    @property
    def changed(self) -> bool:
        return bool(self.created or self.adopted or self.topics_updated or self.deleted)


@dataclass
class LoggingTopology:
    """Resolved category and channel map used by the notifier."""

    category: Any
    channels: Dict[LogChannel, Any]
    report: ReconcileReport

    def get(self, log_channel: LogChannel) -> Optional[Any]:
        return self.channels.get(log_channel)

    @property
    def missing(self) -> List[LogChannel]:
        return [c for c in LogChannel if c not in self.channels]


# =============================================================================
# Channel Helpers
# =============================================================================

def _is_category(channel: Any) -> bool:
    return getattr(channel, "type", None) == discord.ChannelType.category


def _is_text(channel: Any) -> bool:
    return getattr(channel, "type", None) == discord.ChannelType.text


def _oldest_first(channels: Iterable[Any]) -> List[Any]:
    return sorted(channels, key=lambda c: c.id)


def verify_permissions(guild: discord.Guild) -> None:
    """
    Check the bot's server-wide permissions.

    Raises:
        SetupError: Naming every missing permission.
    """
    me = guild.me
    if me is None:
        raise SetupError(guild.name, ["membership"])

    permissions = me.guild_permissions
    missing = [name for name in REQUIRED_PERMISSIONS if not getattr(permissions, name, False)]
    if missing:
        raise SetupError(guild.name, missing)


# =============================================================================
# Topology Reconciler
# =============================================================================

class TopologyReconciler:
    """
    Converges the logging server to the configured layout.

    Args:
        store: Persisted topology record.
        category_name: Exact name of the logging category.
    """

    def __init__(self, store: TopologyStore, category_name: str) -> None:
        self.store = store
        self.category_name = category_name

    async def reconcile(self, guild: discord.Guild) -> LoggingTopology:
        """
        Resolve the category, clean duplicates and resolve every channel.

        Raises:
            discord.HTTPException: Only if the category can neither be
                found nor created.
        """
        report = ReconcileReport()
        record = self.store.load() or TopologyRecord()

        category = await self._resolve_category(guild, record, report)

        children = [c for c in category.channels if _is_text(c)]
        children = await self._cleanup_duplicate_channels(children, record, report)

        channels: Dict[LogChannel, Any] = await gather_keyed(
            {
                log_channel: self._resolve_channel(guild, category, children, log_channel, record, report)
                for log_channel in LogChannel
            },
            context="Topology Reconcile",
        )

        topology = LoggingTopology(category=category, channels=channels, report=report)

        logger.tree("Topology Reconciled", [
            ("Category", f"{category.name} ({category.id})"),
            ("Channels", f"{len(channels)}/{len(LogChannel)}"),
            ("Created", str(len(report.created))),
            ("Adopted", str(len(report.adopted))),
            ("Topics Updated", str(len(report.topics_updated))),
            ("Deleted", str(report.deleted)),
            ("Failed Deletions", str(report.failed)),
        ], emoji="🗂️")

        if topology.missing:
            logger.warning("Logging Channels Unavailable", [
                ("Keys", ", ".join(c.key for c in topology.missing)),
            ])

        return topology

    # =========================================================================
    # Category
    # =========================================================================

    async def _resolve_category(
        self,
        guild: discord.Guild,
        record: TopologyRecord,
        report: ReconcileReport,
    ) -> Any:
        if record.category_id:
            stored = await self._fetch_channel(guild, record.category_id)
            if stored is not None and _is_category(stored):
                logger.debug(f"Using stored category {stored.name} ({stored.id})")
                return stored
            logger.info("Stored category not found, scanning by name")

        matches = _oldest_first(
            c for c in guild.categories if c.name == self.category_name
        )

        if not matches:
            category = await guild.create_category(self.category_name, reason="c0rd logging setup")
            self.store.set_category_id(category.id)
            report.created.append(f"category:{category.name}")
            logger.success(f"Created logging category: {category.name}")
            return category

        category, duplicates = matches[0], matches[1:]
        self.store.set_category_id(category.id)
        if record.category_id != category.id:
            report.adopted.append(f"category:{category.name}")

        for duplicate in duplicates:
            report.cleanup.merge(await self._delete_category(duplicate))

        return category

    async def _delete_category(self, category: Any) -> CleanupReport:
        """Delete a duplicate category and its children, continuing past failures."""
        cleanup = CleanupReport()
        for child in list(category.channels):
            cleanup.merge(await self._delete(child, "Cleaning up duplicate logging category"))
        cleanup.merge(await self._delete(category, "Cleaning up duplicate logging categories"))
        return cleanup

    # =========================================================================
    # Channels
    # =========================================================================

    async def _cleanup_duplicate_channels(
        self,
        children: List[Any],
        record: TopologyRecord,
        report: ReconcileReport,
    ) -> List[Any]:
        """
        Delete same-named duplicates of each logging channel.

        Keeps the stored channel when it is one of the duplicates, else the
        oldest. Returns the children that were not deleted.
        """
        remaining = list(children)
        for log_channel in LogChannel:
            matches = _oldest_first(c for c in remaining if c.name == log_channel.channel_name)
            if len(matches) < 2:
                continue

            stored_id = record.channel_ids.get(log_channel.key)
            keep = next((c for c in matches if c.id == stored_id), matches[0])

            for duplicate in matches:
                if duplicate is keep:
                    continue
                result = await self._delete(duplicate, CLEANUP_REASON)
                report.cleanup.merge(result)
                if result.deleted:
                    remaining.remove(duplicate)

        return remaining

    async def _resolve_channel(
        self,
        guild: discord.Guild,
        category: Any,
        children: List[Any],
        log_channel: LogChannel,
        record: TopologyRecord,
        report: ReconcileReport,
    ) -> Any:
        key = log_channel.key

        stored_id = record.channel_ids.get(key)
        if stored_id:
            stored = await self._fetch_channel(guild, stored_id)
            if stored is not None and _is_text(stored) and stored.category_id == category.id:
                await self._sync_topic(stored, log_channel, report)
                return stored
            logger.debug(f"Stored channel for {key} not usable, scanning by name")

        existing = next(
            (c for c in _oldest_first(children) if c.name == log_channel.channel_name),
            None,
        )
        if existing is not None:
            self.store.set_channel_id(key, existing.id)
            report.adopted.append(key)
            await self._sync_topic(existing, log_channel, report)
            return existing

        channel = await guild.create_text_channel(
            log_channel.channel_name,
            topic=log_channel.topic,
            category=category,
            reason="c0rd logging setup",
        )
        self.store.set_channel_id(key, channel.id)
        report.created.append(key)
        logger.info(f"Created logging channel: {log_channel.channel_name}")
        return channel

    async def _sync_topic(self, channel: Any, log_channel: LogChannel, report: ReconcileReport) -> None:
        if channel.topic == log_channel.topic:
            return
        try:
            await channel.edit(topic=log_channel.topic)
            report.topics_updated.append(log_channel.key)
        except discord.HTTPException as e:
            log_http_error(e, "Channel Topic Update", [("Channel", log_channel.channel_name)])

    # =========================================================================
    # Server Access
    # =========================================================================

    async def _fetch_channel(self, guild: discord.Guild, channel_id: int) -> Optional[Any]:
        """Fetch a channel by id, treating any failure as not found."""
        try:
            return await guild.fetch_channel(channel_id)
        except discord.NotFound:
            return None
        except discord.InvalidData:
            return None
        except discord.HTTPException as e:
            log_http_error(e, "Channel Fetch", [("Channel ID", str(channel_id))])
            return None

    async def _delete(self, channel: Any, reason: str) -> CleanupReport:
        cleanup = CleanupReport()
        try:
            await channel.delete(reason=reason)
            cleanup.deleted += 1
            logger.info(f"Deleted duplicate: {channel.name}")
        except discord.NotFound:
            cleanup.deleted += 1
        except discord.HTTPException as e:
            cleanup.failed += 1
            cleanup.failed_names.append(channel.name)
            log_http_error(e, "Duplicate Delete", [("Channel", channel.name)])
        return cleanup


__all__ = [
    "REQUIRED_PERMISSIONS",
    "SetupError",
    "CleanupReport",
    "ReconcileReport",
    "LoggingTopology",
    "TopologyReconciler",
    "verify_permissions",
]
