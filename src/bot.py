"""
c0rd - Main Bot Class
=====================

Discord client that mirrors one server's activity into the logging
channels of another.

DESIGN: Central orchestrator that:
- Owns every long-lived service (attribution caches, topology, notifier)
- Builds the logging channel layout once per process
- Gates event cogs until the logging channels are ready

INITIALIZATION ORDER:
1. __init__: database, topology store and reconciler, attribution engine,
   invite tracker, reaction dedup, logging service (all empty state)
2. setup_hook: event cog loading
3. on_ready: guild resolution, permission checks, reconcile, invite
   baseline, then events start flowing
"""

from datetime import datetime, timedelta
from typing import Optional

import discord
from discord.ext import commands

from src.core.config import Config, get_config
from src.core.database import DatabaseManager
from src.core.logger import logger
from src.services.attribution import AttributionEngine, InviteTracker, ReactionDeduplicator
from src.services.server_logs import LoggingService
from src.services.topology import (
    SetupError,
    TopologyReconciler,
    TopologyStore,
    verify_permissions,
)
from src.utils.error_handler import ErrorHandler


# =============================================================================
# C0rdBot Class
# =============================================================================

class C0rdBot(commands.Bot):
    """
    Main Discord bot class for c0rd.

    Attributes:
        logging_ready: True once the logging channels are bound. Event
            cogs drop everything before that.
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or get_config()

        intents = discord.Intents.default()
        intents.members = True
        intents.message_content = True
        intents.guild_reactions = True
        intents.voice_states = True
        intents.invites = True
        intents.moderation = True
        intents.guild_scheduled_events = True
        intents.auto_moderation_execution = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.db = DatabaseManager(self.config.database_path)
        self.topology_store = TopologyStore(self.db)
        self.reconciler = TopologyReconciler(self.topology_store, self.config.log_category_name)
        self.engine = AttributionEngine(self.config)
        self.invites = InviteTracker()
        self.reactions = ReactionDeduplicator(ttl=timedelta(seconds=self.config.reaction_dedup_seconds))
        self.logging_service = LoggingService(self.config)

        self.start_time: datetime = datetime.now()
        self.logging_ready: bool = False

        # Ready state guard
        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load event cogs before on_ready."""
        from src.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

    # =========================================================================
    # Guild Filter
    # =========================================================================

    @property
    def target_guild(self) -> Optional[discord.Guild]:
        return self.get_guild(self.config.target_guild_id)

    @property
    def logging_guild(self) -> Optional[discord.Guild]:
        return self.get_guild(self.config.logging_guild_id)

    def watches(self, guild: Optional[discord.abc.Snowflake]) -> bool:
        """True when events from this guild should be mirrored right now."""
        if not self.logging_ready or guild is None:
            return False
        return getattr(guild, "id", None) == self.config.target_guild_id

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        """Build the logging layout once; reconnects reuse it."""
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🚀")

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        target = self.target_guild
        logging_guild = self.logging_guild
        if target is None or logging_guild is None:
            logger.critical(
                f"Bot is not in both servers (target={self.config.target_guild_id}, "
                f"logging={self.config.logging_guild_id})"
            )
            await self.close()
            return

        try:
            verify_permissions(logging_guild)
            verify_permissions(target)
        except SetupError as e:
            logger.critical(str(e))
            await self.close()
            return

        try:
            topology = await self.reconciler.reconcile(logging_guild)
        except discord.HTTPException as e:
            ErrorHandler.handle(e, location="bot.on_ready", critical=True)
            await self.close()
            return
        self.logging_service.bind(topology)

        invite_count = await self.invites.snapshot(target)
        self.logging_ready = True

        logger.tree("C0RD READY", [
            ("Target", f"{target.name} ({target.id})"),
            ("Logging", f"{logging_guild.name} ({logging_guild.id})"),
            ("Channels", f"{len(topology.channels)}/{len(topology.channels) + len(topology.missing)}"),
            ("Invites", str(invite_count) if invite_count >= 0 else "Unavailable"),
        ], emoji="🔥")

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Graceful shutdown with proper cleanup."""
        logger.info("Initiating Graceful Shutdown")
        self.logging_ready = False

        self.db.close()
        await super().close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
        ], emoji="🛑")

    async def close(self) -> None:
        """Override close to ensure proper shutdown."""
        await self.shutdown()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["C0rdBot"]
