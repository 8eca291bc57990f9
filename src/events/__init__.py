"""
c0rd - Events Package
=====================

Event handler Cogs, one per gateway event family.

DESIGN:
    Each event file contains a Cog class with @commands.Cog.listener decorators.
    Cogs are loaded dynamically by the bot using load_extension().
    Every listener returns early until the logging channels are ready and
    ignores any guild other than the target.
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "src.events.messages",
    "src.events.members",
    "src.events.voice",
    "src.events.reactions",
    "src.events.threads",
    "src.events.invites",
    "src.events.scheduled_events",
    "src.events.audit_log",
]
"""
List of event cog module paths for dynamic loading.

DESIGN:
    Bot iterates this list and calls load_extension() for each.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "EVENT_COGS",
]
