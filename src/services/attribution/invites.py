"""
c0rd - Invite Tracker
=====================

Works out which invite a new member used.

DESIGN:
    A baseline of invite code -> (uses, inviter) is taken at startup and
    kept current from invite create/delete events. On a join, a fresh list
    is compared against it:

    1. A code whose use count went up wins.
    2. Otherwise a code missing from the baseline with uses > 0 wins.
       This covers an invite created and used before its create event
       was seen.

    The fresh list then replaces the baseline wholesale. When the invite
    list cannot be fetched the join is unattributed and the baseline is
    left untouched.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import discord

from src.core.logger import logger
from src.services.attribution.engine import QUERY_FAILURES
from src.utils.discord_rate_limit import log_query_failure


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class InviteSnapshot:
    code: str
    uses: int
    inviter: Optional[Any]


@dataclass(frozen=True)
class InviteUse:
    """An invite attributed to a join."""

    code: str
    uses: int
    inviter: Optional[Any]
    rule: str  # "uses_increased" or "new_code"

    @property
    def url(self) -> str:
        return f"https://discord.gg/{self.code}"


def _snapshot_of(invite: Any) -> InviteSnapshot:
    return InviteSnapshot(
        code=invite.code,
        uses=invite.uses or 0,
        inviter=invite.inviter,
    )


# =============================================================================
# Invite Tracker
# =============================================================================

class InviteTracker:
    """Invite baseline owner for one target server."""

    def __init__(self) -> None:
        self._baseline: Dict[str, InviteSnapshot] = {}

    @property
    def baseline(self) -> Dict[str, InviteSnapshot]:
        return dict(self._baseline)

    async def snapshot(self, guild: discord.Guild) -> int:
        """
        Replace the baseline with the server's current invites.

        Returns:
            Number of invites cached, or -1 if the fetch failed.
        """
        try:
            invites = await guild.invites()
        except QUERY_FAILURES as e:
            log_query_failure(e, "Invite Snapshot", [("Guild", str(guild.id))])
            return -1

        self._baseline = self._build(invites)
        logger.tree("Invites Cached", [
            ("Guild", getattr(guild, "name", str(guild.id))),
            ("Count", str(len(self._baseline))),
        ], emoji="📨")
        return len(self._baseline)

    def record_created(self, invite: Any) -> None:
        self._baseline[invite.code] = _snapshot_of(invite)

    def record_deleted(self, invite: Any) -> None:
        self._baseline.pop(invite.code, None)

    async def resolve_join(self, guild: discord.Guild) -> Optional[InviteUse]:
        """
        Find the invite used by the member who just joined.

        Returns:
            The matched invite, or None when no rule matched or the invite
            list could not be fetched.
        """
        try:
            invites = await guild.invites()
        except QUERY_FAILURES as e:
            log_query_failure(e, "Invite Fetch On Join", [("Guild", str(guild.id))])
            return None

        fresh = self._build(invites)
        use = self.compare(self._baseline, fresh)
        self._baseline = fresh

        if use is None:
            logger.debug(f"Join unattributed: no invite delta across {len(fresh)} invites")
        return use

    @staticmethod
    def compare(
        baseline: Dict[str, InviteSnapshot],
        fresh: Dict[str, InviteSnapshot],
    ) -> Optional[InviteUse]:
        """Apply the two attribution rules to a baseline and a fresh list."""
        for code, invite in fresh.items():
            cached = baseline.get(code)
            if cached is not None and invite.uses > cached.uses:
                return InviteUse(code, invite.uses, invite.inviter, "uses_increased")

        for code, invite in fresh.items():
            if code not in baseline and invite.uses > 0:
                return InviteUse(code, invite.uses, invite.inviter, "new_code")

        return None

    @staticmethod
    def _build(invites: Iterable[Any]) -> Dict[str, InviteSnapshot]:
        return {invite.code: _snapshot_of(invite) for invite in invites}

    def __len__(self) -> int:
        return len(self._baseline)


__all__ = ["InviteSnapshot", "InviteUse", "InviteTracker"]
