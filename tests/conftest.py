"""
c0rd - Test Fixtures
====================

Shared fixtures for all tests.
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep test runs out of the real log folder
os.environ.setdefault("C0RD_LOGS_DIR", str(Path(tempfile.gettempdir()) / "c0rd-test-logs"))

import discord  # noqa: E402


# =============================================================================
# Helpers
# =============================================================================

class FakeClock:
    """Callable clock returning a settable aware time."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class AsyncIter:
    """Async iterator over a fixed list, like guild.audit_logs()."""

    def __init__(self, items):
        self._items = list(items)

    def __aiter__(self):
        self._iter = iter(self._items)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


def http_error(cls=discord.HTTPException, status: int = 500, message: str = "boom"):
    """Build a discord HTTP exception without a real response."""
    response = MagicMock()
    response.status = status
    response.reason = message
    return cls(response, message)


def make_user(user_id: int, name: str = None, bot: bool = False):
    user = MagicMock()
    user.id = user_id
    user.name = name or f"user{user_id}"
    user.mention = f"<@{user_id}>"
    user.bot = bot
    user.display_avatar.url = f"https://example.com/{user_id}.png"
    return user


# =============================================================================
# Fake Logging Server
# =============================================================================

class FakeChannel:
    """Category or text channel living in a FakeGuild."""

    def __init__(self, guild, channel_id, name, channel_type, category=None, topic=None):
        self.guild = guild
        self.id = channel_id
        self.name = name
        self.type = channel_type
        self.category = category
        self.topic = topic
        self.fail_delete = False
        self.send = AsyncMock()

    @property
    def category_id(self):
        return self.category.id if self.category is not None else None

    @property
    def channels(self):
        return [c for c in self.guild.all_channels() if c.category is self]

    async def delete(self, reason=None):
        if self.fail_delete:
            raise http_error(discord.Forbidden, 403, "Missing Permissions")
        self.guild.deleted.append(self.id)
        self.guild.remove(self.id)

    async def edit(self, topic=None):
        self.topic = topic
        self.guild.edits.append(self.id)


class FakeGuild:
    """In-memory guild with just the channel API the reconciler uses."""

    def __init__(self, guild_id: int = 1000, name: str = "Logging") -> None:
        self.id = guild_id
        self.name = name
        self._channels = {}
        self._next_id = 10_000
        self.created = []
        self.deleted = []
        self.edits = []
        self.me = MagicMock()
        self.me.guild_permissions = MagicMock()

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def all_channels(self):
        return list(self._channels.values())

    def remove(self, channel_id):
        self._channels.pop(channel_id, None)

    @property
    def categories(self):
        return [c for c in self._channels.values() if c.type == discord.ChannelType.category]

    def add_category(self, name: str, channel_id: int = None) -> FakeChannel:
        category = FakeChannel(self, channel_id or self._new_id(), name, discord.ChannelType.category)
        self._channels[category.id] = category
        return category

    def add_text(self, name: str, category=None, topic=None, channel_id: int = None) -> FakeChannel:
        channel = FakeChannel(
            self, channel_id or self._new_id(), name, discord.ChannelType.text,
            category=category, topic=topic,
        )
        self._channels[channel.id] = channel
        return channel

    async def fetch_channel(self, channel_id):
        if channel_id not in self._channels:
            raise http_error(discord.NotFound, 404, "Unknown Channel")
        return self._channels[channel_id]

    async def create_category(self, name, reason=None):
        category = self.add_category(name)
        self.created.append(category.id)
        return category

    async def create_text_channel(self, name, topic=None, category=None, reason=None):
        channel = self.add_text(name, category=category, topic=topic)
        self.created.append(channel.id)
        return channel


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """Clock frozen at a fixed aware instant."""
    return FakeClock(datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def config(tmp_path):
    """Config with zero delays so lookups run instantly."""
    from src.core.config import Config

    return Config(
        discord_token="test-token",
        logging_guild_id=1000,
        target_guild_id=2000,
        moderator_role_id=777,
        database_path=tmp_path / "c0rd.db",
        audit_log_delay_ms=0,
        move_audit_delay_ms=0,
        message_delete_delay_ms=0,
    )


@pytest.fixture
def engine(config, clock):
    """Attribution engine with an injectable clock and a recorded sleep."""
    from src.services.attribution import AttributionEngine

    return AttributionEngine(config, clock=clock, sleep=AsyncMock())


@pytest.fixture
def make_entry(clock):
    """Factory for audit log entries created relative to the fake clock."""
    counter = {"id": 5000}

    def _make(
        action,
        target_id=None,
        executor_id=None,
        age: float = 0,
        channel_id=None,
        count=None,
        after=None,
        reason=None,
        entry_id=None,
    ):
        counter["id"] += 1
        extra = None
        if channel_id is not None or count is not None:
            extra = SimpleNamespace(
                channel=SimpleNamespace(id=channel_id) if channel_id is not None else None,
                count=count,
            )
        return SimpleNamespace(
            id=entry_id or counter["id"],
            action=action,
            target=SimpleNamespace(id=target_id) if target_id is not None else None,
            user=make_user(executor_id) if executor_id is not None else None,
            user_id=executor_id,
            created_at=clock.now - timedelta(seconds=age),
            extra=extra,
            after=after if after is not None else SimpleNamespace(),
            reason=reason,
        )

    return _make


@pytest.fixture
def audit_guild():
    """Factory for a target guild whose audit log returns the given entries."""

    def _make(entries=None, error=None, guild_id=2000):
        guild = MagicMock()
        guild.id = guild_id
        if error is not None:
            guild.audit_logs = MagicMock(side_effect=error)
        else:
            guild.audit_logs = MagicMock(side_effect=lambda **kwargs: AsyncIter(entries or []))
        return guild

    return _make


@pytest.fixture
def test_db(tmp_path):
    """Create a fresh test database instance."""
    from src.core.database import DatabaseManager

    db = DatabaseManager(tmp_path / "test_c0rd.db")
    yield db
    db.close()


@pytest.fixture
def topology_store(test_db):
    from src.services.topology import TopologyStore

    return TopologyStore(test_db)


@pytest.fixture
def logging_guild():
    return FakeGuild()
