"""
c0rd - Topology Store
=====================

Durable record of the logging category and channel ids.

DESIGN:
    The whole record is one JSON document under a single bot_state key:

        {"category_id": 123, "channel_ids": {"voice": 456, ...}}

    Every update reads the whole record, sets one field and writes it back.
    A missing record is not an error; it means build from scratch.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from src.core.database import DatabaseManager
from src.core.logger import logger


STATE_KEY = "logging_topology"


@dataclass
class TopologyRecord:
    category_id: Optional[int] = None
    channel_ids: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"category_id": self.category_id, "channel_ids": dict(self.channel_ids)}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["TopologyRecord"]:
        """Parse a stored document, returning None if it is unusable."""
        if not isinstance(data, dict):
            return None

        category_id = data.get("category_id")
        channel_ids: Dict[str, int] = {}
        raw_channels = data.get("channel_ids")
        if isinstance(raw_channels, dict):
            for key, value in raw_channels.items():
                try:
                    channel_ids[str(key)] = int(value)
                except (TypeError, ValueError):
                    continue

        try:
            category_id = int(category_id) if category_id else None
        except (TypeError, ValueError):
            category_id = None

        return cls(category_id=category_id, channel_ids=channel_ids)


class TopologyStore:
    """Persisted topology record backed by the bot_state table."""

    def __init__(self, db: DatabaseManager, key: str = STATE_KEY) -> None:
        self._db = db
        self._key = key

    def load(self) -> Optional[TopologyRecord]:
        data = self._db.get_bot_state(self._key)
        if data is None:
            return None
        record = TopologyRecord.from_dict(data)
        if record is None:
            logger.warning("Topology Record Unreadable", [
                ("Key", self._key),
                ("Action", "Rebuilding from live server"),
            ])
        return record

    def set_category_id(self, category_id: int) -> None:
        def apply(record: TopologyRecord) -> None:
            record.category_id = category_id

        self._update(apply)

    def set_channel_id(self, key: str, channel_id: int) -> None:
        def apply(record: TopologyRecord) -> None:
            record.channel_ids[key] = channel_id

        self._update(apply)

    def _update(self, apply: Callable[[TopologyRecord], None]) -> None:
        def transform(data: Any) -> Dict[str, Any]:
            record = TopologyRecord.from_dict(data) or TopologyRecord()
            apply(record)
            return record.to_dict()

        saved = self._db.update_bot_state(self._key, transform)
        logger.debug(f"Topology record saved: {len(saved['channel_ids'])} channel id(s)")


__all__ = ["TopologyRecord", "TopologyStore", "STATE_KEY"]
