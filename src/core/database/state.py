"""
c0rd - State Operations Mixin
=============================

Key-value bot state. Values are stored as JSON documents.
"""

import json
import time
from typing import TYPE_CHECKING, Any, Callable

from src.core.database.base import _safe_json_loads

if TYPE_CHECKING:
    from .manager import DatabaseManager


_SELECT = "SELECT value FROM bot_state WHERE key = ?"
_UPSERT = "INSERT OR REPLACE INTO bot_state (key, value, updated_at) VALUES (?, ?, ?)"


class StateMixin:
    """Mixin for bot state operations."""

    def get_bot_state(self: "DatabaseManager", key: str, default: Any = None) -> Any:
        """
        Get a bot state value.

        Returns:
            Stored value, or default if the key is missing or unreadable.
        """
        row = self.fetchone(_SELECT, (key,))
        if row is None:
            return default
        return _safe_json_loads(row["value"], default)

    def set_bot_state(self: "DatabaseManager", key: str, value: Any) -> None:
        self.execute(_UPSERT, (key, json.dumps(value), time.time()))

    def update_bot_state(
        self: "DatabaseManager",
        key: str,
        update: Callable[[Any], Any],
        default: Any = None,
    ) -> Any:
        """
        Read, transform and write one value under a single lock hold.

        Args:
            key: State key to update
            update: Receives the current value (or default), returns the new one
            default: Value passed to update when the key is missing

        Returns:
            The value written.
        """
        with self.transaction() as conn:
            row = conn.execute(_SELECT, (key,)).fetchone()
            current = _safe_json_loads(row["value"], default) if row is not None else default
            value = update(current)
            conn.execute(_UPSERT, (key, json.dumps(value), time.time()))
        return value

    def delete_bot_state(self: "DatabaseManager", key: str) -> None:
        self.execute("DELETE FROM bot_state WHERE key = ?", (key,))
