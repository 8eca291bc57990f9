"""
c0rd - Database Schema Module
=============================

Table definitions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


TABLES = {
    # Key-value store, one JSON document per key
    "bot_state": """
        CREATE TABLE IF NOT EXISTS bot_state (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at REAL NOT NULL
        )
    """,
}


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """Create missing tables. Existing data is left untouched."""
        with self.transaction() as conn:
            for ddl in TABLES.values():
                conn.execute(ddl)
