"""
c0rd - Database Manager
=======================

SQLite database manager for persisted bot state.

DESIGN:
    The base class owns the connection, each mixin owns its queries.
    A manager is bound to one file path; the bot owns its instance.
"""

from pathlib import Path

from src.core.logger import logger
from src.core.database.base import DatabaseBase
from src.core.database.schema import SchemaMixin
from src.core.database.state import StateMixin


# =============================================================================
# Database Manager
# =============================================================================

class DatabaseManager(SchemaMixin, StateMixin, DatabaseBase):
    """
    Central database manager.

    Args:
        path: SQLite file location. Parent directories are created.
    """

    def __init__(self, path: Path) -> None:
        self._init_base(path)
        self._init_tables()
        logger.tree("Database Initialized", [
            ("Path", str(self.path)),
        ], emoji="🗄️")


__all__ = ["DatabaseManager"]
