"""
c0rd - Database Base Module
===========================

Core SQLite connection and execution methods.

DESIGN:
    One connection per manager, opened lazily and guarded by a thread
    lock. Every statement runs inside transaction(), so a read followed
    by a write can share one lock hold.
"""

import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from src.core.logger import logger


PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA busy_timeout=5000",
)


# =============================================================================
# Helper Functions
# =============================================================================

def _safe_json_loads(value: Optional[str], default: Any = None) -> Any:
    """Safely parse JSON, returning default on error."""
    if not value:
        return default
    try:
        return json.loads(value)
    except (json.JSONDecodeError, ValueError):
        logger.warning(f"Corrupted JSON in database: {value[:50]}")
        return default


def _open(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(path), check_same_thread=False, timeout=30.0)
    for pragma in PRAGMAS:
        conn.execute(pragma)
    conn.row_factory = sqlite3.Row
    return conn


# =============================================================================
# Base Database Class
# =============================================================================

class DatabaseBase:
    """
    Connection owner for the manager mixins.

    Attributes:
        path: SQLite file backing this manager.
    """

    def _init_base(self, path: Path) -> None:
        self.path = Path(path)
        self._db_lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_connection()

    def _ensure_connection(self) -> sqlite3.Connection:
        """Return the open connection, opening it on first use or after close."""
        if self._conn is None:
            try:
                self._conn = _open(self.path)
            except sqlite3.Error as e:
                logger.error("Database Connection Failed", [
                    ("Path", str(self.path)),
                    ("Error", str(e)),
                ])
                raise
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Hold the lock for one unit of work.

        Commits on success and rolls back if the body raises.
        """
        with self._db_lock:
            conn = self._ensure_connection()
            try:
                yield conn
            except Exception:
                conn.rollback()
                raise
            else:
                conn.commit()

    def execute(self, query: str, params: Tuple = ()) -> int:
        """Run a write statement. Returns the affected row count."""
        with self.transaction() as conn:
            return conn.execute(query, params).rowcount

    def fetchone(self, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        with self.transaction() as conn:
            return conn.execute(query, params).fetchone()

    def fetchall(self, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        with self.transaction() as conn:
            return conn.execute(query, params).fetchall()

    def close(self) -> None:
        with self._db_lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Database Connection Closed")


__all__ = ["DatabaseBase", "_safe_json_loads"]
