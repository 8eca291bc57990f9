"""
c0rd - Database Module
======================

SQLite persistence for bot state.
"""

from src.core.database.manager import DatabaseManager

__all__ = [
    "DatabaseManager",
]
