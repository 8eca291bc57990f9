"""
c0rd - Core Package
===================

Configuration, logging and persistence.

DESIGN:
    get_config() returns the same Config instance for the process.
    logger is a global TreeLogger instance.
    The database manager is bound to a path and owned by the bot.
"""

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    get_config,
)

from .database import DatabaseManager

from .logger import logger


__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    # Database
    "DatabaseManager",
    # Logger
    "logger",
]
