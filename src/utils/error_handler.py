"""
c0rd - Error Handler
====================

Error categorization and context capture for event handlers.

DESIGN:
    Event listeners must never crash the gateway loop. Unexpected errors
    are categorized, logged with a recovery hint, and (when critical)
    dumped to a JSON file for later analysis.
"""

import functools
import json
import sqlite3
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import discord

from src.core.logger import LOGS_DIR, logger


class ErrorContext:
    """Captures and formats detailed error context."""

    @staticmethod
    def get_full_context(e: Exception, location: str, **kwargs) -> Dict[str, Any]:
        """
        Get comprehensive error context.

        Args:
            e: The exception
            location: Where the error occurred
            **kwargs: Additional context (guild, member, etc.)
        """
        context = {
            "timestamp": datetime.now().isoformat(),
            "location": location,
            "error_type": type(e).__name__,
            "error_message": str(e),
            "traceback": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
            "python_version": sys.version,
            "additional_context": {k: str(v) for k, v in kwargs.items()},
        }

        guild = kwargs.get("guild")
        if isinstance(guild, discord.Guild):
            context["guild_context"] = {"name": guild.name, "id": guild.id}

        return context


class ErrorHandler:
    """Error handling with context and recovery hints."""

    ERROR_CATEGORIES = {
        "discord": (discord.Forbidden, discord.NotFound, discord.HTTPException),
        "network": (ConnectionError, TimeoutError, OSError),
        "database": (sqlite3.Error,),
    }

    RECOVERY_SUGGESTIONS = (
        (discord.Forbidden, "Check bot permissions in the logging server"),
        (discord.NotFound, "Resource not found - it may have been deleted"),
        (discord.HTTPException, "Discord API issue - next event will retry"),
        (sqlite3.OperationalError, "Database locked - will retry on next write"),
        (sqlite3.Error, "General database error - check database file"),
        (TimeoutError, "Request timed out"),
        (ConnectionError, "Network connection issue"),
    )

    @classmethod
    def categorize_error(cls, e: Exception) -> str:
        for category, error_types in cls.ERROR_CATEGORIES.items():
            if isinstance(e, error_types):
                return category
        return "general"

    @classmethod
    def get_recovery_suggestion(cls, e: Exception) -> str:
        for error_type, suggestion in cls.RECOVERY_SUGGESTIONS:
            if isinstance(e, error_type):
                return suggestion
        return "Unexpected error - check logs for details"

    @classmethod
    def handle(cls, e: Exception, location: str, critical: bool = False, **context) -> None:
        """
        Handle an error with full context.

        Args:
            e: The exception
            location: Where the error occurred
            critical: Whether to persist the full context to disk
            **context: Additional context
        """
        category = cls.categorize_error(e)
        suggestion = cls.get_recovery_suggestion(e)
        full_context = ErrorContext.get_full_context(e, location, **context)

        details = [
            ("Category", category),
            ("Location", location),
            ("Type", full_context["error_type"]),
            ("Error", full_context["error_message"][:200]),
            ("Recovery", suggestion),
        ]

        if critical:
            logger.error("💥 Critical Error", details)
            logger.info(f"Traceback:\n{full_context['traceback']}")
            cls._store_critical_error(full_context)
        else:
            logger.warning("Handler Error", details)

    @staticmethod
    def _store_critical_error(context: Dict[str, Any]) -> None:
        error_dir = LOGS_DIR / "errors"
        try:
            error_dir.mkdir(exist_ok=True, parents=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            error_file: Path = error_dir / f"error_{timestamp}.json"
            with open(error_file, "w", encoding="utf-8") as f:
                json.dump(context, f, indent=2, default=str)
            logger.info(f"Critical error saved to {error_file}")
        except OSError as save_error:
            logger.warning(f"Failed to save error details: {save_error}")


def safe_execute(func):
    """
    Decorator for event listeners: log and swallow unexpected errors.

    Usage:
        @commands.Cog.listener()
        @safe_execute
        async def on_member_join(self, member):
            ...
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            ErrorHandler.handle(e, location=f"{func.__module__}.{func.__qualname__}")
            return None

    return wrapper


__all__ = ["ErrorContext", "ErrorHandler", "safe_execute"]
