"""
c0rd - Discord HTTP Error Utilities
===================================

Uniform logging for failed Discord API calls.

Usage:
    from src.utils.discord_rate_limit import log_http_error

    try:
        await channel.edit(topic=topic)
    except discord.HTTPException as e:
        log_http_error(e, "Channel Topic Update", [("Channel", channel.name)])
"""

from typing import List, Optional, Tuple

import discord

from src.core.logger import logger


# HTTP status code descriptions for logging
HTTP_STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[List[Tuple[str, str]]] = None,
) -> None:
    """
    Log a Discord HTTPException with comprehensive details.

    Rate limits, missing permissions and missing resources are recoverable
    and logged as warnings. Everything else is an error.

    Args:
        e: The HTTPException that occurred
        operation: Description of what operation failed
        context: Additional context tuples for logging [(key, value), ...]
    """
    status = getattr(e, "status", 0)
    status_desc = HTTP_STATUS_DESCRIPTIONS.get(status, "Unknown")
    retry_after = getattr(e, "retry_after", None)
    text = getattr(e, "text", None)

    log_items = [
        ("Status", f"{status} ({status_desc})"),
        ("Error", str(text) if text else str(e)),
    ]

    if retry_after:
        log_items.append(("Retry After", f"{retry_after:.1f}s"))

    if context:
        log_items.extend(context)

    if status == 429:
        logger.warning(f"🚦 {operation} Rate Limited", log_items)
    elif status == 403:
        logger.warning(f"🚫 {operation} Forbidden", log_items)
    elif status == 404:
        logger.warning(f"❓ {operation} Not Found", log_items)
    else:
        logger.error(f"{operation} Failed", log_items)


def log_query_failure(
    e: BaseException,
    operation: str,
    context: Optional[List[Tuple[str, str]]] = None,
) -> None:
    """Log a failed read: HTTP errors by status, transport errors by type."""
    if isinstance(e, discord.HTTPException):
        log_http_error(e, operation, context)
        return

    log_items = [
        ("Error Type", type(e).__name__),
        ("Error", str(e)[:100] or "-"),
    ]
    if context:
        log_items.extend(context)
    logger.warning(f"🔌 {operation} Failed", log_items)


__all__ = ["log_http_error", "log_query_failure", "HTTP_STATUS_DESCRIPTIONS"]
