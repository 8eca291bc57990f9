"""
c0rd - Utils Package
====================

Stateless helpers shared across services.

DESIGN:
    Utils hold no bot state and can be used anywhere in the codebase.
"""

from .async_utils import gather_keyed
from .cache import TTLCache
from .discord_rate_limit import log_http_error
from .error_handler import ErrorHandler, safe_execute


__all__ = [
    "gather_keyed",
    "TTLCache",
    "log_http_error",
    "ErrorHandler",
    "safe_execute",
]
