"""
Server Logs Service Package
===========================

Mirrors target-guild activity into the logging guild's channels.

Structure:
    - service.py: LoggingService, delivery and shared embed helpers
    - handlers/: one mixin per group of log types
"""

from .handlers import AUDIT_ROUTES, MODERATION_ACTIONS
from .service import LoggingService

__all__ = [
    "LoggingService",
    "AUDIT_ROUTES",
    "MODERATION_ACTIONS",
]
