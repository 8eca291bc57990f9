"""
Server Logs Handlers Package
============================

Handler mixins for the LoggingService, one per group of logging channels.
"""

from .moderation import MODERATION_ACTIONS, ModerationLogsMixin
from .messages import MessageLogsMixin
from .members import MemberLogsMixin
from .voice import VoiceLogsMixin
from .threads import ThreadsLogsMixin
from .automod import AutoModLogsMixin
from .events import EventsLogsMixin
from .reactions import ReactionsLogsMixin
from .audit import AUDIT_ROUTES, AuditLogsMixin

__all__ = [
    "ModerationLogsMixin",
    "MessageLogsMixin",
    "MemberLogsMixin",
    "VoiceLogsMixin",
    "ThreadsLogsMixin",
    "AutoModLogsMixin",
    "EventsLogsMixin",
    "ReactionsLogsMixin",
    "AuditLogsMixin",
    "AUDIT_ROUTES",
    "MODERATION_ACTIONS",
]
