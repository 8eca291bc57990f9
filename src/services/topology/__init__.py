"""
c0rd - Topology Service
=======================

Provisioning of the logging category and channels.
"""

from src.services.topology.layout import CHANNEL_TOPICS, LogChannel
from src.services.topology.reconciler import (
    REQUIRED_PERMISSIONS,
    CleanupReport,
    LoggingTopology,
    ReconcileReport,
    SetupError,
    TopologyReconciler,
    verify_permissions,
)
from src.services.topology.store import TopologyRecord, TopologyStore

__all__ = [
    "CHANNEL_TOPICS",
    "LogChannel",
    "REQUIRED_PERMISSIONS",
    "CleanupReport",
    "LoggingTopology",
    "ReconcileReport",
    "SetupError",
    "TopologyReconciler",
    "verify_permissions",
    "TopologyRecord",
    "TopologyStore",
]
