"""
c0rd - Source Package
=====================

Audit trail mirror for one Discord server.

Package Structure:
- bot.py: Bot class, startup sequence and shared state
- core/: Config, logging and the SQLite state store
- events/: Gateway listeners (one cog per event family)
- services/attribution/: Audit log correlation and invite tracking
- services/topology/: Logging channel layout and reconciler
- services/server_logs/: Embed rendering and delivery
- utils/: Helper functions and utilities
"""
