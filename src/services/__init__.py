"""
c0rd - Services Package
=======================

DESIGN:
    attribution: who did it, read from the audit log and invite counters.
    topology: where it goes, the category and channels in the logging server.
    server_logs: how it looks, one embed per event posted to its channel.
"""
