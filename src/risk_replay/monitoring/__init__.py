"""Monitoring exports."""

from risk_replay.monitoring.audit import AuditLog

__all__ = ["AuditLog"]
