"""Audit sink implementations."""

from stockflow.infrastructure.audit.log_sink import LoggingAuditSink

__all__ = ["LoggingAuditSink"]
