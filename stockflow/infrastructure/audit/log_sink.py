"""Audit sink that forwards events to the structured log."""

from stockflow.config import get_logger
from stockflow.core.entities.audit import AuditEvent
from stockflow.core.interfaces import IAuditSink

logger = get_logger("stockflow.audit")


class LoggingAuditSink(IAuditSink):
    """Emits each event as an ``audit_event`` log line for the log shipper."""

    async def emit(self, event: AuditEvent) -> None:
        logger.info(
            "audit_event",
            action=event.action,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            user_id=event.user_id,
            details=event.details,
            occurred_at=event.occurred_at.isoformat(),
        )
