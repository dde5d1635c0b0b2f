"""Post-commit audit emission."""

from stockflow.config import get_logger
from stockflow.core.entities.audit import AuditEvent
from stockflow.core.interfaces import IAuditSink

logger = get_logger(__name__)


async def emit_audit(sink: IAuditSink | None, event: AuditEvent) -> bool:
    """
    Hand an event to the audit sink after the change is committed.

    The change is already durable, so a sink failure is logged and
    reported as False instead of being raised to the caller.
    """
    if sink is None:
        return False
    try:
        await sink.emit(event)
    except Exception as e:
        logger.warning(
            "audit_emit_failed",
            action=event.action,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
    return True
