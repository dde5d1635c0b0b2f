"""Audit sink port."""

from abc import ABC, abstractmethod

from stockflow.core.entities.audit import AuditEvent


class IAuditSink(ABC):
    """Receives structured events for the external audit log writer."""

    @abstractmethod
    async def emit(self, event: AuditEvent) -> None:
        """Hand over one event."""
        pass
