"""Audit events emitted after committed changes."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class AuditEvent(BaseModel):
    """Structured event handed to the external audit log writer."""

    action: str
    entity_type: str
    entity_id: str
    user_id: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
