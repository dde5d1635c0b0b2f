"""
Core business logic services.

Layer-pure services that depend only on:
- stockflow/core/entities/*
- stockflow/core/interfaces/*
- stockflow/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockflow.core.services.audit import emit_audit
from stockflow.core.services.movement_processor import (
    MOVEMENT_ENTITY,
    STOCK_ENTITY,
    AppliedMovement,
    MovementProcessor,
)
from stockflow.core.services.movement_rules import (
    build_movement,
    build_route,
    compensating_movement,
    compute_deltas,
    validate_items,
)
from stockflow.core.services.sync_runner import SyncRunner, collapse_batch

__all__ = [
    # Movements
    "MovementProcessor",
    "AppliedMovement",
    "STOCK_ENTITY",
    "MOVEMENT_ENTITY",
    "build_movement",
    "build_route",
    "compensating_movement",
    "compute_deltas",
    "validate_items",
    # Sync
    "SyncRunner",
    "collapse_batch",
    # Audit
    "emit_audit",
]
