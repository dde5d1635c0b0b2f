"""
Record Movement Use Case.

Validates and applies one inventory movement, or reverses a committed one.
"""

from stockflow.application.dto.requests import CreateMovementRequest, ReverseMovementRequest
from stockflow.application.dto.responses import (
    MovementItemResponse,
    MovementResponse,
    StockChangeResponse,
)
from stockflow.config import get_logger
from stockflow.core.entities.movement import MovementItem
from stockflow.core.services import AppliedMovement, MovementProcessor

logger = get_logger(__name__)


class RecordMovementUseCase:
    """Apply a movement request through the MovementProcessor."""

    def __init__(self, processor: MovementProcessor | None = None):
        self._processor = processor

    async def _get_processor(self) -> MovementProcessor:
        if self._processor is None:
            from stockflow.application.services import get_movement_processor

            self._processor = await get_movement_processor()
        return self._processor

    async def execute(self, request: CreateMovementRequest) -> AppliedMovement:
        """
        Execute record movement use case.

        Raises:
            ValidationError: Structural problem or unknown product/warehouse
            InsufficientStockError: A stock row would go negative
            TransientStorageError: Storage stayed busy after all retries
        """
        logger.info(
            "record_movement_started",
            type=request.type,
            user_id=request.user_id,
            lines=len(request.items),
        )

        processor = await self._get_processor()
        return await processor.record(
            movement_type=request.type,
            user_id=request.user_id,
            items=[
                MovementItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    cost=item.cost,
                    price=item.price,
                    notes=item.notes,
                )
                for item in request.items
            ],
            warehouse_from_id=request.warehouse_from_id,
            warehouse_to_id=request.warehouse_to_id,
            notes=request.notes,
            reference=request.reference,
            date=request.date,
        )

    async def reverse(self, request: ReverseMovementRequest) -> AppliedMovement:
        """Apply the compensating movement for a committed one."""
        logger.info(
            "reverse_movement_started",
            movement_id=request.movement_id,
            user_id=request.user_id,
        )
        processor = await self._get_processor()
        return await processor.reverse(request.movement_id, request.user_id, request.notes)

    def to_response(self, result: AppliedMovement) -> MovementResponse:
        """Convert result to response DTO."""
        mvmt = result.movement
        return MovementResponse(
            id=mvmt.id,
            type=mvmt.type.value,
            user_id=mvmt.user_id,
            warehouse_from_id=mvmt.warehouse_from_id,
            warehouse_to_id=mvmt.warehouse_to_id,
            date=mvmt.date,
            notes=mvmt.notes,
            reference=mvmt.reference,
            total_cost=mvmt.total_cost,
            items=[
                MovementItemResponse(
                    id=item.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    cost=item.cost,
                    price=item.price,
                    total_cost=item.total_cost,
                    total_price=item.total_price,
                    notes=item.notes,
                )
                for item in mvmt.items
            ],
            stock_changes=[
                StockChangeResponse(
                    stock_id=change.stock.id,
                    product_id=change.stock.product_id,
                    warehouse_id=change.stock.warehouse_id,
                    previous_quantity=change.previous_quantity,
                    quantity=change.stock.quantity,
                    created=change.created,
                )
                for change in result.stock_changes
            ],
            attempts=result.attempts,
        )
