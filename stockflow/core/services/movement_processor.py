"""
Movement processor.

Turns a movement request into ledger deltas and commits, in one write
transaction, the stock changes, the movement header and items, and one
outbox entry per touched stock row plus one for the movement. Either all
of it is written or none of it.

Lifecycle of a request: DRAFT -> VALIDATED -> APPLIED, or DRAFT -> REJECTED
with nothing persisted.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockflow.config import get_logger, get_settings
from stockflow.core.entities.audit import AuditEvent
from stockflow.core.entities.movement import InventoryMovement, MovementItem, MovementType
from stockflow.core.entities.stock import StockChange, StockDelta
from stockflow.core.entities.sync import SyncOperation
from stockflow.core.exceptions import (
    InsufficientStockError,
    MovementAlreadyReversedError,
    MovementNotFoundError,
    ProductNotFoundError,
    TransientStorageError,
    ValidationError,
    WarehouseNotFoundError,
)
from stockflow.core.interfaces import (
    IAuditSink,
    ICatalogReader,
    IMovementStore,
    IStockLedger,
    ISyncOutbox,
    IUnitOfWork,
    Transaction,
)
from stockflow.core.services.audit import emit_audit
from stockflow.core.services.movement_rules import (
    build_movement,
    compensating_movement,
    compute_deltas,
    validate_items,
    warehouses_of,
)

logger = get_logger(__name__)

STOCK_ENTITY = "Stock"
MOVEMENT_ENTITY = "InventoryMovement"


@dataclass
class AppliedMovement:
    """Result of a committed movement."""

    movement: InventoryMovement
    stock_changes: list[StockChange] = field(default_factory=list)
    outbox_entries: int = 0
    attempts: int = 1


class MovementProcessor:
    """Validates and applies movements against the stock ledger."""

    def __init__(
        self,
        unit_of_work: IUnitOfWork,
        ledger: IStockLedger,
        movement_store: IMovementStore,
        outbox: ISyncOutbox,
        catalog: ICatalogReader,
        audit_sink: IAuditSink | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        retry_multiplier: float | None = None,
    ):
        settings = get_settings().ledger
        self._uow = unit_of_work
        self._ledger = ledger
        self._movements = movement_store
        self._outbox = outbox
        self._catalog = catalog
        self._audit = audit_sink
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay
        self.retry_multiplier = (
            retry_multiplier if retry_multiplier is not None else settings.retry_multiplier
        )

    async def record(
        self,
        movement_type: MovementType | str,
        user_id: str,
        items: list[MovementItem],
        warehouse_from_id: str | None = None,
        warehouse_to_id: str | None = None,
        notes: str | None = None,
        reference: str | None = None,
        date: datetime | None = None,
    ) -> AppliedMovement:
        """
        Validate a flat movement request and apply it.

        Raises:
            ValidationError: Structural problem or unknown product/warehouse
            InsufficientStockError: A stock row would go negative
            TransientStorageError: Storage stayed busy after all retries
        """
        try:
            movement = build_movement(
                movement_type=movement_type,
                user_id=user_id,
                items=items,
                warehouse_from_id=warehouse_from_id,
                warehouse_to_id=warehouse_to_id,
                notes=notes,
                reference=reference,
                date=date,
            )
        except ValidationError as e:
            logger.info("movement_rejected", reason=e.code, details=e.details)
            raise
        return await self.apply(movement)

    async def apply(
        self, movement: InventoryMovement, reverses: str | None = None
    ) -> AppliedMovement:
        """
        Apply an already-built movement; see ``record`` for errors.

        With ``reverses`` set, the movement is the compensation of that
        movement id and is rejected if one was already committed.
        """
        try:
            validate_items(movement.type, movement.items)
        except ValidationError as e:
            logger.info("movement_rejected", movement_id=movement.id, reason=e.code)
            raise

        deltas = compute_deltas(movement)
        attempts = 0

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(
                    multiplier=self.retry_delay,
                    min=self.retry_delay,
                    max=self.retry_delay * (self.retry_multiplier**3),
                ),
                retry=retry_if_exception_type(TransientStorageError),
                before_sleep=self._log_retry,
                reraise=True,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    result = await self._apply_once(movement, deltas, reverses)
        except (ValidationError, InsufficientStockError) as e:
            logger.info(
                "movement_rejected",
                movement_id=movement.id,
                type=movement.type.value,
                reason=e.code,
                details=e.details,
            )
            raise
        except TransientStorageError:
            logger.error(
                "movement_retries_exhausted",
                movement_id=movement.id,
                attempts=attempts,
            )
            raise

        result.attempts = attempts
        logger.info(
            "movement_applied",
            movement_id=movement.id,
            type=movement.type.value,
            lines=len(movement.items),
            stock_rows=len(result.stock_changes),
            attempts=attempts,
        )
        await emit_audit(
            self._audit,
            AuditEvent(
                action=f"movement.{movement.type.value.lower()}",
                entity_type=MOVEMENT_ENTITY,
                entity_id=movement.id,
                user_id=movement.user_id,
                details={
                    "reference": movement.reference,
                    "warehouse_from_id": movement.warehouse_from_id,
                    "warehouse_to_id": movement.warehouse_to_id,
                    "lines": len(movement.items),
                    "stock": [
                        {
                            "product_id": c.stock.product_id,
                            "warehouse_id": c.stock.warehouse_id,
                            "before": c.previous_quantity,
                            "after": c.stock.quantity,
                        }
                        for c in result.stock_changes
                    ],
                },
            ),
        )
        return result

    async def reverse(
        self, movement_id: str, user_id: str, notes: str | None = None
    ) -> AppliedMovement:
        """
        Undo a committed movement by applying its compensating movement.

        Raises:
            MovementNotFoundError: If the movement does not exist
            MovementAlreadyReversedError: If it was reversed before
            InsufficientStockError: If the stock it added was already used
        """
        original = await self._movements.get_movement(movement_id)
        if original is None:
            raise MovementNotFoundError(movement_id)
        return await self.apply(
            compensating_movement(original, user_id, notes), reverses=original.id
        )

    async def _apply_once(
        self,
        movement: InventoryMovement,
        deltas: list[StockDelta],
        reverses: str | None = None,
    ) -> AppliedMovement:
        async with self._uow.begin() as tx:
            if reverses is not None:
                earlier = await self._movements.find_by_reference(reverses, tx=tx)
                if earlier:
                    raise MovementAlreadyReversedError(reverses, earlier[0].id)
            await self._check_references(movement, tx)
            changes = await self._ledger.adjust_many(deltas, tx=tx)
            await self._movements.add_movement(movement, tx=tx)

            for change in changes:
                await self._outbox.enqueue(
                    STOCK_ENTITY,
                    change.stock.id,
                    SyncOperation.CREATE if change.created else SyncOperation.UPDATE,
                    change.stock.model_dump_json(),
                    tx=tx,
                )
            await self._outbox.enqueue(
                MOVEMENT_ENTITY,
                movement.id,
                SyncOperation.CREATE,
                json.dumps(movement.to_snapshot()),
                tx=tx,
            )

        return AppliedMovement(
            movement=movement,
            stock_changes=changes,
            outbox_entries=len(changes) + 1,
        )

    async def _check_references(self, movement: InventoryMovement, tx: Transaction) -> None:
        for warehouse_id in warehouses_of(movement):
            if await self._catalog.get_warehouse(warehouse_id, tx=tx) is None:
                raise WarehouseNotFoundError(warehouse_id)

        product_ids = [item.product_id for item in movement.items]
        known = await self._catalog.get_products(product_ids, tx=tx)
        for product_id in product_ids:
            if product_id not in known:
                raise ProductNotFoundError(product_id)

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        logger.warning(
            "movement_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )
