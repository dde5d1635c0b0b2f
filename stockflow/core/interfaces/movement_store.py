"""Abstract interface for movement persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from stockflow.core.entities.movement import InventoryMovement, MovementType
from stockflow.core.interfaces.unit_of_work import Transaction


class IMovementStore(ABC):
    """Interface for movement header and line item persistence."""

    @abstractmethod
    async def add_movement(
        self, movement: InventoryMovement, tx: Transaction | None = None
    ) -> InventoryMovement:
        """Insert a movement header and all of its items."""
        pass

    @abstractmethod
    async def get_movement(self, movement_id: str) -> InventoryMovement | None:
        """Get movement with items by ID."""
        pass

    @abstractmethod
    async def find_by_reference(
        self, reference: str, tx: Transaction | None = None
    ) -> list[InventoryMovement]:
        """Movements whose ``reference`` equals the given value, oldest first."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        movement_type: MovementType | None = None,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        since: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[InventoryMovement]:
        """List movements newest first, optionally filtered."""
        pass
