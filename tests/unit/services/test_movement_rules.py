"""Tests for movement structural rules and delta computation."""

import pytest

from stockflow.core.entities import (
    AdjustmentRoute,
    InboundRoute,
    InventoryMovement,
    MovementItem,
    MovementType,
    OutboundRoute,
    TransferRoute,
)
from stockflow.core.exceptions import ValidationError
from stockflow.core.services.movement_rules import (
    build_movement,
    build_route,
    compensating_movement,
    compute_deltas,
    validate_items,
    warehouses_of,
)


def _item(product_id: str = "P1", quantity: int = 1, **kwargs) -> MovementItem:
    return MovementItem(product_id=product_id, quantity=quantity, **kwargs)


class TestBuildRoute:
    def test_valid_routes(self):
        assert build_route(MovementType.IN, None, "W1") == InboundRoute(warehouse_to_id="W1")
        assert build_route(MovementType.OUT, "W1", None) == OutboundRoute(
            warehouse_from_id="W1"
        )
        assert build_route(MovementType.TRANSFER, "W1", "W2") == TransferRoute(
            warehouse_from_id="W1", warehouse_to_id="W2"
        )
        assert build_route(MovementType.ADJUSTMENT, "W1", None) == AdjustmentRoute(
            warehouse_id="W1", side="from"
        )
        assert build_route(MovementType.ADJUSTMENT, None, "W2") == AdjustmentRoute(
            warehouse_id="W2", side="to"
        )

    @pytest.mark.parametrize(
        ("movement_type", "src", "dst", "field"),
        [
            (MovementType.IN, None, None, "warehouse_to_id"),
            (MovementType.IN, "W1", "W2", "warehouse_from_id"),
            (MovementType.OUT, None, None, "warehouse_from_id"),
            (MovementType.OUT, "W1", "W2", "warehouse_to_id"),
            (MovementType.TRANSFER, None, "W2", "warehouse_from_id"),
            (MovementType.TRANSFER, "W1", None, "warehouse_to_id"),
            (MovementType.TRANSFER, "W1", "W1", "warehouse_to_id"),
            (MovementType.ADJUSTMENT, None, None, "warehouse_id"),
            (MovementType.ADJUSTMENT, "W1", "W2", "warehouse_id"),
        ],
    )
    def test_invalid_combinations(self, movement_type, src, dst, field):
        with pytest.raises(ValidationError) as exc_info:
            build_route(movement_type, src, dst)
        assert exc_info.value.details["field"] == field

    def test_empty_string_counts_as_missing(self):
        with pytest.raises(ValidationError):
            build_route(MovementType.IN, "", "")


class TestValidateItems:
    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_items(MovementType.IN, [])
        assert exc_info.value.details["field"] == "items"

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError) as exc_info:
            validate_items(MovementType.OUT, [_item(quantity=5), _item(quantity=quantity)])
        assert exc_info.value.details["field"] == "items[1].quantity"

    def test_adjustment_allows_signed_quantities(self):
        validate_items(MovementType.ADJUSTMENT, [_item(quantity=-3), _item("P2", 4)])

    def test_adjustment_zero_rejected(self):
        with pytest.raises(ValidationError):
            validate_items(MovementType.ADJUSTMENT, [_item(quantity=0)])

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_items(MovementType.IN, [_item(cost=-1.0)])
        assert exc_info.value.details["field"] == "items[0].cost"

    def test_missing_product_rejected(self):
        with pytest.raises(ValidationError):
            validate_items(MovementType.IN, [_item(product_id="")])


class TestBuildMovement:
    def test_builds_from_string_type(self):
        movement = build_movement(
            "TRANSFER",
            user_id="U1",
            items=[_item(quantity=4)],
            warehouse_from_id="W1",
            warehouse_to_id="W2",
            reference="T-1",
        )
        assert movement.type == MovementType.TRANSFER
        assert movement.reference == "T-1"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_movement("RETURN", user_id="U1", items=[_item()], warehouse_to_id="W1")
        assert exc_info.value.details["field"] == "type"

    def test_user_required(self):
        with pytest.raises(ValidationError) as exc_info:
            build_movement("IN", user_id="", items=[_item()], warehouse_to_id="W1")
        assert exc_info.value.details["field"] == "user_id"

    def test_lines_are_copied_with_fresh_ids(self):
        line = _item(quantity=3, movement_id="older")
        first = build_movement("IN", user_id="U1", items=[line, line], warehouse_to_id="W1")
        second = build_movement("IN", user_id="U1", items=[line], warehouse_to_id="W1")

        ids = {item.id for item in first.items + second.items}
        assert len(ids) == 3
        assert line.id not in ids
        assert line.movement_id == "older"
        assert all(item.movement_id is None for item in first.items)
        assert [item.quantity for item in first.items] == [3, 3]

    def test_adjustment_keeps_submitted_side(self):
        movement = build_movement(
            "ADJUSTMENT", user_id="U1", items=[_item(quantity=-1)], warehouse_from_id="W2"
        )
        assert movement.warehouse_from_id == "W2"
        assert movement.warehouse_to_id is None
        assert movement.to_snapshot()["warehouse_from_id"] == "W2"


class TestComputeDeltas:
    def test_in_adds_at_destination(self):
        movement = InventoryMovement(
            route=InboundRoute(warehouse_to_id="W1"), user_id="U1", items=[_item(quantity=10)]
        )
        [delta] = compute_deltas(movement)
        assert (delta.product_id, delta.warehouse_id, delta.delta) == ("P1", "W1", 10)

    def test_out_removes_at_source(self):
        movement = InventoryMovement(
            route=OutboundRoute(warehouse_from_id="W1"), user_id="U1", items=[_item(quantity=3)]
        )
        [delta] = compute_deltas(movement)
        assert delta.delta == -3

    def test_transfer_produces_two_deltas(self):
        movement = InventoryMovement(
            route=TransferRoute(warehouse_from_id="W1", warehouse_to_id="W2"),
            user_id="U1",
            items=[_item(quantity=4)],
        )
        deltas = compute_deltas(movement)
        assert [(d.warehouse_id, d.delta) for d in deltas] == [("W1", -4), ("W2", 4)]

    def test_adjustment_keeps_sign(self):
        movement = InventoryMovement(
            route=AdjustmentRoute(warehouse_id="W1"),
            user_id="U1",
            items=[_item(quantity=-2), _item("P2", 5)],
        )
        assert [d.delta for d in compute_deltas(movement)] == [-2, 5]

    def test_warehouses_of_transfer(self):
        movement = InventoryMovement(
            route=TransferRoute(warehouse_from_id="W1", warehouse_to_id="W2"), user_id="U1"
        )
        assert warehouses_of(movement) == ["W1", "W2"]


class TestCompensatingMovement:
    def test_in_becomes_out(self):
        original = InventoryMovement(
            route=InboundRoute(warehouse_to_id="W1"), user_id="U1", items=[_item(quantity=10)]
        )
        reversal = compensating_movement(original, user_id="U2")
        assert reversal.route == OutboundRoute(warehouse_from_id="W1")
        assert reversal.reference == original.id
        assert reversal.user_id == "U2"
        assert reversal.items[0].quantity == 10
        assert reversal.items[0].id != original.items[0].id

    def test_transfer_swaps_warehouses(self):
        original = InventoryMovement(
            route=TransferRoute(warehouse_from_id="W1", warehouse_to_id="W2"),
            user_id="U1",
            items=[_item(quantity=4)],
        )
        reversal = compensating_movement(original, user_id="U1")
        assert reversal.warehouse_from_id == "W2"
        assert reversal.warehouse_to_id == "W1"

    def test_adjustment_flips_sign(self):
        original = InventoryMovement(
            route=AdjustmentRoute(warehouse_id="W1"),
            user_id="U1",
            items=[_item(quantity=-2)],
        )
        reversal = compensating_movement(original, user_id="U1", notes="undo")
        assert reversal.items[0].quantity == 2
        assert reversal.notes == "undo"
        assert original.items[0].quantity == -2
        assert reversal.items[0].id != original.items[0].id
