"""Unit tests for purchase order models and total recomputation."""
import pytest

from po_desk.core.purchase_order import (
    ExtractedPurchaseOrder,
    OrderStatus,
    PurchaseOrder,
    PurchaseOrderItem,
    add_item,
    initial_status,
    is_mapped,
    is_url,
    line_total,
    recompute_grand_total,
    remove_item,
    set_item_field,
)


def _order(*items: PurchaseOrderItem) -> ExtractedPurchaseOrder:
    return ExtractedPurchaseOrder(
        supplier="Auto Peças Brasil",
        items=list(items),
        grand_total=recompute_grand_total(list(items)),
    )


TIRES = PurchaseOrderItem(code="P-15", description="Pneu aro 15", unit="UN", quantity=4, unit_price=350.0, total_price=1400.0)
OIL = PurchaseOrderItem(code="OL-1", description="Óleo 5W30", unit="L", quantity=10, unit_price=32.5, total_price=325.0)


class TestInitialStatus:
    def test_invoice_number_means_received(self):
        assert initial_status("12345") == OrderStatus.RECEIVED

    def test_missing_invoice_number_means_started(self):
        assert initial_status(None) == OrderStatus.STARTED
        assert initial_status("") == OrderStatus.STARTED

    def test_whitespace_invoice_number_means_started(self):
        assert initial_status("   ") == OrderStatus.STARTED


class TestLineTotal:
    def test_multiplies_and_rounds(self):
        assert line_total(3, 1.1) == 3.3

    def test_non_finite_becomes_zero(self):
        assert line_total(float("inf"), 2) == 0.0
        assert line_total(float("nan"), 2) == 0.0

    def test_grand_total_sums_item_totals(self):
        assert recompute_grand_total([TIRES, OIL]) == 1725.0

    def test_grand_total_of_no_items_is_zero(self):
        assert recompute_grand_total([]) == 0


class TestSetItemField:
    def test_quantity_change_recomputes_line_and_grand_total(self):
        order = _order(TIRES, OIL)

        updated = set_item_field(order, 0, "quantity", 2)

        assert updated.items[0].total_price == 700.0
        assert updated.grand_total == 1025.0

    def test_unit_price_change_recomputes_line_total(self):
        order = _order(OIL)

        updated = set_item_field(order, 0, "unit_price", 30)

        assert updated.items[0].total_price == 300.0
        assert updated.grand_total == 300.0

    def test_manual_total_price_is_kept_and_summed(self):
        order = _order(TIRES, OIL)

        updated = set_item_field(order, 1, "total_price", 300)

        assert updated.items[1].total_price == 300
        assert updated.items[1].quantity == 10
        assert updated.grand_total == 1700.0

    def test_description_change_keeps_totals(self):
        order = _order(TIRES)

        updated = set_item_field(order, 0, "description", "Pneu aro 16")

        assert updated.items[0].description == "Pneu aro 16"
        assert updated.items[0].total_price == 1400.0
        assert updated.grand_total == 1400.0

    def test_does_not_mutate_original(self):
        order = _order(TIRES)

        set_item_field(order, 0, "quantity", 1)

        assert order.items[0].quantity == 4
        assert order.grand_total == 1400.0

    def test_out_of_range_index_raises(self):
        with pytest.raises(IndexError):
            set_item_field(_order(TIRES), 1, "quantity", 1)

    def test_unknown_field_raises(self):
        with pytest.raises(ValueError, match="Unknown item field"):
            set_item_field(_order(TIRES), 0, "color", "red")


class TestAddRemoveItem:
    def test_add_appends_blank_item(self):
        updated = add_item(_order(TIRES))

        assert len(updated.items) == 2
        assert updated.items[1] == PurchaseOrderItem()
        assert updated.grand_total == 1400.0

    def test_remove_recomputes_grand_total(self):
        updated = remove_item(_order(TIRES, OIL), 0)

        assert [i.code for i in updated.items] == ["OL-1"]
        assert updated.grand_total == 325.0

    def test_remove_last_item_gives_zero_total(self):
        updated = remove_item(_order(TIRES), 0)

        assert updated.items == []
        assert updated.grand_total == 0

    def test_remove_out_of_range_raises(self):
        with pytest.raises(IndexError):
            remove_item(_order(TIRES), 5)


class TestIsMapped:
    def test_all_items_with_erp_code(self):
        order = _order(TIRES.model_copy(update={"erp_code": "ERP-1"}))
        assert is_mapped(order)

    def test_blank_erp_code_is_unmapped(self):
        order = _order(
            TIRES.model_copy(update={"erp_code": "ERP-1"}),
            OIL.model_copy(update={"erp_code": "  "}),
        )
        assert not is_mapped(order)

    def test_missing_erp_code_is_unmapped(self):
        assert not is_mapped(_order(TIRES))


class TestModels:
    def test_stored_order_round_trips_through_json(self):
        order = PurchaseOrder(id="abc", supplier="ACME", items=[TIRES], status=OrderStatus.RECEIVED)

        restored = PurchaseOrder.model_validate(order.model_dump(mode="json"))

        assert restored == order

    def test_status_serializes_as_portuguese_label(self):
        order = ExtractedPurchaseOrder(status=OrderStatus.CANCELLED)
        assert order.model_dump(mode="json")["status"] == "Cancelado"

    def test_is_url(self):
        assert is_url("https://nfe.example.com/abc")
        assert is_url("http://example.com")
        assert not is_url("nfe.example.com")
        assert not is_url(None)
