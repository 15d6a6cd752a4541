"""Unit tests for order list filtering and sorting."""
from datetime import datetime, timezone

from po_desk.core.filters import OrderFilter, filter_orders, sort_newest_first, unique_suppliers
from po_desk.core.purchase_order import OrderStatus, PurchaseOrder


def _order(order_id, supplier, created_day, **kwargs) -> PurchaseOrder:
    return PurchaseOrder(
        id=order_id,
        supplier=supplier,
        created_at=datetime(2025, 1, created_day, tzinfo=timezone.utc),
        **kwargs,
    )


ORDERS = [
    _order("a", "Auto Peças Brasil", 10, order_number="PED-100", sequence="55",
           cnpj="12.345.678/0001-90", status=OrderStatus.STARTED),
    _order("b", "Distribuidora Sul", 12, order_number="PED-200", sequence="56",
           cnpj="98.765.432/0001-10", status=OrderStatus.RECEIVED),
    _order("c", "Auto Peças Brasil", 11, order_number="PED-300", sequence="57",
           cnpj=None, status=OrderStatus.CANCELLED),
]


class TestOrderFilter:
    def test_empty_filter_matches_everything_newest_first(self):
        result = filter_orders(ORDERS, OrderFilter())
        assert [o.id for o in result] == ["b", "c", "a"]

    def test_search_matches_order_number_case_insensitive(self):
        result = filter_orders(ORDERS, OrderFilter(search="ped-2"))
        assert [o.id for o in result] == ["b"]

    def test_search_matches_sequence_and_supplier(self):
        assert [o.id for o in filter_orders(ORDERS, OrderFilter(search="57"))] == ["c"]
        assert [o.id for o in filter_orders(ORDERS, OrderFilter(search="sul"))] == ["b"]

    def test_supplier_is_exact(self):
        result = filter_orders(ORDERS, OrderFilter(supplier="Auto Peças Brasil"))
        assert [o.id for o in result] == ["c", "a"]
        assert filter_orders(ORDERS, OrderFilter(supplier="Auto")) == []

    def test_cnpj_compares_digits_only(self):
        result = filter_orders(ORDERS, OrderFilter(cnpj="12345678"))
        assert [o.id for o in result] == ["a"]

    def test_cnpj_filter_skips_orders_without_cnpj(self):
        result = filter_orders(ORDERS, OrderFilter(cnpj="0001"))
        assert "c" not in [o.id for o in result]

    def test_status(self):
        result = filter_orders(ORDERS, OrderFilter(status="Recebido"))
        assert [o.id for o in result] == ["b"]

    def test_criteria_combine(self):
        criteria = OrderFilter(supplier="Auto Peças Brasil", status="Iniciado")
        assert [o.id for o in filter_orders(ORDERS, criteria)] == ["a"]


class TestSorting:
    def test_orders_without_created_at_go_last(self):
        undated = PurchaseOrder(id="z", supplier="X")
        result = sort_newest_first([undated, *ORDERS])
        assert result[-1].id == "z"

    def test_unique_suppliers_sorted(self):
        assert unique_suppliers(ORDERS) == ["Auto Peças Brasil", "Distribuidora Sul"]
