"""Unit tests for CSV export."""
import csv
import io
from datetime import datetime

import pytest

from po_desk.core.export import CSV_HEADERS, UTF8_BOM, orders_to_csv
from po_desk.core.purchase_order import OrderStatus, PurchaseOrder, PurchaseOrderItem


def _parse(content: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content[len(UTF8_BOM):])))


ORDER = PurchaseOrder(
    id="po-1",
    supplier='Fornecedor "Central", Ltda',
    cnpj="12.345.678/0001-90",
    invoice_number="NF-9",
    order_number="PED-1",
    sequence="7",
    date="18/01/2025",
    status=OrderStatus.RECEIVED,
    grand_total=1725.5,
    created_by="Maria",
    creator_email="maria@example.com",
    created_at=datetime(2025, 1, 18, 8, 30, 5),
    items=[
        PurchaseOrderItem(code="P-15", description="Pneu", unit="UN", quantity=4, unit_price=350, total_price=1400),
        PurchaseOrderItem(code="OL-1", description="Óleo", unit="L", quantity=10, unit_price=32.55, total_price=325.5),
    ],
)


class TestOrdersToCsv:
    def test_starts_with_bom_and_headers(self):
        content = orders_to_csv([ORDER])

        assert content.startswith(UTF8_BOM)
        assert _parse(content)[0] == CSV_HEADERS

    def test_one_row_per_item(self):
        rows = _parse(orders_to_csv([ORDER]))[1:]

        assert len(rows) == 2
        assert rows[0][:4] == ["po-1", "7", "PED-1", "NF-9"]
        assert rows[0][12:] == ["P-15", "Pneu", "UN", "4", "350", "1400"]
        assert rows[1][12:] == ["OL-1", "Óleo", "L", "10", "32.55", "325.5"]

    def test_order_columns_repeat_on_each_item_row(self):
        rows = _parse(orders_to_csv([ORDER]))[1:]

        assert rows[0][:12] == rows[1][:12]
        assert rows[0][7] == "Recebido"
        assert rows[0][8] == "1725.5"
        assert rows[0][11] == "18/01/2025, 08:30:05"

    def test_quotes_embedded_commas_and_quotes(self):
        content = orders_to_csv([ORDER])

        assert '"Fornecedor ""Central"", Ltda"' in content
        assert _parse(content)[1][4] == 'Fornecedor "Central", Ltda'

    def test_order_without_items_exports_one_row(self):
        order = ORDER.model_copy(update={"items": []})

        rows = _parse(orders_to_csv([order]))[1:]

        assert len(rows) == 1
        assert rows[0][12:] == [""] * 6

    def test_missing_values_are_blank(self):
        order = PurchaseOrder(id="po-2", cnpj=None, invoice_number=None)

        row = _parse(orders_to_csv([order]))[1]

        assert row[3] == ""
        assert row[5] == ""
        assert row[11] == ""

    def test_no_orders_raises(self):
        with pytest.raises(ValueError, match="No orders to export"):
            orders_to_csv([])
