import csv
import io

from po_desk.core.purchase_order import PurchaseOrder

CSV_HEADERS = [
    "ID Ordem", "Sequencia", "Pedido", "Nota Fiscal", "Fornecedor", "CNPJ", "Data", "Status",
    "Total Ordem", "Criado Por", "Email Criador", "Data Criacao",
    "Item Codigo", "Item Descricao", "Item Unidade", "Item Quantidade",
    "Item Preco Unitario", "Item Preco Total",
]

# Excel needs the BOM to read the file as UTF-8
UTF8_BOM = "\ufeff"


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _rows(order: PurchaseOrder) -> list[list[str]]:
    created = order.created_at.strftime("%d/%m/%Y, %H:%M:%S") if order.created_at else ""
    head = [
        order.id, order.sequence, order.order_number, order.invoice_number, order.supplier,
        order.cnpj, order.date, order.status.value, order.grand_total, order.created_by,
        order.creator_email, created,
    ]
    if not order.items:
        return [[_cell(v) for v in head] + [""] * 6]
    return [
        [_cell(v) for v in head + [
            item.code, item.description, item.unit,
            item.quantity, item.unit_price, item.total_price,
        ]]
        for item in order.items
    ]


def orders_to_csv(orders: list[PurchaseOrder]) -> str:
    """Render orders as CSV with one row per line item.

    Raises:
        ValueError: If there is nothing to export
    """
    if not orders:
        raise ValueError("No orders to export with the current filters")

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for order in orders:
        writer.writerows(_rows(order))
    return UTF8_BOM + buffer.getvalue()
