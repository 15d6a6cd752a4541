from datetime import date

from pydantic import BaseModel, Field

from po_desk.core.dates import month_key, month_label, parse_date
from po_desk.core.filters import sort_newest_first
from po_desk.core.purchase_order import STATUS_OPTIONS, PurchaseOrder

STATUS_COLORS = {
    "Iniciado": "blue",
    "Recebido": "green",
    "Cancelado": "red",
}
DEFAULT_STATUS_COLOR = "gray"


class ChartBar(BaseModel):
    label: str
    value: float
    color: str | None = None


class Overview(BaseModel):
    total_value: float = 0
    total_count: int = 0
    average_value: float = 0
    by_status: list[ChartBar] = Field(default_factory=list)
    top_suppliers: list[ChartBar] = Field(default_factory=list)
    by_month: list[ChartBar] = Field(default_factory=list)
    kanban: dict[str, list[PurchaseOrder]] = Field(default_factory=dict)


def in_date_range(order: PurchaseOrder, start: date | None, end: date | None) -> bool:
    """Inclusive range check on the order's document date.

    With no bounds every order passes; once a bound is set, orders whose
    date cannot be parsed are left out.
    """
    if start is None and end is None:
        return True
    order_date = parse_date(order.date)
    if order_date is None:
        return False
    if start and order_date < start:
        return False
    if end and order_date > end:
        return False
    return True


def build_overview(
    orders: list[PurchaseOrder],
    start: date | None = None,
    end: date | None = None,
    top_suppliers: int = 5,
    language: str = "pt",
) -> Overview:
    selected = sort_newest_first([o for o in orders if in_date_range(o, start, end)])
    kanban: dict[str, list[PurchaseOrder]] = {s.value: [] for s in STATUS_OPTIONS}

    if not selected:
        return Overview(kanban=kanban)

    total_value = sum(o.grand_total for o in selected)
    status_counts: dict[str, int] = {}
    supplier_values: dict[str, float] = {}
    month_values: dict[str, float] = {}

    for order in selected:
        status = order.status.value
        status_counts[status] = status_counts.get(status, 0) + 1
        supplier_values[order.supplier] = supplier_values.get(order.supplier, 0) + order.grand_total
        order_date = parse_date(order.date)
        if order_date:
            key = month_key(order_date)
            month_values[key] = month_values.get(key, 0) + order.grand_total
        kanban[status].append(order)

    by_status = sorted(
        (ChartBar(label=s, value=n, color=STATUS_COLORS.get(s, DEFAULT_STATUS_COLOR))
         for s, n in status_counts.items()),
        key=lambda bar: bar.value,
        reverse=True,
    )
    suppliers = sorted(supplier_values.items(), key=lambda kv: kv[1], reverse=True)[:top_suppliers]
    by_month = [
        ChartBar(label=month_label(key, language), value=month_values[key])
        for key in sorted(month_values)
    ]

    return Overview(
        total_value=total_value,
        total_count=len(selected),
        average_value=total_value / len(selected),
        by_status=by_status,
        top_suppliers=[ChartBar(label=name, value=value) for name, value in suppliers],
        by_month=by_month,
        kanban=kanban,
    )
