import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    STARTED = "Iniciado"
    RECEIVED = "Recebido"
    CANCELLED = "Cancelado"


STATUS_OPTIONS = [OrderStatus.STARTED, OrderStatus.RECEIVED, OrderStatus.CANCELLED]

# Item fields whose change triggers a line total recomputation
PRICED_FIELDS = ("quantity", "unit_price")

ERP_FIELDS = (
    "erp_code", "erp_description", "erp_unit",
    "erp_quantity", "erp_unit_price", "erp_total_price",
)


class PurchaseOrderItem(BaseModel):
    """A single line of a purchase order, with optional ERP destination fields."""
    code: str = ""
    description: str = ""
    unit: str = ""
    quantity: float = 0
    unit_price: float = 0
    total_price: float = 0

    erp_code: str | None = None
    erp_description: str | None = None
    erp_unit: str | None = None
    erp_quantity: float | None = None
    erp_unit_price: float | None = None
    erp_total_price: float | None = None


class Attachment(BaseModel):
    """A file stored in the object store and referenced by URL."""
    url: str
    file_name: str
    uploaded_by: str
    uploaded_at: datetime


class ExtractedPurchaseOrder(BaseModel):
    """Purchase order data as extracted from a document, before it is saved."""
    supplier: str = ""
    cnpj: str | None = ""
    invoice_number: str | None = ""
    operation: str = ""
    branch: str = ""
    order_number: str = ""
    sequence: str = ""
    date: str = ""
    issue_date: str = ""
    receipt_date: str = ""
    order_link: str = ""
    entry_link: str | None = ""
    reference_name: str = ""
    items: list[PurchaseOrderItem] = Field(default_factory=list)
    grand_total: float = 0
    status: OrderStatus = OrderStatus.STARTED

    is_book: bool = False
    is_site: bool = False
    is_tax_review: bool = False
    is_matched: bool = False
    is_stock: bool = False
    is_remark: bool = False


class PurchaseOrder(ExtractedPurchaseOrder):
    """A purchase order as stored in the order database."""
    id: str = ""
    user_id: str = ""
    created_by: str = ""
    creator_email: str = ""
    created_at: datetime | None = None
    updated_by: str | None = None
    updater_email: str | None = None
    updated_at: datetime | None = None
    attachments: list[Attachment] = Field(default_factory=list)


def initial_status(invoice_number: str | None) -> OrderStatus:
    """Orders that already carry an invoice number arrive as received."""
    if invoice_number and invoice_number.strip():
        return OrderStatus.RECEIVED
    return OrderStatus.STARTED


def line_total(quantity: float, unit_price: float) -> float:
    total = quantity * unit_price
    if not math.isfinite(total):
        return 0.0
    return round(total, 2)


def recompute_grand_total(items: list[PurchaseOrderItem]) -> float:
    return round(sum(item.total_price or 0 for item in items), 2)


def set_item_field(order: ExtractedPurchaseOrder, index: int, field: str, value: Any) -> ExtractedPurchaseOrder:
    """Return a copy of `order` with one item field changed and totals recomputed.

    Changing quantity or unit_price recomputes that item's total_price.
    The order's grand_total is always recomputed from the item totals.

    Raises:
        IndexError: If `index` does not address an existing item
        ValueError: If `field` is not an item field
    """
    if index < 0 or index >= len(order.items):
        raise IndexError(f"Item index {index} out of range")
    if field not in PurchaseOrderItem.model_fields:
        raise ValueError(f"Unknown item field '{field}'")

    items = [item.model_copy() for item in order.items]
    updated = PurchaseOrderItem.model_validate({**items[index].model_dump(), field: value})
    if field in PRICED_FIELDS:
        updated.total_price = line_total(updated.quantity, updated.unit_price)
    items[index] = updated

    return order.model_copy(update={
        "items": items,
        "grand_total": recompute_grand_total(items),
    })


def add_item(order: ExtractedPurchaseOrder) -> ExtractedPurchaseOrder:
    return order.model_copy(update={"items": [*order.items, PurchaseOrderItem()]})


def remove_item(order: ExtractedPurchaseOrder, index: int) -> ExtractedPurchaseOrder:
    if index < 0 or index >= len(order.items):
        raise IndexError(f"Item index {index} out of range")
    items = [item for i, item in enumerate(order.items) if i != index]
    return order.model_copy(update={
        "items": items,
        "grand_total": recompute_grand_total(items),
    })


def is_mapped(order: ExtractedPurchaseOrder) -> bool:
    """An order is mapped when every item has an ERP code."""
    return all(item.erp_code and item.erp_code.strip() for item in order.items)


def is_url(text: str | None) -> bool:
    if not text:
        return False
    return text.startswith("http://") or text.startswith("https://")
