from pydantic import BaseModel

from po_desk.core.filters import sort_newest_first
from po_desk.core.purchase_order import ERP_FIELDS, ExtractedPurchaseOrder, PurchaseOrder, is_mapped


class MappingStatus(BaseModel):
    """One row of the ERP mapping list."""
    id: str
    supplier: str
    order_number: str
    sequence: str
    reference_name: str
    item_count: int
    is_mapped: bool


class ItemMapping(BaseModel):
    """ERP destination values for the item at `index`."""
    index: int
    erp_code: str | None = None
    erp_description: str | None = None
    erp_unit: str | None = None
    erp_quantity: float | None = None
    erp_unit_price: float | None = None
    erp_total_price: float | None = None


def mapping_statuses(orders: list[PurchaseOrder]) -> list[MappingStatus]:
    return [
        MappingStatus(
            id=o.id,
            supplier=o.supplier,
            order_number=o.order_number,
            sequence=o.sequence,
            reference_name=o.reference_name,
            item_count=len(o.items),
            is_mapped=is_mapped(o),
        )
        for o in sort_newest_first(orders)
    ]


def apply_mappings(order: ExtractedPurchaseOrder, mappings: list[ItemMapping]) -> ExtractedPurchaseOrder:
    """Set ERP fields on the addressed items. Supplier-side fields are untouched.

    Raises:
        IndexError: If a mapping addresses an item that does not exist
    """
    items = [item.model_copy() for item in order.items]
    for mapping in mappings:
        if mapping.index < 0 or mapping.index >= len(items):
            raise IndexError(f"Item index {mapping.index} out of range")
        values = mapping.model_dump(include=set(ERP_FIELDS))
        items[mapping.index] = items[mapping.index].model_copy(update=values)
    return order.model_copy(update={"items": items})
