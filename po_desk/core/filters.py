import re

from pydantic import BaseModel

from po_desk.core.purchase_order import PurchaseOrder

_NON_DIGITS = re.compile(r"[^\d]")


class OrderFilter(BaseModel):
    """Criteria for the order list. Empty criteria match every order."""
    search: str = ""
    supplier: str = ""
    cnpj: str = ""
    status: str = ""

    def matches(self, order: PurchaseOrder) -> bool:
        term = self.search.lower()
        if term and not (
            term in order.order_number.lower()
            or term in order.sequence.lower()
            or term in order.supplier.lower()
        ):
            return False

        if self.supplier and order.supplier != self.supplier:
            return False

        if self.cnpj:
            wanted = _NON_DIGITS.sub("", self.cnpj)
            if not order.cnpj or wanted not in _NON_DIGITS.sub("", order.cnpj):
                return False

        if self.status and order.status.value != self.status:
            return False

        return True


def created_at_key(order: PurchaseOrder) -> float:
    return order.created_at.timestamp() if order.created_at else 0.0


def sort_newest_first(orders: list[PurchaseOrder]) -> list[PurchaseOrder]:
    return sorted(orders, key=created_at_key, reverse=True)


def filter_orders(orders: list[PurchaseOrder], criteria: OrderFilter) -> list[PurchaseOrder]:
    """Apply `criteria` and return the matches, most recently created first."""
    return sort_newest_first([o for o in orders if criteria.matches(o)])


def unique_suppliers(orders: list[PurchaseOrder]) -> list[str]:
    return sorted({o.supplier for o in orders})
