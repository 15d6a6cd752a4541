import copy
import uuid

from po_desk.core.errors import OrderNotFoundError
from po_desk.services.orders.base import OrderRepository


class InMemoryOrderRepository(OrderRepository):
    """Inspectable in-process store for tests and local runs."""

    def __init__(self, documents: dict[str, dict] | None = None):
        self._documents: dict[str, dict] = copy.deepcopy(documents or {})

    def add(self, data: dict) -> str:
        order_id = uuid.uuid4().hex
        self._documents[order_id] = copy.deepcopy(data)
        return order_id

    def get(self, order_id: str) -> dict | None:
        data = self._documents.get(order_id)
        if data is None:
            return None
        return {**copy.deepcopy(data), "id": order_id}

    def list_orders(self) -> list[dict]:
        orders = [{**copy.deepcopy(d), "id": i} for i, d in self._documents.items()]
        return sorted(orders, key=lambda d: d.get("created_at") or "", reverse=True)

    def update(self, order_id: str, updates: dict) -> None:
        if order_id not in self._documents:
            raise OrderNotFoundError(order_id)
        self._documents[order_id].update(copy.deepcopy(updates))

    def delete(self, order_id: str) -> None:
        self._documents.pop(order_id, None)

    # --- Inspection API for tests ---

    @property
    def documents(self) -> dict[str, dict]:
        return copy.deepcopy(self._documents)
