from abc import ABC, abstractmethod


class OrderRepository(ABC):
    """Document store for purchase orders.

    Orders are stored as plain JSON-compatible dicts (PurchaseOrder.model_dump
    in JSON mode, without the id). Ids are assigned by the store.
    """

    @abstractmethod
    def add(self, data: dict) -> str:
        """Store a new order document. Returns the new id."""
        ...

    @abstractmethod
    def get(self, order_id: str) -> dict | None:
        """Fetch one order document (with its id) or None."""
        ...

    @abstractmethod
    def list_orders(self) -> list[dict]:
        """All order documents (with ids), most recently created first."""
        ...

    @abstractmethod
    def update(self, order_id: str, updates: dict) -> None:
        """Merge `updates` into the stored document.

        Raises:
            OrderNotFoundError: If the order does not exist
        """
        ...

    @abstractmethod
    def delete(self, order_id: str) -> None:
        """Remove the order document. Deleting a missing order is a no-op."""
        ...
