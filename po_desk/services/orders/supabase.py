from supabase import Client, create_client

from po_desk.core.errors import OrderNotFoundError
from po_desk.services.orders.base import OrderRepository


class SupabaseOrderRepository(OrderRepository):
    """Orders stored as JSON documents in a Supabase (PostgREST) table.

    Expected table layout:
        id          uuid primary key default gen_random_uuid()
        created_at  timestamptz
        document    jsonb
    """

    def __init__(self, url: str, key: str, table: str = "purchase_orders", client: Client | None = None):
        if client is None:
            missing = [name for name, value in (("SUPABASE_URL", url), ("SUPABASE_KEY", key)) if not value]
            if missing:
                raise ValueError(f"Missing Supabase settings: {', '.join(missing)}")
            client = create_client(url, key)
        self._client = client
        self._table = table

    def add(self, data: dict) -> str:
        res = (
            self._client.table(self._table)
            .insert({"document": data, "created_at": data.get("created_at")})
            .execute()
        )
        return str(res.data[0]["id"])

    def get(self, order_id: str) -> dict | None:
        res = (
            self._client.table(self._table)
            .select("id, document")
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
        if not res.data:
            return None
        return self._to_order(res.data[0])

    def list_orders(self) -> list[dict]:
        res = (
            self._client.table(self._table)
            .select("id, document")
            .order("created_at", desc=True)
            .execute()
        )
        return [self._to_order(row) for row in res.data or []]

    def update(self, order_id: str, updates: dict) -> None:
        current = self.get(order_id)
        if current is None:
            raise OrderNotFoundError(order_id)
        current.pop("id", None)
        (
            self._client.table(self._table)
            .update({"document": {**current, **updates}})
            .eq("id", order_id)
            .execute()
        )

    def delete(self, order_id: str) -> None:
        self._client.table(self._table).delete().eq("id", order_id).execute()

    @staticmethod
    def _to_order(row: dict) -> dict:
        return {**(row.get("document") or {}), "id": str(row["id"])}
