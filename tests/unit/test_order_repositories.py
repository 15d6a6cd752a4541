"""Unit tests for order repositories (in-memory and Supabase with a mocked client)."""
from unittest.mock import MagicMock

import pytest

from po_desk.core.errors import OrderNotFoundError
from po_desk.services.orders.memory import InMemoryOrderRepository
from po_desk.services.orders.supabase import SupabaseOrderRepository


class TestInMemoryOrderRepository:
    def test_add_and_get(self):
        repo = InMemoryOrderRepository()

        order_id = repo.add({"supplier": "Alfa", "created_at": "2025-01-10T00:00:00Z"})

        assert repo.get(order_id) == {"supplier": "Alfa", "created_at": "2025-01-10T00:00:00Z", "id": order_id}

    def test_get_missing_returns_none(self):
        assert InMemoryOrderRepository().get("nope") is None

    def test_list_newest_first(self):
        repo = InMemoryOrderRepository()
        old = repo.add({"created_at": "2025-01-10T00:00:00Z"})
        new = repo.add({"created_at": "2025-02-10T00:00:00Z"})

        assert [d["id"] for d in repo.list_orders()] == [new, old]

    def test_update_merges(self):
        repo = InMemoryOrderRepository()
        order_id = repo.add({"supplier": "Alfa", "status": "Iniciado"})

        repo.update(order_id, {"status": "Recebido"})

        assert repo.get(order_id)["supplier"] == "Alfa"
        assert repo.get(order_id)["status"] == "Recebido"

    def test_update_missing_raises(self):
        with pytest.raises(OrderNotFoundError):
            InMemoryOrderRepository().update("nope", {"status": "Recebido"})

    def test_delete(self):
        repo = InMemoryOrderRepository()
        order_id = repo.add({"supplier": "Alfa"})

        repo.delete(order_id)
        repo.delete(order_id)

        assert repo.documents == {}

    def test_returned_documents_are_copies(self):
        repo = InMemoryOrderRepository()
        order_id = repo.add({"items": [{"code": "A"}]})

        repo.get(order_id)["items"].append({"code": "B"})

        assert repo.get(order_id)["items"] == [{"code": "A"}]


def _supabase(rows=None):
    """SupabaseOrderRepository over a MagicMock client whose queries return `rows`."""
    client = MagicMock()
    table = client.table.return_value
    query = MagicMock()
    query.execute.return_value = MagicMock(data=rows or [])
    for method in ("select", "insert", "update", "delete", "eq", "limit", "order"):
        getattr(table, method).return_value = query
        getattr(query, method).return_value = query
    return SupabaseOrderRepository(url="", key="", client=client), client, table, query


class TestSupabaseOrderRepository:
    def test_requires_url_and_key_without_client(self):
        with pytest.raises(ValueError, match="SUPABASE_URL, SUPABASE_KEY"):
            SupabaseOrderRepository(url="", key="")

    def test_add_inserts_document(self):
        repo, client, table, _ = _supabase(rows=[{"id": "7b1c"}])
        data = {"supplier": "Alfa", "created_at": "2025-01-10T00:00:00Z"}

        order_id = repo.add(data)

        assert order_id == "7b1c"
        client.table.assert_called_with("purchase_orders")
        table.insert.assert_called_once_with({"document": data, "created_at": "2025-01-10T00:00:00Z"})

    def test_get_flattens_document(self):
        repo, _, table, query = _supabase(rows=[{"id": "7b1c", "document": {"supplier": "Alfa"}}])

        assert repo.get("7b1c") == {"supplier": "Alfa", "id": "7b1c"}
        table.select.assert_called_once_with("id, document")
        query.eq.assert_called_once_with("id", "7b1c")

    def test_get_missing_returns_none(self):
        repo, _, _, _ = _supabase(rows=[])
        assert repo.get("nope") is None

    def test_list_orders_newest_first(self):
        rows = [{"id": "b", "document": {"supplier": "Beta"}}, {"id": "a", "document": {"supplier": "Alfa"}}]
        repo, _, _, query = _supabase(rows=rows)

        result = repo.list_orders()

        assert [d["id"] for d in result] == ["b", "a"]
        query.order.assert_called_once_with("created_at", desc=True)

    def test_update_merges_into_stored_document(self):
        repo, _, table, _ = _supabase(rows=[{"id": "a", "document": {"supplier": "Alfa", "status": "Iniciado"}}])

        repo.update("a", {"status": "Recebido"})

        table.update.assert_called_once_with({"document": {"supplier": "Alfa", "status": "Recebido"}})

    def test_update_missing_raises(self):
        repo, _, table, _ = _supabase(rows=[])

        with pytest.raises(OrderNotFoundError):
            repo.update("nope", {"status": "Recebido"})
        table.update.assert_not_called()

    def test_delete(self):
        repo, _, table, query = _supabase()

        repo.delete("a")

        table.delete.assert_called_once_with()
        query.eq.assert_called_once_with("id", "a")
