from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from todo_gateway.main import create_app
from todo_gateway.repositories import StoreError
from todo_gateway.schemas import TodoCreate, TodoUpdate
from todo_gateway.supabase_store import SupabaseRepository

ROW = {
    "id": 7,
    "task": "buy milk",
    "completed": False,
    "created_at": "2024-05-01T10:00:00.123456+00:00",
}


@pytest.fixture
def supabase():
    return MagicMock()


@pytest.fixture
def store(supabase):
    return SupabaseRepository("https://test-project.supabase.co", "test-key", table="todos", client=supabase)


class TestSupabaseRepository:
    def test_list_orders_newest_first(self, store, supabase):
        query = supabase.table.return_value.select.return_value.order.return_value
        query.execute.return_value = SimpleNamespace(data=[ROW])

        todos = store.list()

        supabase.table.assert_called_with("todos")
        supabase.table.return_value.select.assert_called_once_with("*")
        supabase.table.return_value.select.return_value.order.assert_called_once_with("created_at", desc=True)
        assert todos == [
            {
                "id": "7",
                "task": "buy milk",
                "completed": False,
                "created_at": datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc),
            }
        ]

    def test_list_handles_utc_suffix_and_no_data(self, store, supabase):
        query = supabase.table.return_value.select.return_value.order.return_value
        query.execute.return_value = SimpleNamespace(data=[{**ROW, "created_at": "2024-05-01T10:00:00Z"}])
        assert store.list()[0]["created_at"].tzinfo is not None

        query.execute.return_value = SimpleNamespace(data=None)
        assert store.list() == []

    def test_get_filters_by_id(self, store, supabase):
        query = supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = SimpleNamespace(data=[ROW])

        todo = store.get("7")

        supabase.table.return_value.select.return_value.eq.assert_called_once_with("id", "7")
        assert todo is not None and todo["task"] == "buy milk"

    def test_get_missing_returns_none(self, store, supabase):
        query = supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = SimpleNamespace(data=[])
        assert store.get("404") is None

    def test_create_inserts_task_only(self, store, supabase):
        store.create(TodoCreate(task="buy milk"))
        supabase.table.return_value.insert.assert_called_once_with({"task": "buy milk"})
        supabase.table.return_value.insert.return_value.execute.assert_called_once()

    def test_update_writes_supplied_fields(self, store, supabase):
        query = supabase.table.return_value.update.return_value.eq.return_value
        query.execute.return_value = SimpleNamespace(data=[{**ROW, "completed": True}])

        assert store.update("7", TodoUpdate(completed=True)) is True
        supabase.table.return_value.update.assert_called_once_with({"completed": True})
        supabase.table.return_value.update.return_value.eq.assert_called_once_with("id", "7")

    def test_update_unknown_id(self, store, supabase):
        query = supabase.table.return_value.update.return_value.eq.return_value
        query.execute.return_value = SimpleNamespace(data=[])
        assert store.update("404", TodoUpdate(task="x")) is False

    def test_delete(self, store, supabase):
        query = supabase.table.return_value.delete.return_value.eq.return_value
        query.execute.return_value = SimpleNamespace(data=[ROW])
        assert store.delete("7") is True
        supabase.table.return_value.delete.return_value.eq.assert_called_once_with("id", "7")

    @pytest.mark.parametrize(
        "call,code",
        [
            (lambda s: s.list(), "FETCH_TODOS_FAILED"),
            (lambda s: s.get("7"), "FETCH_TODO_FAILED"),
            (lambda s: s.create(TodoCreate(task="x")), "INSERT_TODO_FAILED"),
            (lambda s: s.update("7", TodoUpdate(completed=True)), "UPDATE_TODO_FAILED"),
            (lambda s: s.delete("7"), "DELETE_TODO_FAILED"),
        ],
    )
    def test_client_errors_become_store_errors(self, call, code):
        supabase = MagicMock()
        supabase.table.side_effect = ConnectionError("network unreachable")
        store = SupabaseRepository("https://test-project.supabase.co", "test-key", client=supabase)

        with pytest.raises(StoreError) as info:
            call(store)
        assert info.value.code == code
        assert isinstance(info.value.__cause__, ConnectionError)


class TestMalformedRows:
    @pytest.mark.parametrize(
        "row",
        [
            {**ROW, "created_at": None},
            {**ROW, "created_at": "yesterday"},
            {key: value for key, value in ROW.items() if key != "task"},
        ],
    )
    def test_list_raises_store_error(self, store, supabase, row):
        query = supabase.table.return_value.select.return_value.order.return_value
        query.execute.return_value = SimpleNamespace(data=[row])

        with pytest.raises(StoreError) as info:
            store.list()
        assert info.value.code == "BAD_ROW"

    def test_get_raises_store_error(self, store, supabase):
        query = supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = SimpleNamespace(data=[{**ROW, "created_at": None}])

        with pytest.raises(StoreError) as info:
            store.get("7")
        assert info.value.code == "BAD_ROW"

    def test_page_renders_load_error(self, store, supabase):
        query = supabase.table.return_value.select.return_value.order.return_value
        query.execute.return_value = SimpleNamespace(data=[{**ROW, "created_at": None}])
        client = TestClient(create_app(repository=store))

        res = client.get("/")
        assert res.status_code == 200
        assert "Failed to load todos" in res.text
        assert "BAD_ROW" not in res.text
