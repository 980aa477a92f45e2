from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from supabase import Client, create_client

from .models import TodoEntity
from .repositories import Repository, StoreError
from .schemas import TodoCreate, TodoUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    id: str = "id"
    task: str = "task"
    completed: str = "completed"
    created_at: str = "created_at"


_COLS = _Cols()


def _parse_dt(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # PostgREST may send a trailing 'Z' for UTC timestamps
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class SupabaseRepository(Repository):
    """
    Repository backed by a Supabase (PostgREST) table.

    The table is expected to assign ``id`` and ``created_at`` and to default
    ``completed`` to false. Every client failure is re-raised as StoreError.
    """

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "todos",
        client: Optional[Client] = None,
    ) -> None:
        self._table_name = table
        if client is not None:
            self._client = client
            return
        try:
            self._client = create_client(url, key)
        except Exception as e:
            raise StoreError(
                f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
            ) from e
        logger.info("Supabase client initialized for table %s", table)

    def _table(self) -> Any:
        return self._client.table(self._table_name)

    def _row_to_entity(self, row: Mapping[str, Any]) -> TodoEntity:
        try:
            return {
                "id": str(row[_COLS.id]),
                "task": str(row[_COLS.task]),
                "completed": bool(row[_COLS.completed]),
                "created_at": _parse_dt(row[_COLS.created_at]),
            }
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(
                f"Malformed todo row: {e!r}",
                code="BAD_ROW",
                details={"row": dict(row) if isinstance(row, Mapping) else row},
            ) from e

    def list(self) -> List[TodoEntity]:
        try:
            response = (
                self._table()
                .select("*")
                .order(_COLS.created_at, desc=True)
                .execute()
            )
        except Exception as e:
            raise StoreError(f"Failed to fetch todos: {e}", code="FETCH_TODOS_FAILED") from e
        rows = response.data or []
        logger.debug("Fetched %d todos", len(rows))
        return [self._row_to_entity(r) for r in rows]

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        try:
            response = (
                self._table()
                .select("*")
                .eq(_COLS.id, todo_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StoreError(
                f"Failed to fetch todo: {e}",
                code="FETCH_TODO_FAILED",
                details={"id": todo_id},
            ) from e
        rows = response.data or []
        return self._row_to_entity(rows[0]) if rows else None

    def create(self, data: TodoCreate) -> None:
        try:
            self._table().insert({_COLS.task: data.task}).execute()
        except Exception as e:
            raise StoreError(f"Failed to insert todo: {e}", code="INSERT_TODO_FAILED") from e
        logger.debug("Inserted todo %r", data.task)

    def update(self, todo_id: str, data: TodoUpdate) -> bool:
        changes: Dict[str, Any] = data.changes()
        try:
            response = self._table().update(changes).eq(_COLS.id, todo_id).execute()
        except Exception as e:
            raise StoreError(
                f"Failed to update todo: {e}",
                code="UPDATE_TODO_FAILED",
                details={"id": todo_id, "fields": sorted(changes)},
            ) from e
        # PostgREST returns the updated rows; none means no row matched
        return bool(response.data)

    def delete(self, todo_id: str) -> bool:
        try:
            response = self._table().delete().eq(_COLS.id, todo_id).execute()
        except Exception as e:
            raise StoreError(
                f"Failed to delete todo: {e}",
                code="DELETE_TODO_FAILED",
                details={"id": todo_id},
            ) from e
        return bool(response.data)
