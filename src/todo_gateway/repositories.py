from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, List, Optional

from .models import TodoEntity
from .schemas import TodoCreate, TodoUpdate
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """
    Raised when the todo store cannot complete an operation.

    The message and details are meant for server-side logs only; handlers
    show a static message to the client instead.
    """

    def __init__(
        self,
        message: str,
        code: str = "STORE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def list(self) -> List[TodoEntity]:
        """Return all todos, newest first."""

    @abstractmethod
    def get(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def create(self, data: TodoCreate) -> None:
        """Insert a new todo; the store assigns id, created_at and completed=False."""

    @abstractmethod
    def update(self, todo_id: str, data: TodoUpdate) -> bool:
        """Write only the supplied fields. Return True if a row matched todo_id."""

    @abstractmethod
    def delete(self, todo_id: str) -> bool:
        """Delete a todo by id. Return True if deleted, False if not found."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and local runs
    without a Supabase project.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TodoEntity] = {}
        self._order: dict[str, int] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def list(self) -> List[TodoEntity]:
        with self._lock:
            # Insertion sequence breaks ties between equal timestamps
            items = sorted(
                self._items.values(),
                key=lambda t: (t["created_at"], self._order[t["id"]]),
                reverse=True,
            )
            return [t.copy() for t in items]

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def create(self, data: TodoCreate) -> None:
        seq = self._allocate_id()
        entity: TodoEntity = {
            "id": str(seq),
            "task": data.task,
            "completed": False,
            "created_at": self._now(),
        }
        with self._lock:
            self._items[entity["id"]] = entity
            self._order[entity["id"]] = seq

    def update(self, todo_id: str, data: TodoUpdate) -> bool:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return False

            # Update only provided fields
            updated = existing.copy()
            updated.update(data.changes())  # type: ignore[typeddict-item]
            self._items[todo_id] = updated
            return True

    def delete(self, todo_id: str) -> bool:
        with self._lock:
            self._order.pop(todo_id, None)
            return self._items.pop(todo_id, None) is not None


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - memory: InMemoryRepository
    - supabase: SupabaseRepository (requires SUPABASE_URL and SUPABASE_KEY)
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "supabase":
        from .supabase_store import SupabaseRepository

        if not settings.supabase_url or not settings.supabase_key:
            raise StoreError(
                "SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend",
                code="STORE_NOT_CONFIGURED",
            )
        logger.info("Using Supabase backend (table=%s)", settings.todos_table)
        return SupabaseRepository(
            settings.supabase_url,
            settings.supabase_key,
            table=settings.todos_table,
        )
    logger.info("Using in-memory backend")
    return InMemoryRepository()
