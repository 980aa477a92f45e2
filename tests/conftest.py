import os
from typing import List, Optional, Set

# Default to memory backend for tests to avoid network dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from todo_gateway.main import create_app  # noqa: E402
from todo_gateway.models import TodoEntity  # noqa: E402
from todo_gateway.repositories import InMemoryRepository, StoreError  # noqa: E402
from todo_gateway.schemas import TodoCreate, TodoUpdate  # noqa: E402


class RecordingRepository(InMemoryRepository):
    """
    In-memory repository that records the order of store calls and can be
    told to fail selected operations.
    """

    def __init__(self, fail_on: Optional[Set[str]] = None) -> None:
        super().__init__()
        self.calls: List[str] = []
        self.fail_on = fail_on or set()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise StoreError(f"internal failure in {name}: connection refused to db.internal:5432")

    def list(self) -> List[TodoEntity]:
        self._record("list")
        return super().list()

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        self._record("get")
        return super().get(todo_id)

    def create(self, data: TodoCreate) -> None:
        self._record("create")
        super().create(data)

    def update(self, todo_id: str, data: TodoUpdate) -> bool:
        self._record("update")
        return super().update(todo_id, data)

    def delete(self, todo_id: str) -> bool:
        self._record("delete")
        return super().delete(todo_id)


@pytest.fixture
def repo() -> RecordingRepository:
    return RecordingRepository()


@pytest.fixture
def client(repo: RecordingRepository) -> TestClient:
    return TestClient(create_app(repository=repo))


@pytest.fixture
def make_client():
    """Build a client around a repository failing the named operations."""

    def _make(*fail_on: str):
        failing = RecordingRepository(fail_on=set(fail_on))
        return TestClient(create_app(repository=failing)), failing

    return _make
