from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo row as returned by the
    store.

    Fields:
    - id: Opaque identifier assigned by the store (kept as a string)
    - task: Non-empty task text, stored trimmed
    - completed: Boolean completion flag (false on insert)
    - created_at: Creation timestamp assigned by the store
    """

    id: str
    task: str
    completed: bool
    created_at: datetime
