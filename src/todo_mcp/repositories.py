from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import List, Optional

from .models import TodoEntity
from .schemas import TodoCreate, TodoUpdate
from .settings import get_settings


class PersistenceError(Exception):
    """Raised when the underlying storage fails."""


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def create(self, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity, including its assigned id."""

    @abstractmethod
    def read(self, todo_id: Optional[int] = None) -> List[TodoEntity]:
        """
        Return todos ordered by id.
        - todo_id None or <= 0: every todo
        - otherwise: the matching todo, or an empty list if there is none
        """

    @abstractmethod
    def update(self, todo_id: int, data: TodoUpdate) -> bool:
        """
        Apply the provided fields of an existing TodoEntity.
        Return False if not found; True if it exists, even when nothing was written.
        """

    @abstractmethod
    def delete(self, todo_id: int) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and ephemeral runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def create(self, data: TodoCreate) -> TodoEntity:
        with self._lock:
            entity: TodoEntity = {
                "id": self._allocate_id(),
                "description": data.description,
                "created_date": data.created_date,
            }
            self._items[entity["id"]] = entity
            return entity.copy()

    def read(self, todo_id: Optional[int] = None) -> List[TodoEntity]:
        with self._lock:
            if todo_id is not None and todo_id > 0:
                item = self._items.get(todo_id)
                return [] if item is None else [item.copy()]
            # Return copies to avoid external mutation
            return [self._items[k].copy() for k in sorted(self._items)]

    def update(self, todo_id: int, data: TodoUpdate) -> bool:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return False

            # Update only provided fields
            if data.description is not None:
                existing["description"] = data.description
            if data.created_date is not None:
                existing["created_date"] = data.created_date
            return True

    def delete(self, todo_id: int) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - sqlite: SQLiteRepository at SQLITE_DB_PATH
    - memory: InMemoryRepository
    """
    settings = get_settings()
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .db import SQLiteRepository

    return SQLiteRepository(settings.sqlite_db_path)
