from __future__ import annotations

import itertools
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import Lock, RLock
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models import MUTABLE_FIELDS, TaskEntity
from .settings import get_settings


def new_task_id() -> str:
    """Opaque identifier for a new task."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def create(self, owner: str, fields: Mapping[str, Any]) -> TaskEntity:
        """Persist a new task owned by ``owner`` and return it."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a task by id regardless of owner, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        """
        Replace the given mutable fields in one write. Return the updated task or
        None if it no longer exists. Keys outside the mutable set are ignored.
        """

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Delete a task by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list_by_owner(self, owner: str) -> List[TaskEntity]:
        """Return every task owned by ``owner``, newest first."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TaskEntity] = {}
        # Insertion sequence breaks created_at ties when listing.
        self._seq: Dict[str, int] = {}
        self._counter = itertools.count()

    def _now(self) -> datetime:
        return utcnow()

    def create(self, owner: str, fields: Mapping[str, Any]) -> TaskEntity:
        now = self._now()
        entity: TaskEntity = {
            "id": new_task_id(),
            "title": fields["title"],
            "description": fields.get("description", ""),
            "status": fields.get("status", "pending"),
            "priority": fields.get("priority", "medium"),
            "owner": owner,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
            self._seq[entity["id"]] = next(self._counter)
        return entity.copy()  # type: ignore[return-value]

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def update(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            for key in MUTABLE_FIELDS:
                if key in changes:
                    updated[key] = changes[key]  # type: ignore[literal-required]
            updated["updated_at"] = self._now()

            self._items[task_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def delete(self, task_id: str) -> bool:
        with self._lock:
            self._seq.pop(task_id, None)
            return self._items.pop(task_id, None) is not None

    def list_by_owner(self, owner: str) -> List[TaskEntity]:
        with self._lock:
            items = [t for t in self._items.values() if t["owner"] == owner]

            def sort_key(t: TaskEntity) -> Tuple[datetime, int]:
                return t["created_at"], self._seq[t["id"]]

            items_sorted = sorted(items, key=sort_key, reverse=True)
            return [t.copy() for t in items_sorted]  # type: ignore[misc]


_repository: Optional[Repository] = None
_repository_lock = Lock()


def _build_repository() -> Repository:
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()


# PUBLIC_INTERFACE
def get_repository() -> Repository:
    """
    Return the process-wide repository for the configured backend.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository

    Built at most once even when first requests arrive concurrently on the
    threadpool. Call ``reset_repository()`` to pick up changed settings.
    """
    global _repository
    if _repository is None:
        with _repository_lock:
            if _repository is None:
                _repository = _build_repository()
    return _repository


def reset_repository() -> None:
    """Drop the process-wide repository; the next call builds a new one."""
    global _repository
    with _repository_lock:
        _repository = None
