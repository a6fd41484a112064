from __future__ import annotations

import logging
from typing import Any, Dict, List

from .errors import TaskNotFoundError
from .guards import load_owned_task
from .models import TaskEntity
from .repositories import Repository
from .schemas import TaskCreate, TaskUpdate
from .utils import summarize_tasks

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Task deleted successfully"


class TaskService:
    """
    Owner-scoped task operations. Every call takes the caller's identity and
    never returns or mutates another user's task.
    """

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def list_tasks(self, owner: str) -> List[TaskEntity]:
        return self._repo.list_by_owner(owner)

    def get_task(self, task_id: str, owner: str) -> TaskEntity:
        return load_owned_task(self._repo, task_id, owner, action="view")

    def create_task(self, owner: str, data: TaskCreate) -> TaskEntity:
        task = self._repo.create(owner, data.document_fields())
        logger.info("created task %s for user %s", task["id"], owner)
        return task

    def update_task(self, task_id: str, owner: str, data: TaskUpdate) -> TaskEntity:
        load_owned_task(self._repo, task_id, owner, action="update")
        updated = self._repo.update(task_id, data.changes())
        if updated is None:
            # deleted between the guard read and the write
            raise TaskNotFoundError()
        logger.info("updated task %s for user %s", task_id, owner)
        return updated

    def delete_task(self, task_id: str, owner: str) -> str:
        load_owned_task(self._repo, task_id, owner, action="delete")
        self._repo.delete(task_id)
        logger.info("deleted task %s for user %s", task_id, owner)
        return DELETED_MESSAGE

    def task_stats(self, owner: str) -> Dict[str, Any]:
        return summarize_tasks(self._repo.list_by_owner(owner))
