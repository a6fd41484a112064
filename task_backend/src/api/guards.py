from __future__ import annotations

import logging

from .errors import TaskForbiddenError, TaskNotFoundError
from .models import TaskEntity
from .repositories import Repository

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def owns(task: TaskEntity, caller: str) -> bool:
    """True when ``caller`` is the task's owner."""
    return task["owner"] == caller


# PUBLIC_INTERFACE
def load_owned_task(repo: Repository, task_id: str, caller: str, action: str = "update") -> TaskEntity:
    """
    Load a task and confirm the caller owns it.

    Existence is checked before ownership: an unknown id is always
    TaskNotFoundError, and TaskForbiddenError is raised only for a task that
    exists and belongs to someone else.

    Args:
        repo: Task store to read from.
        task_id: Identifier from the request path.
        caller: Identity of the authenticated user.
        action: Verb used in the forbidden message ("update", "delete", "view").

    Returns:
        The stored task.
    """
    task = repo.get(task_id)
    if task is None:
        raise TaskNotFoundError()
    if not owns(task, caller):
        logger.warning("denied %s of task %s for user %s", action, task_id, caller)
        raise TaskForbiddenError(f"Not authorized to {action} this task")
    return task
