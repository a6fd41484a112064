from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..auth import Identity, get_current_identity
from ..repositories import Repository, get_repository
from ..schemas import (
    MessageOut,
    TaskCreate,
    TaskEnvelope,
    TaskListEnvelope,
    TaskOut,
    TaskStats,
    TaskUpdate,
)
from ..services import TaskService

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)

_ERRORS = {
    400: {"description": "Validation error"},
    401: {"description": "Missing or invalid bearer credential"},
    403: {"description": "Task belongs to another user"},
    404: {"description": "Task not found"},
    500: {"description": "Store error"},
}


def _get_service(repo: Repository = Depends(get_repository)) -> TaskService:
    """
    Dependency building the task service over the configured repository.
    """
    return TaskService(repo)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TaskListEnvelope,
    summary="List Tasks",
    description="List every task owned by the caller, newest first.",
    responses={200: {"description": "Tasks retrieved"}, 401: _ERRORS[401], 500: _ERRORS[500]},
)
def list_tasks(
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(_get_service),
) -> TaskListEnvelope:
    """
    List the caller's tasks.
    """
    tasks = service.list_tasks(identity.user_id)
    return TaskListEnvelope(tasks=[TaskOut(**t) for t in tasks])  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=TaskStats,
    summary="Task Stats",
    description="Counts by status and priority, completion rate and the newest tasks for the dashboard.",
    responses={200: {"description": "Stats computed"}, 401: _ERRORS[401], 500: _ERRORS[500]},
)
def task_stats(
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(_get_service),
) -> TaskStats:
    """
    Dashboard summary of the caller's tasks.
    """
    summary = service.task_stats(identity.user_id)
    summary["recent"] = [TaskOut(**t) for t in summary["recent"]]
    return TaskStats(**summary)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a task owned by the caller. Any owner value in the body is ignored.",
    responses={201: {"description": "Task created"}, 400: _ERRORS[400], 401: _ERRORS[401], 500: _ERRORS[500]},
)
def create_task(
    payload: TaskCreate,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(_get_service),
) -> TaskEnvelope:
    """
    Create a new task.
    """
    created = service.create_task(identity.user_id, payload)
    return TaskEnvelope(task=TaskOut(**created))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Get Task",
    description="Get one of the caller's tasks by ID.",
    responses={200: {"description": "Task found"}, **{k: _ERRORS[k] for k in (401, 403, 404, 500)}},
)
def get_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(_get_service),
) -> TaskEnvelope:
    """
    Retrieve a single task by its ID.
    """
    task = service.get_task(task_id, identity.user_id)
    return TaskEnvelope(task=TaskOut(**task))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Update Task",
    description=(
        "Update one of the caller's tasks. Title is required; description, status and priority "
        "replace the stored values only when present."
    ),
    responses={200: {"description": "Task updated"}, **_ERRORS},
)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(_get_service),
) -> TaskEnvelope:
    """
    Update a task. 404 if it does not exist, 403 if it belongs to someone else.
    """
    updated = service.update_task(task_id, identity.user_id, payload)
    return TaskEnvelope(task=TaskOut(**updated))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=MessageOut,
    summary="Delete Task",
    description="Permanently delete one of the caller's tasks.",
    responses={200: {"description": "Task deleted"}, **{k: _ERRORS[k] for k in (401, 403, 404, 500)}},
)
def delete_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(_get_service),
) -> MessageOut:
    """
    Delete a task. 404 if it does not exist, 403 if it belongs to someone else.
    """
    return MessageOut(message=service.delete_task(task_id, identity.user_id))
