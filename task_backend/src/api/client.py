"""
HTTP client for the task API and an immutable task-list state.

``TaskListState`` replaces a shared, mutated task list: every transition
returns a new state. ``TasksClient`` performs the request and hands back the
next state, so callers hold exactly one current value.

Usage:
    with httpx.Client(base_url="http://localhost:8000") as http:
        api = TasksClient(http, token="alice-token")
        state = api.list_tasks()
        state = api.create_task(state, {"title": "Plan sprint"})
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from .utils import summarize_tasks

Task = Dict[str, Any]


class TasksApiError(Exception):
    """Non-2xx response from the task API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskListState:
    """The caller's tasks, newest first. Never mutated in place."""

    tasks: Tuple[Task, ...] = ()

    def with_created(self, task: Task) -> "TaskListState":
        return replace(self, tasks=(task, *self.tasks))

    def with_updated(self, task: Task) -> "TaskListState":
        return replace(self, tasks=tuple(task if t["id"] == task["id"] else t for t in self.tasks))

    def without(self, task_id: str) -> "TaskListState":
        return replace(self, tasks=tuple(t for t in self.tasks if t["id"] != task_id))

    def find(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t["id"] == task_id), None)

    def stats(self) -> Dict[str, Any]:
        return summarize_tasks(self.tasks)


# PUBLIC_INTERFACE
class TasksClient:
    """
    Thin wrapper over an ``httpx.Client`` that adds the bearer credential and
    turns error responses into TasksApiError.
    """

    base_path = "/api/tasks"

    def __init__(self, http: httpx.Client, token: str) -> None:
        self._http = http
        self._headers = {"Authorization": f"Bearer {token}"}

    def _request(self, method: str, path: str = "", json: Optional[Mapping[str, Any]] = None) -> Any:
        res = self._http.request(method, f"{self.base_path}{path}", json=json, headers=self._headers)
        if res.is_error:
            raise TasksApiError(res.status_code, _error_message(res))
        return res.json()

    def list_tasks(self) -> TaskListState:
        return TaskListState(tasks=tuple(self._request("GET")["tasks"]))

    def get_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/stats")

    def create_task(self, state: TaskListState, data: Mapping[str, Any]) -> TaskListState:
        return state.with_created(self._request("POST", json=data)["task"])

    def update_task(self, state: TaskListState, task_id: str, data: Mapping[str, Any]) -> TaskListState:
        return state.with_updated(self._request("PUT", f"/{task_id}", json=data)["task"])

    def delete_task(self, state: TaskListState, task_id: str) -> TaskListState:
        self._request("DELETE", f"/{task_id}")
        return state.without(task_id)


def _error_message(res: httpx.Response) -> str:
    try:
        body = res.json()
    except ValueError:
        return res.text or res.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return res.reason_phrase
