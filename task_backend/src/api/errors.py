from __future__ import annotations

from typing import Any, Dict, Optional


class TaskError(Exception):
    """Base class for task errors carrying an error name and an HTTP status."""

    error: str = "TaskError"
    http_status: int = 500

    def __init__(self, message: str, *, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error, "message": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidTaskError(TaskError):
    """Malformed or out-of-range input. Only the first violation is reported."""

    error = "ValidationError"
    http_status = 400


class TaskForbiddenError(TaskError):
    error = "Forbidden"
    http_status = 403


class TaskNotFoundError(TaskError):
    error = "NotFound"
    http_status = 404

    def __init__(self, message: str = "Task not found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class StoreError(TaskError):
    """Persistence failure. The underlying cause is logged, never returned."""

    error = "StoreError"
    http_status = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "message": "Server error"}
