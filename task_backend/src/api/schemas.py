from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from .models import TaskPriority, TaskStatus

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
TITLE_REQUIRED = "Title is required"


def _check_title(value: Any) -> str:
    """
    Trim and validate a title. Missing, null and blank titles are all reported
    as required.
    """
    if value is None:
        raise PydanticCustomError("title_required", TITLE_REQUIRED)
    if not isinstance(value, str):
        raise PydanticCustomError("title_type", "Title must be a string")
    s = value.strip()
    if not s:
        raise PydanticCustomError("title_required", TITLE_REQUIRED)
    if len(s) > TITLE_MAX_LENGTH:
        raise PydanticCustomError(
            "title_too_long", "Title must be {max_length} characters or fewer", {"max_length": TITLE_MAX_LENGTH}
        )
    return s


def _check_description(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise PydanticCustomError("description_type", "Description must be a string")
    s = value.strip()
    if len(s) > DESCRIPTION_MAX_LENGTH:
        raise PydanticCustomError(
            "description_too_long",
            "Description must be {max_length} characters or fewer",
            {"max_length": DESCRIPTION_MAX_LENGTH},
        )
    return s


def _check_member(value: Any, enum_cls: type, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str) and value in {m.value for m in enum_cls}:  # type: ignore[attr-defined]
        return value
    raise PydanticCustomError(f"{label}_invalid", f"Invalid {label}")


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a task.

    Fields are checked in declaration order (title, description, status,
    priority). Unknown keys, including any attempt to set ``owner``, are
    ignored.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "required": ["title"],
            "example": {
                "title": "Plan sprint",
                "description": "First draft of the API contract",
                "status": "pending",
                "priority": "high",
            }
        },
    )

    # defaults to None so a missing title reaches validate_title; "required" is declared in json_schema_extra
    title: str = Field(
        default=None,  # type: ignore[assignment]
        validate_default=True,
        description="Short title, 1..100 characters after trimming",
    )
    description: Optional[str] = Field(default="", description="Optional details, up to 500 characters")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="pending, in_progress or completed")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="low, medium or high")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        return _check_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> Optional[str]:
        return _check_description(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        return _check_member(v, TaskStatus, "status")

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v: Any) -> Any:
        return _check_member(v, TaskPriority, "priority")

    def document_fields(self) -> Dict[str, Any]:
        """Field values for a new task document, with defaults applied."""
        return {
            "title": self.title,
            "description": self.description or "",
            "status": self.status.value,
            "priority": self.priority.value,
        }


# PUBLIC_INTERFACE
class TaskUpdate(TaskCreate):
    """
    Schema for updating a task. Same rules as creation; title is required,
    the other fields replace stored values only when present in the body.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "required": ["title"],
            "example": {
                "title": "Plan sprint",
                "status": "completed",
            }
        },
    )

    def changes(self) -> Dict[str, Any]:
        """Return only the fields the caller supplied, ready to be stored."""
        values = self.document_fields()
        provided = {"title"} | self.model_fields_set
        if self.description is None:
            provided.discard("description")
        return {k: v for k, v in values.items() if k in provided}


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0f8fad5bd9cb469fa16570867728950e",
                "title": "Plan sprint",
                "description": "",
                "status": "pending",
                "priority": "medium",
                "owner": "alice",
                "created_at": "2025-01-25T10:15:30.123456+00:00",
                "updated_at": "2025-01-25T10:15:30.123456+00:00",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Task details")
    status: TaskStatus = Field(..., description="Workflow status")
    priority: TaskPriority = Field(..., description="Priority")
    owner: str = Field(..., description="Identifier of the owning user")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class TaskEnvelope(BaseModel):
    task: TaskOut


class TaskListEnvelope(BaseModel):
    tasks: List[TaskOut]


class MessageOut(BaseModel):
    message: str


class StatusCounts(BaseModel):
    pending: int = 0
    in_progress: int = 0
    completed: int = 0


class PriorityCounts(BaseModel):
    low: int = 0
    medium: int = 0
    high: int = 0


# PUBLIC_INTERFACE
class TaskStats(BaseModel):
    """
    Dashboard summary of the caller's tasks.
    """

    total: int = Field(..., description="Number of tasks owned by the caller")
    by_status: StatusCounts
    by_priority: PriorityCounts
    completion_rate: float = Field(..., description="Completed tasks as a percentage of total, one decimal")
    recent: List[TaskOut] = Field(default_factory=list, description="Newest tasks first")
