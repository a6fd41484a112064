from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskStatus(str, Enum):
    """Workflow label of a task. Any transition between members is allowed."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# PUBLIC_INTERFACE
class TaskPriority(str, Enum):
    """Priority label of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A task document as held by the storage backends.

    Fields:
    - id: Opaque unique identifier (uuid4 hex), immutable
    - title: Trimmed title (1..100 chars)
    - description: Trimmed description (0..500 chars), '' when not given
    - status: TaskStatus value
    - priority: TaskPriority value
    - owner: Identifier of the owning user, bound at creation and never changed
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp
    """

    id: str
    title: str
    description: str
    status: str
    priority: str
    owner: str
    created_at: datetime
    updated_at: datetime


# Fields a caller may replace through an update.
MUTABLE_FIELDS = ("title", "description", "status", "priority")
