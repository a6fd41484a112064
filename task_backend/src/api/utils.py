from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from .models import TaskPriority, TaskStatus

RECENT_LIMIT = 5


def _value(v: Any) -> Any:
    return v.value if isinstance(v, (TaskStatus, TaskPriority)) else v


# PUBLIC_INTERFACE
def summarize_tasks(
    tasks: Union[Sequence[Mapping[str, Any]], Iterable[Mapping[str, Any]]],
    recent_limit: int = RECENT_LIMIT,
) -> Dict[str, Any]:
    """
    Build the dashboard summary for a list of tasks.

    Args:
        tasks: Tasks ordered newest first, as stored or as returned by the API.
        recent_limit: How many of the newest tasks to include under ``recent``.

    Returns:
        Dict with keys: total, by_status, by_priority, completion_rate, recent.
    """
    materialized: List[Mapping[str, Any]] = list(tasks) if not isinstance(tasks, list) else tasks
    by_status = {s.value: 0 for s in TaskStatus}
    by_priority = {p.value: 0 for p in TaskPriority}
    for t in materialized:
        status = _value(t.get("status"))
        priority = _value(t.get("priority"))
        if status in by_status:
            by_status[status] += 1
        if priority in by_priority:
            by_priority[priority] += 1

    total = len(materialized)
    completed = by_status[TaskStatus.COMPLETED.value]
    rate = round(completed * 100.0 / total, 1) if total else 0.0
    return {
        "total": total,
        "by_status": by_status,
        "by_priority": by_priority,
        "completion_rate": rate,
        "recent": list(materialized[: max(recent_limit, 0)]),
    }
