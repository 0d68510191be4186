"""
Client-side task helpers.

Payload building and pre-validation run before any request leaves the
client, using the same rules the API enforces, so a task the client accepts
is never rejected by the server for a field rule (and vice versa).
"""
from datetime import date
from typing import Any, Dict, Mapping, Optional, Union

from taskboard.core.status import is_completed
from taskboard.errors import TaskValidationError
from taskboard.models.task import DEFAULT_CATEGORY, generate_task_id, utcnow
from taskboard.services.task_validator import UPDATABLE_FIELDS, TaskValidator


def creation_payload(
    title: Any,
    description: Optional[str] = None,
    due_date: Union[str, date, None] = None,
    category: Optional[str] = None,
    status: Optional[int] = None,
    parent_task_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Wire payload for POST /tasks with client defaults applied."""
    if isinstance(due_date, date):
        due_date = due_date.isoformat()
    return {
        "title": title.strip() if isinstance(title, str) else title,
        "description": description if description is not None else "",
        "dueDate": due_date,
        "category": category if category is not None else DEFAULT_CATEGORY,
        "status": status if status is not None else 0,
        "parentTaskId": parent_task_id,
    }


def build_task(title: str, **options: Any) -> Dict[str, Any]:
    """
    Build a new local task record with defaults, in wire form.

    Options are the snake_case creation fields (description, due_date,
    category, status, parent_task_id). The record is not validated; pass it
    to validate_task first.
    """
    now = utcnow().isoformat()
    task = creation_payload(title, **options)
    task.update(id=generate_task_id(), createdAt=now, updatedAt=now)
    task["isCompleted"] = is_completed(task)
    return task


def update_payload(updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only the fields the API lets a client change."""
    return {name: value for name, value in updates.items() if name in UPDATABLE_FIELDS}


def check_task(task: Mapping[str, Any]) -> Optional[TaskValidationError]:
    """Return the first rule a task record violates, or None if it is valid."""
    try:
        TaskValidator.validate_create(task)
    except TaskValidationError as e:
        return e
    return None


def check_update(changes: Mapping[str, Any]) -> Optional[TaskValidationError]:
    """Return the first rule a partial update violates, or None."""
    try:
        TaskValidator.validate_update(changes)
    except TaskValidationError as e:
        return e
    return None


def validate_task(task: Mapping[str, Any]) -> Optional[str]:
    """Human-readable message for the first violated rule, or None."""
    error = check_task(task)
    return error.message if error else None
