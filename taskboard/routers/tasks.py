"""Task router: REST endpoints over the task repository."""
from fastapi import APIRouter, Body, Depends, Query, status
from typing import Any, Dict, List, Optional
from sqlmodel import Session

from taskboard.core.filters import TaskFilter, filter_tasks, sort_tasks
from taskboard.db.config import get_session
from taskboard.errors import TaskNotFoundError, TaskValidationError
from taskboard.models.task import Task
from taskboard.schemas.task import ErrorResponse, TaskDeleteResponse, TaskResponse
from taskboard.services.task_repository import TaskRepository
from taskboard.services.task_validator import TaskValidator
from taskboard.utils.logger import get_logger

router = APIRouter(tags=["Tasks"])  # No prefix since main.py adds /api prefix

api_logger = get_logger("taskboard.api").bind(router="tasks")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    404: {"model": ErrorResponse, "description": "Task not found"},
}


def get_task_repository(session: Session = Depends(get_session)) -> TaskRepository:
    """Dependency for getting TaskRepository instance."""
    return TaskRepository(session)


def to_response(task: Task) -> Dict[str, Any]:
    """Canonical wire form of a task (camelCase, derived isCompleted)."""
    return TaskResponse.model_validate(task).model_dump(by_alias=True, mode="json")


def _require_task(repository: TaskRepository, task_id: str) -> Task:
    task = repository.get_by_id(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


@router.get("/tasks", response_model=List[TaskResponse])
async def list_tasks(
    repository: TaskRepository = Depends(get_task_repository),
    category: Optional[str] = Query(None, description="Filter by category"),
    status_filter: Optional[str] = Query(None, alias="status", description="all, completed, incomplete, in-progress"),
    date_range: Optional[str] = Query(None, alias="dateRange", description="overdue, today, tomorrow, week, month, no-due-date"),
    search: Optional[str] = Query(None, description="Search keyword for title/description"),
    sort: Optional[str] = Query(None, description="field-direction, e.g. dueDate-asc"),
):
    """List top-level tasks, newest first, optionally filtered and sorted."""
    tasks = [to_response(task) for task in repository.get_all()]

    criteria = TaskFilter(
        category=category,
        status=status_filter or "all",
        date_range=date_range,
        search_query=search or "",
    )
    if criteria != TaskFilter():
        tasks = filter_tasks(tasks, criteria)
    if sort:
        tasks = sort_tasks(tasks, sort)
    return tasks


@router.get("/tasks/{task_id}", response_model=TaskResponse, responses=ERROR_RESPONSES)
async def get_task(task_id: str, repository: TaskRepository = Depends(get_task_repository)):
    """Get a specific task by ID."""
    return to_response(_require_task(repository, task_id))


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def create_task(
    payload: Any = Body(None),
    repository: TaskRepository = Depends(get_task_repository),
):
    """Create a task; parentTaskId makes it a sub-task of an existing task."""
    if payload is None:
        raise TaskValidationError("Request body is required", code="INVALID_REQUEST_BODY")

    task = repository.create(payload)
    api_logger.info("task.created", task_id=task.id, parent_task_id=task.parent_task_id)
    return to_response(task)


@router.put("/tasks/{task_id}", response_model=TaskResponse, responses=ERROR_RESPONSES)
async def update_task(
    task_id: str,
    payload: Any = Body(None),
    repository: TaskRepository = Depends(get_task_repository),
):
    """Update any subset of title, description, category, status and dueDate."""
    _require_task(repository, task_id)

    if not TaskValidator.has_updatable_fields(payload):
        raise TaskValidationError("At least one field must be updated", code="NO_UPDATES_PROVIDED")

    task = repository.update(task_id, payload)
    api_logger.info("task.updated", task_id=task.id)
    return to_response(task)


@router.delete("/tasks/{task_id}", response_model=TaskDeleteResponse, responses=ERROR_RESPONSES)
async def delete_task(task_id: str, repository: TaskRepository = Depends(get_task_repository)):
    """Delete a task together with all of its sub-tasks."""
    _require_task(repository, task_id)

    removed = repository.delete(task_id)
    api_logger.info("task.deleted", task_id=task_id, removed_count=len(removed))
    return TaskDeleteResponse(message="Task deleted successfully", id=task_id)


@router.get("/tasks/{task_id}/subtasks", response_model=List[TaskResponse], responses=ERROR_RESPONSES)
async def list_sub_tasks(task_id: str, repository: TaskRepository = Depends(get_task_repository)):
    """List the direct sub-tasks of a task, newest first."""
    _require_task(repository, task_id)
    return [to_response(task) for task in repository.get_sub_tasks(task_id)]
