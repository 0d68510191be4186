"""Task repository: validated CRUD and queries over the tasks table."""
from sqlmodel import Session, select
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Callable, List, Mapping, Optional
from datetime import datetime
import logging

from taskboard.core.status import average_status
from taskboard.errors import ParentTaskNotFoundError, TaskInternalError, TaskNotFoundError
from taskboard.models.task import Task, generate_task_id, utcnow
from taskboard.services.task_validator import TaskValidator

logger = logging.getLogger(__name__)


class TaskRepository:
    """Task CRUD with validation, sub-task queries and cascade delete."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock

    def create(self, data: Mapping[str, Any]) -> Task:
        """
        Validate and persist a new task.

        Args:
            data: Payload with wire field names (title, description, dueDate,
                category, status, parentTaskId)

        Returns:
            The stored task

        Raises:
            TaskValidationError: If a field violates its rule
            ParentTaskNotFoundError: If parentTaskId does not reference a task
        """
        task_data = TaskValidator.validate_create(data)

        if task_data.parent_task_id is not None and self.get_by_id(task_data.parent_task_id) is None:
            raise ParentTaskNotFoundError(task_data.parent_task_id)

        now = self.clock()
        task = Task(
            id=generate_task_id(),
            title=task_data.title,
            description=task_data.description,
            due_date=task_data.due_date,
            category=task_data.category,
            status=task_data.status,
            parent_task_id=task_data.parent_task_id,
            created_at=now,
            updated_at=now,
        )

        self.session.add(task)
        self._commit("create")
        self.session.refresh(task)
        logger.info(f"Created task {task.id} (parent={task.parent_task_id})")
        return task

    def get_by_id(self, task_id: str) -> Optional[Task]:
        return self.session.get(Task, task_id)

    def get_all(self) -> List[Task]:
        """Top-level tasks only, newest first."""
        statement = (
            select(Task)
            .where(Task.parent_task_id.is_(None))
            .order_by(Task.created_at.desc())
        )
        return list(self.session.exec(statement).all())

    def get_sub_tasks(self, parent_task_id: str) -> List[Task]:
        """Direct children of a task, newest first."""
        statement = (
            select(Task)
            .where(Task.parent_task_id == parent_task_id)
            .order_by(Task.created_at.desc())
        )
        return list(self.session.exec(statement).all())

    def get_sub_task_ids(self, task_id: str) -> List[str]:
        """All transitive descendant ids of a task, walking parent edges breadth-first."""
        found: List[str] = []
        frontier = [task_id]
        while frontier:
            statement = select(Task.id).where(Task.parent_task_id.in_(frontier))
            children = [child_id for child_id in self.session.exec(statement).all() if child_id not in found]
            found.extend(children)
            frontier = children
        return found

    def update(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        """
        Apply a partial update; only supplied fields are validated and written.

        Raises:
            TaskNotFoundError: If the task does not exist
            TaskValidationError: If a supplied field violates its rule
        """
        task = self.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id, message=f"Task with ID {task_id} not found")

        changes = TaskValidator.validate_update(updates)
        if not changes.model_fields_set:
            return task

        for field in changes.model_fields_set:
            setattr(task, field, getattr(changes, field))
        task.updated_at = self.clock()

        self.session.add(task)
        self._commit("update")
        self.session.refresh(task)
        logger.info(f"Updated task {task.id} fields={sorted(changes.model_fields_set)}")
        return task

    def delete(self, task_id: str) -> List[str]:
        """
        Delete a task and its whole sub-tree in one transaction.

        Returns:
            Ids of every removed task, the root first

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        if self.get_by_id(task_id) is None:
            raise TaskNotFoundError(task_id, message=f"Task with ID {task_id} not found")

        removed = [task_id] + self.get_sub_task_ids(task_id)
        try:
            self.session.exec(delete(Task).where(Task.id.in_(removed)))
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to delete task {task_id}: {str(e)}")
            raise TaskInternalError("Failed to delete task") from e
        self._commit("delete")
        logger.info(f"Deleted task {task_id} with {len(removed) - 1} descendant(s)")
        return removed

    def calculate_parent_status(self, parent_task_id: str) -> Optional[int]:
        """Rounded average of the direct children's status, None without children."""
        return average_status(task.status for task in self.get_sub_tasks(parent_task_id))

    def _commit(self, operation: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to {operation} task: {str(e)}")
            raise TaskInternalError(f"Failed to {operation} task") from e
