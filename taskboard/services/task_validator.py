"""Task field validation shared by the repository and the client cache."""
from datetime import date
from typing import Any, Dict, Mapping, Optional
import re

from taskboard.errors import TaskValidationError
from taskboard.models.task import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    DESCRIPTION_MAX_LENGTH,
    STATUS_MAX,
    STATUS_MIN,
    TITLE_MAX_LENGTH,
)
from taskboard.schemas.task import TaskCreate, TaskUpdate

DUE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")

# Wire field name -> model attribute for fields a client may change after creation
UPDATABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "category": "category",
    "status": "status",
    "dueDate": "due_date",
}


class TaskValidator:
    """Validate task fields and raise a coded TaskValidationError on the first violation."""

    @staticmethod
    def validate_title(title: Any) -> str:
        """
        Validate a task title.

        Args:
            title: Raw title value

        Returns:
            The trimmed title

        Raises:
            TaskValidationError: INVALID_TITLE or TITLE_TOO_LONG
        """
        if not isinstance(title, str) or not title.strip():
            raise TaskValidationError(
                "Task title is required and must be a non-empty string",
                code="INVALID_TITLE",
                details={"field": "title"},
            )
        title = title.strip()
        if len(title) > TITLE_MAX_LENGTH:
            raise TaskValidationError(
                f"Task title must be {TITLE_MAX_LENGTH} characters or less",
                code="TITLE_TOO_LONG",
                details={"field": "title", "length": len(title)},
            )
        return title

    @staticmethod
    def validate_description(description: Any) -> str:
        if description is None:
            return ""
        if not isinstance(description, str):
            raise TaskValidationError(
                "Task description must be a string",
                code="INVALID_DESCRIPTION",
                details={"field": "description"},
            )
        if len(description) > DESCRIPTION_MAX_LENGTH:
            raise TaskValidationError(
                f"Task description must be {DESCRIPTION_MAX_LENGTH} characters or less",
                code="DESCRIPTION_TOO_LONG",
                details={"field": "description", "length": len(description)},
            )
        return description

    @staticmethod
    def validate_category(category: Any) -> str:
        if category not in CATEGORIES:
            raise TaskValidationError(
                f"Category must be one of: {', '.join(CATEGORIES)}",
                code="INVALID_CATEGORY",
                details={"field": "category", "value": category},
            )
        return category

    @staticmethod
    def validate_status(status: Any) -> int:
        """
        Validate a completion percentage.

        Booleans and fractional numbers are rejected; 50.0 is accepted as 50.
        """
        is_number = isinstance(status, (int, float)) and not isinstance(status, bool)
        if (
            not is_number
            or (isinstance(status, float) and not status.is_integer())
            or status < STATUS_MIN
            or status > STATUS_MAX
        ):
            raise TaskValidationError(
                f"Status must be an integer between {STATUS_MIN} and {STATUS_MAX}",
                code="INVALID_STATUS",
                details={"field": "status", "value": status},
            )
        return int(status)

    @staticmethod
    def validate_due_date(due_date: Any) -> Optional[date]:
        """
        Validate a due date; only the YYYY-MM-DD prefix is significant.

        Returns:
            The calendar day, or None when the due date is unset
        """
        if due_date is None:
            return None
        if not isinstance(due_date, str):
            raise TaskValidationError(
                "Due date must be a string",
                code="INVALID_DUE_DATE",
                details={"field": "dueDate"},
            )
        if not DUE_DATE_PATTERN.match(due_date):
            raise TaskValidationError(
                "Due date must be in ISO 8601 format (YYYY-MM-DD)",
                code="INVALID_DUE_DATE_FORMAT",
                details={"field": "dueDate", "value": due_date},
            )
        try:
            return date.fromisoformat(due_date[:10])
        except ValueError:
            raise TaskValidationError(
                f"Due date {due_date[:10]} is not a valid calendar date",
                code="INVALID_DUE_DATE_FORMAT",
                details={"field": "dueDate", "value": due_date},
            )

    @staticmethod
    def validate_parent_task_id(parent_task_id: Any) -> Optional[str]:
        """
        An empty id means a top-level task. Whether a non-empty id resolves
        is for the repository to decide.
        """
        if parent_task_id is None or parent_task_id == "":
            return None
        if not isinstance(parent_task_id, str):
            raise TaskValidationError(
                "Parent task ID must be a string",
                code="INVALID_PARENT_TASK_ID",
                details={"field": "parentTaskId"},
            )
        return parent_task_id

    @staticmethod
    def _require_mapping(data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise TaskValidationError(
                "Request body must be a JSON object",
                code="INVALID_REQUEST_BODY",
            )
        return data

    @classmethod
    def validate_create(cls, data: Any) -> TaskCreate:
        """
        Validate a create payload (wire field names) and apply defaults.

        Existence of the parent task is checked by the repository, not here.
        """
        data = cls._require_mapping(data)

        title = cls.validate_title(data.get("title"))
        description = cls.validate_description(data.get("description"))

        category = data.get("category")
        category = DEFAULT_CATEGORY if category is None else cls.validate_category(category)

        status = data.get("status")
        status = 0 if status is None else cls.validate_status(status)

        due_date = cls.validate_due_date(data.get("dueDate"))
        parent_task_id = cls.validate_parent_task_id(data.get("parentTaskId"))

        return TaskCreate(
            title=title,
            description=description,
            due_date=due_date,
            category=category,
            status=status,
            parent_task_id=parent_task_id,
        )

    @classmethod
    def validate_update(cls, data: Any) -> TaskUpdate:
        """
        Validate only the updatable fields present in a partial payload.

        Unknown keys and parentTaskId are ignored. The returned model's
        ``model_fields_set`` lists the fields to write.
        """
        data = cls._require_mapping(data)
        validators = {
            "title": cls.validate_title,
            "description": cls.validate_description,
            "category": cls.validate_category,
            "status": cls.validate_status,
            "dueDate": cls.validate_due_date,
        }

        values: Dict[str, Any] = {}
        for wire_name, attribute in UPDATABLE_FIELDS.items():
            if wire_name in data:
                values[attribute] = validators[wire_name](data[wire_name])
        return TaskUpdate(**values)

    @staticmethod
    def has_updatable_fields(data: Any) -> bool:
        return isinstance(data, Mapping) and any(name in data for name in UPDATABLE_FIELDS)
