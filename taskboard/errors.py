"""
Task error taxonomy.

Every failure the task layer reports carries an explicit kind, so callers
route on the kind and never on message text:
- VALIDATION: client-correctable input problems (HTTP 400)
- NOT_FOUND: a referenced task (direct or as parent) does not exist (HTTP 404)
- INTERNAL: unexpected storage/system failure (HTTP 500)
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


class TaskError(Exception):
    """Base exception for task errors"""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self) -> Dict[str, str]:
        """Error body as returned over the wire."""
        return {"error": self.message, "code": self.code}


class TaskValidationError(TaskError):
    kind = ErrorKind.VALIDATION
    default_code = "VALIDATION_ERROR"


class TaskNotFoundError(TaskError):
    kind = ErrorKind.NOT_FOUND
    default_code = "TASK_NOT_FOUND"

    def __init__(self, task_id: Optional[str] = None, message: Optional[str] = None, code: Optional[str] = None):
        self.task_id = task_id
        super().__init__(
            message or "Task not found",
            code=code,
            details={"id": task_id} if task_id else None,
        )


class ParentTaskNotFoundError(TaskNotFoundError):
    default_code = "PARENT_TASK_NOT_FOUND"

    def __init__(self, parent_task_id: Optional[str] = None, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(
            parent_task_id,
            message=message or f"Parent task with ID {parent_task_id} not found",
            code=code,
        )


class TaskInternalError(TaskError):
    kind = ErrorKind.INTERNAL
    default_code = "INTERNAL_SERVER_ERROR"


_ERROR_CLASS_BY_STATUS = {
    400: TaskValidationError,
    404: TaskNotFoundError,
}


def error_from_response(status_code: int, body: Any) -> TaskError:
    """
    Rebuild a TaskError from an API error response.

    Args:
        status_code: HTTP status of the response
        body: Decoded JSON body (expected shape: {"error", "code"})

    Returns:
        TaskError subclass matching the response kind
    """
    message = "Request failed"
    code = None
    if isinstance(body, dict):
        message = body.get("error") or message
        code = body.get("code")

    if code == ParentTaskNotFoundError.default_code:
        return ParentTaskNotFoundError(message=message, code=code)
    if status_code == 404:
        return TaskNotFoundError(message=message, code=code)

    error_class = _ERROR_CLASS_BY_STATUS.get(status_code, TaskInternalError)
    return error_class(message, code=code)
