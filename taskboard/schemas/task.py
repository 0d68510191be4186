"""Task schemas for requests and responses (camelCase on the wire)."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import date, datetime, timezone
from typing import Optional

from taskboard.models.task import DEFAULT_CATEGORY


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(CamelModel):
    """Normalized, already-validated input for creating a task."""
    title: str
    description: str = ""
    due_date: Optional[date] = None
    category: str = DEFAULT_CATEGORY
    status: int = 0
    parent_task_id: Optional[str] = None


class TaskUpdate(CamelModel):
    """Normalized partial update; only explicitly set fields are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    category: Optional[str] = None
    status: Optional[int] = None


class TaskResponse(CamelModel):
    """Canonical task record returned by the API."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: str = ""
    due_date: Optional[date] = None
    category: str
    status: int = Field(ge=0, le=100)
    parent_task_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_completed: bool

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands timestamps back without their offset; they are always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TaskDeleteResponse(BaseModel):
    """Confirmation payload for a cascade delete."""
    message: str
    id: str


class ErrorResponse(BaseModel):
    """Error body shared by every failing route."""
    error: str
    code: str
