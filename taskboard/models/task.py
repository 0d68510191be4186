"""Task model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
import uuid


class TaskCategory(str, Enum):
    """Fixed set of task categories."""
    WORK = "Work"
    PERSONAL = "Personal"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    FINANCE = "Finance"
    EDUCATION = "Education"
    HOME = "Home"
    OTHER = "Other"


CATEGORIES = [category.value for category in TaskCategory]
DEFAULT_CATEGORY = TaskCategory.OTHER.value

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000
STATUS_MIN = 0
STATUS_MAX = 100

_CATEGORY_SQL_LIST = ", ".join(f"'{category}'" for category in CATEGORIES)


def generate_task_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(SQLModel, table=True):
    """Task entity; sub-tasks point at their parent through parent_task_id."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(f"status >= {STATUS_MIN} AND status <= {STATUS_MAX}", name="ck_tasks_status_range"),
        CheckConstraint(f"category IN ({_CATEGORY_SQL_LIST})", name="ck_tasks_category"),
        Index("ix_tasks_category", "category"),
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_due_date", "due_date"),
        Index("ix_tasks_created_at", "created_at"),
    )

    id: str = Field(default_factory=generate_task_id, primary_key=True)
    title: str = Field(max_length=TITLE_MAX_LENGTH, min_length=1)
    description: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    due_date: Optional[date] = Field(default=None)  # calendar day, no time component
    category: str = Field(default=DEFAULT_CATEGORY, max_length=20)
    status: int = Field(default=0)  # completion percentage 0-100
    parent_task_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), index=True, nullable=True),
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    @property
    def is_completed(self) -> bool:
        """Derived completion flag, never stored."""
        return self.status == STATUS_MAX
