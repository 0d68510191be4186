"""
Filter/sort engine for task lists.

Pure functions over task records in wire form (camelCase keys, as returned by
the API and held by the client cache). The same functions back the server's
filtered listing and the client's visible view.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Union

from taskboard.core.dates import matches_date_range, parse_local_date

STATUS_FILTERS = ("all", "completed", "incomplete", "in-progress")
SORT_FIELDS = ("dueDate", "createdAt", "title", "category", "status")
DEFAULT_SORT = "dueDate-asc"


@dataclass
class TaskFilter:
    """Filter criteria; every supplied criterion must hold (AND)."""

    category: Optional[str] = None
    status: str = "all"
    date_range: Optional[str] = None
    search_query: str = ""

    @classmethod
    def from_mapping(cls, criteria: Optional[Mapping[str, Any]]) -> "TaskFilter":
        """Build from a wire-style dict (category, status, dateRange, searchQuery)."""
        criteria = criteria or {}
        return cls(
            category=criteria.get("category") or None,
            status=criteria.get("status") or "all",
            date_range=criteria.get("dateRange") or criteria.get("date_range") or None,
            search_query=criteria.get("searchQuery") or criteria.get("search_query") or "",
        )


Criteria = Union[TaskFilter, Mapping[str, Any], None]


def _matches_status(task_status: int, status_filter: str) -> bool:
    if status_filter == "completed":
        return task_status == 100
    if status_filter == "incomplete":
        return task_status != 100
    if status_filter == "in-progress":
        return 0 < task_status < 100
    return True


def _matches_search(task: Mapping[str, Any], query: str) -> bool:
    query = query.lower()
    title = (task.get("title") or "").lower()
    description = (task.get("description") or "").lower()
    return query in title or query in description


def matches_filter(task: Mapping[str, Any], criteria: TaskFilter, today: Optional[date] = None) -> bool:
    # Sub-tasks never show up in the top-level view
    if task.get("parentTaskId"):
        return False
    if criteria.category and task.get("category") != criteria.category:
        return False
    if not _matches_status(task.get("status", 0), criteria.status):
        return False
    if criteria.date_range and not matches_date_range(task.get("dueDate"), criteria.date_range, today=today):
        return False
    if criteria.search_query and not _matches_search(task, criteria.search_query):
        return False
    return True


def filter_tasks(tasks: Iterable[Mapping[str, Any]], criteria: Criteria = None, today: Optional[date] = None) -> List[Mapping[str, Any]]:
    """
    Filter top-level tasks by category, status, due date range and search text.

    Args:
        tasks: Task records
        criteria: TaskFilter or dict with category/status/dateRange/searchQuery
        today: Reference day for date ranges (defaults to the local current day)

    Returns:
        Matching tasks, input order preserved
    """
    if not isinstance(criteria, TaskFilter):
        criteria = TaskFilter.from_mapping(criteria)
    return [task for task in tasks if matches_filter(task, criteria, today=today)]


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _sort_key(field: str):
    if field == "dueDate":
        def key(task):
            due = parse_local_date(task.get("dueDate"))
            # Missing due dates behave as +infinity
            return (1, date.max) if due is None else (0, due)
        return key
    if field == "createdAt":
        return lambda task: _parse_timestamp(task.get("createdAt"))
    if field == "title":
        return lambda task: (task.get("title") or "").lower()
    if field == "category":
        return lambda task: task.get("category") or ""
    if field == "status":
        return lambda task: task.get("status", 0)
    return None


def parse_sort_option(sort_option: Optional[str]):
    """Split "field-direction" into (field, ascending)."""
    field, _, direction = (sort_option or DEFAULT_SORT).rpartition("-")
    if not field:
        field, direction = direction, "asc"
    return field, direction == "asc"


def sort_tasks(tasks: Iterable[Mapping[str, Any]], sort_option: str = DEFAULT_SORT) -> List[Mapping[str, Any]]:
    """
    Stable sort by "field-direction", e.g. "dueDate-asc" or "title-desc".

    Never mutates the input; unknown fields keep the input order.
    """
    field, ascending = parse_sort_option(sort_option)
    key = _sort_key(field)
    if key is None:
        return list(tasks)
    return sorted(tasks, key=key, reverse=not ascending)
