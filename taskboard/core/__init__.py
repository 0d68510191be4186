"""Task derived-state rules shared by the API and the client cache."""

from .dates import (
    DATE_RANGES,
    days_until_due,
    format_date_for_input,
    get_relative_date_label,
    is_overdue,
    matches_date_range,
    parse_local_date,
)
from .filters import DEFAULT_SORT, SORT_FIELDS, STATUS_FILTERS, TaskFilter, filter_tasks, sort_tasks
from .status import (
    PREDEFINED_STATUS,
    average_status,
    calculate_parent_status,
    get_descendant_ids,
    get_status_label,
    get_sub_tasks,
    is_completed,
)

__all__ = [
    "DATE_RANGES",
    "DEFAULT_SORT",
    "PREDEFINED_STATUS",
    "SORT_FIELDS",
    "STATUS_FILTERS",
    "TaskFilter",
    "average_status",
    "calculate_parent_status",
    "days_until_due",
    "filter_tasks",
    "format_date_for_input",
    "get_descendant_ids",
    "get_relative_date_label",
    "get_status_label",
    "get_sub_tasks",
    "is_completed",
    "is_overdue",
    "matches_date_range",
    "parse_local_date",
    "sort_tasks",
]
