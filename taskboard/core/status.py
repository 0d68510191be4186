"""Completion and parent/sub-task helpers over task records."""
import math
from typing import Any, Iterable, List, Mapping, Optional

PREDEFINED_STATUS = (0, 25, 50, 75, 100)

_STATUS_LABELS = {
    0: "Not Started",
    25: "In Progress",
    50: "Half Done",
    75: "Almost Done",
    100: "Complete",
}


def is_completed(task: Mapping[str, Any]) -> bool:
    return task.get("status") == 100


def get_status_label(status: int) -> str:
    return _STATUS_LABELS.get(status, f"{status}%")


def average_status(statuses: Iterable[int]) -> Optional[int]:
    """
    Mean of child statuses rounded half up, None when there are no children.
    """
    values = list(statuses)
    if not values:
        return None
    return math.floor(sum(values) / len(values) + 0.5)


def get_sub_tasks(tasks: Iterable[Mapping[str, Any]], parent_task_id: str) -> List[Mapping[str, Any]]:
    """Direct children of a task, taken from the parent edge."""
    return [task for task in tasks if task.get("parentTaskId") == parent_task_id]


def get_descendant_ids(tasks: Iterable[Mapping[str, Any]], task_id: str) -> List[str]:
    """All transitive sub-task ids of a task, children before grandchildren."""
    tasks = list(tasks)
    found: List[str] = []
    frontier = [task_id]
    while frontier:
        current = frontier.pop(0)
        for child in get_sub_tasks(tasks, current):
            child_id = child.get("id")
            if child_id in found or child_id == task_id:
                continue
            found.append(child_id)
            frontier.append(child_id)
    return found


def calculate_parent_status(tasks: Iterable[Mapping[str, Any]], parent_task_id: str) -> Optional[int]:
    return average_status(task.get("status", 0) for task in get_sub_tasks(tasks, parent_task_id))
