"""Client-side task cache with local fallback storage."""

from .storage import LocalTaskStorage
from .task_cache import TaskCache

__all__ = ["LocalTaskStorage", "TaskCache"]
