"""
Client task cache.

Holds the full task list (top-level tasks and their sub-trees) for a UI,
mirrored to local fallback storage. Mutations are write-through: the API is
called first and the in-memory list only changes once the server confirms.
"""
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union
import logging
import os

import httpx
from dotenv import load_dotenv

from taskboard.client.storage import LocalTaskStorage
from taskboard.client.task_manager import check_task, check_update, creation_payload, update_payload
from taskboard.core.filters import DEFAULT_SORT, TaskFilter, filter_tasks, sort_tasks
from taskboard.core.status import calculate_parent_status, get_descendant_ids, get_sub_tasks
from taskboard.errors import (
    TaskError,
    TaskInternalError,
    TaskNotFoundError,
    TaskValidationError,
    error_from_response,
)

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_CACHE_PATH = "./.taskboard_cache.json"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEGRADED_MESSAGE = "Failed to sync with server, using cached data"

Task = Dict[str, Any]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class TaskCache:
    """
    Write-through task cache bound to one API.

    Use as ``async with TaskCache() as cache:``; entering opens the HTTP
    client and loads the tasks, leaving closes the client.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        storage: Optional[LocalTaskStorage] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or os.getenv("TASKBOARD_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.storage = storage or LocalTaskStorage(os.getenv("TASKBOARD_CACHE_PATH", DEFAULT_CACHE_PATH))
        if timeout is None:
            timeout = _env_float("TASKBOARD_CLIENT_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._tasks: List[Task] = []

        self.filter = TaskFilter()
        self.sort = DEFAULT_SORT
        self.loading = False
        self.error: Optional[str] = None
        self.degraded = False

    # Lifecycle

    async def open(self) -> "TaskCache":
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        await self.load()
        return self

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TaskCache":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Transport

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        if self._client is None:
            raise RuntimeError("TaskCache is not open")

        response = await self._client.request(method, path, **kwargs)
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            raise error_from_response(response.status_code, body)
        try:
            return response.json()
        except ValueError as e:
            raise TaskInternalError(f"Unreadable response from {method} {path}") from e

    def _fail(self, action: str, error: Exception) -> None:
        if isinstance(error, TaskError):
            self.error = error.message
        else:
            self.error = f"Network error while trying to {action}: {error}"
        logger.error(f"Failed to {action}: {self.error}")

    # Reads

    async def _get_task_list(self, path: str) -> List[Task]:
        payload = await self._request("GET", path)
        if not isinstance(payload, list) or not all(isinstance(t, dict) and "id" in t for t in payload):
            raise TaskInternalError(f"Unexpected task list from GET {path}")
        return payload

    async def _fetch_all(self) -> List[Task]:
        tasks = await self._get_task_list("/tasks")
        frontier = [task["id"] for task in tasks]
        while frontier:
            children: List[Task] = []
            for parent_id in frontier:
                children.extend(await self._get_task_list(f"/tasks/{parent_id}/subtasks"))
            tasks.extend(children)
            frontier = [child["id"] for child in children]
        return tasks

    async def load(self) -> List[Task]:
        """
        Replace the cache with the server's tasks.

        On any failure the previously stored copy is used instead and the
        cache is marked degraded; the failure is not raised.
        """
        self.loading = True
        self.error = None
        try:
            tasks = await self._fetch_all()
        except (httpx.HTTPError, TaskError) as e:
            logger.warning(f"Error loading tasks, falling back to local copy: {str(e)}")
            self._tasks = self.storage.load()
            self.error = DEGRADED_MESSAGE
            self.degraded = True
        else:
            self._tasks = tasks
            self.degraded = False
            self._persist()
        finally:
            self.loading = False
        return self.all_tasks

    @property
    def all_tasks(self) -> List[Task]:
        return list(self._tasks)

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.get("id") == task_id:
                return task
        return None

    def get_sub_tasks(self, parent_task_id: str) -> List[Task]:
        return get_sub_tasks(self._tasks, parent_task_id)

    def calculate_parent_status(self, parent_task_id: str) -> Optional[int]:
        return calculate_parent_status(self._tasks, parent_task_id)

    def set_filter(self, criteria: Union[TaskFilter, Mapping[str, Any], None] = None, **changes) -> TaskFilter:
        """Replace the filter criteria, or change single criteria by keyword."""
        if criteria is not None:
            self.filter = criteria if isinstance(criteria, TaskFilter) else TaskFilter.from_mapping(criteria)
        if changes:
            self.filter = replace(self.filter, **changes)
        return self.filter

    def set_sort(self, sort_option: str) -> None:
        self.sort = sort_option

    def visible_tasks(self, today: Optional[date] = None) -> List[Task]:
        """Top-level tasks after the current filter, in the current sort order."""
        return sort_tasks(filter_tasks(self._tasks, self.filter, today=today), self.sort)

    def clear_error(self) -> None:
        self.error = None

    # Writes

    def _persist(self) -> None:
        self.storage.save(self._tasks)

    async def _create(self, action: str, payload: Dict[str, Any]) -> Task:
        try:
            invalid = check_task(payload)
            if invalid is not None:
                raise invalid
            created = await self._request("POST", "/tasks", json=payload)
        except (httpx.HTTPError, TaskError) as e:
            self._fail(action, e)
            raise

        self._tasks.append(created)
        self._persist()
        return created

    async def add_task(
        self,
        title: str,
        description: Optional[str] = None,
        due_date: Union[str, date, None] = None,
        category: Optional[str] = None,
        status: Optional[int] = None,
    ) -> Task:
        """Create a top-level task and add the confirmed record to the cache."""
        payload = creation_payload(title, description, due_date, category, status)
        return await self._create("create task", payload)

    async def add_sub_task(
        self,
        parent_task_id: str,
        title: str,
        description: Optional[str] = None,
        due_date: Union[str, date, None] = None,
        category: Optional[str] = None,
        status: Optional[int] = None,
    ) -> Task:
        """
        Create a sub-task with a single call; the parent's children are
        derived from parentTaskId, so the parent record is not touched.
        """
        payload = creation_payload(title, description, due_date, category, status, parent_task_id)
        return await self._create("create sub-task", payload)

    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        """
        Update a cached task through the API.

        Args:
            task_id: Task to update
            updates: Wire-named fields (title, description, dueDate, category, status)

        Returns:
            The server's updated record
        """
        try:
            task = self.get_task(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)

            changes = update_payload(updates)
            if not changes:
                raise TaskValidationError("At least one field must be updated", code="NO_UPDATES_PROVIDED")

            invalid = check_update(changes) or check_task({**task, **changes})
            if invalid is not None:
                raise invalid

            updated = await self._request("PUT", f"/tasks/{task_id}", json=changes)
        except (httpx.HTTPError, TaskError) as e:
            self._fail("update task", e)
            raise

        self._tasks = [updated if t.get("id") == task_id else t for t in self._tasks]
        self._persist()
        return updated

    async def delete_task(self, task_id: str) -> Dict[str, Any]:
        """Delete a task through the API and drop its whole sub-tree from the cache."""
        try:
            result = await self._request("DELETE", f"/tasks/{task_id}")
        except (httpx.HTTPError, TaskError) as e:
            self._fail("delete task", e)
            raise

        removed = {task_id, *get_descendant_ids(self._tasks, task_id)}
        self._tasks = [t for t in self._tasks if t.get("id") not in removed]
        self._persist()
        return result
