# tests/test_task_cache.py

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from taskboard.client.storage import LocalTaskStorage
from taskboard.client.task_cache import DEGRADED_MESSAGE, TaskCache
from taskboard.core.filters import TaskFilter
from taskboard.errors import ParentTaskNotFoundError, TaskNotFoundError, TaskValidationError

from .conftest import TODAY
from .fakes import RecordingTransport, failing_transport, status_transport, text_transport

pytestmark = pytest.mark.asyncio

MakeCache = Callable[..., TaskCache]


async def test_load_pulls_top_level_tasks_and_sub_trees(
    client: TestClient, make_cache: MakeCache, storage: LocalTaskStorage
) -> None:
    parent = client.post("/api/tasks", json={"title": "Parent"}).json()
    child = client.post("/api/tasks", json={"title": "Child", "parentTaskId": parent["id"]}).json()
    grandchild = client.post("/api/tasks", json={"title": "Grandchild", "parentTaskId": child["id"]}).json()

    async with make_cache() as cache:
        assert {t["id"] for t in cache.all_tasks} == {parent["id"], child["id"], grandchild["id"]}
        assert cache.degraded is False
        assert cache.error is None
        assert cache.loading is False
        assert cache.get_sub_tasks(parent["id"]) == [child]

    assert {t["id"] for t in storage.load()} == {parent["id"], child["id"], grandchild["id"]}


async def test_load_failure_falls_back_to_stored_copy(make_cache: MakeCache, storage: LocalTaskStorage) -> None:
    stored = [{"id": "cached", "title": "From last session", "status": 0, "parentTaskId": None}]
    storage.save(stored)

    async with make_cache(failing_transport()) as cache:
        assert cache.all_tasks == stored
        assert cache.degraded is True
        assert cache.error == DEGRADED_MESSAGE


async def test_load_server_error_is_degraded_not_raised(make_cache: MakeCache) -> None:
    transport = status_transport(500, {"error": "Internal server error", "code": "INTERNAL_SERVER_ERROR"})

    async with make_cache(transport) as cache:
        assert cache.all_tasks == []
        assert cache.degraded is True


async def test_load_non_json_page_is_degraded(make_cache: MakeCache, storage: LocalTaskStorage) -> None:
    stored = [{"id": "cached", "title": "Kept", "status": 0, "parentTaskId": None}]
    storage.save(stored)

    async with make_cache(text_transport("<html>portal</html>")) as cache:
        assert cache.all_tasks == stored
        assert cache.degraded is True
        assert cache.error == DEGRADED_MESSAGE


@pytest.mark.parametrize("body", [{"tasks": []}, [{"title": "no id"}], ["not a task"]])
async def test_load_unexpected_payload_is_degraded(
    make_cache: MakeCache, storage: LocalTaskStorage, body: object
) -> None:
    storage.save([])

    async with make_cache(status_transport(200, body)) as cache:
        assert cache.all_tasks == []
        assert cache.degraded is True



async def test_add_task_is_write_through(
    make_cache: MakeCache, client: TestClient, storage: LocalTaskStorage
) -> None:
    async with make_cache() as cache:
        created = await cache.add_task("  Pay rent ", category="Finance", due_date=TODAY)

        assert created["title"] == "Pay rent"
        assert created["dueDate"] == TODAY.isoformat()
        assert cache.get_task(created["id"]) == created

    assert client.get(f"/api/tasks/{created['id']}").json() == created
    assert storage.load() == [created]


async def test_invalid_task_is_rejected_before_any_request(
    make_cache: MakeCache, recorder: RecordingTransport
) -> None:
    async with make_cache() as cache:
        requests_after_load = len(recorder.requests)

        with pytest.raises(TaskValidationError) as info:
            await cache.add_task("   ")

        assert info.value.code == "INVALID_TITLE"
        assert len(recorder.requests) == requests_after_load
        assert cache.all_tasks == []
        assert cache.error == info.value.message


async def test_server_rejection_leaves_cache_unchanged(make_cache: MakeCache) -> None:
    async with make_cache() as cache:
        with pytest.raises(ParentTaskNotFoundError):
            await cache.add_sub_task("missing-parent", "Child")

        assert cache.all_tasks == []
        assert "missing-parent" in cache.error


async def test_add_sub_task_is_a_single_create(
    make_cache: MakeCache, recorder: RecordingTransport, client: TestClient
) -> None:
    async with make_cache() as cache:
        parent = await cache.add_task("Parent")
        recorder.requests.clear()

        child = await cache.add_sub_task(parent["id"], "Child", status=50)

        assert recorder.requests == [("POST", "/api/tasks")]
        assert child["parentTaskId"] == parent["id"]
        assert cache.get_sub_tasks(parent["id"]) == [child]
        assert cache.calculate_parent_status(parent["id"]) == 50
        assert cache.get_task(parent["id"]) == parent

    assert client.get(f"/api/tasks/{parent['id']}").json() == parent


async def test_update_task_merges_confirmed_record(make_cache: MakeCache, storage: LocalTaskStorage) -> None:
    async with make_cache() as cache:
        task = await cache.add_task("Stretch")

        updated = await cache.update_task(task["id"], {"status": 100, "id": "ignored"})

        assert updated["isCompleted"] is True
        assert cache.get_task(task["id"]) == updated
        assert storage.load() == [updated]


async def test_update_requires_cached_task_and_fields(make_cache: MakeCache, recorder: RecordingTransport) -> None:
    async with make_cache() as cache:
        task = await cache.add_task("Something")
        recorder.requests.clear()

        with pytest.raises(TaskNotFoundError):
            await cache.update_task("unknown", {"status": 10})
        with pytest.raises(TaskValidationError) as info:
            await cache.update_task(task["id"], {"parentTaskId": "x"})

        assert info.value.code == "NO_UPDATES_PROVIDED"
        assert recorder.requests == []
        assert cache.get_task(task["id"]) == task


async def test_delete_removes_whole_sub_tree(make_cache: MakeCache, client: TestClient) -> None:
    async with make_cache() as cache:
        parent = await cache.add_task("Parent")
        child = await cache.add_sub_task(parent["id"], "Child")
        await cache.add_sub_task(child["id"], "Grandchild")
        keep = await cache.add_task("Keep")

        result = await cache.delete_task(parent["id"])

        assert result == {"message": "Task deleted successfully", "id": parent["id"]}
        assert [t["id"] for t in cache.all_tasks] == [keep["id"]]

    assert client.get(f"/api/tasks/{child['id']}").status_code == 404


async def test_network_failure_on_write_is_raised(make_cache: MakeCache, storage: LocalTaskStorage) -> None:
    storage.save([])

    async with make_cache(failing_transport()) as cache:
        with pytest.raises(httpx.ConnectError):
            await cache.add_task("Offline")

        assert cache.all_tasks == []
        assert cache.error.startswith("Network error while trying to create task")


async def test_visible_tasks_apply_filter_and_sort(make_cache: MakeCache) -> None:
    async with make_cache() as cache:
        await cache.add_task("b later", due_date=TODAY + timedelta(days=3))
        await cache.add_task("a soon", due_date=TODAY + timedelta(days=1))
        await cache.add_task("no date")
        done = await cache.add_task("finished", status=100)
        parent = cache.all_tasks[0]
        await cache.add_sub_task(parent["id"], "hidden child")

        assert [t["title"] for t in cache.visible_tasks(today=TODAY)] == ["a soon", "b later", "no date", "finished"]

        cache.set_filter(status="incomplete")
        cache.set_sort("title-asc")
        assert [t["title"] for t in cache.visible_tasks(today=TODAY)] == ["a soon", "b later", "no date"]

        cache.set_filter({"dateRange": "week"})
        assert cache.filter == TaskFilter(date_range="week")
        assert [t["title"] for t in cache.visible_tasks(today=TODAY)] == ["a soon", "b later"]
        assert done not in cache.visible_tasks(today=TODAY)


async def test_closed_cache_refuses_writes(make_cache: MakeCache) -> None:
    cache = make_cache()
    await cache.open()
    await cache.close()

    with pytest.raises(RuntimeError):
        await cache.add_task("Too late")


async def test_set_filter_rejects_unknown_criteria(make_cache: MakeCache) -> None:
    async with make_cache() as cache:
        cache.set_filter(date_range="week")

        with pytest.raises(TypeError):
            cache.set_filter(dateRange="today")

        assert cache.filter == TaskFilter(date_range="week")
