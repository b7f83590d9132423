"""Unit tests for task_service module."""

from datetime import UTC, datetime

import pytest

from src.core.db_client import StoreTransaction
from src.core.errors import InvalidInputError, TaskNotFoundError, TransientStoreError
from src.domain.create_models import TaskCreate
from src.domain.task import TaskPriority, TaskStatus
from src.domain.update_models import ABSENT, Present, TaskPatch
from src.services import task_service
from tests.unit.helpers import assert_dense, column, seed, snapshot


@pytest.mark.unit
class TestCreateTask:
    """Tests for create_task function."""

    async def test_create_defaults(self, store):
        task = await task_service.create_task(store, TaskCreate(title="Write docs"))

        assert task.task_id > 0
        assert task.title == "Write docs"
        assert task.description == ""
        assert task.priority == TaskPriority.MEDIUM
        assert task.status == TaskStatus.TODO
        assert task.order_index == 0
        assert task.deadline is None
        assert task.create_time.tzinfo is not None

    async def test_create_appends_to_its_column(self, store):
        await seed(store, TaskStatus.TODO, ["T1", "T2"])
        await seed(store, TaskStatus.DONE, ["D1"])

        task = await task_service.create_task(store, TaskCreate(title="T3", status=TaskStatus.TODO))

        assert task.order_index == 2
        assert await column(store, TaskStatus.TODO) == [("T1", 0), ("T2", 1), ("T3", 2)]
        assert await column(store, TaskStatus.DONE) == [("D1", 0)]

    async def test_create_keeps_deadline(self, store):
        deadline = datetime(2026, 11, 1, 12, 0, tzinfo=UTC)

        task = await task_service.create_task(store, TaskCreate(title="Ship", deadline=deadline))

        assert task.deadline == deadline


@pytest.mark.unit
class TestUpdateTask:
    """Tests for update_task function."""

    @pytest.fixture
    async def task(self, store):
        return await task_service.create_task(
            store,
            TaskCreate(
                title="Original",
                description="Some text",
                priority=TaskPriority.LOW,
                deadline=datetime(2026, 12, 24, tzinfo=UTC),
            ),
        )

    async def test_update_only_present_fields(self, store, task):
        updated = await task_service.update_task(store, task.task_id, TaskPatch(title=Present("Renamed")))

        assert updated.title == "Renamed"
        assert updated.description == "Some text"
        assert updated.priority == TaskPriority.LOW
        assert updated.deadline == task.deadline

    async def test_empty_description_and_null_deadline_are_applied(self, store, task):
        updated = await task_service.update_task(
            store,
            task.task_id,
            TaskPatch(description=Present(""), deadline=Present(None)),
        )

        assert updated.description == ""
        assert updated.deadline is None
        assert updated.title == "Original"

    async def test_update_does_not_touch_position(self, store, task):
        await seed(store, TaskStatus.TODO, ["Second"])

        updated = await task_service.update_task(store, task.task_id, TaskPatch(priority=Present(TaskPriority.HIGH)))

        assert updated.priority == TaskPriority.HIGH
        assert updated.status == TaskStatus.TODO
        assert updated.order_index == 0

    async def test_empty_patch_rejected(self, store, task):
        with pytest.raises(InvalidInputError, match="At least one field"):
            await task_service.update_task(store, task.task_id, TaskPatch(title=ABSENT))

    async def test_update_missing_task(self, store):
        with pytest.raises(TaskNotFoundError):
            await task_service.update_task(store, 404, TaskPatch(title=Present("Nope")))


@pytest.mark.unit
class TestDeleteTask:
    """Tests for delete_task function."""

    async def test_delete_closes_gap(self, store):
        _t1, t2, _t3 = await seed(store, TaskStatus.TODO, ["T1", "T2", "T3"])

        await task_service.delete_task(store, t2.task_id)

        assert await column(store, TaskStatus.TODO) == [("T1", 0), ("T3", 1)]

    async def test_delete_leaves_other_columns_alone(self, store):
        (t1,) = await seed(store, TaskStatus.TODO, ["T1"])
        await seed(store, TaskStatus.DONE, ["D1", "D2"])

        await task_service.delete_task(store, t1.task_id)

        assert await column(store, TaskStatus.TODO) == []
        assert await column(store, TaskStatus.DONE) == [("D1", 0), ("D2", 1)]

    async def test_delete_missing_task(self, store):
        await seed(store, TaskStatus.TODO, ["T1"])

        with pytest.raises(TaskNotFoundError):
            await task_service.delete_task(store, 999)

        assert await column(store, TaskStatus.TODO) == [("T1", 0)]

    async def test_get_after_delete(self, store):
        (t1,) = await seed(store, TaskStatus.TODO, ["T1"])
        await task_service.delete_task(store, t1.task_id)

        with pytest.raises(TaskNotFoundError):
            await task_service.get_task(store, t1.task_id)

    async def test_failure_during_renumber_rolls_back_delete(self, store, monkeypatch):
        _t1, t2, _t3 = await seed(store, TaskStatus.TODO, ["T1", "T2", "T3"])
        before = await snapshot(store)

        async def failing_set_position(self, task_id, position):
            raise TransientStoreError("Failed to delete task.", detail="injected failure")

        monkeypatch.setattr(StoreTransaction, "set_position", failing_set_position)

        with pytest.raises(TransientStoreError, match="Failed to delete task"):
            await task_service.delete_task(store, t2.task_id)

        assert await snapshot(store) == before
        assert (await task_service.get_task(store, t2.task_id)).title == "T2"


@pytest.mark.unit
class TestListTasks:
    """Tests for list_tasks function."""

    async def test_pagination(self, store, monkeypatch):
        monkeypatch.setattr("src.services.task_service.settings.list_page_size", 5)
        await seed(store, TaskStatus.TODO, [f"T{i}" for i in range(7)])

        first = await task_service.list_tasks(store, page=1)
        second = await task_service.list_tasks(store, page=2)

        assert first.total == 7
        assert len(first.tasks) == 5
        assert [task.title for task in second.tasks] == ["T5", "T6"]
        assert second.page == 2
        assert second.limit == 5

    async def test_default_page_size_from_settings(self, store, monkeypatch):
        monkeypatch.setattr("src.services.task_service.settings.list_page_size", 3)
        await seed(store, TaskStatus.TODO, ["A", "B", "C", "D"])

        page = await task_service.list_tasks(store)

        assert page.limit == 3
        assert len(page.tasks) == 3

    async def test_status_filter(self, store):
        await seed(store, TaskStatus.TODO, ["T1"])
        await seed(store, TaskStatus.IN_PROGRESS, ["P1", "P2"])

        page = await task_service.list_tasks(store, status=TaskStatus.IN_PROGRESS)

        assert page.total == 2
        assert [task.title for task in page.tasks] == ["P1", "P2"]

    async def test_search_matches_title_and_description(self, store):
        await task_service.create_task(store, TaskCreate(title="Fix login bug"))
        await task_service.create_task(store, TaskCreate(title="Release", description="after the login fix"))
        await task_service.create_task(store, TaskCreate(title="Unrelated"))

        page = await task_service.list_tasks(store, search="login")

        assert page.total == 2
        assert {task.title for task in page.tasks} == {"Fix login bug", "Release"}

    async def test_search_treats_wildcards_literally(self, store):
        await task_service.create_task(store, TaskCreate(title="Discount 50% off"))
        await task_service.create_task(store, TaskCreate(title="Order 500 items"))

        page = await task_service.list_tasks(store, search="50%")

        assert [task.title for task in page.tasks] == ["Discount 50% off"]

    async def test_search_combined_with_status(self, store):
        await seed(store, TaskStatus.TODO, ["Report draft"])
        await seed(store, TaskStatus.DONE, ["Report final"])

        page = await task_service.list_tasks(store, search="Report", status=TaskStatus.DONE)

        assert [task.title for task in page.tasks] == ["Report final"]

    async def test_invalid_page(self, store):
        with pytest.raises(InvalidInputError, match="page"):
            await task_service.list_tasks(store, page=0)


@pytest.mark.unit
class TestPositionAudit:
    """Tests for check_positions and repair_positions."""

    async def test_fresh_board_is_dense(self, store):
        await seed(store, TaskStatus.TODO, ["T1", "T2"])

        groups = await task_service.check_positions(store)

        assert [group.status for group in groups] == list(TaskStatus)
        assert all(group.is_dense for group in groups)

    async def test_repair_closes_legacy_gaps(self, store):
        _t1, t2, t3 = await seed(store, TaskStatus.TODO, ["T1", "T2", "T3"])
        async with store.transaction("simulate legacy delete") as txn:
            await txn.delete(t2.task_id)
            await txn.set_position(t3.task_id, 5)

        groups = await task_service.check_positions(store)
        assert groups[TaskStatus.TODO].positions == [0, 5]
        assert not groups[TaskStatus.TODO].is_dense

        rewritten = await task_service.repair_positions(store)

        assert rewritten == 1
        assert await column(store, TaskStatus.TODO) == [("T1", 0), ("T3", 1)]
        await assert_dense(store)
