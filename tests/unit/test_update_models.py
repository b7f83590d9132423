"""Tests for partial update models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.domain.task import TaskPriority
from src.domain.update_models import ABSENT, Present, TaskPatch, TaskUpdate


@pytest.mark.unit
class TestTaskUpdate:
    def test_absent_fields_stay_absent(self):
        patch = TaskUpdate(task_id=1, title="New").to_patch()

        assert patch.title == Present("New")
        assert patch.description is ABSENT
        assert patch.priority is ABSENT
        assert patch.deadline is ABSENT

    def test_empty_and_null_values_are_present(self):
        patch = TaskUpdate.model_validate({"task_id": 1, "description": "", "deadline": None}).to_patch()

        assert patch.description == Present("")
        assert patch.deadline == Present(None)
        assert patch.changes() == {"description": "", "deadline": None}

    def test_deadline_parsed(self):
        patch = TaskUpdate.model_validate({"task_id": 1, "deadline": "2026-11-01T09:00:00Z"}).to_patch()

        assert patch.deadline == Present(datetime(2026, 11, 1, 9, 0, tzinfo=UTC))

    def test_priority_coerced_to_enum(self):
        patch = TaskUpdate.model_validate({"task_id": 1, "priority": 3}).to_patch()

        assert patch.priority == Present(TaskPriority.HIGH)

    def test_requires_field_besides_id(self):
        with pytest.raises(ValidationError, match="At least one field"):
            TaskUpdate.model_validate({"task_id": 1})

    @pytest.mark.parametrize(
        "body",
        [
            {"task_id": 1, "status": 2},
            {"task_id": 1, "order_index": 0},
            {"task_id": 1, "title": None},
            {"task_id": 1, "title": ""},
            {"task_id": 1, "priority": 4},
            {"title": "No id"},
        ],
    )
    def test_rejects_invalid_bodies(self, body):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate(body)


@pytest.mark.unit
class TestTaskPatch:
    def test_default_patch_is_empty(self):
        patch = TaskPatch()

        assert patch.changes() == {}

    def test_absent_is_falsy_singleton(self):
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"
        assert type(ABSENT)() is ABSENT
