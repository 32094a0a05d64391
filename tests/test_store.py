"""Tests for the in-memory record store, the schedule config store and task documents."""
import pytest

from quest_planner.models import ScheduleEntry
from task_store.models import Task
from task_store.store import (
    ConfigStore,
    InMemoryRecordStore,
    RecordStore,
    RecordStoreError,
    SCHEDULE_CONFIG,
    TASKS,
)


def test_add_and_read_back() -> None:
    store = InMemoryRecordStore()

    key = store.add(TASKS, {"subject": "Math", "description": "p. 12"})

    assert store.read_one(TASKS, key) == {"subject": "Math", "description": "p. 12"}
    assert list(store.read_all(TASKS)) == [key]
    assert store.read_one(TASKS, "missing") is None
    assert store.read_all("empty") == {}


def test_documents_are_copied() -> None:
    store = InMemoryRecordStore()
    document = {"tags": ["a"]}
    store.write_one(TASKS, "t1", document)

    document["tags"].append("b")
    store.read_one(TASKS, "t1")["tags"].append("c")

    assert store.read_one(TASKS, "t1") == {"tags": ["a"]}


def test_update_merges_fields() -> None:
    store = InMemoryRecordStore({TASKS: {"t1": {"subject": "Math", "completed": False}}})

    store.update(TASKS, "t1", {"completed": True})

    assert store.read_one(TASKS, "t1") == {"subject": "Math", "completed": True}


def test_update_missing_raises() -> None:
    with pytest.raises(RecordStoreError):
        InMemoryRecordStore().update(TASKS, "nope", {"completed": True})


def test_delete_and_query() -> None:
    store = InMemoryRecordStore({
        TASKS: {
            "t1": {"subject": "Math", "type": "homework"},
            "t2": {"subject": "Math", "type": "exam"},
            "t3": {"subject": "Art", "type": "homework"},
        }
    })

    assert set(store.query(TASKS, subject="Math")) == {"t1", "t2"}
    assert set(store.query(TASKS, subject="Math", type="exam")) == {"t2"}
    assert store.query(TASKS, subject="Civics") == {}

    store.delete(TASKS, "t1")
    store.delete(TASKS, "already-gone")
    assert set(store.read_all(TASKS)) == {"t2", "t3"}


def test_in_memory_store_satisfies_protocol() -> None:
    assert isinstance(InMemoryRecordStore(), RecordStore)


def test_config_store_round_trip() -> None:
    store = InMemoryRecordStore()
    config = ConfigStore(store)

    config.set_schedule(ScheduleEntry("Math", ["Tuesday", "Friday"], 5))

    assert store.read_one(SCHEDULE_CONFIG, "Math") == {"classDays": ["Tuesday", "Friday"], "defaultDueInterval": 5}
    assert config.get_schedule("Math") == ScheduleEntry("Math", ["Tuesday", "Friday"], 5)
    assert config.get_schedule("Art") is None
    assert [entry.subject for entry in config.all_schedules()] == ["Math"]


def test_task_document_round_trip() -> None:
    task = Task(subject="Math", description="p. 12", date="2024-06-03", due_date="2024-06-04",
                due_date_calculation_method="schedule", id="abc")

    document = task.to_document()

    assert "id" not in document
    assert "topic" not in document
    assert document["due_date_calculation_method"] == "schedule"
    assert Task.from_document("abc", document) == task


def test_task_from_legacy_document() -> None:
    task = Task.from_document("k1", {"date_added": "2024-06-03", "type": "homework", "extra": 1})

    assert task.id == "k1"
    assert task.date == "2024-06-03"
    assert task.subject == "Unknown"
    assert task.description == ""
