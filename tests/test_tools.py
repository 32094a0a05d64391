"""Tests for the MCP tool servers and their table formatters."""
import pytest

import task_store.server as task_server
from quest_planner.server import format_due_date_summary, mcp as planner_mcp
from task_store.models import Task
from task_store.store import InMemoryRecordStore, TASKS


@pytest.mark.asyncio
async def test_planner_tools_registered() -> None:
    tools = await planner_mcp.get_tools()

    assert {"resolve_due_date", "normalize_subject", "next_class", "show_due_date_summary"} <= set(tools)
    assert tools["resolve_due_date"].fn("Matematiikka", "2024-06-03") == {
        "dueDate": "2024-06-07",
        "calculationMethod": "schedule",
        "nextClassInfo": "Friday, 4 days after assignment",
    }
    assert tools["normalize_subject"].fn("englanti") == "English"


def test_due_date_summary_table() -> None:
    table = format_due_date_summary([("Math", "2024-06-03"), ("Chemistry", "2024-06-03")])

    assert "07.06.2024" in table
    assert "10.06.2024" in table
    assert "Total: 2 task(s)" in table
    assert format_due_date_summary([]) == "📚 No tasks to resolve."


def test_task_table_sorted_by_due_date(monkeypatch) -> None:
    store = InMemoryRecordStore()
    monkeypatch.setattr(task_server, "store", store)
    store.add(TASKS, Task(subject="Art", description="Sketch", due_date="2024-06-10").to_document())
    store.add(TASKS, Task(subject="Math", description="p. 12", due_date="2024-06-04").to_document())
    store.add(TASKS, Task(subject="History", description="Read", due_date="").to_document())

    table = task_server.format_tasks()
    lines = table.splitlines()

    assert [line.split()[1] for line in lines[4:7]] == ["Math", "Art", "History"]
    assert "04.06.2024" in lines[4]
    assert "Total: 3 task(s)" in table


def test_task_table_empty(monkeypatch) -> None:
    monkeypatch.setattr(task_server, "store", InMemoryRecordStore())

    assert task_server.format_tasks() == "✅ No tasks found."


@pytest.mark.asyncio
async def test_task_tools(monkeypatch) -> None:
    monkeypatch.setattr(task_server, "store", InMemoryRecordStore())
    tools = await task_server.mcp.get_tools()

    created = tools["create_task"].fn("Math", "p. 12", type="exam", due_date="2024-06-04", topic="Angles")

    assert created.id
    assert [t.id for t in tools["list_tasks"].fn()] == [created.id]
    assert tools["find_tasks"].fn(type="exam")[0].topic == "Angles"
    assert tools["find_tasks"].fn(type="homework") == []
