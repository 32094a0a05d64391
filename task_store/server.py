# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP

from quest_planner.dates import convert_date_format, FORMATS
from task_store.models import Task
from task_store.store import InMemoryRecordStore, RecordStore, TASKS

mcp = FastMCP("TaskStore")

# Process-local store; replace with an HttpRecordStore to share records
store: RecordStore = InMemoryRecordStore()


@mcp.tool()
def create_task(
        subject: str,
        description: str,
        type: str = "homework",
        date: str = "",
        due_date: str = "",
        topic: str = "",
) -> Task:
    """Creates a task.

    :param subject: Canonical subject name.
    :param description: What needs to be done.
    :param type: "homework" or "exam".
    :param date: Date the task was assigned (YYYY-MM-DD).
    :param due_date: Due date (YYYY-MM-DD), optional.
    :param topic: Exam topic (optional).
    :return: The created Task, including its id.
    """
    task = Task(
        subject=subject,
        description=description,
        type=type,
        date=date,
        due_date=due_date,
        topic=topic,
    )
    task.id = store.add(TASKS, task.to_document())
    return task


def get_tasks() -> list[Task]:
    """Internal function to get tasks as dataclass objects.

    :return: A list of Task objects.
    """
    return [Task.from_document(key, doc) for key, doc in store.read_all(TASKS).items()]


@mcp.tool()
def list_tasks() -> list[Task]:
    """Lists all tasks.

    :return: A list of Task objects.
    """
    return get_tasks()


@mcp.tool()
def find_tasks(subject: str = "", type: str = "", status: str = "") -> list[Task]:
    """Finds tasks whose fields equal all given non-empty values.

    :param subject: Subject to match (optional).
    :param type: Task type to match (optional).
    :param status: Status to match (optional).
    :return: Matching Task objects.
    """
    equals = {k: v for k, v in {"subject": subject, "type": type, "status": status}.items() if v}
    return [Task.from_document(key, doc) for key, doc in store.query(TASKS, **equals).items()]


def format_tasks(tasks: t.Optional[list[Task]] = None) -> str:
    """Formats tasks as a clean table sorted by due date.

    :param tasks: Tasks to format; defaults to every stored task.
    :return: Formatted table string.
    """
    tasks = get_tasks() if tasks is None else tasks
    if not tasks:
        return "✅ No tasks found."

    ordered = sorted(tasks, key=lambda task: (task.due_date or "9999-99-99", task.subject))

    lines = []
    lines.append("✅ TASKS")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Subject':<12} {'Type':<9} {'Due':<12} {'Status':<10} {'Description':<50}")
    lines.append("-" * 100)

    for idx, task in enumerate(ordered, 1):
        description = task.description[:49] if len(task.description) > 49 else task.description
        due = convert_date_format(task.due_date, FORMATS.ISO, FORMATS.DAY_FIRST) or "-"
        lines.append(
            f"{idx:<4} {task.subject[:11]:<12} {task.type:<9} {due:<12} {task.status:<10} {description:<50}"
        )

    lines.append("=" * 100)
    lines.append(f"Total: {len(ordered)} task(s)")
    return "\n".join(lines)


@mcp.tool()
def show_tasks() -> str:
    """Displays all tasks in a formatted table, soonest due first.

    :return: Formatted string of all tasks, or a message if no tasks exist.
    """
    return format_tasks()


if __name__ == "__main__":
    mcp.run()
