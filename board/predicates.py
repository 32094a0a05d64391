"""Composable task filters used by the board views."""
from __future__ import annotations

import typing as t
from datetime import date, timedelta

from quest_planner.dates import parse_date
from task_store.models import Task

TaskPredicate = t.Callable[..., bool]

ARCHIVE_AFTER_DAYS = 14


def _due(task: Task) -> t.Optional[date]:
    if not task.due_date:
        return None
    try:
        return parse_date(task.due_date)
    except ValueError:
        return None


def is_due_today(task: Task, today: t.Optional[date] = None) -> bool:
    return _due(task) == (today or date.today())


def is_due_tomorrow(task: Task, today: t.Optional[date] = None) -> bool:
    return _due(task) == (today or date.today()) + timedelta(days=1)


def is_overdue(task: Task, today: t.Optional[date] = None) -> bool:
    """Past its due date and not completed."""
    due = _due(task)
    return due is not None and due < (today or date.today()) and not task.completed


def is_due_future(task: Task, today: t.Optional[date] = None) -> bool:
    """Due after tomorrow."""
    due = _due(task)
    return due is not None and due > (today or date.today()) + timedelta(days=1)


def is_completed(task: Task, today: t.Optional[date] = None) -> bool:
    return bool(task.completed) or task.status == "completed"


def matches_all(*predicates: TaskPredicate) -> TaskPredicate:
    def predicate(task: Task, today: t.Optional[date] = None) -> bool:
        return all(p(task, today) for p in predicates)
    return predicate


def matches_any(*predicates: TaskPredicate) -> TaskPredicate:
    def predicate(task: Task, today: t.Optional[date] = None) -> bool:
        return any(p(task, today) for p in predicates)
    return predicate


def negate(predicate: TaskPredicate) -> TaskPredicate:
    def negated(task: Task, today: t.Optional[date] = None) -> bool:
        return not predicate(task, today)
    return negated


def split_current_and_archive(
        tasks: t.Iterable[Task],
        today: t.Optional[date] = None,
        archive_after_days: int = ARCHIVE_AFTER_DAYS,
) -> tuple[list[Task], list[Task]]:
    """Partition tasks into (current, archive).

    A task is archived when it is completed or its assignment date (due date
    for tasks without one) is more than ``archive_after_days`` days ago.
    """
    reference = today or date.today()
    cutoff = reference - timedelta(days=archive_after_days)

    current: list[Task] = []
    archive: list[Task] = []
    for task in tasks:
        try:
            anchor = parse_date(task.date or task.due_date) if (task.date or task.due_date) else None
        except ValueError:
            anchor = None
        if is_completed(task) or (anchor is not None and anchor < cutoff):
            archive.append(task)
        else:
            current.append(task)
    return current, archive
