# -*- coding: utf-8 -*-
"""
One-off maintenance jobs over the record store.

This module handles:
- Backfilling due dates on tasks stored without one
- Archiving tasks that are more than two weeks old
- Seeding the schedule configuration collection
- Rebuilding the subjects collection from a weekly timetable
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass
from datetime import date, datetime, timezone

from loguru import logger

from quest_planner.dates import days_ago_iso, normalize_date
from quest_planner.models import WEEKDAY_NAMES, ScheduleEntry
from quest_planner.resolver import ScheduleResolver
from quest_planner.schedule import DEFAULT_SCHEDULE_CONFIG, DEFAULT_WEEKLY_SCHEDULE_TEXT, parse_weekly_schedule
from task_store.models import Task
from task_store.store import ConfigStore, RecordStore, RecordStoreError, SUBJECTS, TASKS

ARCHIVE_CUTOFF_DAYS = 14

SUBJECT_COLORS: dict[str, str] = {
    "math": "var(--subject-math)",
    "finnish": "var(--subject-finnish)",
    "english": "var(--subject-english)",
    "history": "var(--subject-history)",
    "civics": "var(--subject-civics)",
    "ethics": "var(--subject-ethics)",
    "pe": "var(--subject-pe)",
    "music": "var(--subject-music)",
    "art": "var(--subject-art)",
    "crafts": "var(--subject-crafts)",
    "eco": "var(--subject-eco)",
    "digi": "var(--subject-digi)",
}
OTHER_SUBJECT_COLOR = "var(--subject-other)"


@dataclass
class MaintenanceSummary:
    total: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


def backfill_due_dates(
        store: RecordStore,
        resolver: ScheduleResolver,
        today: t.Optional[date] = None,
) -> MaintenanceSummary:
    """Resolve and store a due date for every task that has none.

    Failed writes are counted and logged; the remaining tasks are still
    processed.
    """
    summary = MaintenanceSummary()
    for key, document in store.read_all(TASKS).items():
        summary.total += 1
        task = Task.from_document(key, document)
        if not resolver.assign_due_date(task, today=today):
            summary.skipped += 1
            continue

        try:
            store.update(TASKS, key, {
                "due_date": task.due_date,
                "due_date_calculation_method": task.due_date_calculation_method,
            })
        except RecordStoreError as e:
            summary.errors += 1
            logger.error(f"Error updating task {key}: {e}")
            continue

        summary.updated += 1
        logger.info(f"Updated task {key}: {task.subject} due {task.due_date} ({task.due_date_calculation_method})")

    logger.info(
        f"Backfill finished: {summary.updated} updated, {summary.skipped} skipped, "
        f"{summary.errors} errors out of {summary.total} tasks"
    )
    return summary


def _archive_reference_date(document: t.Mapping[str, t.Any]) -> str:
    """Date a task ages from: posting date for homework, exam day for exams."""
    if document.get("type") == "homework":
        return normalize_date(document.get("date") or document.get("date_added"))
    if document.get("type") == "exam":
        return normalize_date(document.get("due_date"))
    return ""


def archive_old_tasks(
        store: RecordStore,
        today: t.Optional[date] = None,
        cutoff_days: int = ARCHIVE_CUTOFF_DAYS,
) -> MaintenanceSummary:
    """Mark homework and exams older than ``cutoff_days`` as completed."""
    cutoff = days_ago_iso(cutoff_days, today=today)
    logger.info(f"Archiving tasks older than {cutoff}")

    summary = MaintenanceSummary()
    for key, document in store.read_all(TASKS).items():
        summary.total += 1
        if document.get("completed"):
            summary.skipped += 1
            continue

        reference = _archive_reference_date(document)
        # ISO dates compare correctly as strings
        if not reference or reference >= cutoff:
            summary.skipped += 1
            continue

        try:
            store.update(TASKS, key, {"completed": True, "status": "completed"})
        except RecordStoreError as e:
            summary.errors += 1
            logger.error(f"Error updating task {key}: {e}")
            continue

        summary.updated += 1
        logger.info(f"Marked task as completed: {key} ({document.get('subject')} - {document.get('type')})")

    logger.info(f"Archived {summary.updated} of {summary.total} tasks")
    return summary


def seed_schedule_config(
        store: RecordStore,
        schedule_config: t.Mapping[str, t.Mapping[str, t.Any]] = DEFAULT_SCHEDULE_CONFIG,
        overwrite: bool = False,
) -> int:
    """Write the schedule configuration, keeping existing entries unless ``overwrite``.

    :return: Number of subjects written.
    """
    config_store = ConfigStore(store)
    written = 0
    for subject, data in schedule_config.items():
        if not overwrite and config_store.get_schedule(subject) is not None:
            logger.debug(f"Schedule for {subject} already exists, skipping")
            continue
        config_store.set_schedule(ScheduleEntry.from_dict(subject, data))
        written += 1

    logger.info(f"Seeded schedule configuration for {written} subjects")
    return written


def subject_documents(entries: t.Iterable[ScheduleEntry]) -> list[dict[str, t.Any]]:
    """Build subject records with a per-weekday class flag."""
    now = datetime.now(timezone.utc).isoformat()
    documents = []
    for entry in entries:
        subject_id = entry.subject.lower().replace(" ", "-")
        documents.append({
            "id": subject_id,
            "name": entry.subject,
            "color": SUBJECT_COLORS.get(subject_id, OTHER_SUBJECT_COLOR),
            "schedule": {day.lower(): day in entry.class_days for day in WEEKDAY_NAMES[:5]},
            "createdAt": now,
            "updatedAt": now,
        })
    return documents


def populate_subjects(
        store: RecordStore,
        schedule_text: str = DEFAULT_WEEKLY_SCHEDULE_TEXT,
        clear: bool = True,
) -> list[dict[str, t.Any]]:
    """Rebuild the subjects collection from a ``"Monday: Math, Eco"`` timetable."""
    documents = subject_documents(parse_weekly_schedule(schedule_text))
    logger.info(f"Parsed {len(documents)} subjects from schedule data")

    if clear:
        for key in store.read_all(SUBJECTS):
            store.delete(SUBJECTS, key)

    for document in documents:
        store.write_one(SUBJECTS, document["id"], document)
        logger.debug(f"Added subject: {document['name']}")

    return documents
