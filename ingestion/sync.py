"""Synchronizing processed tasks into the record store.

Each task costs one remote query and at most one remote write. Calls run in
worker threads, bounded by a semaphore so the store's rate limits hold.
"""
from __future__ import annotations

import asyncio
import json
import os
import typing as t
from dataclasses import asdict, dataclass
from pathlib import Path

from loguru import logger

from portal_scraper.config import DATA_DIR
from quest_planner.dates import normalize_date
from quest_planner.subjects import translate_subject_name
from task_store.models import Task
from task_store.store import RecordStore, RecordStoreError, TASKS

SYNC_MAX_CONCURRENT = int(os.getenv("SYNC_MAX_CONCURRENT", "4"))
FALLBACK_FILE = DATA_DIR / "tasks.json"


@dataclass
class SyncSummary:
    """Outcome counts of one sync run."""
    added: int = 0
    skipped: int = 0
    failed: int = 0


def is_duplicate(existing: Task, new: Task) -> bool:
    """Whether ``new`` describes the same task as an already stored one.

    Same due date, subject, type and student, plus either the same non-empty
    topic or the same non-empty description.
    """
    same_content = (
        (bool(new.topic) and existing.topic == new.topic)
        or (bool(new.description) and existing.description == new.description)
    )
    return (
        existing.due_date == new.due_date
        and existing.subject == new.subject
        and existing.type == new.type
        and existing.student_id == new.student_id
        and same_content
    )


def prepare_document(task: Task) -> dict[str, t.Any]:
    """Normalize subject and dates and return the document to store."""
    prepared = Task(
        subject=translate_subject_name(task.subject),
        description=task.description or "",
        type=task.type or "homework",
        status=task.status or "open",
        date=normalize_date(task.date),
        due_date=normalize_date(task.due_date),
        topic=task.topic,
        student_id=int(task.student_id or 1),
        completed=bool(task.completed),
        due_date_calculation_method=task.due_date_calculation_method,
    )
    return prepared.to_document()


def load_existing_tasks(store: RecordStore) -> list[Task]:
    """Read stored tasks; an unreachable store counts as empty."""
    try:
        documents = store.read_all(TASKS)
    except RecordStoreError as e:
        logger.error(f"Could not load existing tasks, continuing without them: {e}")
        return []
    tasks = [Task.from_document(key, doc) for key, doc in documents.items()]
    logger.info(f"Loaded {len(tasks)} existing tasks")
    return tasks


def write_fallback_file(tasks: t.Sequence[Task], path: Path = FALLBACK_FILE) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"tasks": [asdict(task) for task in tasks]}, indent=2, ensure_ascii=False),
                    encoding="utf-8")
    logger.warning(f"Saved {len(tasks)} tasks to {path} as fallback")
    return path


async def _save_one(
        store: RecordStore,
        task: Task,
        semaphore: asyncio.Semaphore,
) -> str:
    """Insert a task unless one with the same subject and description exists.

    Returns "added", "skipped" or "failed".
    """
    document = prepare_document(task)
    async with semaphore:
        try:
            matches = await asyncio.to_thread(
                store.query, TASKS, subject=document["subject"], description=document["description"]
            )
            if matches:
                logger.debug(f"Task already exists, skipping: {document['description'][:30]}...")
                return "skipped"
            key = await asyncio.to_thread(store.add, TASKS, document)
        except RecordStoreError as e:
            logger.error(
                f"Error adding {document['type']} task for {document['subject']} "
                f"({document['description'][:50]}): {e}"
            )
            return "failed"

    logger.info(f"Added new {document['type']} task with ID: {key}")
    return "added"


async def save_new_tasks(
        store: RecordStore,
        tasks: t.Sequence[Task],
        max_concurrent: int = SYNC_MAX_CONCURRENT,
        fallback_file: t.Optional[Path] = FALLBACK_FILE,
) -> SyncSummary:
    """Insert tasks that are not stored yet.

    If every insert fails, the store is considered down and the tasks are
    written to ``fallback_file`` instead.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))
    outcomes = await asyncio.gather(*(_save_one(store, task, semaphore) for task in tasks))

    summary = SyncSummary(
        added=outcomes.count("added"),
        skipped=outcomes.count("skipped"),
        failed=outcomes.count("failed"),
    )
    if tasks and summary.failed == len(tasks) and fallback_file is not None:
        write_fallback_file(tasks, fallback_file)

    logger.info(f"Saved tasks: {summary.added} added, {summary.skipped} skipped, {summary.failed} failed")
    return summary


async def sync_tasks(
        store: RecordStore,
        new_tasks: t.Sequence[Task],
        max_concurrent: int = SYNC_MAX_CONCURRENT,
        fallback_file: t.Optional[Path] = FALLBACK_FILE,
) -> SyncSummary:
    """Add the tasks that are not already in the store."""
    logger.info(f"Preparing to sync {len(new_tasks)} tasks")

    existing = await asyncio.to_thread(load_existing_tasks, store)
    to_add = [task for task in new_tasks if not any(is_duplicate(old, task) for old in existing)]
    already_stored = len(new_tasks) - len(to_add)
    logger.info(f"Found {len(to_add)} new tasks to add out of {len(new_tasks)} total tasks")

    if not to_add:
        return SyncSummary(skipped=already_stored)

    summary = await save_new_tasks(store, to_add, max_concurrent=max_concurrent, fallback_file=fallback_file)
    summary.skipped += already_stored
    return summary
