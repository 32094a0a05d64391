"""Turning scraped portal rows into task records."""
from __future__ import annotations

import random
import re
import string
import time
import typing as t

from loguru import logger

from portal_scraper.models import SubjectExtraction
from quest_planner.dates import normalize_date
from quest_planner.resolver import ScheduleResolver
from quest_planner.subjects import translate_subject_name
from task_store.models import Task

MAX_DESCRIPTION_LENGTH = 1000

_BASE36 = string.digits + string.ascii_lowercase


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def clean_description(text: t.Optional[str]) -> str:
    """Collapse whitespace and cap the length of a scraped description."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.strip())[:MAX_DESCRIPTION_LENGTH]


def generate_unique_id(
        subject: str,
        date: str,
        task_type: str,
        now_ms: t.Optional[int] = None,
        rng: t.Optional[random.Random] = None,
) -> str:
    """Build a readable task id: ``<subject>-<date digits>-<type>-<time>-<random>``."""
    clean_subject = re.sub(r"[^\w]", "", subject or "")[:10]
    clean_date = re.sub(r"[^\d]", "", date or "")[:8]
    clean_type = re.sub(r"[^\w]", "", task_type or "")[:5]

    timestamp = _base36(now_ms if now_ms is not None else int(time.time() * 1000))
    random_part = _base36((rng or random).randrange(10000))
    return f"{clean_subject}-{clean_date}-{clean_type}-{timestamp}-{random_part}"


def process_extracted_data(
        extractions: t.Iterable[SubjectExtraction],
        resolver: t.Optional[ScheduleResolver] = None,
        student_id: int = 1,
) -> list[Task]:
    """Normalize scraped rows into tasks.

    Homework keeps the day it was posted as ``date``; upcoming exams use the
    exam day as ``due_date``. Past exams are not imported and rows without a
    description are skipped. With a resolver, homework gets a due date from
    the subject's class schedule.

    :param extractions: Per-subject scrape results.
    :param resolver: Optional resolver used to assign homework due dates.
    :param student_id: Student the tasks belong to.
    :return: The tasks, ready to sync.
    """
    tasks: list[Task] = []

    for extraction in extractions:
        if extraction.error:
            logger.warning(f"Skipping {extraction.subject}: {extraction.error}")
            continue

        subject = translate_subject_name(extraction.subject)

        for homework in extraction.data.homework:
            description = clean_description(homework.description)
            if not description:
                continue
            date_added = normalize_date(homework.date_added)
            task = Task(
                id=generate_unique_id(subject, date_added, "homework"),
                subject=subject,
                description=description,
                type="homework",
                date=date_added,
                student_id=student_id,
            )
            if resolver is not None:
                resolver.assign_due_date(task)
            tasks.append(task)

        for exam in extraction.data.future_exams:
            description = clean_description(exam.description)
            if not description:
                continue
            exam_date = normalize_date(exam.due_date)
            tasks.append(
                Task(
                    id=generate_unique_id(subject, exam_date, "exam"),
                    subject=subject,
                    description=description,
                    type="exam",
                    due_date=exam_date,
                    topic=exam.topic,
                    student_id=student_id,
                )
            )

    logger.info(f"Processed {len(tasks)} tasks")
    return tasks
