# -*- coding: utf-8 -*-
"""
Local weekly schedule data and helpers.

``DEFAULT_SCHEDULE_CONFIG`` is the table used to seed the schedule
configuration collection and doubles as the offline fallback lookup.
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass
from datetime import date, timedelta

from loguru import logger

from quest_planner.models import DEFAULT_DUE_INTERVAL, ScheduleEntry, canonical_weekday, weekday_name
from quest_planner.subjects import translate_subject_name


DEFAULT_SCHEDULE_CONFIG: dict[str, dict[str, t.Any]] = {
    "English": {"classDays": ["Wednesday", "Thursday"], "defaultDueInterval": 7},
    "Math": {"classDays": ["Monday", "Friday"], "defaultDueInterval": 7},
    "Finnish": {"classDays": ["Tuesday", "Friday"], "defaultDueInterval": 7},
    "History": {"classDays": ["Tuesday"], "defaultDueInterval": 7},
    "Eco": {"classDays": ["Monday", "Thursday"], "defaultDueInterval": 7},
    "Civics": {"classDays": ["Tuesday"], "defaultDueInterval": 7},
    # Longer-running projects
    "Crafts": {"classDays": ["Monday"], "defaultDueInterval": 14},
    "Art": {"classDays": ["Wednesday"], "defaultDueInterval": 14},
    "PE": {"classDays": ["Monday", "Friday"], "defaultDueInterval": 7},
    "Music": {"classDays": ["Tuesday"], "defaultDueInterval": 7},
    "Ethics": {"classDays": ["Wednesday"], "defaultDueInterval": 7},
    "Digi": {"classDays": ["Friday"], "defaultDueInterval": 7},
}

DEFAULT_WEEKLY_SCHEDULE_TEXT = """Monday: Math, Eco, Crafts, PE
Tuesday: Math, Finnish, History, Music, PE
Wednesday: Finnish, Math, English, Ethics, PE
Thursday: English, Math, Eco, Finnish
Friday: Art, Civics, Finnish, Digi"""


def local_schedule_lookup(subject: str) -> t.Optional[ScheduleEntry]:
    """Look a subject up in :data:`DEFAULT_SCHEDULE_CONFIG`."""
    data = DEFAULT_SCHEDULE_CONFIG.get(subject)
    if data is None:
        return None
    return ScheduleEntry.from_dict(subject, data)


def parse_weekly_schedule(
        text: str,
        default_due_interval: int = DEFAULT_DUE_INTERVAL,
) -> list[ScheduleEntry]:
    """Parse a ``"Monday: Math, Eco"`` style timetable into schedule entries.

    Lines without a colon or with an unknown weekday are skipped. Subjects
    keep the order of their first appearance and class days follow the
    order of the lines.

    :param text: Timetable text, one weekday per line.
    :param default_due_interval: Interval assigned to every parsed subject.
    :return: One ScheduleEntry per subject.
    """
    days_by_subject: dict[str, list[str]] = {}

    for line in text.splitlines():
        if ":" not in line:
            continue
        day_part, subjects_part = line.split(":", 1)
        weekday = canonical_weekday(day_part)
        if weekday is None:
            logger.warning(f"Skipping schedule line with unknown weekday: {line.strip()!r}")
            continue
        for raw_subject in subjects_part.split(","):
            subject = raw_subject.strip()
            if not subject:
                continue
            days = days_by_subject.setdefault(subject, [])
            if weekday not in days:
                days.append(weekday)

    return [
        ScheduleEntry(subject=subject, class_days=days, default_due_interval=default_due_interval)
        for subject, days in days_by_subject.items()
    ]


@dataclass
class NextClass:
    """When a subject's next class takes place, relative to a reference day."""
    found: bool
    days_until: t.Optional[int] = None
    weekday: t.Optional[str] = None

    @property
    def label(self) -> str:
        if not self.found:
            return "Not scheduled"
        if self.days_until == 0:
            return "Today"
        if self.days_until == 1:
            return "Tomorrow"
        return f"{self.weekday} (in {self.days_until} days)"


def next_class_info(
        subject: str,
        schedule_lookup: t.Callable[[str], t.Optional[ScheduleEntry]] = local_schedule_lookup,
        today: t.Optional[date] = None,
) -> NextClass:
    """Find the next class of ``subject`` counting today as a class day."""
    reference = today or date.today()
    entry = schedule_lookup(translate_subject_name(subject))
    if entry is None or not entry.class_days:
        logger.debug(f"No schedule found for subject: {subject}")
        return NextClass(found=False)

    for days_ahead in range(0, 7):
        candidate = reference + timedelta(days=days_ahead)
        name = weekday_name(candidate)
        if name in entry.class_days:
            return NextClass(found=True, days_until=days_ahead, weekday=name)

    return NextClass(found=False)
