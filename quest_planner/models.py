"""
Data models for schedule-based due date resolution.

This module contains the dataclasses used to describe a subject's weekly
class schedule and the outcome of resolving a due date against it.
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from loguru import logger

# Same order as date.weekday(): Monday is 0
WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)

DEFAULT_DUE_INTERVAL = 7
DEFAULT_HORIZON_DAYS = 14

CalculationMethod = t.Literal["schedule", "default", "error"]


class HorizonFallback(Enum):
    """What to do when no class day is found inside the search horizon."""
    DEFAULT_INTERVAL = "default_interval"
    FIRST_CLASS_DAY = "first_class_day"


def canonical_weekday(name: str) -> t.Optional[str]:
    """Return the canonical weekday name for ``name`` or None if unknown."""
    cleaned = (name or "").strip().lower()
    for weekday in WEEKDAY_NAMES:
        if weekday.lower() == cleaned:
            return weekday
    return None


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


@dataclass
class ScheduleEntry:
    """Weekly recurrence of one subject."""
    subject: str
    class_days: list[str] = field(default_factory=list)
    default_due_interval: int = DEFAULT_DUE_INTERVAL

    def __post_init__(self) -> None:
        days: list[str] = []
        for raw in self.class_days:
            weekday = canonical_weekday(raw)
            if weekday is None:
                logger.warning(f"Ignoring unknown weekday '{raw}' for subject {self.subject}")
                continue
            if weekday not in days:
                days.append(weekday)
        self.class_days = days

    @classmethod
    def from_dict(cls, subject: str, data: t.Mapping[str, t.Any]) -> "ScheduleEntry":
        """Build an entry from a stored ``{classDays, defaultDueInterval}`` document."""
        interval = data.get("defaultDueInterval") or 0
        return cls(
            subject=subject,
            class_days=list(data.get("classDays") or []),
            default_due_interval=int(interval),
        )

    def to_dict(self) -> dict[str, t.Any]:
        return {
            "classDays": list(self.class_days),
            "defaultDueInterval": self.default_due_interval,
        }


@dataclass
class ResolutionResult:
    """Due date produced by the resolver, with how it was obtained."""
    due_date: date
    calculation_method: CalculationMethod
    next_class_info: str

    @property
    def due_date_iso(self) -> str:
        return self.due_date.isoformat()

    def to_dict(self) -> dict[str, str]:
        return {
            "dueDate": self.due_date_iso,
            "calculationMethod": self.calculation_method,
            "nextClassInfo": self.next_class_info,
        }
