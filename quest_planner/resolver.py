"""Schedule-based due date resolution.

Given a subject, the day a task was created and the subject's weekly class
schedule, the resolver picks the next class day within a bounded horizon,
falling back to a flat interval. It never raises for bad data: an unusable
creation date or a failing schedule lookup still produces a due date.
"""
from __future__ import annotations

import typing as t
from datetime import date, datetime, timedelta

from loguru import logger

from quest_planner.dates import parse_date
from quest_planner.models import (
    DEFAULT_DUE_INTERVAL,
    DEFAULT_HORIZON_DAYS,
    HorizonFallback,
    ResolutionResult,
    ScheduleEntry,
    weekday_name,
    WEEKDAY_NAMES,
)
from quest_planner.subjects import translate_subject_name

ERROR_FALLBACK_DAYS = 7

ScheduleLookup = t.Callable[[str], t.Optional[ScheduleEntry]]
LookupSource = t.Union[ScheduleLookup, t.Mapping[str, t.Any], t.Any, None]


def as_schedule_lookup(source: LookupSource) -> ScheduleLookup:
    """Turn a callable, a mapping or a config store into a lookup function.

    Mappings may hold ScheduleEntry objects or stored
    ``{classDays, defaultDueInterval}`` documents. Objects exposing
    ``get_schedule(subject)`` are used through that method.
    """
    if source is None:
        return lambda subject: None

    if hasattr(source, "get_schedule"):
        return source.get_schedule

    if isinstance(source, t.Mapping):
        def _lookup(subject: str) -> t.Optional[ScheduleEntry]:
            value = source.get(subject)
            if value is None or isinstance(value, ScheduleEntry):
                return value
            return ScheduleEntry.from_dict(subject, value)
        return _lookup

    if callable(source):
        return source

    raise TypeError(f"Unsupported schedule lookup source: {type(source).__name__}")


def _safe_lookup(lookup: ScheduleLookup, subject: str) -> t.Optional[ScheduleEntry]:
    try:
        return lookup(subject)
    except Exception as e:
        # A broken config store degrades to the default interval.
        logger.warning(f"Schedule lookup failed for {subject}, using default interval: {e}")
        return None


def _first_class_day_result(creation: date, class_days: list[str]) -> ResolutionResult:
    target = WEEKDAY_NAMES.index(class_days[0])
    offset = (target - creation.weekday()) % 7 or 7
    return ResolutionResult(
        due_date=creation + timedelta(days=offset),
        calculation_method="schedule",
        next_class_info=f"{class_days[0]}, {offset} days after assignment",
    )


def _error_result(subject: str, reason: t.Any, today: t.Optional[date]) -> ResolutionResult:
    fallback_day = today or date.today()
    logger.error(f"Error calculating due date for {subject}: {reason}")
    return ResolutionResult(
        due_date=fallback_day + timedelta(days=ERROR_FALLBACK_DAYS),
        calculation_method="error",
        next_class_info=f"Default {ERROR_FALLBACK_DAYS} day interval",
    )


def resolve_due_date(
        subject: str,
        creation_date: t.Union[date, datetime, str, None],
        schedule_lookup: LookupSource = None,
        default_interval: int = DEFAULT_DUE_INTERVAL,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        horizon_fallback: HorizonFallback = HorizonFallback.DEFAULT_INTERVAL,
        today: t.Optional[date] = None,
) -> ResolutionResult:
    """Resolve the due date of a task.

    :param subject: Subject name, normalized before lookup.
    :param creation_date: Day the task was assigned. Strings may be ISO or day-first.
    :param schedule_lookup: Callable, mapping or config store yielding ScheduleEntry.
    :param default_interval: Days to add when no class day applies.
    :param horizon_days: How many days ahead to search for a class day.
    :param horizon_fallback: Policy used when the horizon holds no class day.
    :param today: Reference date substituted for an unusable creation date.
    :return: The resolved due date, how it was found, and a readable explanation.
    """
    if default_interval <= 0:
        raise ValueError(f"default_interval must be positive, got {default_interval}")
    if horizon_days <= 0:
        raise ValueError(f"horizon_days must be positive, got {horizon_days}")

    try:
        creation = parse_date(creation_date)
    except ValueError as e:
        return _error_result(subject, e, today)

    canonical = translate_subject_name(subject)
    logger.debug(f"Calculating due date for {canonical} created on {weekday_name(creation)}")

    entry = _safe_lookup(as_schedule_lookup(schedule_lookup), canonical)
    if entry is None:
        logger.debug(
            f"No schedule configuration found for {canonical}, "
            f"using default interval of {default_interval} days"
        )
        class_days: list[str] = []
        interval = default_interval
    else:
        class_days = entry.class_days
        interval = entry.default_due_interval
        if interval <= 0:
            if interval < 0:
                logger.warning(f"Ignoring non-positive due interval {interval} stored for {canonical}")
            interval = default_interval

    try:
        if class_days:
            for days_ahead in range(1, horizon_days + 1):
                candidate = creation + timedelta(days=days_ahead)
                name = weekday_name(candidate)
                if name in class_days:
                    logger.debug(f"Next {canonical} class is on {candidate.isoformat()}")
                    return ResolutionResult(
                        due_date=candidate,
                        calculation_method="schedule",
                        next_class_info=f"{name}, {days_ahead} days after assignment",
                    )

            if horizon_fallback is HorizonFallback.FIRST_CLASS_DAY:
                return _first_class_day_result(creation, class_days)

        return ResolutionResult(
            due_date=creation + timedelta(days=interval),
            calculation_method="default",
            next_class_info=f"Default {interval} day interval",
        )
    except OverflowError as e:
        return _error_result(subject, e, today)


class ScheduleResolver:
    """Resolver bound to one schedule source and one set of policies.

    Scripts and services share a single instance instead of carrying their
    own copy of the algorithm; only the lookup source differs between them.
    """

    def __init__(
            self,
            schedule_lookup: LookupSource = None,
            default_interval: int = DEFAULT_DUE_INTERVAL,
            horizon_days: int = DEFAULT_HORIZON_DAYS,
            horizon_fallback: HorizonFallback = HorizonFallback.DEFAULT_INTERVAL,
    ) -> None:
        self.schedule_lookup = as_schedule_lookup(schedule_lookup)
        self.default_interval = default_interval
        self.horizon_days = horizon_days
        self.horizon_fallback = horizon_fallback

    def resolve(
            self,
            subject: str,
            creation_date: t.Union[date, datetime, str, None],
            today: t.Optional[date] = None,
    ) -> ResolutionResult:
        return resolve_due_date(
            subject,
            creation_date,
            schedule_lookup=self.schedule_lookup,
            default_interval=self.default_interval,
            horizon_days=self.horizon_days,
            horizon_fallback=self.horizon_fallback,
            today=today,
        )

    def assign_due_date(self, task: t.Any, today: t.Optional[date] = None) -> bool:
        """Fill ``due_date`` and ``due_date_calculation_method`` on a task lacking one.

        :param task: Any object with ``subject``, ``date`` and ``due_date`` attributes.
        :return: True if the task was updated.
        """
        if task.due_date:
            return False
        result = self.resolve(task.subject, task.date, today=today)
        task.due_date = result.due_date_iso
        task.due_date_calculation_method = result.calculation_method
        return True
