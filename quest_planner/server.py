# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP

from quest_planner.dates import format_day_first
from quest_planner.resolver import ScheduleResolver
from quest_planner.schedule import local_schedule_lookup, next_class_info
from quest_planner.subjects import translate_subject_name

mcp = FastMCP("QuestPlanner")

resolver = ScheduleResolver(local_schedule_lookup)


@mcp.tool()
def resolve_due_date(subject: str, creation_date: str) -> dict[str, str]:
    """Resolves the due date of a task from its subject's class schedule.

    :param subject: Subject name, in English or as written in the school portal.
    :param creation_date: Date the task was assigned (YYYY-MM-DD or DD.MM.YYYY).
    :return: dueDate, calculationMethod and nextClassInfo.
    """
    return resolver.resolve(subject, creation_date).to_dict()


@mcp.tool()
def normalize_subject(subject: str) -> str:
    """Translates a subject name to its canonical English label.

    :param subject: Subject name as written in the portal.
    :return: Canonical subject label.
    """
    return translate_subject_name(subject)


@mcp.tool()
def next_class(subject: str) -> dict[str, t.Any]:
    """Tells when the subject's next class takes place, counting today.

    :param subject: Subject name.
    :return: found, daysUntil, weekday and a display label.
    """
    info = next_class_info(subject, local_schedule_lookup)
    return {
        "found": info.found,
        "daysUntil": info.days_until,
        "weekday": info.weekday,
        "label": info.label,
    }


def format_due_date_summary(rows: list[tuple[str, str]]) -> str:
    """Formats resolved due dates for (subject, creation_date) pairs as a table.

    :param rows: Pairs of subject and creation date.
    :return: Formatted table string.
    """
    if not rows:
        return "📚 No tasks to resolve."

    lines = []
    lines.append("📚 DUE DATES")
    lines.append("=" * 90)
    lines.append(f"{'#':<4} {'Subject':<12} {'Assigned':<12} {'Due':<12} {'Method':<10} {'Why':<36}")
    lines.append("-" * 90)

    for idx, (subject, creation_date) in enumerate(rows, 1):
        result = resolver.resolve(subject, creation_date)
        canonical = translate_subject_name(subject)[:11]
        lines.append(
            f"{idx:<4} {canonical:<12} {creation_date[:11]:<12} {format_day_first(result.due_date):<12} "
            f"{result.calculation_method:<10} {result.next_class_info[:35]:<36}"
        )

    lines.append("=" * 90)
    lines.append(f"Total: {len(rows)} task(s)")
    return "\n".join(lines)


@mcp.tool()
def show_due_date_summary(subjects: list[str], creation_date: str) -> str:
    """Displays the due dates each subject would get for a task assigned on one day.

    :param subjects: Subject names.
    :param creation_date: Date the tasks were assigned.
    :return: Formatted table string.
    """
    return format_due_date_summary([(subject, creation_date) for subject in subjects])


if __name__ == "__main__":
    mcp.run()
