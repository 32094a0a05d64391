# -*- coding: utf-8 -*-
import typing as t
from contextlib import contextmanager

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ingestion.logging_setup import LOG_LEVEL, setup_logger
from ingestion.maintenance import (
    ARCHIVE_CUTOFF_DAYS,
    MaintenanceSummary,
    archive_old_tasks,
    backfill_due_dates,
    populate_subjects,
    seed_schedule_config,
)
from ingestion.run import build_resolver, get_store
from mcp_wrappers.record_store.mcp_service import RECORD_SERVICE_URL
from task_store.store import RecordStoreError


console = Console()


@contextmanager
def store_errors() -> t.Iterator[None]:
    """Turn an unreachable store into a printed error and exit status 1."""
    try:
        yield
    except RecordStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def print_summary(title: str, summary: MaintenanceSummary) -> None:
    stats_text = Text()
    stats_text.append("Total tasks: ", style="white")
    stats_text.append(f"{summary.total}", style="bold")
    stats_text.append("\nUpdated: ", style="white")
    stats_text.append(f"{summary.updated}", style="bold green")
    stats_text.append("\nSkipped: ", style="white")
    stats_text.append(f"{summary.skipped}", style="bold yellow")
    stats_text.append("\nErrors: ", style="white")
    stats_text.append(f"{summary.errors}", style="bold red" if summary.errors else "bold green")
    console.print(Panel(stats_text, title=title, border_style="green"))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--store-url", default=RECORD_SERVICE_URL, show_default=True, help="Record service base URL.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def cli(ctx: click.Context, store_url: str, verbose: bool) -> None:
    """Maintenance jobs for the quest board record store."""
    setup_logger(level="DEBUG" if verbose else LOG_LEVEL)
    ctx.obj = get_store(store_url)


@cli.command()
@click.option("--local-schedule", is_flag=True, help="Resolve from the built-in schedule table.")
@click.pass_obj
def backfill(store: t.Any, local_schedule: bool) -> None:
    """Assign due dates to stored tasks that have none."""
    with store_errors():
        summary = backfill_due_dates(store, build_resolver(store, local_schedule))
    print_summary("Due Date Backfill", summary)


@cli.command()
@click.option("--cutoff-days", default=ARCHIVE_CUTOFF_DAYS, show_default=True, type=click.IntRange(min=1))
@click.pass_obj
def archive(store: t.Any, cutoff_days: int) -> None:
    """Mark homework and exams older than the cutoff as completed."""
    with store_errors():
        summary = archive_old_tasks(store, cutoff_days=cutoff_days)
    print_summary("Archive", summary)


@cli.command()
@click.option("--overwrite", is_flag=True, help="Replace existing schedule entries.")
@click.pass_obj
def seed(store: t.Any, overwrite: bool) -> None:
    """Write the default subject schedule configuration."""
    with store_errors():
        written = seed_schedule_config(store, overwrite=overwrite)
    console.print(f"[bold green]✅ Seeded {written} subject schedules[/bold green]")


@cli.command()
@click.option("--schedule-file", type=click.Path(exists=True, dir_okay=False),
              help="Timetable text file, one 'Weekday: Subject, Subject' line per day.")
@click.option("--keep-existing", is_flag=True, help="Do not clear the subjects collection first.")
@click.pass_obj
def subjects(store: t.Any, schedule_file: t.Optional[str], keep_existing: bool) -> None:
    """Rebuild the subjects collection from the weekly timetable."""
    kwargs: dict[str, t.Any] = {"clear": not keep_existing}
    if schedule_file:
        with open(schedule_file, encoding="utf-8") as f:
            kwargs["schedule_text"] = f.read()
    with store_errors():
        documents = populate_subjects(store, **kwargs)

    table = Table(title="Subjects", show_header=True, header_style="bold magenta")
    table.add_column("Subject", style="cyan")
    table.add_column("Class days", style="white")
    for document in documents:
        days = [day.capitalize() for day, has_class in document["schedule"].items() if has_class]
        table.add_row(document["name"], ", ".join(days))
    console.print(table)


if __name__ == "__main__":
    cli()
