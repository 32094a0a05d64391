# -*- coding: utf-8 -*-
import asyncio
import typing as t

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from ingestion.logging_setup import LOG_LEVEL, setup_logger
from ingestion.processor import process_extracted_data
from ingestion.sync import SYNC_MAX_CONCURRENT, SyncSummary, sync_tasks
from mcp_wrappers.record_store.mcp_service import HttpRecordStore, RECORD_SERVICE_URL
from portal_scraper.config import SUBJECT_PAGES
from portal_scraper.models import SubjectExtraction
from portal_scraper.portal import PortalLoginError, PortalSession
from quest_planner.dates import format_day_first, parse_date
from quest_planner.resolver import ScheduleResolver
from quest_planner.schedule import local_schedule_lookup
from task_store.models import Task
from task_store.store import ConfigStore, RecordStore


console = Console()


def get_store(url: str) -> RecordStore:
    return HttpRecordStore(base_url=url)


def build_resolver(store: t.Optional[RecordStore], local_schedule: bool) -> ScheduleResolver:
    """Resolver over the stored schedule configuration, or the built-in table."""
    if local_schedule or store is None:
        return ScheduleResolver(local_schedule_lookup)
    return ScheduleResolver(ConfigStore(store))


def display_date(iso_date: str) -> str:
    if not iso_date:
        return "-"
    return format_day_first(parse_date(iso_date))


def create_tasks_table(tasks: t.Sequence[Task], title: str = "Scraped Tasks") -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Subject", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Assigned", style="yellow")
    table.add_column("Due", style="yellow")
    table.add_column("Method", style="dim")
    table.add_column("Description", style="white")

    for task in sorted(tasks, key=lambda item: (item.due_date or "9999", item.subject)):
        description = task.description if len(task.description) <= 45 else task.description[:42] + "..."
        table.add_row(
            task.subject,
            task.type,
            display_date(task.date),
            display_date(task.due_date),
            task.due_date_calculation_method or "-",
            description,
        )
    return table


def scrape_portal(pages: t.Sequence[tuple[str, str]]) -> list[SubjectExtraction]:
    with console.status("[bold green]Logging in to the school portal..."):
        session = PortalSession()
        session.login()

    results: list[SubjectExtraction] = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        scrape_task = progress.add_task("Scraping subjects...", total=len(pages))
        try:
            for subject, url in pages:
                progress.update(scrape_task, description=f"Scraping {subject}...")
                result = session.extract_subject_data(subject, url)
                status = "[red]x[/red]" if result.error else "[green]✓[/green]"
                console.print(f"   {status} {subject}")
                results.append(result)
                progress.update(scrape_task, advance=1)
        finally:
            session.close()
    return results


def print_sync_summary(summary: SyncSummary) -> None:
    stats_text = Text()
    stats_text.append("Added: ", style="white")
    stats_text.append(f"{summary.added}", style="bold green")
    stats_text.append("\nAlready stored: ", style="white")
    stats_text.append(f"{summary.skipped}", style="bold yellow")
    stats_text.append("\nFailed: ", style="white")
    stats_text.append(f"{summary.failed}", style="bold red" if summary.failed else "bold green")
    console.print(Panel(stats_text, title="Sync Summary", border_style="green"))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--store-url", default=RECORD_SERVICE_URL, show_default=True, help="Record service base URL.")
@click.option("--dry-run", is_flag=True, help="Scrape and process without writing to the store.")
@click.option("--local-schedule", is_flag=True, help="Resolve due dates from the built-in schedule table.")
@click.option("--max-concurrent", default=SYNC_MAX_CONCURRENT, show_default=True, type=click.IntRange(min=1),
              help="Maximum concurrent store requests.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
def main(store_url: str, dry_run: bool, local_schedule: bool, max_concurrent: int, verbose: bool) -> None:
    """Scrape homework and exams from the school portal and sync them to the quest board."""
    setup_logger(level="DEBUG" if verbose else LOG_LEVEL)

    console.print(
        Panel.fit(
            f"[bold blue]Quest Board Sync[/bold blue]\n"
            f"Scraping [bold]{len(SUBJECT_PAGES)}[/bold] subject pages",
            border_style="blue",
        )
    )

    try:
        extractions = scrape_portal(SUBJECT_PAGES)
    except PortalLoginError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    store = None if dry_run else get_store(store_url)
    resolver = build_resolver(store, local_schedule)
    tasks = process_extracted_data(extractions, resolver=resolver)

    if verbose or dry_run:
        console.print(create_tasks_table(tasks))

    if dry_run:
        console.print(f"\n[bold yellow]Dry run:[/bold yellow] {len(tasks)} tasks not written.")
        return

    with console.status("[bold green]Syncing tasks..."):
        summary = asyncio.run(sync_tasks(store, tasks, max_concurrent=max_concurrent))

    console.print("\n[bold green]✅ Sync complete![/bold green]")
    print_sync_summary(summary)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("subjects", nargs=-1, required=True)
@click.option("--date", "creation_date", required=True, help="Assignment date, YYYY-MM-DD or DD.MM.YYYY.")
@click.option("--store-url", default=None, help="Read schedules from this record service instead of the built-in table.")
def resolve(subjects: tuple[str, ...], creation_date: str, store_url: t.Optional[str]) -> None:
    """Show the resolved due date of SUBJECTS for an assignment date."""
    setup_logger(level=LOG_LEVEL)
    store = get_store(store_url) if store_url else None
    resolver = build_resolver(store, local_schedule=store is None)

    table = Table(title=f"Due dates for work assigned {creation_date}", show_header=True,
                  header_style="bold magenta")
    table.add_column("Subject", style="cyan")
    table.add_column("Due", style="yellow")
    table.add_column("Method", style="white")
    table.add_column("Details", style="dim")

    for subject in subjects:
        result = resolver.resolve(subject, creation_date)
        table.add_row(
            subject,
            format_day_first(result.due_date),
            result.calculation_method,
            result.next_class_info,
        )
    console.print(table)


if __name__ == "__main__":
    main()
