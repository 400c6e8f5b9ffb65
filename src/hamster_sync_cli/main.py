import datetime
from pathlib import Path
from typing import NoReturn, Optional

import humanize
import typer

from rich.console import Console
from rich.table import Table

from hamster_sync import version
from hamster_sync.core import Workspace
from hamster_sync.core.aggregate import aggregate, sorted_tasks, total_duration
from hamster_sync.core.config import CONFIG_TEMPLATE
from hamster_sync.core.reconcile import Reconciler, RunMode
from hamster_sync.exceptions import HamsterSyncError
from hamster_sync.utils import format_duration, last_week
from hamster_sync_cli.utils import edit_file, resolve_natural_date, resolve_range

cli = typer.Typer(help="Aggregate Hamster facts per task and sync them to a remote time tracker.")

ONE_DAY = datetime.timedelta(days=1)


def warn(message: str) -> None:
    typer.echo(f"Warning: {message}", err=True)


def fail(message) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


@cli.callback()
def main(ctx: typer.Context,
         config_path: Optional[Path] = typer.Option(
             None, "--config", envvar="HAMSTER_SYNC_CONFIG", help="Path to the config file."),
         database: Optional[Path] = typer.Option(
             None, "--db", help="Path to the Hamster database, overriding the config.")):
    try:
        ws = Workspace(config_path)
    except HamsterSyncError as e:
        fail(e)
    if database:
        ws.config.database = database.expanduser()
    ctx.obj = ws


@cli.command()
def info(ctx: typer.Context):
    """
    Show the configuration in use.
    """
    ws: Workspace = ctx.obj
    config = ws.config
    typer.echo(f"hamster-sync version: {version()}")
    typer.echo(f"Config file: {ws.config_path}{'' if ws.config_path.exists() else ' (not found, using defaults)'}")
    typer.echo(f"Hamster database: {config.database}{'' if config.database.exists() else ' (not found)'}")
    typer.echo(f"Timezone: {config.timezone.name}")
    typer.echo(f"Default category: {config.category or '(all categories)'}")
    typer.echo(f"Remote: {config.remote.plugin} (task prefix {config.remote.task_prefix!r})")


@cli.command()
def config(ctx: typer.Context):
    """
    Edit the configuration in your preferred editor.
    """
    ws: Workspace = ctx.obj
    path = ws.config_path
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(CONFIG_TEMPLATE)
        typer.echo(f"Created {path}.")

    if edit_file(path):
        typer.echo("Configuration file was updated.")
    else:
        typer.echo("No changes detected.")


@cli.command()
def facts(ctx: typer.Context,
          from_date: Optional[str] = typer.Option(None, "--from", "-f", help="Start date (inclusive). Defaults to last Monday week."),
          to_date: Optional[str] = typer.Option(None, "--to", "-t", help="End date (inclusive). Defaults to last Sunday."),
          category: Optional[str] = typer.Option(None, "--category", "-c", help="Only facts in this category.")):
    """
    List the raw Hamster facts in a date range, last week by default.
    """
    ws: Workspace = ctx.obj
    category = category or ws.config.category
    try:
        start, end = resolve_range(ws.today(), last_week(ws.now()), from_date, to_date)
        with ws.open_store() as store:
            records = store.fetch_activities(start, end + ONE_DAY)
    except (HamsterSyncError, ValueError) as e:
        fail(e)

    if category:
        records = [r for r in records if r.category == category]

    now = ws.now()
    table = Table(title=f"Facts {start} to {end}")
    table.add_column("Id", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Duration", justify="right")
    table.add_column("Activity")
    table.add_column("Category")
    table.add_column("Description")

    for record in records:
        table.add_row(
            str(record.id),
            record.start_time.format("YYYY-MM-DD HH:mm"),
            record.end_time.format("HH:mm") if record.end_time else "running",
            format_duration(record.duration(now)),
            record.activity_name,
            record.category,
            record.description,
        )

    Console().print(table)
    if not records:
        typer.echo("No facts found.")


@cli.command()
def tasks(ctx: typer.Context,
          from_date: Optional[str] = typer.Option(None, "--from", "-f", help="Start date (inclusive). Defaults to last Monday week."),
          to_date: Optional[str] = typer.Option(None, "--to", "-t", help="End date (inclusive). Defaults to last Sunday."),
          category: Optional[str] = typer.Option(None, "--category", "-c", help="Only facts in this category.")):
    """
    Show time and comments per task over a date range, last week by default.
    """
    ws: Workspace = ctx.obj
    category = category or ws.config.category
    try:
        start, end = resolve_range(ws.today(), last_week(ws.now()), from_date, to_date)
        with ws.open_store() as store:
            records = store.fetch_activities(start, end + ONE_DAY)
        if category:
            records = [r for r in records if r.category == category]
        aggregates = aggregate(records, ws.now(), warn=warn)
    except (HamsterSyncError, ValueError) as e:
        fail(e)

    table = Table(title=f"Tasks {start} to {end}")
    table.add_column("Task")
    table.add_column("Title")
    table.add_column("Duration", justify="right")
    table.add_column("Comments")

    for task_id, task in sorted_tasks(aggregates):
        table.add_row(task_id or "-", task.title or "", format_duration(task.duration),
                      "\n".join(task.comments))

    table.add_section()
    table.add_row("TOTAL", "", format_duration(total_duration(aggregates)), "")

    Console().print(table)


@cli.command()
def sync(ctx: typer.Context,
         from_date: str = typer.Option(..., "--from", "-f", help="First day to sync."),
         to_date: str = typer.Option(..., "--to", "-t", help="Last day to sync (inclusive)."),
         category: Optional[str] = typer.Option(None, "--category", "-c", help="Only sync facts in this category."),
         api_token: Optional[str] = typer.Option(None, "--api-token", envvar="EVERHOUR_API_TOKEN", help="Remote API token."),
         dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be synced without changing anything.")):
    """
    Push per-task daily totals to the remote, adding or updating its records.
    """
    ws: Workspace = ctx.obj
    mode = RunMode.DRY_RUN if dry_run else RunMode.APPLY
    try:
        start = resolve_natural_date(ws.today(), from_date)
        end = resolve_natural_date(ws.today(), to_date)

        remote = ws.remote({"api_token": api_token})
        with ws.open_store() as store:
            reconciler = Reconciler(remote, store.fetch_activities,
                                    task_prefix=ws.config.remote.task_prefix,
                                    category=category or ws.config.category,
                                    report=typer.echo,
                                    warn=warn)
            results = reconciler.run(start, end, mode, ws.now())
    except (HamsterSyncError, ValueError) as e:
        fail(e)

    total = sum((result.total for result in results), datetime.timedelta())
    typer.echo(f"Total for {start} to {end}: {humanize.precisedelta(total, minimum_unit='minutes')}")
    if dry_run:
        typer.echo("Dry run, nothing was changed.")
