"""Command line interface for inspecting habits and their statistics."""

from __future__ import annotations

from datetime import date
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import ConfigurationError, StreakwiseError
from .logging_config import setup_logging
from .models.habit import Habit
from .services.dates import parse_date_key
from .services.schedule import schedule_label, validate_schedule


def _parse_date(_ctx, _param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date_key(value)
    except ConfigurationError as exc:
        raise click.BadParameter(str(exc)) from exc


def _parse_days(_ctx, _param, value: str) -> list[int]:
    try:
        days = [int(part) for part in value.split(",") if part.strip()]
        return sorted(validate_schedule(days))
    except (ValueError, ConfigurationError) as exc:
        raise click.BadParameter(f"expected weekday indices 0-6 (0=Sunday): {exc}") from exc


@click.group()
@click.option("--user-id", type=int, default=None, help="Owner of the habits (defaults to STREAKWISE_USER_ID)")
@click.pass_context
def cli(ctx: click.Context, user_id: Optional[int]) -> None:
    """Streakwise habit statistics."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = create_app_context(config, user_id=user_id)


@cli.command("init-db")
@click.pass_obj
def init_db(app: AppContext) -> None:
    """Create the database schema."""

    click.echo(f"Database ready: {app.config.DATABASE_URL}")


@cli.command("add-habit")
@click.argument("name")
@click.option("--days", default="0,1,2,3,4,5,6", callback=_parse_days, help="Comma separated weekdays, 0=Sunday")
@click.option("--created-on", callback=_parse_date, default=None, help="YYYY-MM-DD, defaults to today")
@click.option("--color", default="#6366F1")
@click.pass_obj
def add_habit(app: AppContext, name: str, days: list[int], created_on: Optional[date], color: str) -> None:
    """Create a habit."""

    habit = Habit(
        user_id=app.habit_store.user_id,
        name=name,
        color=color,
        days_of_week=days,
        created_on=created_on or date.today(),
    )
    created = app.habit_store.create(habit)
    click.echo(f"Created habit {created.id}: {created.name} ({schedule_label(created.days_of_week)})")


@cli.command("habits")
@click.option("--refresh/--no-refresh", default=True, help="Refresh stale cached stats first")
@click.pass_obj
def list_habits(app: AppContext, refresh: bool) -> None:
    """List active habits with their cached stats."""

    if refresh:
        app.stats.refresh_stale()
    habits = app.habit_store.list_active()
    if not habits:
        click.echo("No active habits.")
        return
    for habit in habits:
        click.echo(
            f"{habit.id:>4}  {habit.name:<24} {schedule_label(habit.days_of_week):<20} "
            f"streak {habit.current_streak}  best {habit.highest_streak}  "
            f"slump {habit.highest_miss_streak}"
        )


@cli.command("toggle")
@click.argument("habit_id", type=int)
@click.option("--date", "day", callback=_parse_date, default=None, help="YYYY-MM-DD, defaults to today")
@click.pass_obj
def toggle(app: AppContext, habit_id: int, day: Optional[date]) -> None:
    """Toggle completion of a habit for a day."""

    day = day or date.today()
    try:
        completed = app.stats.toggle_completion(habit_id, day)
    except StreakwiseError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{day.isoformat()}: {'completed' if completed else 'not completed'}")


@cli.command("archive")
@click.argument("habit_id", type=int)
@click.pass_obj
def archive(app: AppContext, habit_id: int) -> None:
    """Archive a habit."""

    try:
        app.habit_store.archive(habit_id)
    except StreakwiseError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Archived habit {habit_id}")


@cli.command("stats")
@click.argument("habit_id", type=int)
@click.option("--as-of", callback=_parse_date, default=None, help="Reference date YYYY-MM-DD")
@click.pass_obj
def stats(app: AppContext, habit_id: int, as_of: Optional[date]) -> None:
    """Show derived stats for one habit."""

    try:
        derived = app.stats.stats_for_id(habit_id, as_of)
    except StreakwiseError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"As of {derived.reference_date.isoformat()}")
    click.echo(f"  completed:      {derived.completed_count}")
    click.echo(f"  missed:         {derived.missed_count}")
    click.echo(f"  current streak: {derived.current_streak}")
    click.echo(f"  best streak:    {derived.highest_streak}")
    click.echo(f"  worst slump:    {derived.highest_miss_streak}")


@cli.command("rate")
@click.option("--start", callback=_parse_date, required=True, help="Window start YYYY-MM-DD")
@click.option("--end", callback=_parse_date, required=True, help="Window end YYYY-MM-DD")
@click.pass_obj
def rate(app: AppContext, start: date, end: date) -> None:
    """Completion rate of all active habits over a window, with trend."""

    try:
        result = app.stats.compute_trend(app.habit_store.list_active(), start, end)
    except StreakwiseError as exc:
        raise click.ClickException(str(exc)) from exc
    direction = "increase" if result.trend >= 0 else "decrease"
    click.echo(f"{result.rate}% ({abs(result.trend)}% {direction})")


def main() -> None:  # pragma: no cover - console entry point
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
